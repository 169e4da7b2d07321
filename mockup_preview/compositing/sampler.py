import logging
import math
from dataclasses import dataclass, field

import numpy as np

from .color import SENTINEL_SAMPLE, ColorSample
from .errors import RasterBoundsError
from .geometry import PrintAreaPixels

logger = logging.getLogger(__name__)

SAMPLE_STEPS = 7


@dataclass
class PlaceholderSample:
    target: ColorSample = SENTINEL_SAMPLE
    best_point: tuple[float, float] | None = None
    points: list[tuple[float, float]] = field(default_factory=list)
    sampled: list[tuple[float, float]] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.best_point is not None


def sample_grid(area: PrintAreaPixels, steps: int = SAMPLE_STEPS) -> list[tuple[float, float]]:
    """(steps-1)^2 interior points at i/steps, j/steps of the print area, row by row."""
    points = []
    for iy in range(1, steps):
        for ix in range(1, steps):
            points.append((
                area.x + area.width * ix / steps,
                area.y + area.height * iy / steps,
            ))
    return points


def read_pixel(pixels: np.ndarray, x: float, y: float) -> tuple[int, int, int, int]:
    height, width = pixels.shape[:2]
    if x < 0 or x >= width or y < 0 or y >= height:
        raise RasterBoundsError(f"({x:.1f}, {y:.1f}) is outside {width}x{height}")
    r, g, b, a = pixels[math.floor(y), math.floor(x)]
    return int(r), int(g), int(b), int(a)


def sample_placeholder(pixels: np.ndarray, area: PrintAreaPixels, steps: int = SAMPLE_STEPS) -> PlaceholderSample:
    """
    Find the print area's placeholder colour: the most saturated of the grid
    samples. A chroma key beats any photographic neutral; with no chroma key
    the result is still some representative neutral.
    """
    result = PlaceholderSample(points=sample_grid(area, steps))
    for x, y in result.points:
        try:
            r, g, b, _ = read_pixel(pixels, x, y)
        except RasterBoundsError as e:
            logger.debug("Skipping sample point: %s", e)
            continue
        result.sampled.append((x, y))
        candidate = ColorSample.from_rgb(r, g, b)
        # strict '>' keeps the first sample on ties
        if candidate.s > result.target.s:
            result.target = candidate
            result.best_point = (x, y)
    return result
