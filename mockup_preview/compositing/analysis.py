from dataclasses import dataclass
from typing import Optional

import numpy as np
from PIL import Image

from .color import hsl_arrays, hue_distance
from .geometry import PrintArea, PrintAreaPixels

MAGENTA_HUE = 300
HUE_TOLERANCE = 15
MIN_SATURATION = 0.4
MIN_LIGHTNESS = 0.15


@dataclass
class TemplateAnalysis:
    template_size: tuple[int, int]
    detected_bounds: Optional[PrintArea]
    print_area_pixels: Optional[PrintAreaPixels]
    orientation_mismatch: bool = False

    def to_dict(self) -> dict:
        w, h = self.template_size
        return {
            "templateDimensions": {"width": w, "height": h},
            "detectedBounds": self.detected_bounds.to_dict() if self.detected_bounds else None,
            "printAreaPixels": self.print_area_pixels.to_dict() if self.print_area_pixels else None,
            "orientationMismatch": self.orientation_mismatch,
        }


def magenta_mask(pixels: np.ndarray) -> np.ndarray:
    """Boolean (H, W) mask of magenta placeholder pixels."""
    h, s, l = hsl_arrays(pixels)
    return (hue_distance(h, MAGENTA_HUE) < HUE_TOLERANCE) & (s > MIN_SATURATION) & (l > MIN_LIGHTNESS)


def mask_bounds(mask: np.ndarray) -> Optional[tuple[int, int, int, int]]:
    """(x1, y1, x2, y2) inclusive bounding box of True pixels, or None."""
    rows = np.any(mask, axis=1)
    cols = np.any(mask, axis=0)
    if not rows.any():
        return None
    y1 = int(np.argmax(rows))
    y2 = int(len(rows) - 1 - np.argmax(rows[::-1]))
    x1 = int(np.argmax(cols))
    x2 = int(len(cols) - 1 - np.argmax(cols[::-1]))
    return x1, y1, x2, y2


def analyze_template(template: Image.Image, print_area: Optional[PrintArea] = None) -> TemplateAnalysis:
    """
    Locate the magenta placeholder in a template and compare it with the
    configured print area. Used to audit catalog entries whose print area
    was entered by hand.
    """
    width, height = template.size
    bounds = mask_bounds(magenta_mask(np.array(template.convert("RGB"))))

    detected = None
    if bounds:
        x1, y1, x2, y2 = bounds
        detected = PrintArea(
            x=x1 / width,
            y=y1 / height,
            width=(x2 - x1 + 1) / width,
            height=(y2 - y1 + 1) / height,
        )

    area_px = print_area.to_pixels(width, height) if print_area else None
    mismatch = bool(detected and print_area and detected.is_landscape != print_area.is_landscape)
    return TemplateAnalysis(
        template_size=(width, height),
        detected_bounds=detected,
        print_area_pixels=area_px,
        orientation_mismatch=mismatch,
    )
