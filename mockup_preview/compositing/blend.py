import enum
from dataclasses import dataclass

import numpy as np

from .color import ColorSample, hsl_arrays, hue_distance
from .errors import CompositeFailure


class BlendMode(str, enum.Enum):
    CHROMA = "chroma"      # saturated key colour: replace matching pixels
    MULTIPLY = "multiply"  # neutral light placeholder: keep template shading
    DIRECT = "direct"      # near-black / nothing usable: paste the design


@dataclass(frozen=True)
class BlendThresholds:
    """Calibration against real chroma-key photography. Change with care."""
    saturation: float = 0.1
    lightness: float = 0.1
    hue_degrees: float = 30.0
    template_alpha: int = 10


DEFAULT_THRESHOLDS = BlendThresholds()


def classify(target: ColorSample, thresholds: BlendThresholds = DEFAULT_THRESHOLDS) -> BlendMode:
    if target.s > thresholds.saturation:
        return BlendMode.CHROMA
    # negative saturation: nothing was sampled
    if target.s >= 0 and target.l < thresholds.lightness:
        return BlendMode.DIRECT
    return BlendMode.MULTIPLY


def multiply_over_white(template: np.ndarray, design: np.ndarray) -> np.ndarray:
    """
    Alpha-aware multiply. The template pixel is first flattened onto white
    by its own alpha, so soft shadow edges dim the design instead of
    blackening it. Result alpha is the design's.
    """
    alpha = template[..., 3:4].astype(np.float64) / 255
    effective = template[..., :3].astype(np.float64) * alpha + 255 * (1 - alpha)
    rgb = effective * design[..., :3].astype(np.float64) / 255
    out = np.empty_like(design)
    out[..., :3] = np.clip(np.rint(rgb), 0, 255).astype(np.uint8)
    out[..., 3] = design[..., 3]
    return out


@dataclass
class BlendOutcome:
    pixels: np.ndarray
    touched: int


def blend(template: np.ndarray, design: np.ndarray, mode: BlendMode, target: ColorSample,
          thresholds: BlendThresholds = DEFAULT_THRESHOLDS) -> BlendOutcome:
    """
    One pass over every pixel of two aligned (H, W, 4) uint8 buffers.

    Pixels where the template is (nearly) transparent or the design has no
    coverage are left as the template. The rest are replaced or multiplied
    according to `mode`.
    """
    if template.shape != design.shape:
        raise CompositeFailure(
            f"Buffer size mismatch: template {template.shape} vs design {design.shape}"
        )
    if template.ndim != 3 or template.shape[2] != 4:
        raise CompositeFailure(f"Expected RGBA buffers, got shape {template.shape}")

    out = template.copy()
    active = (template[..., 3] >= thresholds.template_alpha) & (design[..., 3] != 0)

    if mode is BlendMode.DIRECT:
        replace = active
        multiply = np.zeros_like(active)
    else:
        h, s, _ = hsl_arrays(template)
        neutral = s < thresholds.saturation
        multiply = active & neutral
        if mode is BlendMode.CHROMA:
            hue_match = hue_distance(h, target.h) < thresholds.hue_degrees
            replace = active & ~neutral & hue_match & (s > thresholds.saturation)
        else:
            replace = np.zeros_like(active)

    out[replace] = design[replace]
    if multiply.any():
        out[multiply] = multiply_over_white(template[multiply], design[multiply])

    return BlendOutcome(pixels=out, touched=int(replace.sum() + multiply.sum()))
