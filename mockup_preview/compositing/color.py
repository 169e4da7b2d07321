from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class ColorSample:
    r: int
    g: int
    b: int
    h: float = 0.0
    s: float = 0.0
    l: float = 0.0

    @classmethod
    def from_rgb(cls, r: int, g: int, b: int) -> "ColorSample":
        h, s, l = rgb_to_hsl(r, g, b)
        return cls(int(r), int(g), int(b), h, s, l)

    def css(self) -> str:
        return f"rgba({self.r}, {self.g}, {self.b})"

    def describe(self) -> str:
        return f"{self.css()} HSL: [{self.h:.1f}, {self.s:.2f}, {self.l:.2f}]"

    def to_dict(self) -> dict:
        return {"r": self.r, "g": self.g, "b": self.b, "h": self.h, "s": self.s, "l": self.l}


# No valid sample: negative saturation loses to any real pixel and classifies as multiply.
SENTINEL_SAMPLE = ColorSample(0, 0, 0, h=0.0, s=-1.0, l=0.0)


def rgb_to_hsl(r: int, g: int, b: int) -> tuple[float, float, float]:
    """Standard RGB (0-255) -> HSL with h in degrees [0, 360), s and l in [0, 1]."""
    r, g, b = r / 255, g / 255, b / 255
    mx, mn = max(r, g, b), min(r, g, b)
    h = s = 0.0
    l = (mx + mn) / 2
    if mx != mn:
        d = mx - mn
        s = d / (2 - mx - mn) if l > 0.5 else d / (mx + mn)
        if mx == r:
            h = (g - b) / d + (6 if g < b else 0)
        elif mx == g:
            h = (b - r) / d + 2
        else:
            h = (r - g) / d + 4
        h *= 60
    return h, s, l


def hsl_arrays(rgb: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Vectorised rgb_to_hsl over an (..., 3) uint8 array.

    Channel precedence on ties matches the scalar version (red, then green,
    then blue), so both agree pixel for pixel.
    """
    c = rgb[..., :3].astype(np.float64) / 255.0
    r, g, b = c[..., 0], c[..., 1], c[..., 2]
    mx = c.max(axis=-1)
    mn = c.min(axis=-1)
    d = mx - mn
    l = (mx + mn) / 2

    chromatic = d > 0
    safe_d = np.where(chromatic, d, 1.0)
    denom = np.where(l > 0.5, 2 - mx - mn, mx + mn)
    s = np.where(chromatic, d / np.where(chromatic, denom, 1.0), 0.0)

    h_r = (g - b) / safe_d + np.where(g < b, 6.0, 0.0)
    h_g = (b - r) / safe_d + 2
    h_b = (r - g) / safe_d + 4
    h = np.where(mx == r, h_r, np.where(mx == g, h_g, h_b)) * 60
    h = np.where(chromatic, h, 0.0)
    return h, s, l


def hue_distance(h, target_h):
    """Circular distance in degrees; works on scalars and arrays."""
    diff = np.abs(h - target_h)
    return np.minimum(diff, 360 - diff)
