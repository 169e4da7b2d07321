from dataclasses import dataclass

from PIL import Image


@dataclass(frozen=True)
class PrintArea:
    """Print rectangle as fractions (0-1) of the template's width/height."""
    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_dict(cls, data: dict) -> "PrintArea":
        if not isinstance(data, dict):
            raise ValueError("print_area must be an object with x, y, width, height")
        values = {}
        for key in ("x", "y", "width", "height"):
            if key not in data:
                raise ValueError(f"print_area is missing '{key}'")
            try:
                values[key] = float(data[key])
            except (TypeError, ValueError):
                raise ValueError(f"print_area.{key} must be a number") from None
        return cls(**values)

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}

    def to_pixels(self, template_width: int, template_height: int) -> "PrintAreaPixels":
        return PrintAreaPixels(
            x=self.x * template_width,
            y=self.y * template_height,
            width=self.width * template_width,
            height=self.height * template_height,
        )

    @property
    def is_landscape(self) -> bool:
        return self.width > self.height


@dataclass(frozen=True)
class PrintAreaPixels:
    """Print area in absolute (possibly fractional) template pixel coordinates."""
    x: float
    y: float
    width: float
    height: float

    @property
    def is_portrait(self) -> bool:
        return self.height > self.width

    def box(self) -> tuple[int, int, int, int]:
        # round edges, not sizes
        left = int(round(self.x))
        top = int(round(self.y))
        right = int(round(self.x + self.width))
        bottom = int(round(self.y + self.height))
        return left, top, right, bottom

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


def needs_rotation(design_size: tuple[int, int], area: PrintAreaPixels) -> bool:
    """True when exactly one of design / print area is portrait. Squares are not portrait."""
    if area.width == area.height:
        # a square area takes either orientation as is
        return False
    design_w, design_h = design_size
    design_is_portrait = design_h > design_w
    return design_is_portrait != area.is_portrait


def rotate_clockwise(img: Image.Image) -> Image.Image:
    """Lossless 90° clockwise turn; width and height swap."""
    return img.transpose(Image.Transpose.ROTATE_270)


def cover_fit_source_box(src_size: tuple[int, int], dest_size: tuple[float, float]) -> tuple[float, float, float, float]:
    """
    Region of the source that, scaled to dest_size, covers it with no margins.
    Overflow is cropped evenly from both sides of the long axis.
    Returns (left, top, right, bottom) in source pixels.
    """
    src_w, src_h = src_size
    dest_w, dest_h = dest_size
    src_ratio = src_w / src_h
    dest_ratio = dest_w / dest_h

    if src_ratio > dest_ratio:
        crop_w = min(src_h * dest_ratio, src_w)
        src_x = (src_w - crop_w) / 2
        return src_x, 0.0, src_x + crop_w, float(src_h)

    crop_h = min(src_w / dest_ratio, src_h)
    src_y = (src_h - crop_h) / 2
    return 0.0, src_y, float(src_w), src_y + crop_h


def cover_fit(design: Image.Image, template_size: tuple[int, int], area: PrintAreaPixels,
              rotate: bool = False) -> Image.Image:
    """
    Template-sized RGBA buffer, transparent everywhere except the print area,
    which holds the design scaled and centre-cropped to cover it.
    """
    canvas = Image.new("RGBA", template_size, (0, 0, 0, 0))
    source = rotate_clockwise(design) if rotate else design
    source = source.convert("RGBA")

    left, top, right, bottom = area.box()
    dest_w, dest_h = right - left, bottom - top
    if dest_w <= 0 or dest_h <= 0:
        return canvas

    src_box = cover_fit_source_box(source.size, (dest_w, dest_h))
    scaled = source.resize((dest_w, dest_h), Image.LANCZOS, box=src_box)
    # paste() clips anything hanging off the template edge
    canvas.paste(scaled, (left, top))
    return canvas
