import base64
from dataclasses import dataclass
from io import BytesIO

from PIL import Image, ImageDraw


def encode_png(img: Image.Image) -> bytes:
    buf = BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def to_data_uri(img: Image.Image) -> str:
    return "data:image/png;base64," + base64.b64encode(encode_png(img)).decode("ascii")


@dataclass
class Stage:
    name: str
    image: Image.Image
    description: str = ""

    @property
    def data_uri(self) -> str:
        return to_data_uri(self.image)

    def to_dict(self) -> dict:
        return {"name": self.name, "url": self.data_uri, "description": self.description}


class StageRecorder:
    """Ordered, append-only snapshots of one composite run. Never read back by the pipeline."""

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self.stages: list[Stage] = []

    def record(self, name: str, image: Image.Image, description: str = ""):
        if not self.enabled:
            return
        self.stages.append(Stage(name=name, image=image.copy(), description=description))

    def __len__(self):
        return len(self.stages)


def draw_sampling_points(template: Image.Image, points, best_point=None) -> Image.Image:
    """Template with half-transparent red dots on each sample and a lime box on the winner."""
    base = template.convert("RGBA")
    overlay = Image.new("RGBA", base.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay)
    for x, y in points:
        draw.rectangle((x - 2, y - 2, x + 2, y + 2), fill=(255, 0, 0, 128))
    out = Image.alpha_composite(base, overlay)
    if best_point is not None:
        bx, by = best_point
        ImageDraw.Draw(out).rectangle((bx - 4, by - 4, bx + 4, by + 4), outline=(0, 255, 0, 255), width=3)
    return out
