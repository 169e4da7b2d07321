"""
Frame mockup compositing.

Places a design inside the print area of a product photo. The print area's
placeholder convention (chroma key, light neutral, near-black) is discovered
per call by sampling, which picks how template and design pixels are blended.
Everything here is a pure function of its inputs: no shared state, no I/O
besides the loader passed in by the caller.
"""
import json
import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

import numpy as np
from PIL import Image

from .blend import DEFAULT_THRESHOLDS, BlendMode, BlendThresholds, blend, classify
from .color import ColorSample
from .errors import ImageLoadError
from .geometry import PrintArea, cover_fit, needs_rotation
from .sampler import sample_placeholder
from .stages import Stage, StageRecorder, draw_sampling_points, to_data_uri

logger = logging.getLogger(__name__)

UNDEFINED = "undefined"

DebugHook = Optional[Callable[[str], None]]


@dataclass
class CompositeResult:
    output: Optional[Image.Image]
    stages: list[Stage] = field(default_factory=list)
    log: list[str] = field(default_factory=list)
    composited: bool = False
    blend_mode: Optional[BlendMode] = None
    target: Optional[ColorSample] = None
    rotated: bool = False
    pixels_blended: int = 0
    error: Optional[str] = None


@dataclass
class PreviewResult:
    """What a caller shows: a composited image, or the untouched design URL."""
    composited: bool
    image: Optional[Image.Image]
    image_url: Optional[str]
    stages: list[Stage] = field(default_factory=list)
    log: list[str] = field(default_factory=list)
    blend_mode: Optional[BlendMode] = None
    error: Optional[str] = None

    def to_dict(self, include_stages: bool = False) -> dict:
        data = {
            "composited": self.composited,
            "image": self.image_url,
            "blend_mode": self.blend_mode.value if self.blend_mode else None,
            "log": self.log,
            "error": self.error,
        }
        if include_stages:
            data["stages"] = [s.to_dict() for s in self.stages]
        return data


class _DebugLog:
    def __init__(self, on_debug: DebugHook = None):
        self.lines: list[str] = []
        self.on_debug = on_debug

    def __call__(self, *parts):
        text = " ".join(str(p) for p in parts)
        self.lines.append(text)
        logger.debug(text)
        if self.on_debug:
            self.on_debug(text)


def _aspect(size) -> str:
    w, h = size
    return f"{w} x {h} (aspect: {w / h:.3f})" if h else f"{w} x {h}"


def composite(template: Optional[Image.Image], design: Image.Image, print_area: Optional[PrintArea], *,
              record_stages: bool = True, on_debug: DebugHook = None,
              thresholds: BlendThresholds = DEFAULT_THRESHOLDS) -> CompositeResult:
    """
    Composite `design` into the print area of `template`.

    The output always has the template's size. Never raises: without a
    template or print area the design is passed through, and any failure
    returns the design unchanged with `error` set and no stages.
    """
    log = _DebugLog(on_debug)
    if template is None or print_area is None:
        return CompositeResult(output=design, log=log.lines)

    recorder = StageRecorder(enabled=record_stages)
    try:
        template = template.convert("RGBA")
        width, height = template.size
        log("=== Frame mockup composite ===")
        log("Template dimensions:", _aspect(template.size))
        log("Design dimensions:", _aspect(design.size))
        log("Print area (fractions):", json.dumps(print_area.to_dict()))

        area_px = print_area.to_pixels(width, height)
        log("Print area (pixels):", json.dumps(area_px.to_dict()))

        rotate = needs_rotation(design.size, area_px)
        log("Orientation:", "rotating design 90° clockwise" if rotate else "no rotation needed")

        design_layer = cover_fit(design, template.size, area_px, rotate=rotate)
        recorder.record("1. Resized Design", design_layer,
                        "Design scaled and cropped to cover the print area")
        recorder.record("2. Raw Template", template, "Template image drawn on canvas")

        template_px = np.array(template)
        sample = sample_placeholder(template_px, area_px)
        if sample.found:
            recorder.record(
                "3. Sampling Points",
                draw_sampling_points(template, sample.sampled, sample.best_point),
                "Red dots are sample points. Green box is best candidate (highest saturation).",
            )
            log("Sampled best color", sample.target.describe(),
                f"from {len(sample.sampled)}/{len(sample.points)} points")
        else:
            log("No sample point falls inside the template; using neutral fallback")

        mode = classify(sample.target, thresholds)
        log("Blend mode:", mode.value)

        outcome = blend(template_px, np.array(design_layer), mode, sample.target, thresholds)
        log(f"Blended {outcome.touched} pixels using {mode.value} mode")

        output = Image.fromarray(outcome.pixels)
        recorder.record("4. Final Result", output, "Final composited output")
    except Exception as e:
        logger.exception("Failed to composite mockup")
        message = str(e) or "Failed to generate preview"
        log(f"ERROR: {message}")
        return CompositeResult(output=design, log=log.lines, error=message)

    return CompositeResult(
        output=output,
        stages=recorder.stages,
        log=log.lines,
        composited=True,
        blend_mode=mode,
        target=sample.target,
        rotated=rotate,
        pixels_blended=outcome.touched,
    )


def is_missing(value) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip() or value.strip() == UNDEFINED
    return False


def render_preview(template_url: Optional[str], print_area, design_url: Optional[str], loader, *,
                   record_stages: bool = False, on_debug: DebugHook = None,
                   thresholds: BlendThresholds = DEFAULT_THRESHOLDS, policy=None) -> PreviewResult:
    """
    Load template and design through `loader` and composite them.

    Missing inputs short-circuit to the design URL. Load and composite
    failures also fall back to the design, with the message in `error`.
    `policy` limits which hosts and directories the loader may read.
    """
    if is_missing(template_url) or is_missing(design_url) or print_area is None:
        return PreviewResult(composited=False, image=None, image_url=design_url)

    log = _DebugLog(on_debug)
    try:
        if not isinstance(print_area, PrintArea):
            print_area = PrintArea.from_dict(print_area)
        log("Template URL:", template_url)
        log("Design URL:", design_url)
        template, design = loader.load_pair(template_url, design_url, policy=policy)
    except (ImageLoadError, ValueError) as e:
        logger.warning("Preview fell back to raw design: %s", e)
        log(f"ERROR: {e}")
        return PreviewResult(composited=False, image=None, image_url=design_url,
                             log=log.lines, error=str(e))
    except Exception as e:
        logger.exception("Unexpected error loading preview images")
        message = str(e) or "Failed to load preview images"
        log(f"ERROR: {message}")
        return PreviewResult(composited=False, image=None, image_url=design_url,
                             log=log.lines, error=message)

    result = composite(template, design, print_area, record_stages=record_stages,
                       on_debug=log, thresholds=thresholds)
    if not result.composited:
        return PreviewResult(composited=False, image=design, image_url=design_url,
                             log=log.lines, error=result.error)

    return PreviewResult(
        composited=True,
        image=result.output,
        image_url=to_data_uri(result.output),
        stages=result.stages,
        log=log.lines,
        blend_mode=result.blend_mode,
    )
