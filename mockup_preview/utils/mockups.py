import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from ..compositing.engine import composite
from ..compositing.errors import ImageLoadError
from ..storage.template_store import MockupTemplate

logger = logging.getLogger(__name__)

# Batch compositing: one preview PNG per catalog template for a single design


def generate_mockups_for_design(design_png_path: str, templates: list[MockupTemplate], out_dir: Path,
                                loader, max_workers: int = 4, policy=None) -> list[Path]:
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    design = loader.load(str(design_png_path), policy=policy)

    def _render(t: MockupTemplate) -> Path:
        out_path = out_dir / f"mockup_{t.id}.png"
        try:
            template = loader.load(t.template_url, policy=policy)
        except ImageLoadError as e:
            logger.warning("Template %s unavailable, writing raw design: %s", t.id, e)
            template = None
        result = composite(template, design, t.print_area, record_stages=False)
        if result.error:
            logger.warning("Template %s fell back to raw design: %s", t.id, result.error)
        result.output.save(out_path, "PNG", optimize=True)
        return out_path

    # Calls share nothing; the pool only bounds memory held by template buffers
    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as pool:
        return list(pool.map(_render, templates))
