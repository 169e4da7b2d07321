import json
from io import BytesIO
from pathlib import Path
from urllib.parse import urlparse

from flask import Blueprint, current_app, jsonify, redirect, request, send_file
from werkzeug.utils import secure_filename

from ..compositing.engine import is_missing, render_preview
from ..compositing.errors import ImageLoadError, SourceNotAllowed
from ..compositing.stages import encode_png
from ..extensions import store, raster_loader
from ..services.raster_loader import SourcePolicy, host_allowed
from ..utils.mockups import generate_mockups_for_design

bp = Blueprint("mockups_api", __name__)


def _json_object():
    """Request body as a dict, or None when it is not a JSON object."""
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    return payload if isinstance(payload, dict) else None


def _template_source(payload: dict):
    """(template_url, print_area) from a catalog id or inline fields; None for an unknown id."""
    template_id = payload.get("template_id")
    if template_id:
        t = store.get(str(template_id))
        if not t:
            return None
        return t.template_url, t.print_area
    return payload.get("template_url"), payload.get("print_area")


def _can_redirect(url: str) -> bool:
    parsed = urlparse(url)
    return (parsed.scheme in ("http", "https")
            and host_allowed(parsed.hostname or "", current_app.config["IMAGE_ALLOWED_DOMAINS"]))


@bp.post("/mockups/preview")
def preview():
    """
    Body: {design_url, template_id | (template_url, print_area), include_stages?}
    Always answers 200 for a known template: when compositing is skipped or
    fails, `image` is the design URL and `composited` is false.
    """
    payload = _json_object()
    if payload is None:
        return jsonify({"error": "Request body must be a JSON object"}), 400
    source = _template_source(payload)
    if source is None:
        return jsonify({"error": "Template not found"}), 404
    template_url, print_area = source

    include_stages = bool(payload.get("include_stages"))
    result = render_preview(template_url, print_area, payload.get("design_url"), raster_loader,
                            record_stages=include_stages,
                            policy=SourcePolicy.from_config(current_app.config))
    if result.error:
        current_app.logger.warning("[PREVIEW] fell back to raw design: %s", result.error)
    return jsonify(result.to_dict(include_stages=include_stages))


@bp.get("/mockups/preview.png")
def preview_png():
    design_url = request.args.get("design_url")
    if is_missing(design_url):
        return jsonify({"error": "design_url is required"}), 400

    source = _template_source(request.args.to_dict())
    if source is None:
        return jsonify({"error": "Template not found"}), 404
    template_url, print_area = source

    if isinstance(print_area, str):
        try:
            print_area = json.loads(print_area)
        except ValueError:
            return jsonify({"error": "print_area must be a JSON object"}), 400

    result = render_preview(template_url, print_area, design_url, raster_loader,
                            policy=SourcePolicy.from_config(current_app.config))
    if not result.composited:
        if not _can_redirect(design_url):
            return jsonify({"error": result.error or "Preview unavailable"}), 400
        return redirect(design_url)
    return send_file(BytesIO(encode_png(result.image)), mimetype="image/png")


@bp.post("/mockups/generate")
def generate():
    """
    Body: {design_path, template_ids?}
    Renders one PNG per template into generated_mockups/<design stem>/.
    """
    payload = _json_object()
    if payload is None:
        return jsonify({"error": "Request body must be a JSON object"}), 400
    design_path = payload.get("design_path")
    if not design_path or not isinstance(design_path, str):
        return jsonify({"error": "design_path is required"}), 400

    templates = store.list()
    wanted = payload.get("template_ids")
    if wanted:
        wanted = {str(w) for w in wanted}
        templates = [t for t in templates if t.id in wanted]
    if not templates:
        return jsonify({"error": "No templates selected"}), 400

    stem = secure_filename(Path(design_path).stem) or "design"
    out_dir = Path(current_app.config["GENERATED_MOCKUPS_DIR"]) / stem
    try:
        paths = generate_mockups_for_design(
            design_path, templates, out_dir, raster_loader,
            max_workers=current_app.config["PREVIEW_MAX_WORKERS"],
            policy=SourcePolicy.from_config(current_app.config),
        )
    except SourceNotAllowed as e:
        return jsonify({"error": str(e)}), 403
    except ImageLoadError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify({"ok": True, "files": [f"{stem}/{p.name}" for p in paths]})
