from flask import Blueprint, current_app, jsonify, request

from ..compositing.analysis import analyze_template
from ..compositing.errors import ImageLoadError, SourceNotAllowed
from ..compositing.geometry import PrintArea
from ..extensions import store, raster_loader
from ..services.raster_loader import SourcePolicy, proxied_url
from ..storage.template_store import MockupTemplate

bp = Blueprint("templates_api", __name__)


def _serialize(t: MockupTemplate) -> dict:
    data = t.to_dict()
    data["proxied_url"] = proxied_url(t.template_url)
    return data


@bp.get("/templates")
def list_templates():
    return jsonify([_serialize(t) for t in store.list()])


@bp.get("/templates/<template_id>")
def get_template(template_id):
    t = store.get(template_id)
    if not t:
        return jsonify({"error": "Not found"}), 404
    return jsonify(_serialize(t))


@bp.put("/templates/<template_id>")
def put_template(template_id):
    payload = request.get_json(silent=True)
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        return jsonify({"error": "Request body must be a JSON object"}), 400
    payload = dict(payload, id=template_id)
    try:
        t = MockupTemplate.from_dict(payload)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    store.upsert(t)
    return jsonify(_serialize(t))


@bp.delete("/templates/<template_id>")
def delete_template(template_id):
    if not store.delete(template_id):
        return jsonify({"error": "Not found"}), 404
    return jsonify({"ok": True, "deleted": template_id})


@bp.post("/templates/analyze")
def analyze():
    """
    Body: {template_url, print_area?}
    Finds the magenta placeholder in the template and reports it next to the
    configured print area, flagging landscape/portrait disagreements.
    """
    payload = request.get_json(silent=True)
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        return jsonify({"error": "Request body must be a JSON object"}), 400
    template_url = payload.get("template_url")
    if not template_url:
        return jsonify({"error": "Template URL is required"}), 400

    print_area = None
    if payload.get("print_area") is not None:
        try:
            print_area = PrintArea.from_dict(payload["print_area"])
        except ValueError as e:
            return jsonify({"error": str(e)}), 400

    try:
        template = raster_loader.load(template_url, policy=SourcePolicy.from_config(current_app.config))
    except SourceNotAllowed as e:
        return jsonify({"error": str(e)}), 403
    except ImageLoadError as e:
        current_app.logger.error("Template analysis error: %s", e)
        return jsonify({"error": str(e)}), 500

    analysis = analyze_template(template, print_area)
    if analysis.detected_bounds is None:
        return jsonify({"error": "No magenta pixels found in template"}), 400

    return jsonify({
        "analysis": analysis.to_dict(),
        "magentaBounds": analysis.detected_bounds.to_dict(),
    })
