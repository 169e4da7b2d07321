from flask import Blueprint, current_app, send_from_directory

bp = Blueprint("mockups_pages", __name__)


@bp.get("/mockups/<path:filename>")
def serve_template(filename):
    return send_from_directory(current_app.config["TEMPLATES_DIR"], filename)


@bp.get("/generated/<path:filename>")
def serve_generated(filename: str):
    return send_from_directory(current_app.config["GENERATED_MOCKUPS_DIR"], filename)
