from urllib.parse import urlparse

import httpx
from flask import Blueprint, Response, current_app, jsonify, request

from ..services.raster_loader import BROWSER_USER_AGENT, host_allowed

bp = Blueprint("proxy_api", __name__)


@bp.get("/proxy-image")
def proxy_image():
    """
    Re-serve a bucket-hosted image with permissive CORS headers so a browser
    can read its pixels. Only hosts in PROXY_ALLOWED_DOMAINS are fetched.
    """
    log = current_app.logger
    url = request.args.get("url")
    if not url:
        log.error("[ProxyImage] Missing url parameter")
        return jsonify({"error": "Missing url parameter"}), 400

    hostname = urlparse(url).hostname or ""
    if not host_allowed(hostname, current_app.config["PROXY_ALLOWED_DOMAINS"]):
        log.error("[ProxyImage] Domain not allowed: %s", hostname)
        return jsonify({"error": "Domain not allowed"}), 403

    try:
        with httpx.Client(timeout=current_app.config["IMAGE_FETCH_TIMEOUT"], follow_redirects=True) as client:
            r = client.get(url, headers={"User-Agent": BROWSER_USER_AGENT})
    except httpx.HTTPError as e:
        log.error("[ProxyImage] Error: %s", e)
        return jsonify({"error": "Failed to proxy image"}), 500

    if r.status_code >= 400:
        log.error("[ProxyImage] Failed to fetch image: %s %s", r.status_code, url[:100])
        return jsonify({"error": f"Failed to fetch image: {r.status_code}"}), r.status_code

    content_type = r.headers.get("content-type") or "image/png"
    log.info("[ProxyImage] Proxied %d bytes (%s)", len(r.content), content_type)
    return Response(r.content, status=200, headers={
        "Content-Type": content_type,
        "Cache-Control": "public, max-age=86400",
        "Access-Control-Allow-Origin": "*",
    })
