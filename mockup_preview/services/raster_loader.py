import base64
import binascii
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Optional
from urllib.parse import quote, unquote, urlparse

import httpx
from PIL import Image, UnidentifiedImageError

from ..compositing.errors import ImageLoadError, SourceNotAllowed

PROXY_PATH = "/api/proxy-image"

# Storage hosts that refuse cross-origin reads from the browser
PROXY_HOST_MARKERS = ("s3", "amazonaws.com")

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)


def proxied_url(src: str, proxy_path: str = PROXY_PATH) -> str:
    """Route bucket-hosted images through our proxy so browsers can read their pixels."""
    try:
        host = urlparse(src).hostname or ""
    except ValueError:
        return src
    if any(marker in host for marker in PROXY_HOST_MARKERS):
        return f"{proxy_path}?url={quote(src, safe='')}"
    return src


def host_allowed(hostname: str, allowed) -> bool:
    """Exact match or any subdomain of an allowed domain."""
    hostname = (hostname or "").lower()
    return any(hostname == d or hostname.endswith(f".{d}") for d in (a.lower() for a in allowed))


@dataclass(frozen=True)
class SourcePolicy:
    """
    Which sources a request may make the server read. Remote images must sit
    on an allowed host (redirects included) and local files must resolve
    inside one of the roots.
    """
    allowed_hosts: tuple[str, ...] = ()
    local_roots: tuple[Path, ...] = ()
    allow_data: bool = True

    @classmethod
    def from_config(cls, config) -> "SourcePolicy":
        return cls(
            allowed_hosts=tuple(config["IMAGE_ALLOWED_DOMAINS"]),
            local_roots=(Path(config["TEMPLATES_DIR"]), Path(config["DESIGNS_DIR"])),
        )

    def check_host(self, url: str):
        host = urlparse(url).hostname or ""
        if not host_allowed(host, self.allowed_hosts):
            raise SourceNotAllowed(url, f"host not allowed: {host or '(none)'}")

    def check_path(self, path: Path, label: str):
        resolved = path.resolve()
        if not any(resolved.is_relative_to(Path(root).resolve()) for root in self.local_roots):
            raise SourceNotAllowed(label, "path outside allowed directories")


class RasterLoader:
    """Fetches templates and designs (http(s), data: URIs, local files) as RGBA images."""

    def __init__(self, timeout: float = 30, base_dir: Path | None = None, transport: httpx.BaseTransport | None = None):
        self.timeout = timeout
        self.base_dir = Path(base_dir) if base_dir else None
        self.transport = transport
        self.headers = {"User-Agent": BROWSER_USER_AGENT}

    def load(self, url: str, policy: Optional[SourcePolicy] = None) -> Image.Image:
        if not url:
            raise ImageLoadError(str(url), "empty url")
        data = self._read_bytes(url, policy)
        try:
            img = Image.open(BytesIO(data))
            img.load()
        except (UnidentifiedImageError, OSError) as e:
            raise ImageLoadError(url, f"not a decodable image: {e}") from e
        if img.width == 0 or img.height == 0:
            raise ImageLoadError(url, "image has no pixels")
        return img.convert("RGBA")

    def load_pair(self, template_url: str, design_url: str,
                  policy: Optional[SourcePolicy] = None) -> tuple[Image.Image, Image.Image]:
        """Load both images in parallel; the first failure is raised."""
        with ThreadPoolExecutor(max_workers=2) as pool:
            template = pool.submit(self.load, template_url, policy)
            design = pool.submit(self.load, design_url, policy)
            return template.result(), design.result()

    # === Sources ===
    def _read_bytes(self, url: str, policy: Optional[SourcePolicy]) -> bytes:
        if url.startswith("data:"):
            if policy and not policy.allow_data:
                raise SourceNotAllowed(url[:64], "data URIs are not allowed")
            return self._read_data_uri(url)
        scheme = urlparse(url).scheme.lower()
        if scheme in ("http", "https"):
            if policy:
                policy.check_host(url)
            return self._fetch(url, policy)
        if scheme == "file":
            return self._read_file(unquote(urlparse(url).path), policy)
        return self._read_file(url, policy)

    def _fetch(self, url: str, policy: Optional[SourcePolicy]) -> bytes:
        hooks = {}
        if policy:
            # each redirect hop is a new request and gets the same host check
            hooks["request"] = [lambda request: policy.check_host(str(request.url))]
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport, follow_redirects=True,
                              event_hooks=hooks) as client:
                r = client.get(url, headers=self.headers)
        except httpx.HTTPError as e:
            raise ImageLoadError(url, str(e)) from e
        if r.status_code >= 400:
            raise ImageLoadError(url, f"HTTP {r.status_code}")
        return r.content

    @staticmethod
    def _read_data_uri(url: str) -> bytes:
        header, _, payload = url.partition(",")
        if ";base64" not in header:
            raise ImageLoadError(url[:64], "only base64 data URIs are supported")
        try:
            return base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ImageLoadError(url[:64], f"bad base64 payload: {e}") from e

    def _read_file(self, path_str: str, policy: Optional[SourcePolicy] = None) -> bytes:
        p = Path(path_str)
        if not p.is_absolute() and self.base_dir is not None:
            p = self.base_dir / p
        if policy:
            policy.check_path(p, path_str)
        try:
            return p.read_bytes()
        except OSError as e:
            raise ImageLoadError(path_str, str(e)) from e
