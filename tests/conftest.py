"""
Shared test fixtures and configuration for mockup preview tests.
"""
from pathlib import Path

import numpy as np
import pytest
from flask import Flask
from flask.testing import FlaskClient
from PIL import Image

from mockup_preview import create_app
from mockup_preview.compositing.geometry import PrintArea
from mockup_preview.storage.template_store import MockupTemplate, TemplateStore

MAGENTA = (255, 0, 255, 255)
WHITE = (255, 255, 255, 255)
BLUE = (0, 0, 255, 255)


@pytest.fixture(scope="session")
def app() -> Flask:
    """Create and configure a test Flask application instance."""
    app = create_app()
    app.config.update({
        "TESTING": True,
    })
    yield app


@pytest.fixture
def client(app: Flask) -> FlaskClient:
    """Create a Flask test client."""
    return app.test_client()


@pytest.fixture(autouse=True)
def image_sources(app: Flask, tmp_path: Path, monkeypatch) -> Path:
    """Let request-driven loads read the fake CDN host and files under tmp_path."""
    monkeypatch.setitem(app.config, "IMAGE_ALLOWED_DOMAINS", ["cdn.example.com"])
    monkeypatch.setitem(app.config, "TEMPLATES_DIR", tmp_path)
    monkeypatch.setitem(app.config, "DESIGNS_DIR", tmp_path)
    return tmp_path


@pytest.fixture
def temp_data_dir(tmp_path: Path) -> Path:
    """Create a temporary data directory for TemplateStore tests."""
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    return data_dir


@pytest.fixture
def template_store(temp_data_dir: Path) -> TemplateStore:
    """Create a TemplateStore instance with temporary directory."""
    return TemplateStore(temp_data_dir)


@pytest.fixture
def patched_store(template_store, mocker) -> TemplateStore:
    """Point every route module at a temporary catalog."""
    mocker.patch("mockup_preview.routes.templates_api.store", template_store)
    mocker.patch("mockup_preview.routes.mockups_api.store", template_store)
    return template_store


@pytest.fixture
def print_area() -> PrintArea:
    return PrintArea(x=0.25, y=0.25, width=0.5, height=0.5)


@pytest.fixture
def sample_design_image(tmp_path: Path) -> Path:
    """Create a sample design image for testing (100x100 opaque blue)."""
    return create_test_image(tmp_path / "test_design.png", 100, 100, BLUE)


@pytest.fixture
def sample_mockup_template(tmp_path: Path) -> Path:
    """200x200 white template with a magenta print area over the middle half."""
    img = make_template((200, 200), (50, 50, 150, 150), placeholder=MAGENTA)
    path = tmp_path / "mockup_template.png"
    img.save(path, "PNG")
    return path


@pytest.fixture
def catalog_template(sample_mockup_template: Path, print_area: PrintArea) -> MockupTemplate:
    return MockupTemplate(
        id="frame-12x12",
        name="Black frame 12x12",
        template_url=str(sample_mockup_template),
        print_area=print_area,
    )


# Helper functions for tests

def create_test_image(path: Path, width: int = 100, height: int = 100,
                      color: tuple = (255, 0, 0, 255)) -> Path:
    """Create a solid test image at the specified path."""
    img = Image.new("RGBA", (width, height), color)
    img.save(path, "PNG")
    return path


def make_template(size: tuple, box: tuple, placeholder: tuple = MAGENTA,
                  background: tuple = WHITE) -> Image.Image:
    """Solid template with `placeholder` filling box=(left, top, right, bottom)."""
    arr = np.zeros((size[1], size[0], 4), dtype=np.uint8)
    arr[:, :] = background
    left, top, right, bottom = box
    arr[top:bottom, left:right] = placeholder
    return Image.fromarray(arr)


def solid(size: tuple, color: tuple) -> Image.Image:
    return Image.new("RGBA", size, color)


def png_bytes(img: Image.Image) -> bytes:
    from io import BytesIO

    buf = BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()
