"""
Unit tests for batch mockup generation.
"""
import pytest
from pathlib import Path
from PIL import Image

from mockup_preview.compositing.geometry import PrintArea
from mockup_preview.services.raster_loader import RasterLoader
from mockup_preview.storage.template_store import MockupTemplate
from mockup_preview.utils.mockups import generate_mockups_for_design

from conftest import make_template


def _catalog_entry(tmp_path, tid, size=(200, 200)):
    w, h = size
    path = tmp_path / f"{tid}.png"
    make_template(size, (w // 4, h // 4, 3 * w // 4, 3 * h // 4)).save(path)
    return MockupTemplate(id=tid, template_url=str(path), print_area=PrintArea(0.25, 0.25, 0.5, 0.5))


@pytest.mark.unit
class TestMockupGeneration:
    """Tests for mockup generation utilities."""

    def test_generate_mockup_basic(self, tmp_path, sample_design_image, catalog_template):
        out_dir = tmp_path / "mockups"

        result = generate_mockups_for_design(
            design_png_path=str(sample_design_image),
            templates=[catalog_template],
            out_dir=out_dir,
            loader=RasterLoader(),
        )

        assert len(result) == 1
        assert result[0].name == "mockup_frame-12x12.png"

        img = Image.open(result[0]).convert("RGBA")
        assert img.size == (200, 200)
        assert img.getpixel((100, 100)) == (0, 0, 255, 255)
        assert img.getpixel((10, 10)) == (255, 255, 255, 255)

    def test_generate_mockup_multiple_templates_keeps_order(self, tmp_path, sample_design_image):
        templates = [_catalog_entry(tmp_path, "t1"), _catalog_entry(tmp_path, "t2", (300, 150)),
                     _catalog_entry(tmp_path, "t3")]

        result = generate_mockups_for_design(
            design_png_path=str(sample_design_image),
            templates=templates,
            out_dir=tmp_path / "mockups",
            loader=RasterLoader(),
            max_workers=2,
        )

        assert [p.name for p in result] == ["mockup_t1.png", "mockup_t2.png", "mockup_t3.png"]
        assert all(isinstance(p, Path) and p.exists() for p in result)
        assert Image.open(result[1]).size == (300, 150)

    def test_generate_mockup_creates_output_directory(self, tmp_path, sample_design_image, catalog_template):
        out_dir = tmp_path / "nested" / "mockups" / "output"
        assert not out_dir.exists()

        generate_mockups_for_design(str(sample_design_image), [catalog_template], out_dir, RasterLoader())

        assert out_dir.is_dir()

    def test_unavailable_template_writes_raw_design(self, tmp_path, sample_design_image):
        broken = MockupTemplate(id="gone", template_url=str(tmp_path / "missing.png"),
                                print_area=PrintArea(0, 0, 1, 1))

        result = generate_mockups_for_design(str(sample_design_image), [broken], tmp_path / "out", RasterLoader())

        img = Image.open(result[0]).convert("RGBA")
        assert img.size == (100, 100)
        assert img.getpixel((50, 50)) == (0, 0, 255, 255)

    def test_missing_design_raises(self, tmp_path, catalog_template):
        from mockup_preview.compositing.errors import ImageLoadError

        with pytest.raises(ImageLoadError):
            generate_mockups_for_design(str(tmp_path / "nope.png"), [catalog_template], tmp_path, RasterLoader())

    def test_output_is_png(self, tmp_path, sample_design_image, catalog_template):
        result = generate_mockups_for_design(str(sample_design_image), [catalog_template], tmp_path, RasterLoader())

        assert result[0].suffix == ".png"
        assert Image.open(result[0]).format == "PNG"
