"""Tests for raster export."""

import io

import pytest
from PIL import Image

from qrsvg.errors import UnsupportedFormatError
from qrsvg.export import SUPPORTED_FORMATS, export_svg, normalize_format
from qrsvg.renderer import generate_sync


@pytest.fixture(scope="module")
def svg():
    return generate_sync({"data": "hello", "width": 200, "height": 200}).svg


class TestFormats:
    def test_svg_passthrough(self, svg):
        assert export_svg(svg, "svg") == svg.encode("utf-8")

    @pytest.mark.parametrize("fmt", ["gif", "bmp", ""])
    def test_unknown_format(self, svg, fmt):
        with pytest.raises(UnsupportedFormatError) as exc:
            export_svg(svg, fmt)
        assert repr(fmt) in str(exc.value)
        assert "svg | png | jpeg | webp" in str(exc.value)
        assert exc.value.supported == SUPPORTED_FORMATS

    def test_jpg_alias(self):
        assert normalize_format("JPG") == "jpeg"


@pytest.mark.usefixtures("require_cairo")
class TestRaster:
    def test_png_native_size(self, svg):
        img = Image.open(io.BytesIO(export_svg(svg, "png")))
        assert img.format == "PNG"
        assert img.size == (200, 200)

    def test_png_contain_resize(self, svg):
        img = Image.open(io.BytesIO(export_svg(svg, "png", width=400, height=100)))
        assert img.size == (400, 100)
        # Square code centred; side strips transparent
        assert img.getpixel((10, 50))[3] == 0

    def test_jpeg_flattened(self, svg):
        img = Image.open(io.BytesIO(export_svg(svg, "jpeg", width=120)))
        assert img.format == "JPEG"
        assert img.mode == "RGB"
        assert img.size == (120, 120)

    def test_webp(self, svg):
        assert Image.open(io.BytesIO(export_svg(svg, "webp", quality=50))).format == "WEBP"
