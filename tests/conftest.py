"""Shared fixtures: synthetic frame bitmaps and native-library guards."""

import base64
import io
import logging

import pytest
from PIL import Image

FRAME_SIZE = (100, 80)
# Transparent hole punched into the frame: x, y, width, height
FRAME_HOLE = (20, 10, 40, 40)


def _frame_image(size=FRAME_SIZE, hole=FRAME_HOLE) -> Image.Image:
    img = Image.new("RGBA", size, (200, 30, 30, 255))
    x, y, w, h = hole
    img.paste((0, 0, 0, 0), (x, y, x + w, y + h))
    return img


@pytest.fixture
def frame_png(tmp_path):
    """Path to a 100x80 opaque red frame with a 40x40 transparent hole at (20, 10)."""
    path = tmp_path / "frame.png"
    _frame_image().save(path)
    return str(path)


@pytest.fixture
def frame_data_uri():
    buf = io.BytesIO()
    _frame_image().save(buf, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")


@pytest.fixture
def opaque_png(tmp_path):
    """A frame with no empty pixels at all."""
    path = tmp_path / "opaque.png"
    Image.new("RGB", (50, 50), (10, 10, 10)).save(path)
    return str(path)


@pytest.fixture
def require_cairo():
    """Skip when cairosvg or the native cairo library is unavailable."""
    try:
        import cairosvg  # noqa: F401
    except (ImportError, OSError) as e:
        pytest.skip(f"cairo not available: {e}")


@pytest.fixture
def require_decoders(require_cairo):
    """Skip when the QR decoders (zbar, OpenCV) cannot be loaded."""
    try:
        import cv2  # noqa: F401
        from pyzbar import pyzbar  # noqa: F401
    except (ImportError, OSError) as e:
        pytest.skip(f"QR decoders not available: {e}")


@pytest.fixture(autouse=True)
def _reset_qrsvg_logging():
    """Undo handlers installed by CLI tests so later tests start clean."""
    yield
    root = logging.getLogger("qrsvg")
    root.handlers.clear()
    root.setLevel(logging.NOTSET)


@pytest.fixture
def pinhole_png(tmp_path):
    """A 100x100 opaque frame whose only empty pixel is at (50, 50)."""
    path = tmp_path / "pinhole.png"
    img = Image.new("RGBA", (100, 100), (10, 10, 10, 255))
    img.putpixel((50, 50), (0, 0, 0, 0))
    img.save(path)
    return str(path)
