"""Raster export — convert rendered SVG markup to PNG / JPEG / WEBP bytes."""

import io

from PIL import Image

from qrsvg.errors import UnsupportedFormatError
from qrsvg.logging import audit, get_logger, trace

log = get_logger("export")

SUPPORTED_FORMATS = ("svg", "png", "jpeg", "webp")
_FORMAT_ALIASES = {"jpg": "jpeg"}


def normalize_format(fmt: str) -> str:
    name = _FORMAT_ALIASES.get(fmt.lower(), fmt.lower())
    if name not in SUPPORTED_FORMATS:
        raise UnsupportedFormatError(fmt, SUPPORTED_FORMATS)
    return name


def _contain(img: Image.Image, width: int | None, height: int | None) -> Image.Image:
    """Fit *img* inside width x height on a transparent canvas, keeping aspect ratio."""
    src_w, src_h = img.size
    if width is None:
        width = round(src_w * height / src_h)
    if height is None:
        height = round(src_h * width / src_w)
    ratio = min(width / src_w, height / src_h)
    new_w, new_h = max(1, round(src_w * ratio)), max(1, round(src_h * ratio))
    resized = img.resize((new_w, new_h), Image.LANCZOS)
    canvas = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    canvas.paste(resized, ((width - new_w) // 2, (height - new_h) // 2))
    return canvas


@trace
def rasterize(svg: str, width: int | None = None, height: int | None = None) -> Image.Image:
    """Render SVG markup to an RGBA Pillow image."""
    import cairosvg

    png = cairosvg.svg2png(bytestring=svg.encode("utf-8"))
    img = Image.open(io.BytesIO(png)).convert("RGBA")
    if width or height:
        img = _contain(img, width, height)
    return img


@trace
def export_svg(
    svg: str,
    fmt: str = "png",
    width: int | None = None,
    height: int | None = None,
    quality: int = 90,
) -> bytes:
    """Convert *svg* to the requested format.

    Args:
        svg: SVG markup from ``generate``.
        fmt: One of svg, png, jpeg (jpg), webp.
        width, height: Optional output box; the image is fitted inside it.
        quality: 1-100, used by jpeg and webp.

    Raises:
        UnsupportedFormatError: for any other format.
    """
    name = normalize_format(fmt)
    if name == "svg":
        return svg.encode("utf-8")

    img = rasterize(svg, width, height)
    buf = io.BytesIO()
    if name == "png":
        img.save(buf, format="PNG")
    elif name == "jpeg":
        flat = Image.new("RGB", img.size, (255, 255, 255))
        flat.paste(img, mask=img.split()[3])
        flat.save(buf, format="JPEG", quality=quality)
    else:
        img.save(buf, format="WEBP", quality=quality)

    data = buf.getvalue()
    audit("export.done", logger=log, format=name, size=f"{img.size[0]}x{img.size[1]}", bytes=len(data))
    return data
