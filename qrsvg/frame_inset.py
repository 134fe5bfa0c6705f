"""Frame inset detection — find the hole in a decorative frame image where the QR code goes.

A pixel is "empty" when it is mostly transparent or near-white. The inset is
the largest axis-aligned rectangle made only of empty pixels, found with a
row-by-row histogram sweep and the stack-based largest-rectangle-in-histogram
scan, O(width x height) overall.
"""

import asyncio
import base64
import io
import urllib.parse
from dataclasses import dataclass
from pathlib import Path

import numpy as np
from PIL import Image

from qrsvg.logging import audit, get_logger, trace

log = get_logger("frame_inset")

# Pixels with alpha below this are empty
ALPHA_THRESHOLD = 128
# Opaque pixels with luminance above this (0-255) are empty
LUMA_THRESHOLD = 240
# Fallback inset covers this fraction of the frame, centred
FALLBACK_FRACTION = 0.8


@dataclass(frozen=True)
class RawImage:
    """Decoded RGBA pixels, shape (height, width, 4), dtype uint8."""
    pixels: np.ndarray
    width: int
    height: int


@dataclass(frozen=True)
class InsetRect:
    x: float
    y: float
    width: float
    height: float

    def as_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

def _read_source(source: str) -> bytes:
    """Bytes behind a ``data:`` URI (base64 or percent-encoded) or a file path."""
    if source.startswith("data:"):
        header, _, payload = source.partition(",")
        if header.endswith(";base64"):
            return base64.b64decode(payload)
        return urllib.parse.unquote_to_bytes(payload)
    return Path(source).read_bytes()


@trace
def decode_to_rgba(source: str) -> RawImage:
    """Decode a raster image into RGBA pixels (alpha added when missing)."""
    with Image.open(io.BytesIO(_read_source(source))) as img:
        rgba = img.convert("RGBA")
    pixels = np.asarray(rgba, dtype=np.uint8)
    return RawImage(pixels=pixels, width=rgba.width, height=rgba.height)


# ---------------------------------------------------------------------------
# Largest empty rectangle
# ---------------------------------------------------------------------------

def empty_mask(pixels: np.ndarray) -> np.ndarray:
    """Bool array (height, width): True where the pixel counts as empty."""
    rgb = pixels[..., :3].astype(np.float64)
    alpha = pixels[..., 3]
    luma = 0.299 * rgb[..., 0] + 0.587 * rgb[..., 1] + 0.114 * rgb[..., 2]
    return (alpha < ALPHA_THRESHOLD) | (luma > LUMA_THRESHOLD)


def largest_rect_in_histogram(heights) -> tuple[int, int, int]:
    """Largest rectangle under a histogram.

    Returns:
        (left, width, height) of the first maximal rectangle found;
        (0, 0, 0) for an all-zero histogram.
    """
    stack: list[int] = []
    best = (0, 0, 0)
    best_area = 0
    n = len(heights)

    for i in range(n + 1):
        h = heights[i] if i < n else 0
        while stack and h < heights[stack[-1]]:
            height = int(heights[stack.pop()])
            left = stack[-1] + 1 if stack else 0
            width = i - left
            if width * height > best_area:
                best_area = width * height
                best = (left, width, height)
        stack.append(i)
    return best


def find_largest_empty_rect(mask: np.ndarray) -> InsetRect | None:
    """Largest all-True rectangle in a bool mask, in pixel coordinates."""
    height, width = mask.shape
    heights = np.zeros(width, dtype=np.int64)
    best: InsetRect | None = None
    best_area = 0

    for row in range(height):
        heights = np.where(mask[row], heights + 1, 0)
        left, rw, rh = largest_rect_in_histogram(heights.tolist())
        if rw * rh > best_area:
            best_area = rw * rh
            best = InsetRect(x=left, y=row - rh + 1, width=rw, height=rh)
    return best


def scale_rect(rect: InsetRect, src_w: int, src_h: int, dst_w: float, dst_h: float) -> InsetRect:
    """Rescale a pixel-space rectangle to display space, rounding to whole units."""
    sx = dst_w / src_w
    sy = dst_h / src_h
    return InsetRect(
        x=round(rect.x * sx),
        y=round(rect.y * sy),
        width=round(rect.width * sx),
        height=round(rect.height * sy),
    )


def fallback_inset(display_w: float, display_h: float) -> InsetRect:
    """Centred box covering 80% of the frame in each direction."""
    w = display_w * FALLBACK_FRACTION
    h = display_h * FALLBACK_FRACTION
    return InsetRect(x=(display_w - w) / 2, y=(display_h - h) / 2, width=w, height=h)


@trace
def detect_in_image(raw: RawImage, display_w: float, display_h: float) -> InsetRect | None:
    """Synchronous detection on already decoded pixels."""
    rect = find_largest_empty_rect(empty_mask(raw.pixels))
    if rect is None:
        return None
    scaled = scale_rect(rect, raw.width, raw.height, display_w, display_h)
    # A hole that rounds away at display size is no hole
    if scaled.width <= 0 or scaled.height <= 0:
        return None
    return scaled


@trace
async def detect_frame_inset(source: str, display_w: float, display_h: float) -> InsetRect | None:
    """Detect the frame hole, scaled to the frame's display dimensions.

    Decoding and the rectangle sweep run in a worker thread. Returns None
    when the image cannot be decoded or has no usable empty area; the caller
    substitutes ``fallback_inset``.
    """
    try:
        raw = await asyncio.to_thread(decode_to_rgba, source)
    except Exception as e:
        audit("frame.decode_failed", logger=log, error=str(e), source=source[:60])
        return None

    inset = await asyncio.to_thread(detect_in_image, raw, display_w, display_h)
    if inset is None:
        audit("frame.no_empty_region", logger=log, image=f"{raw.width}x{raw.height}")
        return None

    audit("frame.inset_detected", logger=log,
          image=f"{raw.width}x{raw.height}", display=f"{display_w}x{display_h}", **inset.as_dict())
    return inset
