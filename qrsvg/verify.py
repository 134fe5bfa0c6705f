"""Scan verification — rasterize a rendered SVG and check it still decodes."""

import time
from dataclasses import dataclass
from typing import Callable

import cv2
import numpy as np
from PIL import Image
from pyzbar.pyzbar import decode as pyzbar_decode

from qrsvg.export import rasterize
from qrsvg.logging import audit, get_logger, trace

log = get_logger("verify")

# Rasterized size for scanning; small styled modules need a few pixels each
SCAN_SIZE = 600


@dataclass
class ScanResult:
    """Result of a single scan attempt."""
    success: bool
    decoded_data: str | None = None
    decode_time_ms: float = 0.0
    decoder: str = ""
    error: str | None = None


def _flatten(image: Image.Image) -> Image.Image:
    """Composite transparent pixels onto white; decoders read RGB only."""
    if image.mode != "RGBA":
        return image.convert("RGB")
    flat = Image.new("RGB", image.size, (255, 255, 255))
    flat.paste(image, mask=image.split()[3])
    return flat


def _read_zbar(image: Image.Image) -> str | None:
    found = pyzbar_decode(image)
    return found[0].data.decode("utf-8", errors="replace") if found else None


def _read_opencv(image: Image.Image) -> str | None:
    gray = cv2.cvtColor(np.array(image), cv2.COLOR_RGB2GRAY)
    data, _, _ = cv2.QRCodeDetector().detectAndDecode(gray)
    return data or None


def _scan(decoder: str, read: Callable[[Image.Image], str | None], image: Image.Image) -> ScanResult:
    start = time.perf_counter()
    try:
        data = read(_flatten(image))
    except Exception as e:
        elapsed = (time.perf_counter() - start) * 1000
        audit("scan.error", logger=log, decoder=decoder, error=str(e), time_ms=round(elapsed, 1))
        return ScanResult(success=False, decode_time_ms=elapsed, decoder=decoder, error=str(e))

    elapsed = (time.perf_counter() - start) * 1000
    if data is None:
        audit("scan.verified", logger=log, decoder=decoder, success=False,
              time_ms=round(elapsed, 1), error="No QR code detected")
        return ScanResult(success=False, decode_time_ms=elapsed, decoder=decoder, error="No QR code detected")

    audit("scan.verified", logger=log, decoder=decoder, success=True, time_ms=round(elapsed, 1), data=data[:80])
    return ScanResult(success=True, decoded_data=data, decode_time_ms=elapsed, decoder=decoder)


@trace
def scan_pyzbar(image: Image.Image) -> ScanResult:
    """Scan with pyzbar (wraps ZBar)."""
    return _scan("pyzbar/zbar", _read_zbar, image)


@trace
def scan_opencv(image: Image.Image) -> ScanResult:
    """Scan with OpenCV's built-in QR detector."""
    return _scan("opencv", _read_opencv, image)


@trace
def verify(image: Image.Image, expected_data: str | None = None) -> list[ScanResult]:
    """Run every decoder on *image*.

    A decode that differs from *expected_data* counts as a failure.
    """
    results = []
    for scanner in (scan_pyzbar, scan_opencv):
        result = scanner(image)
        if result.success and expected_data is not None and result.decoded_data != expected_data:
            result.success = False
            result.error = f"Data mismatch: got '{result.decoded_data}', expected '{expected_data}'"
        results.append(result)
    return results


@trace
def verify_svg(svg: str, expected_data: str | None = None, size: int = SCAN_SIZE) -> list[ScanResult]:
    """Rasterize rendered SVG markup and verify it."""
    return verify(rasterize(svg, size, size), expected_data)
