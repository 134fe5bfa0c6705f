"""QR symbol encoder wrapper — turns text into a square dark/light module matrix.

The symbology itself (version sizing, Reed-Solomon, mask selection) is done
by the ``qrcode`` package; this module only adapts its output.
"""

from dataclasses import dataclass
from enum import Enum

import qrcode
import qrcode.constants

from qrsvg.errors import ConfigError
from qrsvg.logging import audit, get_logger, trace

log = get_logger("encoder")


class ECCLevel(Enum):
    L = qrcode.constants.ERROR_CORRECT_L  # 7%
    M = qrcode.constants.ERROR_CORRECT_M  # 15%
    Q = qrcode.constants.ERROR_CORRECT_Q  # 25%
    H = qrcode.constants.ERROR_CORRECT_H  # 30%


ECC_NAMES = {"L": ECCLevel.L, "M": ECCLevel.M, "Q": ECCLevel.Q, "H": ECCLevel.H}


@dataclass(frozen=True)
class QRMatrix:
    """Square module matrix. ``modules[y][x]`` is True for a dark module."""
    version: int
    ecc: str
    modules: tuple[tuple[bool, ...], ...]

    @property
    def size(self) -> int:
        return len(self.modules)

    def is_dark(self, x: int, y: int) -> bool:
        """Dark test that treats anything outside the symbol as light."""
        if 0 <= x < self.size and 0 <= y < self.size:
            return self.modules[y][x]
        return False


def symbol_size(version: int) -> int:
    """Side length in modules for a QR version (1 -> 21, 40 -> 177)."""
    return version * 4 + 17


def parse_ecc(ecc: str) -> ECCLevel:
    try:
        return ECC_NAMES[str(ecc).upper()]
    except KeyError:
        raise ConfigError(f"Unknown error correction level {ecc!r}; expected one of L, M, Q, H") from None


@trace
def encode(text: str, ecc: str = "H") -> QRMatrix:
    """Encode *text* at the given ECC level with automatic version and mask.

    Raises:
        ConfigError: if *text* is empty or *ecc* is not one of L/M/Q/H.
    """
    if not text:
        raise ConfigError("QR data must be a non-empty string")
    ecc_level = parse_ecc(ecc)

    qr = qrcode.QRCode(
        version=None,
        error_correction=ecc_level.value,
        box_size=1,
        border=0,
    )
    qr.add_data(text)
    qr.make(fit=True)

    modules = tuple(tuple(bool(cell) for cell in row) for row in qr.modules)
    matrix = QRMatrix(version=qr.version, ecc=ecc_level.name, modules=modules)

    audit("qr.encoded", logger=log,
          data=text[:80], version=matrix.version, size=f"{matrix.size}x{matrix.size}",
          ecc=matrix.ecc)
    return matrix
