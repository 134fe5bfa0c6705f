"""Fatal error types raised by qrsvg."""


class QRSVGError(Exception):
    """Base class for all qrsvg errors."""


class ConfigError(QRSVGError, ValueError):
    """Render configuration is unusable (empty data, bad ECC level, bad gradient...)."""


class UnsupportedFormatError(QRSVGError, ValueError):
    """Export was asked for a format the exporter does not know."""

    def __init__(self, fmt: str, supported: tuple[str, ...]):
        self.format = fmt
        self.supported = supported
        super().__init__(f"Unsupported format: {fmt!r}. Use one of: {' | '.join(supported)}")
