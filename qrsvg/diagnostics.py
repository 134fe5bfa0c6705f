"""Non-fatal diagnostics collected during a render and returned to the caller."""

from dataclasses import dataclass, field

from qrsvg.logging import audit, get_logger

log = get_logger("diagnostics")

SHAPE_FALLBACK = "shape.fallback"
IMAGE_ADJUSTED = "image.adjusted"
IMAGE_CENTER_FALLBACK = "image.center_fallback"
FRAME_DETECT_FAILED = "frame.detect_failed"
SCALE_CLAMPED = "scale.clamped"


@dataclass(frozen=True)
class Diagnostic:
    """One non-fatal condition the renderer corrected on its own."""
    code: str
    message: str
    context: dict = field(default_factory=dict)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class Diagnostics(list):
    """List of Diagnostic entries owned by a single render call.

    Every entry is mirrored to the AUDIT log, but callers should read the
    list itself rather than rely on log output.
    """

    def report(self, code: str, message: str, **context) -> Diagnostic:
        entry = Diagnostic(code=code, message=message, context=context)
        self.append(entry)
        audit(code, logger=log, message=message, **context)
        return entry

    def codes(self) -> list[str]:
        return [d.code for d in self]
