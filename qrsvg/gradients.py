"""Gradient binding — attach a gradient descriptor to the bounding box of the zone it colours.

Each eye gets its own gradient bound to its own box; the dots layer binds to
the QR area and the background to the full canvas. Coordinates are emitted
with ``gradientUnits="userSpaceOnUse"`` so the binding survives masking.
"""

import html
import math
import re
from dataclasses import dataclass, field

from qrsvg.errors import ConfigError
from qrsvg.shapes import fmt
from qrsvg.zones import Rect

_OFFSET_RE = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*%?\s*$")


@dataclass(frozen=True)
class ColorStop:
    offset: str  # "0%" .. "100%"
    color: str

    @property
    def percent(self) -> float:
        return parse_offset(self.offset)


@dataclass(frozen=True)
class Gradient:
    type: str = "linear"  # linear | radial
    rotation: float = 0.0  # degrees
    color_stops: tuple[ColorStop, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class BoundGradient:
    """A gradient resolved against a concrete box in user space."""
    gradient: Gradient
    box: Rect
    cx: float
    cy: float
    r: float
    x1: float
    y1: float
    x2: float
    y2: float


def parse_offset(offset: str | float) -> float:
    """Parse a stop offset such as ``"40%"`` (or a bare number) into percent."""
    if isinstance(offset, (int, float)):
        return float(offset)
    m = _OFFSET_RE.match(offset)
    if not m:
        raise ConfigError(f"Invalid gradient stop offset {offset!r}")
    return float(m.group(1))


def validate_gradient(gradient: Gradient) -> Gradient:
    """Check type and that stop offsets are non-decreasing percentages."""
    if gradient.type not in ("linear", "radial"):
        raise ConfigError(f"Unknown gradient type {gradient.type!r}; expected 'linear' or 'radial'")
    if not gradient.color_stops:
        raise ConfigError("Gradient needs at least one color stop")
    previous = -math.inf
    for stop in gradient.color_stops:
        pct = stop.percent
        if pct < previous:
            raise ConfigError(
                f"Gradient stop offsets must be non-decreasing, got {stop.offset!r} after {previous:g}%"
            )
        previous = pct
    return gradient


def bind_gradient(gradient: Gradient, box: Rect) -> BoundGradient:
    """Resolve *gradient* against *box*.

    The gradient line runs through the box centre along the rotation angle
    with half-length equal to half the box diagonal, so it spans the box
    whatever the angle.
    """
    cx = box.x + box.width / 2
    cy = box.y + box.height / 2
    r = math.sqrt(box.width ** 2 + box.height ** 2) / 2
    theta = math.radians(gradient.rotation or 0.0)
    dx, dy = r * math.cos(theta), r * math.sin(theta)
    return BoundGradient(
        gradient=gradient, box=box, cx=cx, cy=cy, r=r,
        x1=cx - dx, y1=cy - dy, x2=cx + dx, y2=cy + dy,
    )


def _stops(gradient: Gradient) -> str:
    return "".join(
        f'<stop offset="{fmt(stop.percent)}%" stop-color="{html.escape(stop.color, quote=True)}"/>'
        for stop in gradient.color_stops
    )


def gradient_def(gradient_id: str, bound: BoundGradient) -> str:
    """``<linearGradient>`` / ``<radialGradient>`` element for *bound*."""
    if bound.gradient.type == "radial":
        return (
            f'<radialGradient id="{gradient_id}" gradientUnits="userSpaceOnUse" '
            f'cx="{fmt(bound.cx)}" cy="{fmt(bound.cy)}" fx="{fmt(bound.cx)}" fy="{fmt(bound.cy)}" '
            f'r="{fmt(bound.r)}">{_stops(bound.gradient)}</radialGradient>'
        )
    return (
        f'<linearGradient id="{gradient_id}" gradientUnits="userSpaceOnUse" '
        f'x1="{fmt(bound.x1)}" y1="{fmt(bound.y1)}" x2="{fmt(bound.x2)}" y2="{fmt(bound.y2)}">'
        f"{_stops(bound.gradient)}</linearGradient>"
    )


@dataclass
class Fill:
    """Resolved paint for a layer rectangle: a colour or a gradient reference."""
    color: str | None = None
    gradient_id: str | None = None

    def paint(self) -> str:
        if self.gradient_id:
            return f"url('#{self.gradient_id}')"
        return html.escape(self.color or "#000000", quote=True)


def resolve_fill(gradient_id: str, gradient: Gradient | None, color: str | None,
                 box: Rect, defs: list[str]) -> Fill:
    """Return the paint for *box*; gradients are bound and appended to *defs*."""
    if gradient is None:
        return Fill(color=color)
    defs.append(gradient_def(gradient_id, bind_gradient(gradient, box)))
    return Fill(gradient_id=gradient_id)
