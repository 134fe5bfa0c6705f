"""Shape drawers — SVG path generators for data dots, eye frames and eye balls.

Two drawer families:
    * context-free drawers for the eye frame ("donut") and eye ball blocks,
      parametrised by a per-corner radius recipe;
    * context-aware drawers for data dots, which only round a corner when
      neither adjacent side touches another dark module.

Every drawer returns a closed path confined to its bounding box at scale 1.
Lookups are total over the enums below; mapping free-form user strings onto
the enums happens in ``qrsvg.options``.
"""

import math
from enum import Enum
from typing import Callable, NamedTuple


class ShapeKind(Enum):
    FIGURE = "figure"
    ICON = "icon"
    CUSTOM_ICON = "custom-icon"


class FigureShape(Enum):
    SQUARE = "square"
    DOT = "dot"
    ROUNDED = "rounded"
    EXTRA_ROUNDED = "extra-rounded"
    CLASSY = "classy"
    CLASSY_ROUNDED = "classy-rounded"


class IconShape(Enum):
    SQUARE = "square"
    CIRCLE = "circle"
    ROUNDED = "rounded"
    HEART = "heart"
    STAR = "star"
    WAVE = "wave"
    CAPSULE = "capsule"
    DIAMOND = "diamond"
    HEXAGON = "hexagon"
    LEAF = "leaf"
    TRIANGLE = "triangle"


FIGURE_ALIASES = {"dots": FigureShape.DOT, "circle": FigureShape.DOT}


class Neighbors(NamedTuple):
    """Whether the module above/right/below/left is also dark."""
    top: bool = False
    right: bool = False
    bottom: bool = False
    left: bool = False


Radii = tuple[float, float, float, float]  # top-left, top-right, bottom-right, bottom-left


# ---------------------------------------------------------------------------
# Number formatting
# ---------------------------------------------------------------------------

def fmt(n: float) -> str:
    """Format a coordinate with at most 3 decimals and no trailing zeros."""
    s = f"{n:.3f}".rstrip("0").rstrip(".")
    return "0" if s in ("-0", "") else s


def _arc(r: float, x: float, y: float, sweep: int) -> str:
    """Quarter arc to (x, y); degenerates to a straight line for tiny radii."""
    if r <= 0.001:
        return f"L {fmt(x)} {fmt(y)}"
    return f"A {fmt(r)} {fmt(r)} 0 0 {sweep} {fmt(x)} {fmt(y)}"


# ---------------------------------------------------------------------------
# Context-free generators
# ---------------------------------------------------------------------------

def rounded_rect_path(x: float, y: float, s: float, radii: Radii) -> str:
    """Closed clockwise contour of an s x s square with per-corner radii."""
    tl, tr, br, bl = radii
    return (
        f"M {fmt(x + tl)} {fmt(y)} "
        f"H {fmt(x + s - tr)} {_arc(tr, x + s, y + tr, 1)} "
        f"V {fmt(y + s - br)} {_arc(br, x + s - br, y + s, 1)} "
        f"H {fmt(x + bl)} {_arc(bl, x, y + s - bl, 1)} "
        f"V {fmt(y + tl)} {_arc(tl, x + tl, y, 1)} Z"
    )


def _hole_path(x: float, y: float, s: float, radii: Radii) -> str:
    """Counter-clockwise contour used as the hole of a ring."""
    tl, tr, br, bl = radii
    return (
        f"M {fmt(x + tl)} {fmt(y)} "
        f"{_arc(tl, x, y + tl, 0)} "
        f"V {fmt(y + s - bl)} {_arc(bl, x + bl, y + s, 0)} "
        f"H {fmt(x + s - br)} {_arc(br, x + s, y + s - br, 0)} "
        f"V {fmt(y + tr)} {_arc(tr, x + s - tr, y, 0)} "
        f"H {fmt(x + tl)} Z"
    )


def donut_path(x: float, y: float, s: float, thickness: float, outer: Radii, inner: Radii) -> str:
    """Square ring: clockwise outer contour plus counter-clockwise hole."""
    t = thickness
    return rounded_rect_path(x, y, s, outer) + " " + _hole_path(x + t, y + t, s - 2 * t, inner)


# ---------------------------------------------------------------------------
# Eye frame (corner square, 7x7) recipes
# ---------------------------------------------------------------------------

def _corner_square_radii(style: FigureShape, s: float) -> tuple[Radii, Radii]:
    t = s / 7
    r_out = s / 2
    r_in = (s - 2 * t) / 2
    if style is FigureShape.DOT:
        return (r_out,) * 4, (r_in,) * 4
    if style is FigureShape.EXTRA_ROUNDED:
        return (2.5 * t,) * 4, (1.5 * t,) * 4
    if style is FigureShape.ROUNDED:
        return (1.5 * t,) * 4, (0.5 * t,) * 4
    if style is FigureShape.CLASSY:
        # TL and BR fully round, TR and BL sharp
        return (r_out, 0, r_out, 0), (r_in, 0, r_in, 0)
    if style is FigureShape.CLASSY_ROUNDED:
        return (r_out, t, r_out, t), (r_in, 0, r_in, 0)
    return (0, 0, 0, 0), (0, 0, 0, 0)


def corner_square_path(style: FigureShape, x: float, y: float, s: float = 7) -> str:
    """Eye frame ring of side *s* (one module thick at s=7)."""
    outer, inner = _corner_square_radii(style, s)
    return donut_path(x, y, s, s / 7, outer, inner)


# ---------------------------------------------------------------------------
# Eye ball (corner dot, 3x3) recipes
# ---------------------------------------------------------------------------

def _corner_dot_radii(style: FigureShape, s: float) -> Radii:
    t = s / 3
    half = s / 2
    if style is FigureShape.DOT:
        return (half,) * 4
    if style is FigureShape.EXTRA_ROUNDED:
        return (t,) * 4
    if style is FigureShape.ROUNDED:
        return (0.5 * t,) * 4
    if style is FigureShape.CLASSY:
        return (half, 0, half, 0)
    if style is FigureShape.CLASSY_ROUNDED:
        return (half, 0.5 * t, half, 0.5 * t)
    return (0, 0, 0, 0)


def corner_dot_path(style: FigureShape, x: float, y: float, s: float = 3) -> str:
    """Solid eye ball block of side *s*."""
    return rounded_rect_path(x, y, s, _corner_dot_radii(style, s))


# ---------------------------------------------------------------------------
# Data dots (context-aware)
# ---------------------------------------------------------------------------

def _dot_square(x, y, n, s):
    c = 0.5 - 0.5 * s
    return f"M {fmt(x + c)} {fmt(y + c)} h {fmt(s)} v {fmt(s)} h {fmt(-s)} Z"


def _dot_circle(x, y, n, s):
    r = 0.5 * s
    cx, cy = x + 0.5, y + 0.5
    return (
        f"M {fmt(cx - r)} {fmt(cy)} "
        f"A {fmt(r)} {fmt(r)} 0 1 0 {fmt(cx + r)} {fmt(cy)} "
        f"A {fmt(r)} {fmt(r)} 0 1 0 {fmt(cx - r)} {fmt(cy)} Z"
    )


def _sharp(cx, cy, r, corner):
    """Two straight edges through the square corner, ending at the next edge midpoint."""
    if corner == "tr":
        return f" L {fmt(cx + r)} {fmt(cy - r)} L {fmt(cx + r)} {fmt(cy)}"
    if corner == "br":
        return f" L {fmt(cx + r)} {fmt(cy + r)} L {fmt(cx)} {fmt(cy + r)}"
    if corner == "bl":
        return f" L {fmt(cx - r)} {fmt(cy + r)} L {fmt(cx - r)} {fmt(cy)}"
    return f" L {fmt(cx - r)} {fmt(cy - r)} L {fmt(cx)} {fmt(cy - r)}"


def _round(cx, cy, r, rad, corner):
    """Corner rounded with radius *rad* (rad == r gives a full quarter circle)."""
    if rad >= r:
        end = {"tr": (cx + r, cy), "br": (cx, cy + r), "bl": (cx - r, cy), "tl": (cx, cy - r)}[corner]
        return f" A {fmt(r)} {fmt(r)} 0 0 1 {fmt(end[0])} {fmt(end[1])}"
    if corner == "tr":
        pts = (cx + r - rad, cy - r), (cx + r, cy - r + rad), (cx + r, cy)
    elif corner == "br":
        pts = (cx + r, cy + r - rad), (cx + r - rad, cy + r), (cx, cy + r)
    elif corner == "bl":
        pts = (cx - r + rad, cy + r), (cx - r, cy + r - rad), (cx - r, cy)
    else:
        pts = (cx - r, cy - r + rad), (cx - r + rad, cy - r), (cx, cy - r)
    (ax, ay), (bx, by), (ex, ey) = pts
    return (
        f" L {fmt(ax)} {fmt(ay)} A {fmt(rad)} {fmt(rad)} 0 0 1 {fmt(bx)} {fmt(by)}"
        f" L {fmt(ex)} {fmt(ey)}"
    )


def _corner_free(n: Neighbors) -> dict[str, bool]:
    return {
        "tr": not (n.top or n.right),
        "br": not (n.bottom or n.right),
        "bl": not (n.bottom or n.left),
        "tl": not (n.top or n.left),
    }


def _neighbor_dot(radius_for: Callable[[str, float], float | None]):
    """Build a drawer from a per-corner radius rule.

    *radius_for(corner, s)* returns the radius for a free corner, or None if
    that corner is always sharp.
    """
    def draw(x, y, n, s):
        cx, cy = x + 0.5, y + 0.5
        r = 0.5 * s
        free = _corner_free(n)
        path = f"M {fmt(cx)} {fmt(cy - r)}"
        for corner in ("tr", "br", "bl", "tl"):
            rad = radius_for(corner, s)
            if rad is not None and free[corner]:
                path += _round(cx, cy, r, rad, corner)
            else:
                path += _sharp(cx, cy, r, corner)
        return path + " Z"
    return draw


_DOT_DRAWERS = {
    FigureShape.SQUARE: _dot_square,
    FigureShape.DOT: _dot_circle,
    FigureShape.EXTRA_ROUNDED: _neighbor_dot(lambda c, s: 0.5 * s),
    FigureShape.ROUNDED: _neighbor_dot(lambda c, s: 0.25 * s),
    FigureShape.CLASSY: _neighbor_dot(lambda c, s: 0.5 * s if c in ("br", "tl") else None),
    FigureShape.CLASSY_ROUNDED: _neighbor_dot(lambda c, s: 0.5 * s if c in ("br", "tl") else 0.25 * s),
}


def dot_path(style: FigureShape, x: int, y: int, neighbors: Neighbors = Neighbors(), scale: float = 1.0) -> str:
    """Data module at cell (x, y), shrunk around its centre by *scale*."""
    return _DOT_DRAWERS[style](x, y, neighbors, scale)


# ---------------------------------------------------------------------------
# Icon shapes (per-module pictograms)
# ---------------------------------------------------------------------------

def _icon_square(cx, cy, k):
    h = 0.5 * k
    return f"M {fmt(cx - h)} {fmt(cy - h)} h {fmt(k)} v {fmt(k)} h {fmt(-k)} Z"


def _icon_circle(cx, cy, k):
    return _dot_circle(cx - 0.5, cy - 0.5, Neighbors(), k)


def _icon_rounded(cx, cy, k):
    return rounded_rect_path(cx - 0.5 * k, cy - 0.5 * k, k, (0.2 * k,) * 4)


def _poly(cx, cy, k, points):
    coords = [f"{fmt(cx + px * k)} {fmt(cy + py * k)}" for px, py in points]
    return "M " + " L ".join(coords) + " Z"


def _icon_heart(cx, cy, k):
    s = k

    def p(dx, dy):
        return f"{fmt(cx + dx * s)} {fmt(cy + dy * s)}"

    return (
        f"M {p(0, -0.3)} "
        f"C {p(0, -0.5)} {p(-0.5, -0.5)} {p(-0.5, -0.1)} "
        f"C {p(-0.5, 0.2)} {p(-0.2, 0.35)} {p(0, 0.45)} "
        f"C {p(0.2, 0.35)} {p(0.5, 0.2)} {p(0.5, -0.1)} "
        f"C {p(0.5, -0.5)} {p(0, -0.5)} {p(0, -0.3)} Z"
    )


def _icon_star(cx, cy, k):
    outer, inner = 0.5, 0.2
    points = []
    for i in range(10):
        r = outer if i % 2 == 0 else inner
        a = -math.pi / 2 + i * math.pi / 5
        points.append((r * math.cos(a), r * math.sin(a)))
    return _poly(cx, cy, k, points)


def _icon_wave(cx, cy, k):
    x0, y0 = cx - 0.5 * k, cy - 0.5 * k
    return (
        f"M {fmt(x0)} {fmt(y0 + 0.1 * k)} "
        f"Q {fmt(x0 + 0.5 * k)} {fmt(y0 - 0.1 * k)} {fmt(x0 + k)} {fmt(y0 + 0.1 * k)} "
        f"V {fmt(y0 + 0.9 * k)} "
        f"Q {fmt(x0 + 0.5 * k)} {fmt(y0 + 0.7 * k)} {fmt(x0)} {fmt(y0 + 0.9 * k)} Z"
    )


def _icon_capsule(cx, cy, k):
    r = 0.23 * k
    return (
        f"M {fmt(cx - r)} {fmt(cy - r)} "
        f"A {fmt(r)} {fmt(r)} 0 0 1 {fmt(cx + r)} {fmt(cy - r)} "
        f"V {fmt(cy + r)} "
        f"A {fmt(r)} {fmt(r)} 0 0 1 {fmt(cx - r)} {fmt(cy + r)} Z"
    )


def _icon_leaf(cx, cy, k):
    r = 0.5 * k
    curve = 0.8 * k
    return (
        f"M {fmt(cx)} {fmt(cy - r)} "
        f"A {fmt(curve)} {fmt(curve)} 0 0 1 {fmt(cx)} {fmt(cy + r)} "
        f"A {fmt(curve)} {fmt(curve)} 0 0 1 {fmt(cx)} {fmt(cy - r)} Z"
    )


_ICON_DRAWERS = {
    IconShape.SQUARE: _icon_square,
    IconShape.CIRCLE: _icon_circle,
    IconShape.ROUNDED: _icon_rounded,
    IconShape.HEART: _icon_heart,
    IconShape.STAR: _icon_star,
    IconShape.WAVE: _icon_wave,
    IconShape.CAPSULE: _icon_capsule,
    IconShape.DIAMOND: lambda cx, cy, k: _poly(cx, cy, k, [(0, -0.45), (0.45, 0), (0, 0.45), (-0.45, 0)]),
    IconShape.HEXAGON: lambda cx, cy, k: _poly(
        cx, cy, k, [(-0.25, -0.45), (0.25, -0.45), (0.45, 0), (0.25, 0.45), (-0.25, 0.45), (-0.45, 0)]
    ),
    IconShape.LEAF: _icon_leaf,
    IconShape.TRIANGLE: lambda cx, cy, k: _poly(cx, cy, k, [(0, -0.45), (0.45, 0.45), (-0.45, 0.45)]),
}


def icon_path(icon: IconShape, x: float, y: float, size: float = 1.0, scale: float = 1.0) -> str:
    """Pictogram filling the size x size box at (x, y), shrunk by *scale*."""
    return _ICON_DRAWERS[icon](x + size / 2, y + size / 2, size * scale)


def icon_use(symbol_id: str, x: float, y: float, size: float = 1.0, scale: float = 1.0) -> str:
    """``<use>`` reference to a custom-icon symbol, centred in its box."""
    k = size * scale
    off = (size - k) / 2
    return (
        f'<use href="#{symbol_id}" x="{fmt(x + off)}" y="{fmt(y + off)}" '
        f'width="{fmt(k)}" height="{fmt(k)}"/>'
    )


def icon_symbol(symbol_id: str, path: str, view_box: str = "0 0 24 24") -> str:
    """``<symbol>`` definition for a user-supplied icon path."""
    return f'<symbol id="{symbol_id}" viewBox="{view_box}"><path d="{path}"/></symbol>'
