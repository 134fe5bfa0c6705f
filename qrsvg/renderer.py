"""SVG assembly — the render entry point.

The pipeline has three phases:
    1. ``layout``        (sync)  encode, classify, draw shapes into layer buckets,
                                 bind gradients, place images;
    2. ``resolve_frame`` (async) optional frame inset detection;
    3. ``assemble``      (sync)  concatenate defs, background, layers, images,
                                 clip path and frame transform.
"""

import asyncio
import html
from dataclasses import dataclass, field
from typing import Callable

from qrsvg.compositor import (
    CORNER_DOT_LAYER,
    CORNER_SQUARE_LAYER,
    DOTS_LAYER,
    LayerBucket,
    PaintedBox,
    layer_markup,
)
from qrsvg.diagnostics import FRAME_DETECT_FAILED, Diagnostics
from qrsvg.encoder import QRMatrix, encode
from qrsvg.frame_inset import InsetRect, detect_frame_inset, fallback_inset
from qrsvg.gradients import bind_gradient, gradient_def, resolve_fill
from qrsvg.logging import audit, get_logger, trace
from qrsvg.options import Frame, PartStyle, RenderOptions
from qrsvg.placement import MaxPosition, PlacedImage, max_position, resolve_image_positions
from qrsvg.shapes import (
    Neighbors,
    ShapeKind,
    corner_dot_path,
    corner_square_path,
    dot_path,
    fmt,
    icon_path,
    icon_symbol,
    icon_use,
)
from qrsvg.zones import (
    EYE_BALL_OFFSET,
    EYE_BALL_SIZE,
    EYE_SIZE,
    Rect,
    Zone,
    classify_zone,
    eye_ball_rects,
    eye_index,
    eye_origins,
    eye_rects,
)

log = get_logger("renderer")

CLIP_ID = "qr-clip"
SYMBOL_IDS = {
    DOTS_LAYER: "dots-icon",
    CORNER_SQUARE_LAYER: "corners-square-icon",
    CORNER_DOT_LAYER: "corners-dot-icon",
}


def _attr(value) -> str:
    return html.escape(str(value), quote=True)


@dataclass
class Layout:
    """Everything the assembler needs, resolved synchronously."""
    options: RenderOptions
    matrix: QRMatrix
    view_size: float
    defs: list[str]
    layers: list[str]
    images: list[PlacedImage]


@dataclass
class RenderResult:
    svg: str
    matrix_size: int
    eye_zones: list[Rect]
    max_position: Callable[[float, float], MaxPosition]
    diagnostics: Diagnostics = field(default_factory=Diagnostics)
    frame_inset: InsetRect | None = None


@dataclass
class QRBounds:
    matrix_size: int
    eye_zones: list[Rect]
    max_position: Callable[[float, float], MaxPosition]


# ---------------------------------------------------------------------------
# Phase 1: layout
# ---------------------------------------------------------------------------

def _offset(rect: Rect, m: float) -> Rect:
    return Rect(rect.x + m, rect.y + m, rect.width, rect.height)


def _draw_dot(bucket: LayerBucket, part: PartStyle, x: int, y: int, m: float,
              neighbors: Neighbors) -> None:
    shape = part.shape
    if shape.kind is ShapeKind.CUSTOM_ICON:
        bucket.add_use(icon_use(SYMBOL_IDS[bucket.name], x + m, y + m, 1, part.scale))
    elif shape.kind is ShapeKind.ICON:
        bucket.add_path(icon_path(shape.icon, x + m, y + m, 1, part.scale))
    else:
        bucket.add_path(dot_path(shape.figure, x + m, y + m, neighbors, part.scale))


def _draw_block(bucket: LayerBucket, part: PartStyle, x: float, y: float, size: float,
                figure_drawer) -> None:
    """One shape covering a size x size block (eye frame, single eye ball, or one module)."""
    shape = part.shape
    if shape.kind is ShapeKind.CUSTOM_ICON:
        bucket.add_use(icon_use(SYMBOL_IDS[bucket.name], x, y, size, part.scale))
    elif shape.kind is ShapeKind.ICON:
        bucket.add_path(icon_path(shape.icon, x, y, size, part.scale))
    else:
        k = size * part.scale
        off = (size - k) / 2
        bucket.add_path(figure_drawer(shape.figure, x + off, y + off, k))


def _draw_corner_square(bucket: LayerBucket, part: PartStyle, matrix: QRMatrix,
                        x: int, y: int, m: float, visited: list[list[bool]]) -> None:
    if part.shape.kind is not ShapeKind.FIGURE:
        _draw_block(bucket, part, x + m, y + m, 1, corner_square_path)
        return
    # Figure styles draw the whole ring once, at the first ring module reached
    ox, oy = eye_origins(matrix.size)[eye_index(x, y, matrix.size)]
    bucket.add_path(corner_square_path(part.shape.figure, ox + m, oy + m, EYE_SIZE))
    for yy in range(oy, oy + EYE_SIZE):
        for xx in range(ox, ox + EYE_SIZE):
            if classify_zone(xx, yy, matrix.size) is Zone.CORNER_SQUARE:
                visited[yy][xx] = True


def _draw_corner_dot(bucket: LayerBucket, part: PartStyle, matrix: QRMatrix,
                     x: int, y: int, m: float, visited: list[list[bool]]) -> None:
    if not part.is_single:
        _draw_block(bucket, part, x + m, y + m, 1, corner_dot_path)
        return
    ox, oy = eye_origins(matrix.size)[eye_index(x, y, matrix.size)]
    bx, by = ox + EYE_BALL_OFFSET, oy + EYE_BALL_OFFSET
    _draw_block(bucket, part, bx + m, by + m, EYE_BALL_SIZE, corner_dot_path)
    for yy in range(by, by + EYE_BALL_SIZE):
        for xx in range(bx, bx + EYE_BALL_SIZE):
            visited[yy][xx] = True


def _draw_modules(matrix: QRMatrix, options: RenderOptions, buckets: dict[str, LayerBucket],
                  excluded: list[Rect], visited: list[list[bool]]) -> None:
    """Scan every module once and route dark ones to their layer bucket.

    *visited* is owned by the caller and marks modules already covered by a
    multi-module shape (eye rings, single eye balls).
    """
    size = matrix.size
    m = options.margin

    def drawn_dot(x: int, y: int) -> bool:
        return (
            matrix.is_dark(x, y)
            and classify_zone(x, y, size) is Zone.DOTS
            and not any(r.contains_cell(x, y) for r in excluded)
        )

    for y in range(size):
        for x in range(size):
            if visited[y][x] or not matrix.is_dark(x, y):
                continue
            zone = classify_zone(x, y, size)
            if zone is Zone.DOTS:
                if not drawn_dot(x, y):
                    continue
                neighbors = Neighbors(
                    top=y > 0 and drawn_dot(x, y - 1),
                    right=x < size - 1 and drawn_dot(x + 1, y),
                    bottom=y < size - 1 and drawn_dot(x, y + 1),
                    left=x > 0 and drawn_dot(x - 1, y),
                )
                _draw_dot(buckets[DOTS_LAYER], options.dots_options, x, y, m, neighbors)
            elif zone is Zone.CORNER_SQUARE:
                _draw_corner_square(buckets[CORNER_SQUARE_LAYER], options.corners_square_options,
                                    matrix, x, y, m, visited)
            else:
                _draw_corner_dot(buckets[CORNER_DOT_LAYER], options.corners_dot_options,
                                 matrix, x, y, m, visited)
            visited[y][x] = True


def _symbols(options: RenderOptions) -> list[str]:
    parts = [
        (DOTS_LAYER, options.dots_options),
        (CORNER_SQUARE_LAYER, options.corners_square_options),
        (CORNER_DOT_LAYER, options.corners_dot_options),
    ]
    return [
        icon_symbol(SYMBOL_IDS[name], _attr(part.shape.custom_path), _attr(part.shape.custom_view_box))
        for name, part in parts
        if part.shape.kind is ShapeKind.CUSTOM_ICON
    ]


def _eye_paint(bucket: LayerBucket, part: PartStyle, boxes: list[Rect], defs: list[str]) -> list[PaintedBox]:
    """One painted rectangle per eye, each with its own gradient binding."""
    return [
        PaintedBox(box=box, fill=resolve_fill(f"{bucket.name}-gradient-{i}", part.gradient, part.color, box, defs))
        for i, box in enumerate(boxes)
    ]


@trace
def layout(options: RenderOptions, diagnostics: Diagnostics) -> Layout:
    """Synchronous phase: everything except frame inset detection."""
    options.validate()
    matrix = encode(options.data, options.ecc)
    size = matrix.size
    m = options.margin
    view_size = size + 2 * m

    placed = resolve_image_positions(options.images, size, diagnostics)
    excluded = [p.rect for p in placed if p.image.exclude_dots]

    buckets = {name: LayerBucket(name) for name in (DOTS_LAYER, CORNER_SQUARE_LAYER, CORNER_DOT_LAYER)}
    visited = [[False] * size for _ in range(size)]
    _draw_modules(matrix, options, buckets, excluded, visited)

    defs = _symbols(options)
    extent = Rect(0, 0, view_size, view_size)
    qr_box = Rect(m, m, size, size)

    dots_paint = [PaintedBox(
        box=qr_box,
        fill=resolve_fill(f"{DOTS_LAYER}-gradient", options.dots_options.gradient,
                          options.dots_options.color, qr_box, defs),
    )]
    square_paint = _eye_paint(buckets[CORNER_SQUARE_LAYER], options.corners_square_options,
                              [_offset(r, m) for r in eye_rects(size)], defs)
    dot_paint = _eye_paint(buckets[CORNER_DOT_LAYER], options.corners_dot_options,
                           [_offset(r, m) for r in eye_ball_rects(size)], defs)

    layers = [
        layer_markup(buckets[DOTS_LAYER], dots_paint, extent),
        layer_markup(buckets[CORNER_SQUARE_LAYER], square_paint, extent),
        layer_markup(buckets[CORNER_DOT_LAYER], dot_paint, extent),
    ]

    audit("layout.done", logger=log,
          size=size, version=matrix.version, ecc=matrix.ecc,
          dots=len(buckets[DOTS_LAYER].paths) + len(buckets[DOTS_LAYER].uses),
          excluded_rects=len(excluded), images=len(placed))
    return Layout(options=options, matrix=matrix, view_size=view_size,
                  defs=defs, layers=layers, images=placed)


# ---------------------------------------------------------------------------
# Phase 2: frame inset
# ---------------------------------------------------------------------------

def _fit_square(rect: InsetRect) -> InsetRect:
    """Largest square centred in *rect* (keeps modules square)."""
    side = min(rect.width, rect.height)
    return InsetRect(
        x=rect.x + (rect.width - side) / 2,
        y=rect.y + (rect.height - side) / 2,
        width=side,
        height=side,
    )


@trace
async def resolve_frame(frame: Frame, diagnostics: Diagnostics) -> InsetRect:
    """Where the QR code sits inside the frame, in frame display pixels.

    - explicit x, y, width, height: used as given;
    - width/height only: centred inside the detected hole on the missing axes;
    - no inset: the largest square centred in the detected hole.
    Detection failure falls back to an 80% centred box (or the whole frame
    when a size was given) and is reported as a diagnostic.
    """
    inset = frame.inset
    if inset is not None and inset.x is not None and inset.y is not None:
        return InsetRect(inset.x, inset.y, inset.width, inset.height)

    hole = await detect_frame_inset(frame.source, frame.width, frame.height)
    if hole is None:
        diagnostics.report(FRAME_DETECT_FAILED,
                           "Could not detect the frame hole; using a centred fallback inset",
                           frame_width=frame.width, frame_height=frame.height)
        if inset is None:
            return _fit_square(fallback_inset(frame.width, frame.height))
        hole = InsetRect(0, 0, frame.width, frame.height)

    if inset is None:
        return _fit_square(hole)

    x = inset.x if inset.x is not None else hole.x + (hole.width - inset.width) / 2
    y = inset.y if inset.y is not None else hole.y + (hole.height - inset.height) / 2
    return InsetRect(x, y, inset.width, inset.height)


# ---------------------------------------------------------------------------
# Phase 3: assembly
# ---------------------------------------------------------------------------

def _background(options: RenderOptions, view_size: float, defs: list[str]) -> str:
    bg = options.background
    box = f'x="0" y="0" width="{fmt(view_size)}" height="{fmt(view_size)}"'
    out = ""
    if bg.color:
        out += f'<rect {box} fill="{_attr(bg.color)}"/>'
    if bg.gradient is not None:
        defs.append(gradient_def("background-gradient", bind_gradient(bg.gradient, Rect(0, 0, view_size, view_size))))
        out += f"<rect {box} fill=\"url('#background-gradient')\"/>"
    if bg.image:
        out += f'<image href="{_attr(bg.image)}" {box} preserveAspectRatio="xMidYMid slice"/>'
    return out


def _images(placed: list[PlacedImage], m: float) -> str:
    out = ""
    for p in placed:
        img = p.image
        opacity = f' opacity="{fmt(img.opacity)}"' if img.opacity < 1 else ""
        out += (
            f'<image href="{_attr(img.source)}" x="{fmt(p.x + m)}" y="{fmt(p.y + m)}" '
            f'width="{fmt(img.width)}" height="{fmt(img.height)}" '
            f'preserveAspectRatio="{_attr(img.preserve_aspect_ratio)}"{opacity}/>'
        )
    return out


def assemble(lay: Layout, frame_rect: InsetRect | None = None) -> str:
    """Concatenate the final SVG document."""
    options = lay.options
    v = lay.view_size
    defs = list(lay.defs)

    body = _background(options, v, defs)
    body += "".join(lay.layers)
    body += _images(lay.images, options.margin)

    output_width = frame_rect.width if frame_rect is not None else options.width
    if options.border_radius > 0 and output_width > 0:
        # Radius is given in output pixels; the clip works in module units
        r = options.border_radius * v / output_width
        defs.append(
            f'<clipPath id="{CLIP_ID}"><rect x="0" y="0" width="{fmt(v)}" height="{fmt(v)}" '
            f'rx="{fmt(r)}" ry="{fmt(r)}"/></clipPath>'
        )
        body = f'<g clip-path="url(#{CLIP_ID})">{body}</g>'

    defs_markup = f"<defs>{''.join(defs)}</defs>" if defs else ""

    if frame_rect is None:
        return (
            f'<svg xmlns="http://www.w3.org/2000/svg" '
            f'width="{fmt(options.width)}" height="{fmt(options.height)}" viewBox="0 0 {fmt(v)} {fmt(v)}">'
            f"{defs_markup}{body}</svg>"
        )

    frame = options.frame
    sx = frame_rect.width / v
    sy = frame_rect.height / v
    return (
        f'<svg xmlns="http://www.w3.org/2000/svg" '
        f'width="{fmt(frame.width)}" height="{fmt(frame.height)}" '
        f'viewBox="0 0 {fmt(frame.width)} {fmt(frame.height)}">'
        f"{defs_markup}"
        f'<image href="{_attr(frame.source)}" x="0" y="0" width="{fmt(frame.width)}" '
        f'height="{fmt(frame.height)}" preserveAspectRatio="none"/>'
        f'<g transform="translate({fmt(frame_rect.x)} {fmt(frame_rect.y)}) scale({fmt(sx)} {fmt(sy)})">'
        f"{body}</g></svg>"
    )


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------

@trace
async def generate(options: RenderOptions | dict) -> RenderResult:
    """Render a styled QR code to SVG.

    Accepts a ``RenderOptions`` or a camelCase mapping. Raises ``ConfigError``
    for unusable configuration; every other problem is corrected and listed
    in ``RenderResult.diagnostics``.
    """
    if isinstance(options, dict):
        options = RenderOptions.from_dict(options)
    diagnostics = Diagnostics(options.parse_diagnostics)

    lay = layout(options, diagnostics)
    frame_rect = await resolve_frame(options.frame, diagnostics) if options.frame is not None else None
    svg = assemble(lay, frame_rect)

    size = lay.matrix.size
    audit("render.done", logger=log, size=size, svg_bytes=len(svg),
          framed=frame_rect is not None, diagnostics=len(diagnostics))
    return RenderResult(
        svg=svg,
        matrix_size=size,
        eye_zones=eye_rects(size),
        max_position=max_position(size),
        diagnostics=diagnostics,
        frame_inset=frame_rect,
    )


def generate_sync(options: RenderOptions | dict) -> RenderResult:
    """Blocking wrapper around ``generate`` for callers without an event loop."""
    return asyncio.run(generate(options))


@trace
def get_qr_bounds(data: str, ecc: str = "H") -> QRBounds:
    """Matrix size, eye zones and position bound for *data*, without rendering."""
    size = encode(data, ecc).size
    return QRBounds(matrix_size=size, eye_zones=eye_rects(size), max_position=max_position(size))
