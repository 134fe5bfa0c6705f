"""Mask compositing — one stencil per layer, painted by a single fill rectangle per box.

Shapes drawn into a layer only decide *where* paint shows; the paint itself
(solid colour or bound gradient) lives on the rectangle behind the mask, so
a gradient reads as one surface across every module of the layer.
"""

from dataclasses import dataclass, field

from qrsvg.gradients import Fill
from qrsvg.shapes import fmt
from qrsvg.zones import Rect

DOTS_LAYER = "dots"
CORNER_SQUARE_LAYER = "corners-square"
CORNER_DOT_LAYER = "corners-dot"


@dataclass
class LayerBucket:
    """Path data and ``<use>`` references accumulated for one layer."""
    name: str
    paths: list[str] = field(default_factory=list)
    uses: list[str] = field(default_factory=list)

    def add_path(self, d: str) -> None:
        self.paths.append(d)

    def add_use(self, markup: str) -> None:
        self.uses.append(markup)

    @property
    def empty(self) -> bool:
        return not self.paths and not self.uses

    @property
    def path_data(self) -> str:
        return " ".join(self.paths)


@dataclass
class PaintedBox:
    box: Rect
    fill: Fill


def mask_id(bucket: LayerBucket) -> str:
    return f"mask-{bucket.name}"


def mask_def(bucket: LayerBucket, extent: Rect) -> str:
    """White-on-black ``<mask>`` covering *extent* built from the bucket content."""
    content = ""
    if bucket.paths:
        content += f'<path d="{bucket.path_data}" fill="#ffffff"/>'
    if bucket.uses:
        content += f'<g fill="#ffffff" color="#ffffff">{"".join(bucket.uses)}</g>'
    return (
        f'<mask id="{mask_id(bucket)}" maskUnits="userSpaceOnUse" '
        f'x="{fmt(extent.x)}" y="{fmt(extent.y)}" width="{fmt(extent.width)}" height="{fmt(extent.height)}">'
        f'<rect x="{fmt(extent.x)}" y="{fmt(extent.y)}" width="{fmt(extent.width)}" '
        f'height="{fmt(extent.height)}" fill="#000000"/>'
        f"{content}</mask>"
    )


def layer_markup(bucket: LayerBucket, painted: list[PaintedBox], extent: Rect) -> str:
    """Mask definition plus the masked fill rectangles for one layer.

    Returns an empty string for a layer with nothing drawn into it.
    """
    if bucket.empty or not painted:
        return ""
    rects = "".join(
        f'<rect x="{fmt(p.box.x)}" y="{fmt(p.box.y)}" width="{fmt(p.box.width)}" '
        f'height="{fmt(p.box.height)}" fill="{p.fill.paint()}"/>'
        for p in painted
    )
    return (
        f"<defs>{mask_def(bucket, extent)}</defs>"
        f'<g class="layer-{bucket.name}" mask="url(#{mask_id(bucket)})">{rects}</g>'
    )
