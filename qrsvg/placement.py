"""Image auto-placement — resolve logo positions so no overlay covers a finder eye.

Manually positioned images that overlap an eye are pushed out along the
axis of least penetration. Images without a position are assigned, in
order, to a fixed list of anchor points inside the data zone.
"""

from dataclasses import dataclass
from typing import Callable, NamedTuple, Sequence

from qrsvg.diagnostics import IMAGE_ADJUSTED, IMAGE_CENTER_FALLBACK, Diagnostics
from qrsvg.logging import audit, get_logger, trace
from qrsvg.options import ImageOverlay
from qrsvg.zones import Rect, eye_rects

log = get_logger("placement")

# Data zone starts this many modules in from each edge (eye + separator).
DATA_ZONE_INSET = 8
_MAX_PUSHES = 8


@dataclass(frozen=True)
class PlacedImage:
    image: ImageOverlay
    x: float
    y: float

    @property
    def rect(self) -> Rect:
        return Rect(self.x, self.y, self.image.width, self.image.height)


class MaxPosition(NamedTuple):
    max_x: float
    max_y: float


# ---------------------------------------------------------------------------
# Geometry helpers
# ---------------------------------------------------------------------------

def overlaps_any_eye(rect: Rect, eyes: list[Rect]) -> bool:
    return any(rect.overlaps(eye) for eye in eyes)


def push_out(rect: Rect, eye: Rect, others: Sequence[Rect] = ()) -> Rect:
    """Move *rect* out of *eye* along the single direction of least penetration.

    Candidate pushes are compared in the order right, left, down, up; the
    first with the smallest positive depth wins. A push that would land in
    one of *others* is skipped while any other push stays clear.
    """
    pushes = [
        (eye.right - rect.x, eye.right - rect.x, 0.0),      # right
        (rect.right - eye.x, -(rect.right - eye.x), 0.0),   # left
        (eye.bottom - rect.y, 0.0, eye.bottom - rect.y),    # down
        (rect.bottom - eye.y, 0.0, -(rect.bottom - eye.y)), # up
    ]
    positive = sorted((p for p in pushes if p[0] > 0), key=lambda p: p[0])
    if not positive:
        return rect
    moved = [Rect(rect.x + dx, rect.y + dy, rect.width, rect.height) for _, dx, dy in positive]
    return next((r for r in moved if not overlaps_any_eye(r, others)), moved[0])


def candidate_anchors(size: int) -> list[tuple[float, float]]:
    """Nine candidate centre points, in the order they are tried."""
    start = DATA_ZONE_INSET
    span = (size - DATA_ZONE_INSET) - start
    q1 = start + span / 4
    q3 = start + span * 3 / 4
    mid = size / 2
    return [
        (mid, mid),
        (q1, mid), (q3, mid),   # left / right centre
        (mid, q1), (mid, q3),   # top / bottom centre
        (q1, q1), (q3, q1),     # quadrant corners
        (q1, q3), (q3, q3),
    ]


def _centered(cx: float, cy: float, image: ImageOverlay) -> Rect:
    return Rect(cx - image.width / 2, cy - image.height / 2, image.width, image.height)


# ---------------------------------------------------------------------------
# Placement
# ---------------------------------------------------------------------------

def _place_manual(image: ImageOverlay, index: int, eyes: list[Rect], diagnostics: Diagnostics) -> PlacedImage:
    rect = Rect(image.x, image.y, image.width, image.height)
    for _ in range(_MAX_PUSHES):
        hit = next((eye for eye in eyes if rect.overlaps(eye)), None)
        if hit is None:
            break
        rect = push_out(rect, hit, eyes)

    if (rect.x, rect.y) != (image.x, image.y):
        diagnostics.report(
            IMAGE_ADJUSTED,
            f"Image {index} at ({image.x}, {image.y}) overlapped a finder pattern; "
            f"moved to ({rect.x}, {rect.y})",
            index=index, original_x=image.x, original_y=image.y, x=rect.x, y=rect.y,
        )
    return PlacedImage(image=image, x=rect.x, y=rect.y)


@trace
def resolve_image_positions(
    images: list[ImageOverlay],
    size: int,
    diagnostics: Diagnostics,
) -> list[PlacedImage]:
    """Give every overlay a final top-left position in module coordinates.

    Order of the returned list matches *images*.
    """
    eyes = eye_rects(size)
    anchors = candidate_anchors(size)
    cursor = 0
    placed: list[PlacedImage] = []

    for index, image in enumerate(images):
        if image.x is not None and image.y is not None:
            placed.append(_place_manual(image, index, eyes, diagnostics))
            continue

        chosen = None
        while cursor < len(anchors):
            cx, cy = anchors[cursor]
            cursor += 1
            rect = _centered(cx, cy, image)
            if not overlaps_any_eye(rect, eyes):
                chosen = rect
                break

        if chosen is None:
            chosen = _centered(size / 2, size / 2, image)
            diagnostics.report(
                IMAGE_CENTER_FALLBACK,
                f"No free anchor left for image {index}; placed at matrix centre",
                index=index, x=chosen.x, y=chosen.y,
            )
        placed.append(PlacedImage(image=image, x=chosen.x, y=chosen.y))

    audit("images.placed", logger=log, count=len(placed), size=size, anchors_used=cursor)
    return placed


def max_position(size: int) -> Callable[[float, float], MaxPosition]:
    """Bound on top-left coordinates that keep a w x h image inside the matrix."""
    def bound(width: float, height: float) -> MaxPosition:
        return MaxPosition(max(0, size - width), max(0, size - height))
    return bound
