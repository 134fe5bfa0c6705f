"""Zone classification: which part of the symbol (data dots, eye frame, eye ball) a module belongs to."""

from dataclasses import dataclass
from enum import Enum

EYE_SIZE = 7
EYE_BALL_OFFSET = 2
EYE_BALL_SIZE = 3


class Zone(Enum):
    DOTS = "dots"
    CORNER_SQUARE = "cornerSquare"
    CORNER_DOT = "cornerDot"


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in module units (top-left origin)."""
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def overlaps(self, other: "Rect") -> bool:
        """True when the interiors intersect; touching edges do not count."""
        return (
            self.x < other.right
            and other.x < self.right
            and self.y < other.bottom
            and other.y < self.bottom
        )

    def contains_cell(self, x: int, y: int) -> bool:
        """True if the 1x1 cell at (x, y) intersects this rectangle."""
        return self.overlaps(Rect(x, y, 1, 1))

    def as_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


def eye_origins(size: int) -> list[tuple[int, int]]:
    """Top-left corners of the three finder patterns: TL, TR, BL."""
    return [(0, 0), (size - EYE_SIZE, 0), (0, size - EYE_SIZE)]


def eye_rects(size: int) -> list[Rect]:
    return [Rect(x, y, EYE_SIZE, EYE_SIZE) for x, y in eye_origins(size)]


def eye_ball_rects(size: int) -> list[Rect]:
    return [
        Rect(x + EYE_BALL_OFFSET, y + EYE_BALL_OFFSET, EYE_BALL_SIZE, EYE_BALL_SIZE)
        for x, y in eye_origins(size)
    ]


def eye_index(x: int, y: int, size: int) -> int | None:
    """Index (0=TL, 1=TR, 2=BL) of the eye containing (x, y), or None."""
    for i, (ox, oy) in enumerate(eye_origins(size)):
        if ox <= x < ox + EYE_SIZE and oy <= y < oy + EYE_SIZE:
            return i
    return None


def classify_zone(x: int, y: int, size: int) -> Zone:
    """Label the module at (x, y) of an N x N symbol."""
    i = eye_index(x, y, size)
    if i is None:
        return Zone.DOTS
    ox, oy = eye_origins(size)[i]
    lx, ly = x - ox, y - oy
    if (EYE_BALL_OFFSET <= lx < EYE_BALL_OFFSET + EYE_BALL_SIZE
            and EYE_BALL_OFFSET <= ly < EYE_BALL_OFFSET + EYE_BALL_SIZE):
        return Zone.CORNER_DOT
    return Zone.CORNER_SQUARE
