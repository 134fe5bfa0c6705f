"""Tests for image auto-placement around the finder eyes."""

import pytest

from qrsvg.diagnostics import IMAGE_ADJUSTED, IMAGE_CENTER_FALLBACK, Diagnostics
from qrsvg.options import ImageOverlay
from qrsvg.placement import (
    candidate_anchors,
    max_position,
    push_out,
    resolve_image_positions,
)
from qrsvg.zones import Rect, eye_rects


def _image(w=4, h=4, x=None, y=None, **kw):
    return ImageOverlay(source="logo.png", width=w, height=h, x=x, y=y, **kw)


# ---------------------------------------------------------------------------
# Push-out
# ---------------------------------------------------------------------------

class TestPushOut:
    def test_smallest_penetration_wins(self):
        # Right needs 2, left 9, down 5, up 6
        assert push_out(Rect(5, 2, 4, 4), Rect(0, 0, 7, 7)) == Rect(7, 2, 4, 4)

    def test_pushes_up_when_cheapest(self):
        # Eye at bottom-left of a 25 matrix; image barely dips into its top edge
        assert push_out(Rect(2, 16, 3, 3), Rect(0, 18, 7, 7)) == Rect(2, 15, 3, 3)

    def test_disjoint_rect_unchanged(self):
        r = Rect(10, 10, 2, 2)
        assert push_out(r, Rect(0, 0, 7, 7)) == r

    def test_tie_prefers_right(self):
        # Right and down both need 1
        assert push_out(Rect(6, 6, 3, 3), Rect(0, 0, 7, 7)) == Rect(7, 6, 3, 3)


# ---------------------------------------------------------------------------
# Manual placement
# ---------------------------------------------------------------------------

class TestManualPlacement:
    def test_overlapping_image_moved_and_reported(self):
        diagnostics = Diagnostics()
        [placed] = resolve_image_positions([_image(5, 5, x=3, y=5)], 25, diagnostics)
        assert not any(placed.rect.overlaps(eye) for eye in eye_rects(25))
        assert diagnostics.codes() == [IMAGE_ADJUSTED]
        ctx = diagnostics[0].context
        assert (ctx["original_x"], ctx["original_y"]) == (3, 5)
        assert (placed.x, placed.y) == (3, 7)

    def test_clear_image_kept_silently(self):
        diagnostics = Diagnostics()
        [placed] = resolve_image_positions([_image(x=10, y=10)], 25, diagnostics)
        assert (placed.x, placed.y) == (10, 10)
        assert diagnostics == []

    def test_image_across_two_eyes_ends_disjoint(self):
        diagnostics = Diagnostics()
        [placed] = resolve_image_positions([_image(11, 3, x=5, y=1)], 21, diagnostics)
        assert not any(placed.rect.overlaps(eye) for eye in eye_rects(21))


# ---------------------------------------------------------------------------
# Auto placement
# ---------------------------------------------------------------------------

class TestAutoPlacement:
    def test_anchor_order(self):
        anchors = candidate_anchors(25)
        assert anchors[0] == (12.5, 12.5)
        assert anchors[1] == (10.25, 12.5)
        assert anchors[2] == (14.75, 12.5)
        assert anchors[3] == (12.5, 10.25)
        assert anchors[-1] == (14.75, 14.75)
        assert len(anchors) == 9

    def test_first_image_centred_second_takes_next_anchor(self):
        placed = resolve_image_positions([_image(), _image()], 25, Diagnostics())
        assert (placed[0].x, placed[0].y) == (10.5, 10.5)
        assert (placed[1].x, placed[1].y) == (8.25, 10.5)

    def test_oversized_image_falls_back_to_centre(self):
        diagnostics = Diagnostics()
        [placed] = resolve_image_positions([_image(15, 15)], 21, diagnostics)
        assert (placed.x, placed.y) == (3, 3)
        assert diagnostics.codes() == [IMAGE_CENTER_FALLBACK]

    def test_cursor_never_rewinds(self):
        # The oversized image exhausts every anchor, so the small one cannot reuse them
        diagnostics = Diagnostics()
        placed = resolve_image_positions([_image(15, 15), _image(2, 2)], 21, diagnostics)
        assert (placed[1].x, placed[1].y) == (9.5, 9.5)
        assert diagnostics.codes() == [IMAGE_CENTER_FALLBACK, IMAGE_CENTER_FALLBACK]

    def test_order_matches_input(self):
        images = [_image(x=10, y=10), _image(), _image(3, 3, x=12, y=12)]
        placed = resolve_image_positions(images, 25, Diagnostics())
        assert [p.image for p in placed] == images


@pytest.mark.parametrize("w,h,expected", [(5, 5, (16, 16)), (30, 5, (0, 16)), (21, 21, (0, 0))])
def test_max_position(w, h, expected):
    assert tuple(max_position(21)(w, h)) == expected


def test_push_skips_direction_that_lands_in_another_eye():
    eyes = eye_rects(21)
    # Pushing right out of the top-left eye would land in the top-right one
    moved = push_out(Rect(5, 1, 11, 3), eyes[0], eyes)
    assert not any(moved.overlaps(eye) for eye in eyes)
    assert moved == Rect(5, -3, 11, 3)
