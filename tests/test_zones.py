"""Tests for zone classification and eye geometry."""

from collections import Counter

import pytest

from qrsvg.zones import (
    Rect,
    Zone,
    classify_zone,
    eye_ball_rects,
    eye_index,
    eye_rects,
)


# ---------------------------------------------------------------------------
# Eye rectangles
# ---------------------------------------------------------------------------

class TestEyeRects:
    def test_three_eyes_at_corners(self):
        assert eye_rects(21) == [Rect(0, 0, 7, 7), Rect(14, 0, 7, 7), Rect(0, 14, 7, 7)]

    def test_eye_balls_centred_in_eyes(self):
        assert eye_ball_rects(25) == [Rect(2, 2, 3, 3), Rect(20, 2, 3, 3), Rect(2, 20, 3, 3)]

    def test_no_eye_bottom_right(self):
        assert eye_index(20, 20, 21) is None

    @pytest.mark.parametrize("x,y,expected", [(0, 0, 0), (6, 6, 0), (14, 3, 1), (3, 20, 2), (7, 0, None)])
    def test_eye_index(self, x, y, expected):
        assert eye_index(x, y, 21) == expected


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

class TestClassifyZone:
    @pytest.mark.parametrize("size", [21, 25, 57])
    def test_partition_counts(self, size):
        counts = Counter(classify_zone(x, y, size) for y in range(size) for x in range(size))
        assert counts[Zone.CORNER_DOT] == 3 * 9
        assert counts[Zone.CORNER_SQUARE] == 3 * (49 - 9)
        assert counts[Zone.DOTS] == size * size - 3 * 49

    def test_eye_ring_and_ball(self):
        assert classify_zone(0, 0, 21) is Zone.CORNER_SQUARE
        assert classify_zone(1, 1, 21) is Zone.CORNER_SQUARE
        assert classify_zone(3, 3, 21) is Zone.CORNER_DOT
        assert classify_zone(16, 2, 21) is Zone.CORNER_DOT
        assert classify_zone(20, 0, 21) is Zone.CORNER_SQUARE

    def test_separator_is_dots(self):
        assert classify_zone(7, 7, 21) is Zone.DOTS
        assert classify_zone(13, 0, 21) is Zone.DOTS


class TestRect:
    def test_touching_edges_do_not_overlap(self):
        assert not Rect(0, 0, 7, 7).overlaps(Rect(7, 0, 3, 3))

    def test_partial_overlap(self):
        assert Rect(0, 0, 7, 7).overlaps(Rect(6.5, 6.5, 2, 2))

    def test_contains_cell(self):
        r = Rect(2.5, 2.5, 2, 2)
        assert r.contains_cell(2, 2)
        assert r.contains_cell(4, 4)
        assert not r.contains_cell(5, 5)
