"""Tests for gradient parsing, validation and box binding."""

import math

import pytest

from qrsvg.errors import ConfigError
from qrsvg.gradients import (
    ColorStop,
    Fill,
    Gradient,
    bind_gradient,
    gradient_def,
    parse_offset,
    resolve_fill,
    validate_gradient,
)
from qrsvg.zones import Rect

STOPS = (ColorStop("0%", "#ff0000"), ColorStop("100%", "#0000ff"))


class TestOffsets:
    @pytest.mark.parametrize("raw,expected", [("40%", 40.0), ("0%", 0.0), ("12.5%", 12.5), (" 60 % ", 60.0), (75, 75.0)])
    def test_parse(self, raw, expected):
        assert parse_offset(raw) == expected

    def test_garbage_rejected(self):
        with pytest.raises(ConfigError):
            parse_offset("half")


class TestValidate:
    def test_non_decreasing_ok(self):
        stops = (ColorStop("0%", "#000"), ColorStop("50%", "#111"), ColorStop("50%", "#222"))
        assert validate_gradient(Gradient("linear", 0, stops)).color_stops == stops

    def test_decreasing_rejected(self):
        stops = (ColorStop("60%", "#000"), ColorStop("40%", "#111"))
        with pytest.raises(ConfigError, match="non-decreasing"):
            validate_gradient(Gradient("linear", 0, stops))

    def test_unknown_type_rejected(self):
        with pytest.raises(ConfigError):
            validate_gradient(Gradient("conic", 0, STOPS))

    def test_empty_stops_rejected(self):
        with pytest.raises(ConfigError):
            validate_gradient(Gradient("linear", 0, ()))


class TestBind:
    def test_horizontal_line_spans_half_diagonal(self):
        bound = bind_gradient(Gradient("linear", 0, STOPS), Rect(0, 0, 10, 10))
        r = math.sqrt(200) / 2
        assert (bound.cx, bound.cy) == (5, 5)
        assert bound.r == pytest.approx(r)
        assert bound.x1 == pytest.approx(5 - r)
        assert bound.x2 == pytest.approx(5 + r)
        assert bound.y1 == pytest.approx(5)

    def test_rotation_turns_line(self):
        bound = bind_gradient(Gradient("linear", 90, STOPS), Rect(10, 20, 4, 4))
        assert bound.x1 == pytest.approx(12)
        assert bound.y1 == pytest.approx(22 - math.sqrt(32) / 2)
        assert bound.y2 == pytest.approx(22 + math.sqrt(32) / 2)

    def test_each_box_gets_its_own_geometry(self):
        g = Gradient("radial", 0, STOPS)
        a = bind_gradient(g, Rect(4, 4, 7, 7))
        b = bind_gradient(g, Rect(18, 4, 7, 7))
        assert (a.cx, b.cx) == (7.5, 21.5)
        assert a.r == b.r


class TestDefs:
    def test_linear_def(self):
        d = gradient_def("g", bind_gradient(Gradient("linear", 0, STOPS), Rect(0, 0, 2, 0)))
        assert d.startswith('<linearGradient id="g" gradientUnits="userSpaceOnUse" x1="0" y1="0" x2="2" y2="0">')
        assert '<stop offset="0%" stop-color="#ff0000"/>' in d
        assert '<stop offset="100%" stop-color="#0000ff"/>' in d

    def test_radial_def(self):
        d = gradient_def("g", bind_gradient(Gradient("radial", 0, STOPS), Rect(0, 0, 6, 8)))
        assert '<radialGradient id="g" gradientUnits="userSpaceOnUse" cx="3" cy="4"' in d
        assert 'r="5"' in d

    def test_resolve_fill_colour_only(self):
        defs = []
        assert resolve_fill("g", None, "#123456", Rect(0, 0, 1, 1), defs) == Fill(color="#123456")
        assert defs == []

    def test_resolve_fill_gradient_appends_def(self):
        defs = []
        fill = resolve_fill("dots-gradient", Gradient("linear", 0, STOPS), "#000", Rect(0, 0, 1, 1), defs)
        assert fill.paint() == "url('#dots-gradient')"
        assert len(defs) == 1 and 'id="dots-gradient"' in defs[0]

    def test_stop_colour_escaped(self):
        gradient = Gradient("linear", 0, (ColorStop("0%", '#fff" onload="x'),))
        d = gradient_def("g", bind_gradient(gradient, Rect(0, 0, 10, 10)))
        assert 'stop-color="#fff&quot; onload=&quot;x"' in d

    def test_colour_paint_escaped(self):
        assert Fill(color='red"><x').paint() == "red&quot;&gt;&lt;x"
        assert Fill(color="#123456").paint() == "#123456"
