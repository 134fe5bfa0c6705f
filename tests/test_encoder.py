"""Tests for the QR encoder wrapper."""

import pytest

from qrsvg.encoder import encode, parse_ecc, symbol_size
from qrsvg.errors import ConfigError


class TestEncode:
    def test_short_text_is_version_one(self):
        matrix = encode("hello", "H")
        assert matrix.version == 1
        assert matrix.size == 21
        assert matrix.ecc == "H"

    def test_finder_pattern_layout(self):
        matrix = encode("hello")
        # Outer ring dark, then a light ring, then a dark 3x3 ball
        assert matrix.is_dark(0, 0)
        assert matrix.is_dark(6, 6)
        assert not matrix.is_dark(1, 1)
        assert matrix.is_dark(3, 3)
        assert matrix.is_dark(matrix.size - 1, 0)

    def test_out_of_range_is_light(self):
        matrix = encode("hello")
        assert not matrix.is_dark(-1, 0)
        assert not matrix.is_dark(0, matrix.size)

    def test_lower_ecc_fits_more(self):
        text = "https://example.com/a/fairly/long/path?with=query"
        assert encode(text, "L").size <= encode(text, "H").size

    def test_size_matches_version(self):
        matrix = encode("x" * 100, "M")
        assert matrix.size == symbol_size(matrix.version)

    def test_empty_text_rejected(self):
        with pytest.raises(ConfigError):
            encode("")

    def test_bad_ecc_rejected(self):
        with pytest.raises(ConfigError, match="error correction"):
            parse_ecc("X")

    def test_ecc_case_insensitive(self):
        assert parse_ecc("q").name == "Q"


def test_symbol_size_bounds():
    assert symbol_size(1) == 21
    assert symbol_size(40) == 177
