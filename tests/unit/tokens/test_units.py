"""Unit tests for CSS value parsing helpers."""

import pytest

from tokenscope.tokens.units import parse_color, parse_duration, parse_length, rgba_to_hsl, to_hex


class TestParseColor:
    """Test color parsing across CSS notations."""

    def test_hex_long_and_short(self):
        assert parse_color("#1a73e8") == (26, 115, 232, 1.0)
        assert parse_color("#FFF") == (255, 255, 255, 1.0)

    def test_hex_with_alpha(self):
        r, g, b, a = parse_color("#00000080")
        assert (r, g, b) == (0, 0, 0)
        assert a == pytest.approx(128 / 255)

    def test_rgb_and_rgba(self):
        assert parse_color("rgb(255, 0, 0)") == (255, 0, 0, 1.0)
        assert parse_color("rgba(0, 0, 0, 0.5)") == (0, 0, 0, 0.5)
        assert parse_color("rgb(100%, 0%, 0%)") == (255, 0, 0, 1.0)

    def test_hsl(self):
        assert parse_color("hsl(0, 100%, 50%)") == (255, 0, 0, 1.0)
        assert parse_color("hsl(0, 0%, 100%)") == (255, 255, 255, 1.0)

    def test_named_colors(self):
        assert parse_color("White") == (255, 255, 255, 1.0)
        assert parse_color("navy") == (0, 0, 128, 1.0)

    @pytest.mark.parametrize("value", ["", "transparent", "currentColor", "inherit", "not-a-color", "#12"])
    def test_unusable_values(self, value):
        """Keywords and malformed values yield None rather than raising."""
        assert parse_color(value) is None

    def test_to_hex_is_uppercase(self):
        assert to_hex((26, 115, 232)) == "#1A73E8"


class TestHsl:
    def test_primary_hues(self):
        assert rgba_to_hsl(255, 0, 0) == (0.0, 1.0, 0.5)
        hue, saturation, lightness = rgba_to_hsl(0, 255, 0)
        assert hue == pytest.approx(120.0)
        assert saturation == pytest.approx(1.0)

    def test_gray_has_no_hue(self):
        hue, saturation, _ = rgba_to_hsl(128, 128, 128)
        assert hue == 0.0
        assert saturation == 0.0


class TestLengthsAndDurations:
    def test_lengths(self):
        assert parse_length("16px") == 16.0
        assert parse_length("1.5rem") == 24.0
        assert parse_length("2em", root_font_size=10.0) == 20.0
        assert parse_length("12pt") == pytest.approx(16.0)
        assert parse_length("0") == 0.0

    @pytest.mark.parametrize("value", ["auto", "50%", "10vw", "", "normal"])
    def test_unresolvable_lengths(self, value):
        assert parse_length(value) is None

    def test_durations(self):
        assert parse_duration("150ms") == 150.0
        assert parse_duration("0.3s") == pytest.approx(300.0)
        assert parse_duration("ease") is None
        assert parse_duration("") is None
