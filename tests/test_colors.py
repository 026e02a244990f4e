"""
Unit tests for color parsing, interpolation and contrast helpers.
"""

import pytest

from nodenet_core.colors import (
    DEFAULT_RGB,
    adjust_opacity,
    contrast_ratio,
    contrast_status,
    interpolate_rgb,
    parse_alpha,
    parse_color,
    to_rgba,
)


class TestParseColor:
    """Hex and functional color strings."""

    def test_six_digit_hex(self):
        assert parse_color("#4dabf5") == (77, 171, 245)

    def test_three_digit_hex_expands(self):
        assert parse_color("#fff") == (255, 255, 255)
        assert parse_color("#0a8") == (0, 170, 136)

    def test_hex_is_case_insensitive(self):
        assert parse_color("#4DABF5") == (77, 171, 245)

    def test_rgb_and_rgba(self):
        assert parse_color("rgb(1, 2, 3)") == (1, 2, 3)
        assert parse_color("rgba(77, 171, 245, 0.5)") == (77, 171, 245)

    @pytest.mark.parametrize("value", ["", "not-a-color", "#12345", "rgb(300, 0, 0)", None, 42])
    def test_malformed_values_fall_back(self, value):
        """Parsing never raises; unknown input resolves to the default blue."""
        assert parse_color(value) == DEFAULT_RGB


class TestAlpha:
    def test_parse_alpha_from_rgba(self):
        assert parse_alpha("rgba(0, 0, 0, 0.25)") == pytest.approx(0.25)

    def test_parse_alpha_defaults(self):
        assert parse_alpha("#ffffff") == 1.0
        assert parse_alpha("rgb(0, 0, 0)", default=0.5) == 0.5

    def test_parse_alpha_is_clamped(self):
        assert parse_alpha("rgba(0, 0, 0, 3)") == 1.0

    def test_to_rgba_scales_alpha(self):
        assert to_rgba("#ff0000", 0.5) == (255, 0, 0, 128)
        assert to_rgba("#ff0000", 2.0) == (255, 0, 0, 255)

    def test_adjust_opacity_emits_rgba_string(self):
        assert adjust_opacity("#4dabf5", 0.5) == "rgba(77, 171, 245, 0.5)"


class TestInterpolation:
    def test_endpoints_and_midpoint(self):
        assert interpolate_rgb((0, 0, 0), (255, 255, 255), 0.0) == (0, 0, 0)
        assert interpolate_rgb((0, 0, 0), (255, 255, 255), 1.0) == (255, 255, 255)
        assert interpolate_rgb((0, 0, 0), (200, 100, 50), 0.5) == (100, 50, 25)

    def test_t_is_clamped(self):
        assert interpolate_rgb((10, 10, 10), (20, 20, 20), 5.0) == (20, 20, 20)


class TestContrast:
    def test_black_on_white_is_maximal(self):
        assert contrast_ratio("#000000", "#ffffff") == pytest.approx(21.0)

    def test_ratio_is_symmetric(self):
        assert contrast_ratio("#4dabf5", "#0a1929") == pytest.approx(contrast_ratio("#0a1929", "#4dabf5"))

    def test_identical_colors(self):
        assert contrast_ratio("#336699", "#336699") == pytest.approx(1.0)

    @pytest.mark.parametrize(
        "ratio,label",
        [(21.0, "Excellent"), (7.0, "Excellent"), (5.0, "Good (AA)"), (3.5, "Fair (AA Large)"), (1.5, "Poor")],
    )
    def test_status_labels(self, ratio, label):
        assert contrast_status(ratio) == label
