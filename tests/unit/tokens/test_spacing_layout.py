"""Unit tests for spacing base-unit detection and layout feature summary."""

import pytest

from tokenscope.config import SpacingConfig
from tokenscope.protocols import SpacingSample, StyleFeatureSample
from tokenscope.tokens import LayoutAnalyzer, SpacingDetector
from tokenscope.tokens.spacing import fits_unit, nearest_multiple

URL = "https://example.com/"


def spacing(*values, prop="margin"):
    return [SpacingSample(URL, "desktop", value=v, property=prop) for v in values]


def feature(name, count=1):
    return StyleFeatureSample(URL, "desktop", feature=name, count=count)


class TestUnitFit:
    def test_nearest_multiple_never_zero(self):
        assert nearest_multiple(2.0, 8) == 1
        assert nearest_multiple(15.0, 4) == 4

    def test_fits_within_tolerance(self):
        assert fits_unit(8.5, 4, 0.2) is True
        assert fits_unit(15.0, 4, 0.1) is False


class TestSpacingDetector:
    """Test base-unit detection and the spacing scale."""

    def test_base_unit_with_irregular_value(self):
        """4, 8 and 15: base 4 fits two of three values; 15 is irregular."""
        result = SpacingDetector().analyze(spacing("4px", "8px", "15px"))
        system = result.spacing

        assert system.base == 4
        assert system.scale == {"xs": 4.0, "sm": 8.0}
        assert system.irregular == [15.0]
        assert system.regularity == pytest.approx(0.6667)
        assert result.regularity == pytest.approx(2 / 3)
        assert result.flags == []

    def test_ties_go_to_larger_unit(self):
        system = SpacingDetector().analyze(spacing("8px", "16px", "16px")).spacing
        assert system.base == 8
        assert system.scale == {"xs": 8.0, "sm": 16.0}
        assert system.regularity == 1.0

    def test_rem_values_resolve_against_root(self):
        system = SpacingDetector(root_font_size_px=16.0).analyze(spacing("0.5rem", "1rem", "2rem")).spacing
        assert system.scale == {"xs": 8.0, "sm": 16.0, "md": 32.0}

    def test_usage_counts_by_property(self):
        samples = spacing("8px", "16px") + spacing("24px", prop="gap")
        system = SpacingDetector().analyze(samples).spacing
        assert system.usage == {"margin": 2, "gap": 1}

    def test_long_scales_use_multiples_as_names(self):
        values = [f"{4 * m}px" for m in range(1, 9)]
        system = SpacingDetector().analyze(spacing(*values)).spacing
        assert list(system.scale) == ["1", "2", "3", "4", "5", "6", "7", "8"]
        assert system.scale["8"] == 32.0

    def test_no_candidate_fits(self):
        result = SpacingDetector().analyze(spacing("7px"))

        assert result.spacing.base is None
        assert result.spacing.irregular == [7.0]
        assert result.spacing.regularity == 0.0
        assert [f.kind for f in result.flags] == ["structural_fit_failure"]

    def test_custom_candidates(self):
        detector = SpacingDetector(SpacingConfig(candidate_units=[5]))
        assert detector.analyze(spacing("5px", "10px", "20px")).spacing.base == 5

    def test_unusable_values_flag_insufficient_data(self):
        result = SpacingDetector().analyze(spacing("auto", "0", "50%"))

        assert result.regularity is None
        assert [f.kind for f in result.flags] == ["insufficient_sample_data"]


class TestLayoutAnalyzer:
    """Test layout system detection from feature usage counts."""

    def test_modern_layout(self):
        features = [
            feature("display:grid", 3),
            feature("display:flex", 5),
            feature("custom-properties", 12),
            feature("media:768px", 2),
            feature("container:1200px"),
        ]
        result = LayoutAnalyzer().analyze(features, spacing("24px", prop="gap"))
        layout = result.layout

        assert layout.uses_grid and layout.uses_flex and layout.uses_custom_properties
        assert layout.uses_media_queries is True
        assert layout.breakpoints == {"md": 768}
        assert layout.gutter == 24.0
        assert layout.container_width == 1200.0
        assert result.modernity_checks == {
            "grid": True,
            "flexbox": True,
            "custom_properties": True,
            "media_queries": True,
            "no_deprecated_features": True,
        }

    def test_deprecated_features_fail_the_checklist(self):
        result = LayoutAnalyzer().analyze([feature("float-layout", 4), feature("display:flex")])

        assert result.layout.deprecated_features == ["float-layout"]
        assert result.modernity_checks["no_deprecated_features"] is False
        assert result.modernity_checks["grid"] is False

    def test_gutter_ignores_margins_and_out_of_range_gaps(self):
        samples = spacing("16px") + spacing("64px", prop="gap")
        assert LayoutAnalyzer().analyze([feature("display:grid")], samples).layout.gutter is None

    def test_no_features_means_no_checklist(self):
        result = LayoutAnalyzer().analyze([])
        assert result.modernity_checks is None
        assert result.layout.uses_grid is False
