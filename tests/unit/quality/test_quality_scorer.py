"""Unit tests for the composite quality score."""

import pytest

from tokenscope.config import SUB_SCORES, ScoringConfig
from tokenscope.quality import AccessibilityAuditor, QualityInputs, QualityScorer, modernity


class TestQualityScorer:
    """Test weighted averaging over the sub-scores that had data."""

    def test_missing_sub_scores_are_excluded(self):
        score = QualityScorer().score(QualityInputs(color_consistency=1.0, spacing_regularity=0.5))

        assert score.overall == pytest.approx(0.75)
        assert score.evaluated == ["color_consistency", "spacing_regularity"]
        assert score.breakdown["typography_hierarchy"] is None
        assert len(score.insufficient) == 5
        assert score.passed is True

    def test_custom_weights(self):
        config = ScoringConfig(weights={"color_consistency": 3.0, "spacing_regularity": 1.0})
        score = QualityScorer(config).score(QualityInputs(color_consistency=1.0, spacing_regularity=0.5))
        assert score.overall == pytest.approx(0.875)

    def test_below_threshold_fails(self):
        score = QualityScorer().score(QualityInputs(color_consistency=0.5))
        assert score.passed is False
        assert score.threshold == 0.7

    def test_values_are_clamped(self):
        score = QualityScorer().score(QualityInputs(color_consistency=1.5))
        assert score.overall == 1.0
        assert score.breakdown["color_consistency"] == 1.0

    def test_no_data_at_all(self):
        scorer = QualityScorer()
        score = scorer.score(QualityInputs())
        flags = scorer.insufficient_flags(score)

        assert score.overall == 0.0
        assert score.passed is False
        assert score.evaluated == []
        assert len(flags) == len(SUB_SCORES) + 1
        assert {f.kind for f in flags} == {"insufficient_sample_data"}
        assert {f.component for f in flags} == {"quality"}

    def test_every_sub_score_in_breakdown(self):
        score = QualityScorer().score(QualityInputs(modernity_score=0.8))
        assert list(score.breakdown) == list(SUB_SCORES)


class TestInputs:
    def test_modernity_is_share_of_passed_checks(self):
        assert modernity({"grid": True, "floats": False}) == 0.5
        assert modernity({}) is None
        assert modernity(None) is None

    def test_reports_are_rescaled(self, accessibility_findings):
        report = AccessibilityAuditor().build_report(accessibility_findings)
        inputs = QualityInputs.from_analyses(accessibility=report)

        assert inputs.accessibility_compliance == pytest.approx(0.55)
        assert inputs.color_consistency is None
