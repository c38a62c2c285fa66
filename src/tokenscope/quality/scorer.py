"""
Composite design quality score.

The overall score is the weighted mean of the sub-scores that had input
data. A sub-score without data is excluded from both the numerator and the
denominator; it is never defaulted to 0 or 1.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import TYPE_CHECKING, Dict, List, Optional

import structlog

from tokenscope.config import SUB_SCORES, ScoringConfig
from tokenscope.errors import InsufficientSampleData
from tokenscope.schemas import AccessibilityReport, Flag, PerformanceReport, QualityScore

if TYPE_CHECKING:
    from tokenscope.patterns import PatternDetection
    from tokenscope.tokens import ColorNormalization, LayoutAnalysis, SpacingAnalysis, TypographyAnalysis

logger = structlog.get_logger(__name__)

# Reports are on a 0-100 scale; sub-scores are on 0-1.
REPORT_SCALE = 100.0


def modernity(checks: Optional[Dict[str, bool]]) -> Optional[float]:
    if not checks:
        return None
    return sum(1 for passed in checks.values() if passed) / len(checks)


@dataclass
class QualityInputs:
    color_consistency: Optional[float] = None
    typography_hierarchy: Optional[float] = None
    spacing_regularity: Optional[float] = None
    accessibility_compliance: Optional[float] = None
    pattern_consistency: Optional[float] = None
    performance_optimization: Optional[float] = None
    modernity_score: Optional[float] = None

    @classmethod
    def from_analyses(
        cls,
        color: Optional["ColorNormalization"] = None,
        typography: Optional["TypographyAnalysis"] = None,
        spacing: Optional["SpacingAnalysis"] = None,
        accessibility: Optional[AccessibilityReport] = None,
        patterns: Optional["PatternDetection"] = None,
        performance: Optional[PerformanceReport] = None,
        layout: Optional["LayoutAnalysis"] = None,
    ) -> "QualityInputs":
        return cls(
            color_consistency=color.consistency if color else None,
            typography_hierarchy=typography.hierarchy_score if typography else None,
            spacing_regularity=spacing.regularity if spacing else None,
            accessibility_compliance=accessibility.score / REPORT_SCALE if accessibility else None,
            pattern_consistency=patterns.consistency if patterns else None,
            performance_optimization=performance.score / REPORT_SCALE if performance else None,
            modernity_score=modernity(layout.modernity_checks) if layout else None,
        )

    def as_dict(self) -> Dict[str, Optional[float]]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


class QualityScorer:
    def __init__(self, config: Optional[ScoringConfig] = None) -> None:
        self.config = config or ScoringConfig()
        self._weights = {name: float(self.config.weights.get(name, 1.0)) for name in SUB_SCORES}

    def score(self, inputs: QualityInputs) -> QualityScore:
        breakdown: Dict[str, Optional[float]] = {}
        evaluated: List[str] = []
        insufficient: List[str] = []
        total_score = 0.0
        valid_weights = 0.0
        for name, value in inputs.as_dict().items():
            if value is None:
                breakdown[name] = None
                insufficient.append(name)
                continue
            value = max(0.0, min(1.0, float(value)))
            breakdown[name] = round(value, 4)
            evaluated.append(name)
            weight = self._weights[name]
            total_score += value * weight
            valid_weights += weight
            logger.debug("Sub-score", name=name, score=value, weight=weight)

        overall = total_score / valid_weights if valid_weights > 0 else 0.0
        overall = round(max(0.0, min(1.0, overall)), 4)
        threshold = self.config.acceptable_threshold
        logger.info("Quality scoring complete", overall=overall, evaluated=len(evaluated), missing=insufficient)
        return QualityScore(
            overall=overall,
            breakdown=breakdown,
            weights=dict(self._weights),
            evaluated=evaluated,
            insufficient=insufficient,
            threshold=threshold,
            passed=bool(evaluated) and overall >= threshold,
        )

    @staticmethod
    def insufficient_flags(score: QualityScore) -> List[Flag]:
        flags = [
            InsufficientSampleData(f"No input data for sub-score '{name}'", component="quality").to_flag()
            for name in score.insufficient
        ]
        if not score.evaluated:
            flags.append(
                InsufficientSampleData("No sub-score had input data; overall reported as 0.0", component="quality")
                .to_flag()
            )
        return flags
