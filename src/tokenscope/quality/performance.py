"""
Performance budget compliance and scoring.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

import structlog

from tokenscope.config import ScoringConfig
from tokenscope.protocols import TimingSample
from tokenscope.schemas import PerformanceReport

logger = structlog.get_logger(__name__)

METRIC_RECOMMENDATIONS: Dict[str, str] = {
    "fcp": "Reduce render-blocking CSS and JavaScript to speed up First Contentful Paint",
    "lcp": "Optimize the largest above-the-fold element (image size, preload, server response) to improve LCP",
    "tti": "Split and defer JavaScript to reach Time to Interactive sooner",
    "tbt": "Break up long main-thread tasks to reduce Total Blocking Time",
    "cls": "Reserve space for images, embeds and late content to avoid layout shifts",
    "speed_index": "Prioritize visible content to improve Speed Index",
}


def compliance_for(value: float, budget: float, warning_factor: float = 1.2) -> str:
    if value <= budget:
        return "pass"
    if value <= budget * warning_factor:
        return "warning"
    return "fail"


def metric_score(value: float, budget: float) -> float:
    """Inverted value/budget ratio scaled to 0-100."""
    if value <= 0:
        return 100.0
    return max(0.0, min(100.0, 100.0 * budget / value))


class PerformanceAuditor:
    def __init__(self, config: Optional[ScoringConfig] = None) -> None:
        self.config = config or ScoringConfig()

    def build_report(self, timings: Sequence[TimingSample]) -> Optional[PerformanceReport]:
        """Return the report, or None when no timings were collected."""
        if not timings:
            return None

        grouped: Dict[str, List[float]] = {}
        for sample in timings:
            grouped.setdefault(sample.metric.value, []).append(sample.value)

        budget = self.config.budget.model_dump()
        metrics: Dict[str, float] = {}
        compliance: Dict[str, str] = {}
        scores: Dict[str, float] = {}
        total = 0.0
        total_weight = 0.0
        for name, values in grouped.items():
            value = sum(values) / len(values)
            limit = budget[name]
            metrics[name] = round(value, 4)
            compliance[name] = compliance_for(value, limit, self.config.warning_factor)
            scores[name] = round(metric_score(value, limit), 2)
            weight = self.config.compliance_weights.get(compliance[name], 1.0)
            total += scores[name] * weight
            total_weight += weight

        score = round(max(0.0, min(100.0, total / total_weight)), 2) if total_weight else 0.0
        recommendations = [METRIC_RECOMMENDATIONS[name] for name, status in compliance.items() if status != "pass"]

        logger.debug("Performance report built", metrics=len(metrics), score=score)
        return PerformanceReport(
            score=score,
            metrics=metrics,
            budget={name: budget[name] for name in metrics},
            compliance=compliance,
            metric_scores=scores,
            recommendations=recommendations,
        )
