from .accessibility import AccessibilityAuditor
from .performance import PerformanceAuditor, compliance_for, metric_score
from .scorer import QualityInputs, QualityScorer, modernity

__all__ = [
    "AccessibilityAuditor",
    "PerformanceAuditor",
    "QualityInputs",
    "QualityScorer",
    "compliance_for",
    "metric_score",
    "modernity",
]
