from .detector import PatternDetection, PatternDetector, PatternMatch, fingerprint
from .rules import RULES, RULES_BY_TYPE, PatternRule

__all__ = [
    "RULES",
    "RULES_BY_TYPE",
    "PatternDetection",
    "PatternDetector",
    "PatternMatch",
    "PatternRule",
    "fingerprint",
]
