"""
Token normalizers: color, typography, spacing/layout and effects.
"""

from .color import ColorNormalization, ColorNormalizer, contrast_ratio, rgb_to_lab
from .effects import EffectsAnalysis, EffectsNormalizer
from .spacing import LayoutAnalysis, LayoutAnalyzer, SpacingAnalysis, SpacingDetector
from .typography import TypographyAnalysis, TypographyAnalyzer

__all__ = [
    "ColorNormalization",
    "ColorNormalizer",
    "EffectsAnalysis",
    "EffectsNormalizer",
    "LayoutAnalysis",
    "LayoutAnalyzer",
    "SpacingAnalysis",
    "SpacingDetector",
    "TypographyAnalysis",
    "TypographyAnalyzer",
    "contrast_ratio",
    "rgb_to_lab",
]
