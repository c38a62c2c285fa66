"""
Canonical and legacy result models.
"""

from .brand import (
    ArchitectureQualityMetrics,
    BrandExtractionResult,
    BrandProfile,
    BrandQualityScore,
    BrokenLink,
    ContentCluster,
    ContentInventory,
    InformationArchitecture,
    InternalLinking,
    KeywordScore,
    LinkingDepth,
    LinkOpportunity,
    LogoAsset,
    NavigationAccessibility,
    PageContent,
    PageSEO,
    ReadabilityMetrics,
    SiteDepthMetrics,
    SiteSEOMetadata,
    VoiceTone,
)
from .common import ExtensionValue, Flag, FrozenModel
from .legacy import LegacyBrandProfile, LegacyContentInventory, LegacyDesignTokens
from .style import (
    AccessibilityReport,
    AccessibilitySummary,
    AccessibilityViolation,
    ColorSystem,
    ColorToken,
    ContrastIssue,
    DesignTokens,
    EffectsSystem,
    ExtractionMetadata,
    ExtractionResult,
    LayoutSystem,
    PatternAccessibility,
    PatternContent,
    PatternVariant,
    PerformanceReport,
    QualityScore,
    Recommendation,
    ScaleFit,
    SpacingSystem,
    Typography,
    TypographyStep,
    UIPattern,
)

__all__ = [
    "AccessibilityReport",
    "AccessibilitySummary",
    "AccessibilityViolation",
    "ArchitectureQualityMetrics",
    "BrandExtractionResult",
    "BrandProfile",
    "BrandQualityScore",
    "BrokenLink",
    "ColorSystem",
    "ColorToken",
    "ContentCluster",
    "ContentInventory",
    "ContrastIssue",
    "DesignTokens",
    "EffectsSystem",
    "ExtensionValue",
    "ExtractionMetadata",
    "ExtractionResult",
    "Flag",
    "FrozenModel",
    "InformationArchitecture",
    "InternalLinking",
    "KeywordScore",
    "LayoutSystem",
    "LegacyBrandProfile",
    "LegacyContentInventory",
    "LegacyDesignTokens",
    "LinkingDepth",
    "LinkOpportunity",
    "LogoAsset",
    "NavigationAccessibility",
    "PageContent",
    "PageSEO",
    "PatternAccessibility",
    "PatternContent",
    "PatternVariant",
    "PerformanceReport",
    "QualityScore",
    "ReadabilityMetrics",
    "Recommendation",
    "ScaleFit",
    "SiteDepthMetrics",
    "SiteSEOMetadata",
    "SpacingSystem",
    "Typography",
    "TypographyStep",
    "UIPattern",
    "VoiceTone",
]
