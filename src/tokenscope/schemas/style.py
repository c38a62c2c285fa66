"""
Canonical Design Token & Pattern model.

Every model is frozen; stages build new instances instead of mutating the
ones they receive.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import Field, field_validator

from tokenscope.schemas.common import ExtensionValue, Flag, FrozenModel

ColorUsage = Literal["primary", "secondary", "accent", "neutral", "semantic", "palette"]
Compliance = Literal["pass", "warning", "fail"]


def _check_increasing(values: List[float], what: str) -> None:
    for previous, current in zip(values, values[1:]):
        if current <= previous:
            raise ValueError(f"{what} must be strictly increasing, got {previous} then {current}")


# --- Colors ---


class ColorToken(FrozenModel):
    value: str
    type: Literal["color"] = "color"
    usage: ColorUsage = "palette"
    contrast: Optional[float] = None
    background: Optional[str] = None
    count: int = 0
    prominence: float = 0.0
    members: List[str] = Field(default_factory=list)


class ContrastIssue(FrozenModel):
    foreground: str
    background: str
    ratio: float
    required: float
    large_text: bool = False
    sample_count: int = 0


class ColorSystem(FrozenModel):
    primary: Optional[ColorToken] = None
    secondary: Optional[ColorToken] = None
    accent: Optional[ColorToken] = None
    neutral: Dict[str, ColorToken] = Field(default_factory=dict)
    semantic: Dict[str, ColorToken] = Field(default_factory=dict)
    palette: List[ColorToken] = Field(default_factory=list)
    contrast_issues: List[ContrastIssue] = Field(default_factory=list)


# --- Typography ---


class TypographyStep(FrozenModel):
    size_px: float
    line_height: Optional[float] = None
    font_family: Optional[str] = None
    font_weight: Optional[int] = None
    letter_spacing: Optional[str] = None
    count: int = 0


class ScaleFit(FrozenModel):
    """Result of fitting a modular (geometric) scale to observed sizes."""

    fitted: bool = False
    base_px: Optional[float] = None
    ratio: Optional[float] = None
    residual: Optional[float] = None
    nearest_named_ratio: Optional[float] = None


class Typography(FrozenModel):
    families: List[str] = Field(default_factory=list)
    scale: Dict[str, TypographyStep] = Field(default_factory=dict)
    hierarchy: Dict[str, TypographyStep] = Field(default_factory=dict)
    modular_scale: Optional[float] = None
    fit: ScaleFit = Field(default_factory=ScaleFit)
    weights: List[int] = Field(default_factory=list)
    line_heights: Dict[str, float] = Field(default_factory=dict)
    letter_spacing: List[str] = Field(default_factory=list)

    @field_validator("scale")
    @classmethod
    def scale_increasing(cls, v: Dict[str, TypographyStep]) -> Dict[str, TypographyStep]:
        _check_increasing([step.size_px for step in v.values()], "typography scale")
        return v


# --- Spacing, layout, effects ---


class SpacingSystem(FrozenModel):
    base: Optional[int] = None
    scale: Dict[str, float] = Field(default_factory=dict)
    irregular: List[float] = Field(default_factory=list)
    regularity: Optional[float] = None
    usage: Dict[str, int] = Field(default_factory=dict)

    @field_validator("scale")
    @classmethod
    def scale_increasing(cls, v: Dict[str, float]) -> Dict[str, float]:
        _check_increasing(list(v.values()), "spacing scale")
        return v


class LayoutSystem(FrozenModel):
    uses_grid: bool = False
    uses_flex: bool = False
    uses_custom_properties: bool = False
    uses_media_queries: bool = False
    uses_container_queries: bool = False
    deprecated_features: List[str] = Field(default_factory=list)
    gutter: Optional[float] = None
    container_width: Optional[float] = None
    breakpoints: Dict[str, int] = Field(default_factory=dict)


class EffectsSystem(FrozenModel):
    shadows: Dict[str, str] = Field(default_factory=dict)
    transitions: Dict[str, str] = Field(default_factory=dict)
    transforms: Dict[str, str] = Field(default_factory=dict)


class DesignTokens(FrozenModel):
    colors: ColorSystem = Field(default_factory=ColorSystem)
    typography: Typography = Field(default_factory=Typography)
    spacing: SpacingSystem = Field(default_factory=SpacingSystem)
    layout: LayoutSystem = Field(default_factory=LayoutSystem)
    effects: EffectsSystem = Field(default_factory=EffectsSystem)
    border_radius: Dict[str, float] = Field(default_factory=dict)
    breakpoints: Dict[str, int] = Field(default_factory=dict)
    extensions: Dict[str, ExtensionValue] = Field(default_factory=dict)


# --- Patterns ---


class PatternAccessibility(FrozenModel):
    has_aria_labels: bool = False
    has_roles: bool = False
    keyboard_navigable: bool = False
    semantic_html: bool = False


class PatternContent(FrozenModel):
    headings: int = 0
    text_length: int = 0
    links: int = 0
    images: int = 0


class UIPattern(FrozenModel):
    type: str
    variant: str
    confidence: float = Field(ge=0.0, le=1.0)
    signature: str
    order: int = 0
    url: str = ""
    viewport: str = ""
    accessibility: PatternAccessibility = Field(default_factory=PatternAccessibility)
    content: PatternContent = Field(default_factory=PatternContent)


class PatternVariant(FrozenModel):
    type: str
    name: str
    signatures: List[str] = Field(default_factory=list)
    instances: int = 0
    mean_confidence: float = 0.0


# --- Scores and reports ---


class AccessibilityViolation(FrozenModel):
    rule: str
    impact: Literal["critical", "serious", "moderate", "minor"]
    description: str = ""
    element: str = ""
    url: str = ""
    guideline: str = ""
    wcag_level: Literal["A", "AA", "AAA"] = "A"
    weight: float = 0.0


class AccessibilitySummary(FrozenModel):
    critical: int = 0
    serious: int = 0
    moderate: int = 0
    minor: int = 0
    total: int = 0


class AccessibilityReport(FrozenModel):
    score: float = Field(ge=0.0, le=100.0)
    violations: List[AccessibilityViolation] = Field(default_factory=list)
    summary: AccessibilitySummary = Field(default_factory=AccessibilitySummary)
    signals: Dict[str, bool] = Field(default_factory=dict)
    recommendations: List[str] = Field(default_factory=list)


class PerformanceReport(FrozenModel):
    score: float = Field(ge=0.0, le=100.0)
    metrics: Dict[str, float] = Field(default_factory=dict)
    budget: Dict[str, float] = Field(default_factory=dict)
    compliance: Dict[str, Compliance] = Field(default_factory=dict)
    metric_scores: Dict[str, float] = Field(default_factory=dict)
    recommendations: List[str] = Field(default_factory=list)


class QualityScore(FrozenModel):
    overall: float = Field(ge=0.0, le=1.0)
    breakdown: Dict[str, Optional[float]] = Field(default_factory=dict)
    weights: Dict[str, float] = Field(default_factory=dict)
    evaluated: List[str] = Field(default_factory=list)
    insufficient: List[str] = Field(default_factory=list)
    threshold: float = 0.7
    passed: bool = False


class Recommendation(FrozenModel):
    id: str
    category: str
    priority: Literal["high", "medium", "low"] = "medium"
    message: str


class ExtractionMetadata(FrozenModel):
    run_id: str = ""
    extraction_duration_ms: float = 0.0
    viewports_tested: List[str] = Field(default_factory=list)
    pages_crawled: int = 0
    pages_failed: int = 0
    extractor_version: str = ""
    partial: bool = False
    samples_rejected: Dict[str, int] = Field(default_factory=dict)


class ExtractionResult(FrozenModel):
    url: str
    timestamp: datetime
    tokens: DesignTokens
    patterns: List[UIPattern] = Field(default_factory=list)
    pattern_variants: List[PatternVariant] = Field(default_factory=list)
    quality: QualityScore
    accessibility: Optional[AccessibilityReport] = None
    performance: Optional[PerformanceReport] = None
    page_quality: Dict[str, float] = Field(default_factory=dict)
    recommendations: List[Recommendation] = Field(default_factory=list)
    flags: List[Flag] = Field(default_factory=list)
    metadata: ExtractionMetadata = Field(default_factory=ExtractionMetadata)
