"""
Composition of terminal extraction results.

The assembler is pure: it builds frozen result models from deep copies of
stage outputs and run metadata, then attaches recommendations from fixed, ordered rule
lists. The first ``max_recommendations`` matching rules are kept, one per
rule id.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence, TypeVar

from pydantic import BaseModel

from tokenscope.architecture import SiteArchitecture
from tokenscope.config import Config
from tokenscope.schemas import (
    AccessibilityReport,
    BrandExtractionResult,
    DesignTokens,
    ExtractionMetadata,
    ExtractionResult,
    Flag,
    PatternVariant,
    PerformanceReport,
    QualityScore,
    Recommendation,
    UIPattern,
)

ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass(frozen=True)
class RecommendationRule:
    id: str
    category: str
    priority: str
    message: str
    applies: Callable[[Any], bool]


def _below_threshold(name: str) -> Callable[[ExtractionResult], bool]:
    def check(result: ExtractionResult) -> bool:
        value = result.quality.breakdown.get(name)
        return value is not None and value < result.quality.threshold

    return check


def _has_critical(result: ExtractionResult) -> bool:
    return result.accessibility is not None and result.accessibility.summary.critical > 0


def _failing_metrics(result: ExtractionResult) -> bool:
    return result.performance is not None and "fail" in result.performance.compliance.values()


EXTRACTION_RULES: Sequence[RecommendationRule] = (
    RecommendationRule(
        "accessibility-critical",
        "accessibility",
        "high",
        "Fix critical accessibility violations before anything else",
        _has_critical,
    ),
    RecommendationRule(
        "color-contrast",
        "accessibility",
        "high",
        "Improve color contrast ratios to meet WCAG AA standards",
        lambda r: bool(r.tokens.colors.contrast_issues),
    ),
    RecommendationRule(
        "accessibility-compliance",
        "accessibility",
        "high",
        "Improve accessibility compliance: ensure proper contrast ratios and focus indicators",
        _below_threshold("accessibility_compliance"),
    ),
    RecommendationRule(
        "performance-budget",
        "performance",
        "high",
        "Bring failing performance metrics back within budget",
        _failing_metrics,
    ),
    RecommendationRule(
        "color-consistency",
        "color",
        "medium",
        "Establish a more consistent color system with semantic color tokens",
        _below_threshold("color_consistency"),
    ),
    RecommendationRule(
        "typography-hierarchy",
        "typography",
        "medium",
        "Improve typography hierarchy with a clear modular scale",
        _below_threshold("typography_hierarchy"),
    ),
    RecommendationRule(
        "spacing-regularity",
        "spacing",
        "medium",
        "Implement a more consistent spacing scale built on a single base unit",
        _below_threshold("spacing_regularity"),
    ),
    RecommendationRule(
        "pattern-consistency",
        "patterns",
        "medium",
        "Standardize UI patterns and ensure consistent component usage",
        _below_threshold("pattern_consistency"),
    ),
    RecommendationRule(
        "performance-optimization",
        "performance",
        "medium",
        "Optimize loading performance for the slowest metrics",
        _below_threshold("performance_optimization"),
    ),
    RecommendationRule(
        "modernity",
        "layout",
        "low",
        "Modernize layout with grid, flexbox and custom properties; remove deprecated features",
        _below_threshold("modernity_score"),
    ),
    RecommendationRule(
        "typography-scale",
        "typography",
        "low",
        "Establish clearer typographic hierarchy using a modular scale",
        lambda r: bool(r.tokens.typography.scale) and not r.tokens.typography.fit.fitted,
    ),
    RecommendationRule(
        "spacing-irregular",
        "spacing",
        "low",
        "Replace one-off spacing values with steps from the spacing scale",
        lambda r: bool(r.tokens.spacing.irregular),
    ),
)


BRAND_RULES: Sequence[RecommendationRule] = (
    RecommendationRule(
        "broken-links",
        "architecture",
        "high",
        "Fix broken internal links",
        lambda r: bool(r.architecture.internal_linking.broken_links),
    ),
    RecommendationRule(
        "orphan-pages",
        "architecture",
        "high",
        "Link to orphan pages from related content",
        lambda r: bool(r.architecture.internal_linking.orphan_pages),
    ),
    RecommendationRule(
        "meta-descriptions",
        "seo",
        "medium",
        "Add meta descriptions to every page",
        lambda r: bool(r.content.pages) and r.seo.description_coverage < 1.0,
    ),
    RecommendationRule(
        "page-titles",
        "seo",
        "medium",
        "Give every page a unique, descriptive title",
        lambda r: bool(r.content.pages) and (r.seo.title_coverage < 1.0 or bool(r.seo.duplicate_titles)),
    ),
    RecommendationRule(
        "image-alt",
        "seo",
        "medium",
        "Add descriptive alt text to all images",
        lambda r: r.seo.images_missing_alt > 0,
    ),
    RecommendationRule(
        "navigation-accessibility",
        "accessibility",
        "medium",
        "Make navigation keyboard accessible and label it with ARIA attributes",
        lambda r: r.architecture.accessibility.keyboard_accessible is False
        or r.architecture.accessibility.aria_labels is False,
    ),
    RecommendationRule(
        "site-depth",
        "architecture",
        "medium",
        "Flatten the site structure so key pages are within three clicks of the home page",
        lambda r: (r.architecture.depth.average or 0.0) > 3.0,
    ),
    RecommendationRule(
        "single-h1",
        "seo",
        "low",
        "Use exactly one h1 heading per page",
        lambda r: bool(r.content.pages) and r.seo.single_h1_coverage < 1.0,
    ),
    RecommendationRule(
        "readability",
        "content",
        "low",
        "Simplify copy with shorter sentences and plainer words",
        lambda r: (r.content.readability.flesch_kincaid_grade or 0.0) > 10.0,
    ),
    RecommendationRule(
        "cluster-linking",
        "architecture",
        "low",
        "Add internal links between related pages in the same topic cluster",
        lambda r: any(c.linking_opportunities for c in r.architecture.content_clusters),
    ),
    RecommendationRule(
        "brand-clarity",
        "brand",
        "low",
        "Define a clear brand identity: name, tagline, logo and theme color",
        lambda r: r.quality.brand_clarity < 0.6,
    ),
    RecommendationRule(
        "messaging-consistency",
        "brand",
        "low",
        "Keep a consistent voice across pages",
        lambda r: bool(r.content.pages) and r.quality.messaging_consistency < 0.5,
    ),
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _detached(model: Optional[ModelT]) -> Optional[ModelT]:
    """Deep copy so a result never shares containers with stage outputs."""
    return model.model_copy(deep=True) if model is not None else None


class ResultAssembler:
    def __init__(self, config: Optional[Config] = None) -> None:
        self.config = config or Config()

    @staticmethod
    def apply_rules(rules: Sequence[RecommendationRule], subject: Any, limit: int) -> List[Recommendation]:
        """First ``limit`` matching rules in list order, one per rule id."""
        selected: List[Recommendation] = []
        seen: set = set()
        for rule in rules:
            if len(selected) >= limit:
                break
            if rule.id in seen or not rule.applies(subject):
                continue
            seen.add(rule.id)
            selected.append(
                Recommendation(id=rule.id, category=rule.category, priority=rule.priority, message=rule.message)
            )
        return selected

    def metadata(
        self,
        run_id: str,
        duration_ms: float,
        viewports: Sequence[str],
        pages_crawled: int,
        pages_failed: int = 0,
        partial: bool = False,
        samples_rejected: Optional[Dict[str, int]] = None,
    ) -> ExtractionMetadata:
        return ExtractionMetadata(
            run_id=run_id,
            extraction_duration_ms=round(duration_ms, 3),
            viewports_tested=list(viewports),
            pages_crawled=pages_crawled,
            pages_failed=pages_failed,
            extractor_version=self.config.version,
            partial=partial,
            samples_rejected=dict(samples_rejected or {}),
        )

    def assemble_extraction(
        self,
        url: str,
        tokens: DesignTokens,
        quality: QualityScore,
        patterns: Sequence[UIPattern] = (),
        pattern_variants: Sequence[PatternVariant] = (),
        accessibility: Optional[AccessibilityReport] = None,
        performance: Optional[PerformanceReport] = None,
        page_quality: Optional[Dict[str, float]] = None,
        flags: Sequence[Flag] = (),
        metadata: Optional[ExtractionMetadata] = None,
        timestamp: Optional[datetime] = None,
    ) -> ExtractionResult:
        result = ExtractionResult(
            url=url,
            timestamp=timestamp or _utcnow(),
            tokens=_detached(tokens),
            patterns=[_detached(p) for p in patterns],
            pattern_variants=[_detached(v) for v in pattern_variants],
            quality=_detached(quality),
            accessibility=_detached(accessibility),
            performance=_detached(performance),
            page_quality=dict(page_quality or {}),
            flags=[_detached(f) for f in flags],
            metadata=metadata or ExtractionMetadata(extractor_version=self.config.version),
        )
        recommendations = self.apply_rules(EXTRACTION_RULES, result, self.config.pipeline.max_recommendations)
        return result.model_copy(update={"recommendations": recommendations})

    def assemble_brand(
        self,
        url: str,
        site: SiteArchitecture,
        flags: Sequence[Flag] = (),
        metadata: Optional[ExtractionMetadata] = None,
        timestamp: Optional[datetime] = None,
    ) -> BrandExtractionResult:
        result = BrandExtractionResult(
            url=url,
            timestamp=timestamp or _utcnow(),
            brand=_detached(site.brand),
            content=_detached(site.inventory),
            architecture=_detached(site.architecture),
            seo=_detached(site.seo),
            quality=_detached(site.quality),
            flags=[_detached(f) for f in [*flags, *site.flags]],
            metadata=metadata or ExtractionMetadata(extractor_version=self.config.version),
        )
        recommendations = self.apply_rules(BRAND_RULES, result, self.config.pipeline.max_recommendations)
        return result.model_copy(update={"recommendations": recommendations})
