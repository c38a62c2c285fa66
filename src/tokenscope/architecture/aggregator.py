"""
Site-level aggregation of page digests.

The aggregator is the synchronization point of a run: it needs every
page's digest before it can build the link graph, so it is called once
after all page-local stages have finished.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import structlog

from tokenscope.architecture.brand import BrandAnalyzer
from tokenscope.architecture.clustering import ContentClusterer
from tokenscope.architecture.content import PageDigest, site_readability
from tokenscope.architecture.graph import LinkGraph, normalize_url
from tokenscope.architecture.seo import summarize_seo
from tokenscope.config import ArchitectureConfig
from tokenscope.errors import GraphIncomplete, InsufficientSampleData
from tokenscope.quality.accessibility import AccessibilityAuditor
from tokenscope.schemas import (
    ArchitectureQualityMetrics,
    BrandProfile,
    BrandQualityScore,
    ContentCluster,
    ContentInventory,
    Flag,
    InformationArchitecture,
    InternalLinking,
    KeywordScore,
    NavigationAccessibility,
    ReadabilityMetrics,
    SiteSEOMetadata,
)

logger = structlog.get_logger(__name__)

# Accessibility signal names reported by the Collector for navigation audits.
NAVIGATION_SIGNALS: Dict[str, str] = {
    "keyboard_accessible": "keyboard-accessible",
    "skip_links": "skip-links",
    "aria_labels": "aria-labels",
    "focus_management": "focus-management",
}


@dataclass
class SiteArchitecture:
    inventory: ContentInventory
    architecture: InformationArchitecture
    seo: SiteSEOMetadata
    brand: BrandProfile
    quality: BrandQualityScore
    flags: List[Flag] = field(default_factory=list)


def depth_score(average: Optional[float]) -> float:
    """1.0 up to three clicks deep, falling to 0 at six."""
    if average is None:
        return 0.0
    if average <= 3:
        return 1.0
    return max(0.0, 1.0 - (average - 3) / 3)


def readability_score(grade: Optional[float]) -> float:
    """1.0 for grades 6-10, losing 0.1 per grade outside that band."""
    if grade is None:
        return 0.0
    if grade < 6:
        return max(0.0, 1.0 - 0.1 * (6 - grade))
    if grade > 10:
        return max(0.0, 1.0 - 0.1 * (grade - 10))
    return 1.0


class ArchitectureAggregator:
    def __init__(self, config: Optional[ArchitectureConfig] = None) -> None:
        self.config = config or ArchitectureConfig()
        self.clusterer = ContentClusterer(self.config)
        self.brand_analyzer = BrandAnalyzer()

    def aggregate(
        self,
        pages: Sequence[PageDigest],
        root_url: str,
        partial: bool = False,
        missing_pages: Sequence[str] = (),
    ) -> SiteArchitecture:
        root = normalize_url(root_url)
        flags: List[Flag] = []
        missing = sorted({normalize_url(u) for u in missing_pages})

        if partial or missing:
            error = GraphIncomplete(
                "Site graph built from a partial crawl; metrics cover delivered pages only",
                component="architecture",
                details={"missing_pages": len(missing), "delivered_pages": len(pages)},
            )
            logger.warning("Architecture built from partial crawl", **error.details)
            flags.append(error.to_flag())
        if not pages:
            flags.append(
                InsufficientSampleData("No pages delivered for aggregation", component="architecture").to_flag()
            )

        urls = [normalize_url(d.url) for d in pages]
        links = [link for digest in pages for link in digest.links]
        graph = LinkGraph.build(root, urls, links)
        depths = graph.depths()

        page_contents = [
            digest.content.model_copy(update={"url": url, "depth": depths.get(url)})
            for digest, url in zip(pages, urls)
        ]
        clusters = self.clusterer.cluster(pages, graph)
        readability = site_readability(pages)
        inventory = ContentInventory(
            pages=page_contents,
            topics=self._topics(pages, clusters),
            keywords=self._site_keywords(pages),
            content_types=dict(Counter(c.content_type for c in page_contents)),
            readability=readability,
            total_words=readability.total_words,
        )
        seo = summarize_seo(page_contents)

        signals = AccessibilityAuditor.aggregate_signals([s for d in pages for s in d.signals])
        navigation = NavigationAccessibility(
            **{field_name: signals.get(signal) for field_name, signal in NAVIGATION_SIGNALS.items()}
        )
        depth = graph.depth_metrics()
        internal_linking = InternalLinking(
            total_internal_links=graph.internal_links,
            orphan_pages=graph.orphans(),
            broken_links=list(graph.broken),
            linking_depth=graph.linking_depth(),
            context_distribution=dict(graph.context_distribution),
        )
        quality = self._architecture_quality(graph, depth.average, navigation, inventory, readability, seo)
        architecture = InformationArchitecture(
            root_url=root,
            pages=urls,
            depth=depth,
            content_clusters=clusters,
            internal_linking=internal_linking,
            accessibility=navigation,
            quality=quality,
            incomplete=bool(partial or missing),
            missing_pages=missing,
        )

        brand = self.brand_analyzer.build_profile(pages, root)
        brand_quality = self._brand_quality(brand, pages, quality)

        logger.info(
            "Site architecture aggregated",
            pages=len(urls),
            clusters=len(clusters),
            orphans=len(internal_linking.orphan_pages),
            broken_links=len(internal_linking.broken_links),
            overall=quality.overall,
        )
        return SiteArchitecture(
            inventory=inventory,
            architecture=architecture,
            seo=seo,
            brand=brand,
            quality=brand_quality,
            flags=flags,
        )

    def _site_keywords(self, pages: Sequence[PageDigest]) -> List[KeywordScore]:
        counts: Counter = Counter()
        order: Dict[str, int] = {}
        for digest in pages:
            for keyword in digest.content.keywords:
                counts[keyword.word] += keyword.frequency
                order.setdefault(keyword.word, len(order))
        total = sum(counts.values())
        ranked = sorted(counts, key=lambda w: (-counts[w], order[w]))[: self.config.max_site_keywords]
        return [
            KeywordScore(word=w, frequency=counts[w], relevance=round(counts[w] / total, 4) if total else 0.0)
            for w in ranked
        ]

    def _topics(self, pages: Sequence[PageDigest], clusters: Sequence[ContentCluster]) -> List[str]:
        """Cluster names first, then keywords that appear on the most pages."""
        topics: List[str] = [c.name for c in clusters]
        page_counts: Counter = Counter()
        order: Dict[str, int] = {}
        for digest in pages:
            for word in digest.top_keywords:
                page_counts[word] += 1
                order.setdefault(word, len(order))
        for word in sorted(page_counts, key=lambda w: (-page_counts[w], order[w])):
            if word not in topics:
                topics.append(word)
        return topics[: self.config.max_topics]

    def _architecture_quality(
        self,
        graph: LinkGraph,
        average_depth: Optional[float],
        navigation: NavigationAccessibility,
        inventory: ContentInventory,
        readability: ReadabilityMetrics,
        seo: SiteSEOMetadata,
    ) -> ArchitectureQualityMetrics:
        total = len(graph.nodes)
        if total == 0:
            return ArchitectureQualityMetrics()
        reachable_ratio = (total - len(graph.unreachable())) / total
        link_total = graph.internal_links + len(graph.broken)
        broken_ratio = len(graph.broken) / link_total if link_total else 0.0
        structure = 100.0 * (0.5 * reachable_ratio + 0.3 * depth_score(average_depth) + 0.2 * (1 - broken_ratio))

        orphan_ratio = len(graph.orphans()) / (total - 1) if total > 1 else 0.0
        nav = 100.0 - 50.0 * orphan_ratio - 10.0 * broken_ratio
        if not navigation.keyboard_accessible:
            nav -= 15.0
        if not navigation.aria_labels:
            nav -= 15.0
        if not navigation.skip_links:
            nav -= 10.0
        nav = max(0.0, nav)

        content = 100.0 * (
            0.4 * readability_score(readability.flesch_kincaid_grade)
            + 0.3 * min(1.0, readability.avg_words_per_page / 300)
            + 0.3 * min(1.0, len(inventory.topics) / 5)
        )
        scores = [round(structure, 2), round(nav, 2), round(content, 2), seo.score]
        return ArchitectureQualityMetrics(
            structure=scores[0],
            navigation=scores[1],
            content=scores[2],
            seo=scores[3],
            overall=round(sum(scores) / len(scores), 2),
        )

    def _brand_quality(
        self, brand: BrandProfile, pages: Sequence[PageDigest], quality: ArchitectureQualityMetrics
    ) -> BrandQualityScore:
        has_voice = any(score > 0 for score in brand.voice_tone.indicator_scores.values())
        present = [bool(brand.name), bool(brand.tagline), brand.logo is not None, bool(brand.theme_color), has_voice]
        values = {
            "brand_clarity": sum(present) / len(present),
            "content_quality": quality.content / 100,
            "information_architecture": (quality.structure + quality.navigation) / 200,
            "seo_optimization": quality.seo / 100,
            "messaging_consistency": self.brand_analyzer.messaging_consistency(pages, brand.voice_tone),
        }
        values = {name: round(value, 4) for name, value in values.items()}
        return BrandQualityScore(overall=round(sum(values.values()) / len(values), 4), **values)
