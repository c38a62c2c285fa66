"""
Async orchestration of an extraction run.

Page-local stages (intake, normalization, detection, scoring, content
digest) run in the default executor, bounded by a semaphore. The site-level
merge and the architecture aggregator run once every page task has
finished or the run deadline has expired; pages still in flight at the
deadline are discarded and the run is marked partial.
"""

from __future__ import annotations

import asyncio
import contextvars
import functools
import time
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence
from uuid import uuid4

import structlog

from tokenscope.architecture import ArchitectureAggregator, ContentAnalyzer, PageDigest, normalize_url
from tokenscope.assembler import ResultAssembler
from tokenscope.config import Config
from tokenscope.errors import CollectorFault, TokenscopeError
from tokenscope.intake import IntakeReport, PageSamples, collect_page, group_batches, merge_pages
from tokenscope.observability.metrics import METRICS
from tokenscope.patterns import PatternDetection, PatternDetector
from tokenscope.protocols import PageBatch
from tokenscope.quality import AccessibilityAuditor, PerformanceAuditor, QualityInputs, QualityScorer
from tokenscope.schemas import (
    AccessibilityReport,
    BrandExtractionResult,
    DesignTokens,
    ExtractionResult,
    Flag,
    PerformanceReport,
    QualityScore,
)
from tokenscope.tokens import (
    ColorNormalization,
    ColorNormalizer,
    EffectsAnalysis,
    EffectsNormalizer,
    LayoutAnalysis,
    LayoutAnalyzer,
    SpacingAnalysis,
    SpacingDetector,
    TypographyAnalysis,
    TypographyAnalyzer,
)


@dataclass
class StyleAnalysis:
    """Normalized tokens, patterns and scores for one page or a whole site."""

    tokens: DesignTokens
    color: ColorNormalization
    typography: TypographyAnalysis
    spacing: SpacingAnalysis
    layout: LayoutAnalysis
    effects: EffectsAnalysis
    patterns: PatternDetection
    accessibility: Optional[AccessibilityReport]
    performance: Optional[PerformanceReport]
    quality: QualityScore
    flags: List[Flag] = field(default_factory=list)


@dataclass
class PageResult:
    url: str
    samples: PageSamples
    intake: IntakeReport
    analysis: StyleAnalysis
    digest: PageDigest
    duration_ms: float = 0.0


@dataclass
class RunOutput:
    extraction: ExtractionResult
    brand: BrandExtractionResult


class ExtractionPipeline:
    def __init__(self, config: Optional[Config] = None) -> None:
        self.config = config or Config()
        self.logger = structlog.get_logger(self.__class__.__name__)

        self.color = ColorNormalizer(self.config.color)
        self.typography = TypographyAnalyzer(self.config.typography)
        self.spacing = SpacingDetector(self.config.spacing, self.config.typography.root_font_size_px)
        self.layout = LayoutAnalyzer(self.config.layout)
        self.effects = EffectsNormalizer()
        self.detector = PatternDetector(self.config.patterns)
        self.accessibility = AccessibilityAuditor(self.config.scoring)
        self.performance = PerformanceAuditor(self.config.scoring)
        self.scorer = QualityScorer(self.config.scoring)
        self.content = ContentAnalyzer(self.config.architecture.top_keywords_per_page)
        self.aggregator = ArchitectureAggregator(self.config.architecture)
        self.assembler = ResultAssembler(self.config)

    def _record_stage_timing(self, stage: str, started: float) -> None:
        METRICS["stage_duration_seconds"].labels(stage=stage).observe(time.perf_counter() - started)

    # --- page-local and site-level stages ---

    def analyze(self, samples: PageSamples, patterns: Optional[PatternDetection] = None) -> StyleAnalysis:
        """Run every normalizer and scorer over one set of samples."""
        started = time.perf_counter()
        color = self.color.normalize(samples.colors)
        typography = self.typography.analyze(samples.fonts)
        self._record_stage_timing("color_typography", started)

        started = time.perf_counter()
        spacing = self.spacing.analyze(samples.spacing)
        layout = self.layout.analyze(samples.features, samples.spacing)
        effects = self.effects.normalize(samples.effects)
        self._record_stage_timing("spacing_layout", started)

        started = time.perf_counter()
        if patterns is None:
            patterns = self.detector.detect(samples.candidates)
        self._record_stage_timing("patterns", started)

        started = time.perf_counter()
        accessibility = self.accessibility.build_report(
            samples.findings,
            samples.signals,
            color.system.contrast_issues,
            color.contrast_checks,
        )
        performance = self.performance.build_report(samples.timings)
        quality = self.scorer.score(
            QualityInputs.from_analyses(
                color=color,
                typography=typography,
                spacing=spacing,
                accessibility=accessibility,
                patterns=patterns,
                performance=performance,
                layout=layout,
            )
        )
        self._record_stage_timing("scoring", started)

        viewports = self.config.layout.viewports
        tokens = DesignTokens(
            colors=color.system,
            typography=typography.typography,
            spacing=spacing.spacing,
            layout=layout.layout,
            effects=effects.effects,
            border_radius=effects.border_radius,
            breakpoints={name: viewports[name] for name in samples.viewports if name in viewports},
        )
        flags = color.flags + typography.flags + spacing.flags + QualityScorer.insufficient_flags(quality)
        return StyleAnalysis(
            tokens=tokens,
            color=color,
            typography=typography,
            spacing=spacing,
            layout=layout,
            effects=effects,
            patterns=patterns,
            accessibility=accessibility,
            performance=performance,
            quality=quality,
            flags=flags,
        )

    def process_page(self, url: str, batches: Sequence[PageBatch]) -> PageResult:
        """Every page-local stage for one page; stages run strictly in sequence."""
        started = time.perf_counter()
        intake = IntakeReport()
        samples = collect_page(url, batches, intake)
        self._record_stage_timing("intake", started)

        analysis = self.analyze(samples)

        stage_started = time.perf_counter()
        digest = self.content.analyze_page(url, samples.texts, samples.links, samples.signals)
        self._record_stage_timing("content", stage_started)

        duration_ms = (time.perf_counter() - started) * 1000
        self.logger.debug(
            "Page processed",
            url=url,
            viewports=samples.viewports,
            accepted=intake.accepted,
            rejected=intake.rejected_total,
            repeated=intake.repeated,
            quality=analysis.quality.overall,
            duration_ms=round(duration_ms, 2),
        )
        return PageResult(
            url=url, samples=samples, intake=intake, analysis=analysis, digest=digest, duration_ms=duration_ms
        )

    # --- orchestration ---

    async def _process_pages(
        self, pages: Dict[str, List[PageBatch]], deadline: Optional[float], flags: List[Flag]
    ) -> Dict[str, PageResult]:
        semaphore = asyncio.Semaphore(self.config.pipeline.max_concurrency)
        loop = asyncio.get_running_loop()

        async def run_page(url: str, batches: List[PageBatch]) -> PageResult:
            async with semaphore:
                # Executor threads do not inherit context; carry the bound run_id along.
                context = contextvars.copy_context()
                return await loop.run_in_executor(
                    None, functools.partial(context.run, self.process_page, url, batches)
                )

        tasks = {url: asyncio.ensure_future(run_page(url, batches)) for url, batches in pages.items()}
        if not tasks:
            return {}
        done, pending = await asyncio.wait(tasks.values(), timeout=deadline)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            self.logger.warning("Deadline expired; discarding in-flight pages", pending=len(pending))

        results: Dict[str, PageResult] = {}
        for url, task in tasks.items():
            if task not in done:
                flags.append(
                    TokenscopeError(
                        "Page did not finish before the run deadline", component="pipeline", details={"url": url}
                    ).to_flag()
                )
                METRICS["pages_processed"].labels(outcome="cancelled").inc()
                continue
            error = task.exception()
            if error is not None:
                self.logger.error("Page processing failed", url=url, error=str(error), exc_info=error)
                flags.append(
                    TokenscopeError(
                        f"Page processing failed: {error}", component="pipeline", details={"url": url}
                    ).to_flag()
                )
                METRICS["pages_processed"].labels(outcome="error").inc()
                continue
            results[url] = task.result()
            METRICS["pages_processed"].labels(outcome="ok").inc()
        return results

    async def run(
        self,
        batches: Iterable[PageBatch],
        root_url: str,
        expected_urls: Optional[Sequence[str]] = None,
        deadline_seconds: Optional[float] = None,
    ) -> RunOutput:
        run_id = uuid4().hex
        structlog.contextvars.bind_contextvars(run_id=run_id)
        try:
            return await self._run(run_id, batches, root_url, expected_urls, deadline_seconds)
        finally:
            structlog.contextvars.unbind_contextvars("run_id")

    async def _run(
        self,
        run_id: str,
        batches: Iterable[PageBatch],
        root_url: str,
        expected_urls: Optional[Sequence[str]],
        deadline_seconds: Optional[float],
    ) -> RunOutput:
        started = time.perf_counter()
        flags: List[Flag] = []
        grouped = group_batches(batches)
        self.logger.info("Extraction run started", root_url=root_url, pages=len(grouped))

        delivered: Dict[str, List[PageBatch]] = {}
        for url, page_batches in grouped.items():
            if any(batch.delivered for batch in page_batches):
                delivered[url] = page_batches
                continue
            errors = sorted({batch.error for batch in page_batches if batch.error})
            fault = CollectorFault(
                "Collector delivered no samples for page",
                component="collector",
                details={"url": url, "error": "; ".join(errors) or "not delivered"},
            )
            flags.append(fault.to_flag())
            METRICS["pages_processed"].labels(outcome="collector_fault").inc()

        deadline = deadline_seconds if deadline_seconds is not None else self.config.pipeline.deadline_seconds
        results = await self._process_pages(delivered, deadline, flags)
        # Page order follows first delivery, not completion order.
        pages = [results[url] for url in grouped if url in results]

        completed = {normalize_url(page.url) for page in pages}
        missing = [url for url in grouped if normalize_url(url) not in completed]
        known = {normalize_url(url) for url in grouped}
        missing.extend(url for url in expected_urls or () if normalize_url(url) not in known | completed)
        partial = bool(missing)

        stage_started = time.perf_counter()
        site_samples = merge_pages(root_url, [page.samples for page in pages])
        site_patterns = self.detector.consolidate([page.analysis.patterns for page in pages])
        site = self.analyze(site_samples, patterns=site_patterns)
        self._record_stage_timing("site_merge", stage_started)

        stage_started = time.perf_counter()
        architecture = self.aggregator.aggregate(
            [page.digest for page in pages], root_url, partial=partial, missing_pages=missing
        )
        self._record_stage_timing("architecture", stage_started)

        rejected: Counter = Counter()
        for page in pages:
            rejected.update(page.intake.rejected)
        metadata = self.assembler.metadata(
            run_id=run_id,
            duration_ms=(time.perf_counter() - started) * 1000,
            viewports=site_samples.viewports,
            pages_crawled=len(pages),
            pages_failed=len(grouped) - len(pages),
            partial=partial,
            samples_rejected=dict(rejected),
        )
        extraction = self.assembler.assemble_extraction(
            url=root_url,
            tokens=site.tokens,
            quality=site.quality,
            patterns=site.patterns.catalog,
            pattern_variants=site.patterns.variants,
            accessibility=site.accessibility,
            performance=site.performance,
            page_quality={page.url: page.analysis.quality.overall for page in pages},
            flags=flags + site.flags,
            metadata=metadata,
        )
        brand = self.assembler.assemble_brand(url=root_url, site=architecture, flags=flags, metadata=metadata)

        METRICS["quality_score"].observe(extraction.quality.overall)
        for flag in extraction.flags + architecture.flags:
            METRICS["flags_raised"].labels(kind=flag.kind).inc()
            self.logger.warning("Result flagged", kind=flag.kind, component=flag.component, message=flag.message)
        self.logger.info(
            "Extraction run finished",
            pages=len(pages),
            missing=len(missing),
            partial=partial,
            quality=extraction.quality.overall,
            architecture=brand.architecture.quality.overall,
            duration_ms=metadata.extraction_duration_ms,
        )
        return RunOutput(extraction=extraction, brand=brand)
