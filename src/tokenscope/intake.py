"""
Sample contract validation and per-page grouping.

Malformed samples are rejected one at a time with a counted reason; they are
never processed speculatively.
"""

from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass, field, fields
from typing import Callable, Dict, Hashable, Iterable, List, Optional, Tuple, Type

import structlog

from tokenscope.errors import SampleContractError
from tokenscope.observability.metrics import METRICS
from tokenscope.protocols import (
    AccessibilityFinding,
    AccessibilitySignal,
    ColorSample,
    DomCandidate,
    EffectSample,
    FontSample,
    LinkEdge,
    PageBatch,
    RawSample,
    SpacingSample,
    StyleFeatureSample,
    TextBlock,
    TextKind,
    TimingSample,
)

logger = structlog.get_logger(__name__)

EFFECT_PROPERTIES = frozenset({"border-radius", "box-shadow", "transition", "transform"})
# Text blocks whose value may arrive as a link instead of text. Image blocks
# are exempt entirely: a missing alt is itself the signal.
HREF_TEXT_KINDS = frozenset({TextKind.LOGO, TextKind.SOCIAL_LINK, TextKind.CANONICAL})

# Document content is the same at every viewport: a sample of these kinds
# repeated in a later viewport is dropped, keeping the per-viewport maximum
# multiplicity of each key.
VIEWPORT_INDEPENDENT: Dict[str, Callable[[RawSample], Hashable]] = {
    "texts": lambda s: (s.kind, s.text, s.level, s.href, s.alt),
    "links": lambda s: (s.target, s.anchor, s.context, s.internal, s.fetch_ok),
    "candidates": lambda s: (s.order, s.tag.lower(), s.child_tags),
}


@dataclass
class PageSamples:
    """Validated samples for one page, across all delivered viewports."""

    url: str
    viewports: List[str] = field(default_factory=list)
    colors: List[ColorSample] = field(default_factory=list)
    fonts: List[FontSample] = field(default_factory=list)
    spacing: List[SpacingSample] = field(default_factory=list)
    effects: List[EffectSample] = field(default_factory=list)
    features: List[StyleFeatureSample] = field(default_factory=list)
    candidates: List[DomCandidate] = field(default_factory=list)
    findings: List[AccessibilityFinding] = field(default_factory=list)
    signals: List[AccessibilitySignal] = field(default_factory=list)
    timings: List[TimingSample] = field(default_factory=list)
    links: List[LinkEdge] = field(default_factory=list)
    texts: List[TextBlock] = field(default_factory=list)


@dataclass
class IntakeReport:
    accepted: int = 0
    rejected: Counter = field(default_factory=Counter)
    repeated: int = 0

    @property
    def rejected_total(self) -> int:
        return sum(self.rejected.values())


def _require(condition: bool, reason: str) -> None:
    if not condition:
        raise SampleContractError(reason)


def _check_color(sample: ColorSample) -> None:
    _require(bool(sample.value.strip()), "missing-color-value")
    _require(sample.area >= 0, "negative-area")


def _check_font(sample: FontSample) -> None:
    _require(bool(sample.size.strip()), "missing-font-size")


def _check_spacing(sample: SpacingSample) -> None:
    _require(bool(sample.value.strip()), "missing-spacing-value")


def _check_effect(sample: EffectSample) -> None:
    _require(sample.property in EFFECT_PROPERTIES, "unknown-effect-property")
    _require(bool(sample.value.strip()), "missing-effect-value")


def _check_feature(sample: StyleFeatureSample) -> None:
    _require(bool(sample.feature), "missing-feature")
    _require(sample.count >= 0, "negative-count")


def _check_candidate(sample: DomCandidate) -> None:
    _require(bool(sample.tag), "missing-tag")


def _check_finding(sample: AccessibilityFinding) -> None:
    _require(bool(sample.rule), "missing-rule")


def _check_signal(sample: AccessibilitySignal) -> None:
    _require(bool(sample.name), "missing-signal-name")


def _check_timing(sample: TimingSample) -> None:
    _require(math.isfinite(sample.value) and sample.value >= 0, "invalid-timing-value")


def _check_link(sample: LinkEdge) -> None:
    _require(bool(sample.target), "missing-link-target")


def _check_text(sample: TextBlock) -> None:
    if sample.kind is TextKind.IMAGE:
        return
    if sample.kind in HREF_TEXT_KINDS:
        _require(bool(sample.href or sample.text.strip()), "empty-text")
        return
    _require(bool(sample.text.strip()), "empty-text")


_CHECKS: Tuple[Tuple[Type[RawSample], str, Callable], ...] = (
    (ColorSample, "colors", _check_color),
    (FontSample, "fonts", _check_font),
    (SpacingSample, "spacing", _check_spacing),
    (EffectSample, "effects", _check_effect),
    (StyleFeatureSample, "features", _check_feature),
    (DomCandidate, "candidates", _check_candidate),
    (AccessibilityFinding, "findings", _check_finding),
    (AccessibilitySignal, "signals", _check_signal),
    (TimingSample, "timings", _check_timing),
    (LinkEdge, "links", _check_link),
    (TextBlock, "texts", _check_text),
)


def validate_sample(sample: object, expected_url: Optional[str] = None) -> str:
    """Check one sample against the Collector contract.

    Returns the name of the ``PageSamples`` bucket it belongs to, or raises
    ``SampleContractError`` with the rejection reason.
    """
    if not isinstance(sample, RawSample):
        raise SampleContractError("unknown-sample-type")
    if not sample.url:
        raise SampleContractError("missing-url")
    if not sample.viewport:
        raise SampleContractError("missing-viewport")
    if expected_url is not None and sample.url != expected_url:
        raise SampleContractError("url-mismatch")
    for sample_type, bucket, check in _CHECKS:
        if isinstance(sample, sample_type):
            check(sample)
            return bucket
    raise SampleContractError("unknown-sample-type")


def collect_page(url: str, batches: Iterable[PageBatch], report: Optional[IntakeReport] = None) -> PageSamples:
    """Validate and group every delivered sample for ``url``.

    Style samples are kept per viewport. Text blocks, links and DOM
    candidates describe the document itself, so a copy already seen in an
    earlier batch is counted in ``report.repeated`` and dropped.
    """
    report = report if report is not None else IntakeReport()
    page = PageSamples(url=url)
    kept: Dict[str, Counter] = {bucket: Counter() for bucket in VIEWPORT_INDEPENDENT}
    for batch in batches:
        if not batch.delivered:
            continue
        if batch.viewport not in page.viewports:
            page.viewports.append(batch.viewport)
        in_batch: Dict[str, Counter] = {bucket: Counter() for bucket in VIEWPORT_INDEPENDENT}
        for sample in batch.samples:
            try:
                bucket = validate_sample(sample, expected_url=url)
            except SampleContractError as e:
                report.rejected[e.reason] += 1
                METRICS["samples_rejected"].labels(reason=e.reason).inc()
                continue
            report.accepted += 1
            key_of = VIEWPORT_INDEPENDENT.get(bucket)
            if key_of is not None:
                key = key_of(sample)
                in_batch[bucket][key] += 1
                if in_batch[bucket][key] <= kept[bucket][key]:
                    report.repeated += 1
                    continue
                kept[bucket][key] += 1
            getattr(page, bucket).append(sample)

    if report.rejected:
        logger.warning("Rejected malformed samples", url=url, rejected=dict(report.rejected))
    return page


def group_batches(batches: Iterable[PageBatch]) -> Dict[str, List[PageBatch]]:
    """Group batches by page URL, preserving first-seen page order."""
    grouped: Dict[str, List[PageBatch]] = {}
    for batch in batches:
        grouped.setdefault(batch.url, []).append(batch)
    return grouped


def merge_pages(url: str, pages: Iterable[PageSamples]) -> PageSamples:
    """Concatenate validated samples from several pages, in page order."""
    merged = PageSamples(url=url)
    for page in pages:
        for viewport in page.viewports:
            if viewport not in merged.viewports:
                merged.viewports.append(viewport)
        for f in fields(PageSamples):
            if f.name in ("url", "viewports"):
                continue
            getattr(merged, f.name).extend(getattr(page, f.name))
    return merged
