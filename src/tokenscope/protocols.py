"""
Core contracts and raw sample dataclasses for tokenscope.

The Collector (crawler / browser automation, external to this package)
delivers per-page observations as the frozen dataclasses below. Every
sample carries the page ``url`` and the ``viewport`` it was captured at, so
that every downstream stage stays free of live handles and can be safely
shared across worker threads.

Architecture Overview:
- Collector delivers ``PageBatch`` objects (one page x one viewport)
- intake validates the sample contract
- tokens / patterns / quality stages run per page
- architecture aggregation runs once per site
- the assembler composes frozen, JSON-serializable results
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Tuple


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================================
# Enums and Constants
# ============================================================================


class ColorContext(Enum):
    """Where a sampled color was applied."""

    TEXT = "text"
    BACKGROUND = "background"
    BORDER = "border"
    FILL = "fill"


class Severity(Enum):
    """Accessibility finding impact, ordered from most to least severe."""

    CRITICAL = "critical"
    SERIOUS = "serious"
    MODERATE = "moderate"
    MINOR = "minor"


class WCAGLevel(Enum):
    """WCAG conformance level a finding maps to."""

    A = "A"
    AA = "AA"
    AAA = "AAA"


class PatternType(Enum):
    """Recognized UI pattern types, in tie-break declaration order."""

    NAVIGATION = "navigation"
    HERO = "hero"
    CARDS = "cards"
    FORM = "form"
    TABLE = "table"
    PRICING = "pricing"
    FOOTER = "footer"


class TimingMetric(Enum):
    """Performance timings reported by the Collector."""

    FCP = "fcp"
    LCP = "lcp"
    TTI = "tti"
    TBT = "tbt"
    CLS = "cls"
    SPEED_INDEX = "speed_index"


class LinkContext(Enum):
    """Region of the page a link was found in."""

    NAVIGATION = "navigation"
    CONTENT = "content"
    FOOTER = "footer"
    UTILITY = "utility"


class TextKind(Enum):
    """Kinds of text block a Collector can report."""

    TITLE = "title"
    HEADING = "heading"
    PARAGRAPH = "paragraph"
    LIST_ITEM = "list_item"
    BUTTON = "button"
    IMAGE = "image"
    META_DESCRIPTION = "meta_description"
    META_KEYWORDS = "meta_keywords"
    LANGUAGE = "language"
    CANONICAL = "canonical"
    BRAND_NAME = "brand_name"
    TAGLINE = "tagline"
    LOGO = "logo"
    THEME_COLOR = "theme_color"
    OG = "og"
    TWITTER = "twitter"
    SOCIAL_LINK = "social_link"
    CONTACT = "contact"


# Text blocks that make up a page's readable body.
BODY_TEXT_KINDS = frozenset({TextKind.HEADING, TextKind.PARAGRAPH, TextKind.LIST_ITEM})


# ============================================================================
# Raw Samples
# ============================================================================


@dataclass(frozen=True)
class RawSample:
    """Base class of every observation delivered by the Collector."""

    url: str
    viewport: str
    captured_at: datetime = field(default_factory=_utcnow, compare=False)


@dataclass(frozen=True)
class ColorSample(RawSample):
    """A computed color value observed on an element."""

    value: str = ""
    context: ColorContext = ColorContext.TEXT
    area: float = 1.0
    background: Optional[str] = None
    font_size_px: Optional[float] = None
    font_weight: Optional[int] = None
    # Hint from class names / roles such as "error" or "success".
    semantic_cue: Optional[str] = None


@dataclass(frozen=True)
class FontSample(RawSample):
    """Computed font properties of one text element."""

    family: str = ""
    size: str = ""
    weight: int = 400
    line_height: Optional[float] = None
    letter_spacing: Optional[str] = None
    tag: str = "p"


@dataclass(frozen=True)
class SpacingSample(RawSample):
    """A margin / padding / gap value."""

    value: str = ""
    property: str = "margin"


@dataclass(frozen=True)
class EffectSample(RawSample):
    """A border-radius, box-shadow, transition or transform value."""

    property: str = ""
    value: str = ""


@dataclass(frozen=True)
class StyleFeatureSample(RawSample):
    """Usage count of a layout or styling feature (``display:grid`` etc.)."""

    feature: str = ""
    count: int = 1


@dataclass(frozen=True)
class DomCandidate(RawSample):
    """Structural summary of a DOM subtree that may be a UI pattern."""

    order: int = 0
    tag: str = "div"
    role: Optional[str] = None
    class_names: Tuple[str, ...] = ()
    child_tags: Tuple[str, ...] = ()
    similar_child_count: int = 0
    link_count: int = 0
    heading_levels: Tuple[int, ...] = ()
    image_count: int = 0
    input_count: int = 0
    button_count: int = 0
    cell_count: int = 0
    header_cell_count: int = 0
    price_count: int = 0
    aria_attributes: Tuple[str, ...] = ()
    tabindex_count: int = 0
    is_first_section: bool = False
    is_last_section: bool = False
    text: str = ""


@dataclass(frozen=True)
class AccessibilityFinding(RawSample):
    """A single accessibility rule violation reported by an audit."""

    rule: str = ""
    impact: Severity = Severity.MINOR
    description: str = ""
    element: str = ""
    guideline: str = ""
    wcag_level: Optional[WCAGLevel] = None


@dataclass(frozen=True)
class AccessibilitySignal(RawSample):
    """Page-level accessibility audit outcome (e.g. ``keyboard-accessible``)."""

    name: str = ""
    present: bool = False


@dataclass(frozen=True)
class TimingSample(RawSample):
    """One performance timing measurement (milliseconds, CLS unitless)."""

    metric: TimingMetric = TimingMetric.FCP
    value: float = 0.0


@dataclass(frozen=True)
class LinkEdge(RawSample):
    """An outbound link from ``url`` to ``target`` with its fetch outcome."""

    target: str = ""
    anchor: str = ""
    internal: bool = True
    fetch_ok: bool = True
    status_code: Optional[int] = None
    context: LinkContext = LinkContext.CONTENT


@dataclass(frozen=True)
class TextBlock(RawSample):
    """A piece of text content or page metadata."""

    kind: TextKind = TextKind.PARAGRAPH
    text: str = ""
    level: Optional[int] = None
    href: Optional[str] = None
    alt: Optional[str] = None


@dataclass(frozen=True)
class PageBatch:
    """One Collector delivery: all samples for one page at one viewport."""

    url: str
    viewport: str
    samples: Tuple[RawSample, ...] = ()
    delivered: bool = True
    error: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate batch identity."""
        if not self.url:
            raise ValueError("PageBatch requires a url")
        if not self.viewport:
            raise ValueError("PageBatch requires a viewport")
