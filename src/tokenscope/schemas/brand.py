"""
Canonical Brand & Information-Architecture model.

Composed structures are flat: each field has exactly one owning model.
Page-level SEO fields live on ``PageSEO`` only; ``PageContent`` never
duplicates them.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import Field

from tokenscope.schemas.common import ExtensionValue, Flag, FrozenModel
from tokenscope.schemas.style import ExtractionMetadata, Recommendation

# --- Brand identity ---


class LogoAsset(FrozenModel):
    src: str
    alt: Optional[str] = None


class VoiceTone(FrozenModel):
    primary: str = "neutral"
    secondary: List[str] = Field(default_factory=list)
    attributes: List[str] = Field(default_factory=list)
    indicator_scores: Dict[str, float] = Field(default_factory=dict)
    formality: str = "neutral"
    personality: List[str] = Field(default_factory=list)


class BrandProfile(FrozenModel):
    name: str = ""
    tagline: Optional[str] = None
    logo: Optional[LogoAsset] = None
    theme_color: Optional[str] = None
    voice_tone: VoiceTone = Field(default_factory=VoiceTone)
    social_links: Dict[str, str] = Field(default_factory=dict)
    contact: List[str] = Field(default_factory=list)
    extensions: Dict[str, ExtensionValue] = Field(default_factory=dict)


# --- Content ---


class KeywordScore(FrozenModel):
    word: str
    frequency: int = 0
    relevance: float = 0.0


class ReadabilityMetrics(FrozenModel):
    flesch_kincaid_grade: Optional[float] = None
    flesch_reading_ease: Optional[float] = None
    total_words: int = 0
    total_sentences: int = 0
    total_syllables: int = 0
    total_paragraphs: int = 0
    avg_words_per_sentence: float = 0.0
    avg_syllables_per_word: float = 0.0
    avg_words_per_page: float = 0.0
    avg_sentences_per_paragraph: float = 0.0


class PageSEO(FrozenModel):
    title: Optional[str] = None
    description: Optional[str] = None
    keywords: List[str] = Field(default_factory=list)
    canonical: Optional[str] = None
    language: Optional[str] = None
    has_open_graph: bool = False
    has_twitter_card: bool = False
    h1_count: int = 0
    images_missing_alt: int = 0


class PageContent(FrozenModel):
    url: str
    title: str = ""
    content_type: str = "general"
    text: List[str] = Field(default_factory=list)
    headings: List[str] = Field(default_factory=list)
    word_count: int = 0
    keywords: List[KeywordScore] = Field(default_factory=list)
    depth: Optional[int] = None
    seo: PageSEO = Field(default_factory=PageSEO)


class ContentInventory(FrozenModel):
    pages: List[PageContent] = Field(default_factory=list)
    topics: List[str] = Field(default_factory=list)
    keywords: List[KeywordScore] = Field(default_factory=list)
    content_types: Dict[str, int] = Field(default_factory=dict)
    readability: ReadabilityMetrics = Field(default_factory=ReadabilityMetrics)
    total_words: int = 0
    extensions: Dict[str, ExtensionValue] = Field(default_factory=dict)


# --- Architecture ---


class SiteDepthMetrics(FrozenModel):
    average: Optional[float] = None
    median: Optional[float] = None
    min: Optional[int] = None
    max: Optional[int] = None
    distribution: Dict[str, int] = Field(default_factory=dict)
    unreachable: List[str] = Field(default_factory=list)


class LinkOpportunity(FrozenModel):
    source: str
    target: str
    keyword: str


class ContentCluster(FrozenModel):
    name: str
    pages: List[str] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)
    pillar_page: Optional[str] = None
    authority: float = 0.0
    user_intent: str = "informational"
    linking_opportunities: List[LinkOpportunity] = Field(default_factory=list)


class BrokenLink(FrozenModel):
    source: str
    target: str
    status_code: Optional[int] = None


class LinkingDepth(FrozenModel):
    average: float = 0.0
    max: int = 0


class InternalLinking(FrozenModel):
    total_internal_links: int = 0
    orphan_pages: List[str] = Field(default_factory=list)
    broken_links: List[BrokenLink] = Field(default_factory=list)
    linking_depth: LinkingDepth = Field(default_factory=LinkingDepth)
    context_distribution: Dict[str, int] = Field(default_factory=dict)


class NavigationAccessibility(FrozenModel):
    keyboard_accessible: Optional[bool] = None
    skip_links: Optional[bool] = None
    aria_labels: Optional[bool] = None
    focus_management: Optional[bool] = None


class ArchitectureQualityMetrics(FrozenModel):
    structure: float = 0.0
    navigation: float = 0.0
    content: float = 0.0
    seo: float = 0.0
    overall: float = 0.0


class InformationArchitecture(FrozenModel):
    root_url: str
    pages: List[str] = Field(default_factory=list)
    depth: SiteDepthMetrics = Field(default_factory=SiteDepthMetrics)
    content_clusters: List[ContentCluster] = Field(default_factory=list)
    internal_linking: InternalLinking = Field(default_factory=InternalLinking)
    accessibility: NavigationAccessibility = Field(default_factory=NavigationAccessibility)
    quality: ArchitectureQualityMetrics = Field(default_factory=ArchitectureQualityMetrics)
    incomplete: bool = False
    missing_pages: List[str] = Field(default_factory=list)


class SiteSEOMetadata(FrozenModel):
    title_coverage: float = 0.0
    description_coverage: float = 0.0
    canonical_coverage: float = 0.0
    open_graph_coverage: float = 0.0
    twitter_coverage: float = 0.0
    single_h1_coverage: float = 0.0
    languages: List[str] = Field(default_factory=list)
    duplicate_titles: List[str] = Field(default_factory=list)
    images_missing_alt: int = 0
    score: float = 0.0


class BrandQualityScore(FrozenModel):
    brand_clarity: float = 0.0
    content_quality: float = 0.0
    information_architecture: float = 0.0
    seo_optimization: float = 0.0
    messaging_consistency: float = 0.0
    overall: float = 0.0


class BrandExtractionResult(FrozenModel):
    url: str
    timestamp: datetime
    brand: BrandProfile
    content: ContentInventory
    architecture: InformationArchitecture
    seo: SiteSEOMetadata
    quality: BrandQualityScore
    recommendations: List[Recommendation] = Field(default_factory=list)
    flags: List[Flag] = Field(default_factory=list)
    metadata: ExtractionMetadata = Field(default_factory=ExtractionMetadata)
