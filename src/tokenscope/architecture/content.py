"""
Page-level content analysis: text statistics, keywords, SEO fields and
content type, plus site-level readability.
"""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence
from urllib.parse import urlparse

import textstat

from tokenscope.protocols import AccessibilitySignal, LinkEdge, TextBlock, TextKind
from tokenscope.schemas import KeywordScore, PageContent, PageSEO, ReadabilityMetrics

STOP_WORDS = frozenset(
    {
        "a", "an", "and", "are", "as", "at", "be", "by", "for", "from", "has", "he", "in", "is", "it", "its",
        "of", "on", "that", "the", "to", "was", "were", "will", "with", "this", "but", "they", "have", "had",
        "what", "said", "each", "which", "she", "do", "how", "their", "if", "up", "out", "many", "then", "them",
        "these", "so", "some", "her", "would", "make", "like", "into", "him", "time", "two", "more", "go", "no",
        "way", "could", "my", "than", "first", "been", "call", "who", "oil", "sit", "now", "find", "down",
        "day", "did", "get", "come", "made", "may", "part", "our", "we", "you", "your", "can", "all", "not",
        "or", "any", "also", "about", "just", "over", "only", "very", "when", "where", "why", "there", "here",
        "us", "i", "me", "am", "own", "off", "both", "being", "those", "such", "should", "most", "other",
    }
)

# Checked in order; the first match wins.
CONTENT_TYPE_RULES = (
    ("about", ("about",)),
    ("blog", ("blog", "article", "news", "post")),
    ("product", ("product", "feature")),
    ("pricing", ("pricing", "plans")),
    ("contact", ("contact",)),
)


def tokenize_words(text: str) -> List[str]:
    """Tokenize text into lowercase words."""
    return re.findall(r"\b\w+\b", text.lower())


def count_sentences(text: str) -> int:
    sentences = re.split(r"[.!?]+", text)
    return len([s for s in sentences if s.strip()])


def content_type_for(url: str) -> str:
    path = urlparse(url).path.lower()
    for content_type, markers in CONTENT_TYPE_RULES:
        if any(marker in path for marker in markers):
            return content_type
    return "general"


def flesch_kincaid_grade(words: int, sentences: int, syllables: int) -> Optional[float]:
    if words == 0 or sentences == 0:
        return None
    return round((0.39 * (words / sentences)) + (11.8 * (syllables / words)) - 15.59, 2)


def flesch_reading_ease(words: int, sentences: int, syllables: int) -> Optional[float]:
    if words == 0 or sentences == 0:
        return None
    return round(206.835 - (1.015 * (words / sentences)) - (84.6 * (syllables / words)), 2)


@dataclass
class TextStats:
    words: int = 0
    sentences: int = 0
    syllables: int = 0
    paragraphs: int = 0

    @classmethod
    def from_paragraphs(cls, paragraphs: Sequence[str]) -> "TextStats":
        stats = cls()
        for paragraph in paragraphs:
            if not paragraph.strip():
                continue
            stats.paragraphs += 1
            stats.words += len(tokenize_words(paragraph))
            stats.sentences += max(1, count_sentences(paragraph))
            stats.syllables += int(textstat.syllable_count(paragraph))
        return stats

    def __add__(self, other: "TextStats") -> "TextStats":
        return TextStats(
            words=self.words + other.words,
            sentences=self.sentences + other.sentences,
            syllables=self.syllables + other.syllables,
            paragraphs=self.paragraphs + other.paragraphs,
        )


@dataclass
class PageDigest:
    """Everything the site aggregator needs from one page."""

    url: str
    content: PageContent
    stats: TextStats = field(default_factory=TextStats)
    links: List[LinkEdge] = field(default_factory=list)
    signals: List[AccessibilitySignal] = field(default_factory=list)
    texts: List[TextBlock] = field(default_factory=list)

    @property
    def top_keywords(self) -> List[str]:
        return [k.word for k in self.content.keywords]

    @property
    def body_text(self) -> str:
        return " ".join(self.content.headings + self.content.text)


def extract_keywords(weighted_texts: Iterable[tuple], limit: int) -> List[KeywordScore]:
    """Rank content words by weighted frequency; relevance is the share of weighted content words."""
    counts: Counter = Counter()
    order: dict = {}
    total = 0
    for text, weight in weighted_texts:
        for word in tokenize_words(text):
            if len(word) <= 2 or word in STOP_WORDS or not word.isalpha():
                continue
            counts[word] += weight
            order.setdefault(word, len(order))
            total += weight
    ranked = sorted(counts, key=lambda w: (-counts[w], order[w]))[:limit]
    return [
        KeywordScore(word=word, frequency=int(counts[word]), relevance=round(counts[word] / total, 4) if total else 0.0)
        for word in ranked
    ]


class ContentAnalyzer:
    def __init__(self, top_keywords: int = 8) -> None:
        self.top_keywords = top_keywords

    def analyze_page(
        self,
        url: str,
        texts: Sequence[TextBlock],
        links: Sequence[LinkEdge] = (),
        signals: Sequence[AccessibilitySignal] = (),
    ) -> PageDigest:
        def of(kind: TextKind) -> List[TextBlock]:
            return [t for t in texts if t.kind is kind]

        titles = [t.text.strip() for t in of(TextKind.TITLE) if t.text.strip()]
        headings_blocks = of(TextKind.HEADING)
        headings = [t.text.strip() for t in headings_blocks if t.text.strip()]
        paragraphs = [
            t.text.strip() for t in texts if t.kind in (TextKind.PARAGRAPH, TextKind.LIST_ITEM) and t.text.strip()
        ]
        title = titles[0] if titles else ""

        keywords = extract_keywords(
            [(title, 3)] + [(h, 2) for h in headings] + [(p, 1) for p in paragraphs],
            self.top_keywords,
        )
        descriptions = [t.text.strip() for t in of(TextKind.META_DESCRIPTION) if t.text.strip()]
        meta_keywords = [
            word.strip() for t in of(TextKind.META_KEYWORDS) for word in t.text.split(",") if word.strip()
        ]
        canonical = next((t.href or t.text for t in of(TextKind.CANONICAL) if t.href or t.text), None)
        language = next((t.text.strip() for t in of(TextKind.LANGUAGE) if t.text.strip()), None)

        seo = PageSEO(
            title=title or None,
            description=descriptions[0] if descriptions else None,
            keywords=meta_keywords,
            canonical=canonical,
            language=language,
            has_open_graph=bool(of(TextKind.OG)),
            has_twitter_card=bool(of(TextKind.TWITTER)),
            h1_count=sum(1 for t in headings_blocks if t.level == 1),
            images_missing_alt=sum(1 for t in of(TextKind.IMAGE) if not (t.alt or "").strip()),
        )
        stats = TextStats.from_paragraphs(headings + paragraphs)
        content = PageContent(
            url=url,
            title=title,
            content_type=content_type_for(url),
            text=paragraphs,
            headings=headings,
            word_count=stats.words,
            keywords=keywords,
            seo=seo,
        )
        return PageDigest(
            url=url,
            content=content,
            stats=stats,
            links=list(links),
            signals=list(signals),
            texts=list(texts),
        )


def site_readability(digests: Sequence[PageDigest]) -> ReadabilityMetrics:
    """Readability from aggregate counts across all pages."""
    total = TextStats()
    for digest in digests:
        total = total + digest.stats
    pages = len(digests)
    return ReadabilityMetrics(
        flesch_kincaid_grade=flesch_kincaid_grade(total.words, total.sentences, total.syllables),
        flesch_reading_ease=flesch_reading_ease(total.words, total.sentences, total.syllables),
        total_words=total.words,
        total_sentences=total.sentences,
        total_syllables=total.syllables,
        total_paragraphs=total.paragraphs,
        avg_words_per_sentence=round(total.words / total.sentences, 2) if total.sentences else 0.0,
        avg_syllables_per_word=round(total.syllables / total.words, 2) if total.words else 0.0,
        avg_words_per_page=round(total.words / pages, 2) if pages else 0.0,
        avg_sentences_per_paragraph=round(total.sentences / total.paragraphs, 2) if total.paragraphs else 0.0,
    )
