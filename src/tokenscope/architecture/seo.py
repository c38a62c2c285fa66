"""
Site-level SEO posture from per-page SEO fields.
"""

from __future__ import annotations

from collections import Counter
from typing import Dict, Sequence

from tokenscope.schemas import PageContent, SiteSEOMetadata

# Weights of each coverage ratio in the 0-100 SEO score.
SEO_WEIGHTS: Dict[str, float] = {
    "title_coverage": 0.25,
    "description_coverage": 0.25,
    "single_h1_coverage": 0.15,
    "canonical_coverage": 0.1,
    "open_graph_coverage": 0.1,
    "unique_titles": 0.1,
    "twitter_coverage": 0.05,
}


def summarize_seo(pages: Sequence[PageContent]) -> SiteSEOMetadata:
    if not pages:
        return SiteSEOMetadata()
    total = len(pages)

    def coverage(predicate) -> float:
        return round(sum(1 for page in pages if predicate(page)) / total, 4)

    titles = Counter(page.seo.title for page in pages if page.seo.title)
    duplicates = sorted(title for title, count in titles.items() if count > 1)
    duplicate_pages = sum(titles[title] for title in duplicates)

    ratios = {
        "title_coverage": coverage(lambda p: bool(p.seo.title)),
        "description_coverage": coverage(lambda p: bool(p.seo.description)),
        "canonical_coverage": coverage(lambda p: bool(p.seo.canonical)),
        "open_graph_coverage": coverage(lambda p: p.seo.has_open_graph),
        "twitter_coverage": coverage(lambda p: p.seo.has_twitter_card),
        "single_h1_coverage": coverage(lambda p: p.seo.h1_count == 1),
    }
    unique_titles = 1.0 - duplicate_pages / total
    score = 100.0 * sum(
        weight * (unique_titles if name == "unique_titles" else ratios[name]) for name, weight in SEO_WEIGHTS.items()
    )
    return SiteSEOMetadata(
        languages=sorted({page.seo.language for page in pages if page.seo.language}),
        duplicate_titles=duplicates,
        images_missing_alt=sum(page.seo.images_missing_alt for page in pages),
        score=round(score, 2),
        **ratios,
    )
