"""
Content and information-architecture aggregation.
"""

from .aggregator import ArchitectureAggregator, SiteArchitecture
from .brand import BrandAnalyzer
from .clustering import ContentClusterer
from .content import ContentAnalyzer, PageDigest, site_readability
from .graph import LinkGraph, normalize_url
from .seo import summarize_seo

__all__ = [
    "ArchitectureAggregator",
    "BrandAnalyzer",
    "ContentAnalyzer",
    "ContentClusterer",
    "LinkGraph",
    "PageDigest",
    "SiteArchitecture",
    "normalize_url",
    "site_readability",
    "summarize_seo",
]
