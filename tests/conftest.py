"""
Shared test configuration for tokenscope.

Fixtures build Collector deliveries the way a crawler would hand them over:
one ``PageBatch`` per page and viewport, each carrying frozen raw samples.
"""

from typing import List

import pytest

from tokenscope.config import Config
from tokenscope.protocols import (
    AccessibilityFinding,
    AccessibilitySignal,
    ColorContext,
    ColorSample,
    DomCandidate,
    EffectSample,
    FontSample,
    LinkContext,
    LinkEdge,
    PageBatch,
    Severity,
    SpacingSample,
    StyleFeatureSample,
    TextBlock,
    TextKind,
    TimingMetric,
    TimingSample,
)

ROOT_URL = "https://example.com/"
ABOUT_URL = "https://example.com/about"
PRICING_URL = "https://example.com/pricing"

# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Integration tests across modules")


# ============================================================================
# Sample builders
# ============================================================================


def style_samples(url: str, viewport: str = "desktop") -> list:
    """A consistent design system: blue primary, dark text, 8px grid."""
    colors = [
        ColorSample(url, viewport, value="#1A73E8", context=ColorContext.BACKGROUND, area=400.0),
        ColorSample(url, viewport, value="#1a73e8", context=ColorContext.BACKGROUND, area=200.0),
        ColorSample(url, viewport, value="#222222", context=ColorContext.TEXT, area=50.0, background="#FFFFFF"),
        ColorSample(url, viewport, value="#222222", context=ColorContext.TEXT, area=50.0, background="#ffffff"),
        ColorSample(url, viewport, value="#FFFFFF", context=ColorContext.BACKGROUND, area=1000.0),
        ColorSample(url, viewport, value="rgb(255, 255, 255)", context=ColorContext.BACKGROUND, area=800.0),
    ]
    fonts = [
        FontSample(url, viewport, family="Inter, sans-serif", size="16px", weight=400, line_height=1.6, tag="p"),
        FontSample(url, viewport, family="Inter, sans-serif", size="16px", weight=400, line_height=1.6, tag="li"),
        FontSample(url, viewport, family="Inter, sans-serif", size="20px", weight=600, line_height=1.4, tag="h3"),
        FontSample(url, viewport, family="Inter, sans-serif", size="25px", weight=700, line_height=1.3, tag="h2"),
        FontSample(url, viewport, family="Inter, sans-serif", size="31.25px", weight=700, line_height=1.2, tag="h1"),
    ]
    spacing = [
        SpacingSample(url, viewport, value="8px", property="margin"),
        SpacingSample(url, viewport, value="16px", property="padding"),
        SpacingSample(url, viewport, value="24px", property="gap"),
        SpacingSample(url, viewport, value="1rem", property="padding"),
    ]
    effects = [
        EffectSample(url, viewport, property="border-radius", value="4px"),
        EffectSample(url, viewport, property="border-radius", value="8px"),
        EffectSample(url, viewport, property="box-shadow", value="0 1px 2px rgba(0,0,0,0.1)"),
        EffectSample(url, viewport, property="transition", value="all 200ms ease"),
    ]
    features = [
        StyleFeatureSample(url, viewport, feature="display:grid", count=3),
        StyleFeatureSample(url, viewport, feature="display:flex", count=5),
        StyleFeatureSample(url, viewport, feature="custom-properties", count=12),
        StyleFeatureSample(url, viewport, feature="media:768px", count=2),
    ]
    candidates = [
        DomCandidate(
            url,
            viewport,
            order=0,
            tag="nav",
            role="navigation",
            child_tags=("ul",),
            link_count=5,
            aria_attributes=("aria-label",),
            class_names=("main-nav",),
        ),
        DomCandidate(
            url,
            viewport,
            order=9,
            tag="footer",
            child_tags=("div", "div"),
            link_count=6,
            is_last_section=True,
            class_names=("site-footer",),
        ),
    ]
    return colors + fonts + spacing + effects + features + candidates


def page_batch(url: str, links: List[LinkEdge], texts: List[TextBlock], viewport: str = "desktop") -> PageBatch:
    extra = [
        AccessibilitySignal(url, viewport, name="keyboard-accessible", present=True),
        AccessibilitySignal(url, viewport, name="aria-labels", present=True),
        AccessibilitySignal(url, viewport, name="skip-links", present=False),
        TimingSample(url, viewport, metric=TimingMetric.FCP, value=1200.0),
        TimingSample(url, viewport, metric=TimingMetric.LCP, value=2100.0),
    ]
    return PageBatch(url=url, viewport=viewport, samples=tuple(style_samples(url, viewport) + extra + links + texts))


def site_links() -> dict:
    return {
        ROOT_URL: [
            LinkEdge(ROOT_URL, "desktop", target=ABOUT_URL, anchor="About", context=LinkContext.NAVIGATION),
            LinkEdge(ROOT_URL, "desktop", target=PRICING_URL, anchor="Pricing", context=LinkContext.NAVIGATION),
        ],
        ABOUT_URL: [
            LinkEdge(ABOUT_URL, "desktop", target=ROOT_URL, anchor="Home", context=LinkContext.NAVIGATION),
            LinkEdge(
                ABOUT_URL,
                "desktop",
                target="https://example.com/old-team",
                anchor="Team",
                fetch_ok=False,
                status_code=404,
            ),
        ],
        PRICING_URL: [
            LinkEdge(PRICING_URL, "desktop", target=ROOT_URL, anchor="Home", context=LinkContext.FOOTER),
        ],
    }


def site_texts() -> dict:
    def page(url: str, title: str, heading: str, *paragraphs: str) -> List[TextBlock]:
        blocks = [
            TextBlock(url, "desktop", kind=TextKind.TITLE, text=title),
            TextBlock(url, "desktop", kind=TextKind.HEADING, text=heading, level=1),
            TextBlock(url, "desktop", kind=TextKind.META_DESCRIPTION, text=f"{heading} at Acme."),
            TextBlock(url, "desktop", kind=TextKind.LANGUAGE, text="en"),
        ]
        blocks.extend(TextBlock(url, "desktop", kind=TextKind.PARAGRAPH, text=p) for p in paragraphs)
        return blocks

    root = page(
        ROOT_URL,
        "Home | Acme",
        "Analytics platform for product teams",
        "Acme is a trusted analytics platform. Our solution helps product teams ship faster.",
        "Connect your data, build dashboards and share insights with the whole team.",
    )
    root += [
        TextBlock(ROOT_URL, "desktop", kind=TextKind.BRAND_NAME, text="Acme"),
        TextBlock(ROOT_URL, "desktop", kind=TextKind.TAGLINE, text="Analytics for everyone"),
        TextBlock(ROOT_URL, "desktop", kind=TextKind.LOGO, href="/logo.svg", alt="Acme logo"),
        TextBlock(ROOT_URL, "desktop", kind=TextKind.THEME_COLOR, text="#1A73E8"),
        TextBlock(ROOT_URL, "desktop", kind=TextKind.OG, text="og:title"),
    ]
    about = page(
        ABOUT_URL,
        "About | Acme",
        "About the analytics team",
        "We are a trusted team of analytics experts. Our platform serves product teams worldwide.",
    )
    pricing = page(
        PRICING_URL,
        "Pricing | Acme",
        "Analytics platform pricing plans",
        "Choose the analytics plan that fits your product team. Every plan includes dashboards.",
    )
    return {ROOT_URL: root, ABOUT_URL: about, PRICING_URL: pricing}


# ============================================================================
# Core Test Fixtures
# ============================================================================


@pytest.fixture
def config() -> Config:
    """Default configuration, isolated from any tokenscope.yaml on disk."""
    return Config()


@pytest.fixture
def root_url() -> str:
    return ROOT_URL


@pytest.fixture
def site_batches() -> List[PageBatch]:
    """A three-page site delivered at the desktop viewport."""
    links = site_links()
    texts = site_texts()
    return [page_batch(url, links[url], texts[url]) for url in (ROOT_URL, ABOUT_URL, PRICING_URL)]


@pytest.fixture
def accessibility_findings() -> List[AccessibilityFinding]:
    return [
        AccessibilityFinding(ROOT_URL, "desktop", rule="image-alt", impact=Severity.CRITICAL, element="img.hero"),
        AccessibilityFinding(ROOT_URL, "desktop", rule="label", impact=Severity.MINOR, element="input#email"),
    ]


@pytest.fixture
def site_link_map() -> dict:
    """Outbound links per page of the three-page site."""
    return site_links()


@pytest.fixture
def site_text_map() -> dict:
    """Text blocks per page of the three-page site."""
    return site_texts()
