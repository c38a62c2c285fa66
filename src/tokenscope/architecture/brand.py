"""
Brand identity and voice/tone analysis from text blocks.
"""

from __future__ import annotations

import re
from collections import Counter
from typing import Dict, List, Optional, Sequence
from urllib.parse import urlparse

from tokenscope.architecture.content import PageDigest
from tokenscope.architecture.graph import normalize_url
from tokenscope.protocols import TextKind
from tokenscope.schemas import BrandProfile, LogoAsset, VoiceTone

# Declaration order breaks ties between voices.
VOICE_INDICATORS: Dict[str, List[str]] = {
    "professional": ["enterprise", "solution", "industry-leading", "robust", "comprehensive"],
    "casual": ["hey", "awesome", "cool", "fun", "easy"],
    "technical": ["api", "sdk", "implementation", "architecture", "framework"],
    "friendly": ["welcome", "happy", "help", "together", "community"],
    "authoritative": ["expert", "leading", "trusted", "proven", "guaranteed"],
    "innovative": ["cutting-edge", "revolutionary", "next-generation", "transform", "pioneer"],
    "minimalist": ["simple", "clean", "essential", "pure", "focused"],
}
DEFAULT_VOICE = "professional"

SOCIAL_HOSTS = {
    "twitter.com": "twitter",
    "x.com": "twitter",
    "facebook.com": "facebook",
    "linkedin.com": "linkedin",
    "instagram.com": "instagram",
    "youtube.com": "youtube",
    "github.com": "github",
    "tiktok.com": "tiktok",
}

_TITLE_SEPARATORS = re.compile(r"\s+[|\-–—:]\s+")


def voice_scores(text: str) -> Dict[str, int]:
    lowered = text.lower()
    return {
        voice: sum(1 for indicator in indicators if re.search(rf"\b{re.escape(indicator)}\b", lowered))
        for voice, indicators in VOICE_INDICATORS.items()
    }


def primary_voice(scores: Dict[str, int]) -> Optional[str]:
    best, best_score = None, 0
    for voice, score in scores.items():
        if score > best_score:
            best, best_score = voice, score
    return best


def formality_score(paragraphs: Sequence[Sequence[str]]) -> float:
    """Share of formal over formal+casual indicators across pages, 0.5 when undecided."""
    formal = 0
    casual = 0
    for page in paragraphs:
        text = " ".join(page).lower()
        if "we provide" in text or "our solution" in text:
            formal += 1
        if "enterprise" in text or "professional" in text:
            formal += 1
        if "don't" not in text and "won't" not in text:
            formal += 1
        if "you'll" in text or "we'll" in text:
            casual += 1
        if "!" in text:
            casual += 1
        if "awesome" in text or "cool" in text:
            casual += 1
    total = formal + casual
    return formal / total if total else 0.5


def derive_personality(voice: str, formality: float) -> str:
    if voice == "professional" and formality > 0.7:
        return "corporate"
    if voice == "casual" and formality < 0.4:
        return "playful"
    if voice == "technical":
        return "expert"
    if voice == "friendly":
        return "approachable"
    if voice == "innovative":
        return "visionary"
    return "balanced"


class BrandAnalyzer:
    def analyze_voice(self, digests: Sequence[PageDigest]) -> VoiceTone:
        totals: Counter = Counter({voice: 0 for voice in VOICE_INDICATORS})
        for digest in digests:
            totals.update(voice_scores(digest.body_text))
        scores = {voice: totals[voice] for voice in VOICE_INDICATORS}
        primary = primary_voice(scores) or DEFAULT_VOICE
        formality = formality_score([d.content.text for d in digests])
        present = [voice for voice in VOICE_INDICATORS if scores[voice] > 0]
        return VoiceTone(
            primary=primary,
            secondary=sorted((v for v in present if v != primary), key=lambda v: -scores[v]),
            attributes=present,
            indicator_scores={voice: float(score) for voice, score in scores.items()},
            formality="formal" if formality > 0.7 else "neutral" if formality > 0.4 else "casual",
            personality=[derive_personality(primary, formality)],
        )

    def messaging_consistency(self, digests: Sequence[PageDigest], voice: VoiceTone) -> float:
        """Share of pages with voice evidence whose own primary voice matches the site's."""
        primaries = [primary_voice(voice_scores(d.body_text)) for d in digests]
        decided = [p for p in primaries if p is not None]
        if not decided:
            return 0.0
        return sum(1 for p in decided if p == voice.primary) / len(decided)

    def _name(self, digests: Sequence[PageDigest], root_url: str) -> str:
        for digest in digests:
            for block in digest.texts:
                if block.kind is TextKind.BRAND_NAME and block.text.strip():
                    return block.text.strip()
        root_key = normalize_url(root_url)
        root = next((d for d in digests if normalize_url(d.url) == root_key), digests[0] if digests else None)
        if root is not None and root.content.title:
            parts = _TITLE_SEPARATORS.split(root.content.title)
            return parts[-1].strip() if len(parts) > 1 else parts[0].strip()
        host = urlparse(root_url).hostname or ""
        return host.removeprefix("www.").split(".")[0].capitalize() if host else ""

    def build_profile(self, digests: Sequence[PageDigest], root_url: str) -> BrandProfile:
        def first(kind: TextKind) -> Optional[str]:
            for digest in digests:
                for block in digest.texts:
                    if block.kind is kind and block.text.strip():
                        return block.text.strip()
            return None

        logo = None
        for digest in digests:
            block = next((b for b in digest.texts if b.kind is TextKind.LOGO and (b.href or b.text)), None)
            if block is not None:
                logo = LogoAsset(src=block.href or block.text, alt=block.alt)
                break

        social: Dict[str, str] = {}
        contact: List[str] = []
        for digest in digests:
            for block in digest.texts:
                if block.kind is TextKind.SOCIAL_LINK and block.href:
                    host = (urlparse(block.href).hostname or "").removeprefix("www.")
                    platform = SOCIAL_HOSTS.get(host, block.text.strip().lower() or host)
                    social.setdefault(platform, block.href)
                elif block.kind is TextKind.CONTACT and block.text.strip() and block.text.strip() not in contact:
                    contact.append(block.text.strip())

        return BrandProfile(
            name=self._name(digests, root_url),
            tagline=first(TextKind.TAGLINE),
            logo=logo,
            theme_color=first(TextKind.THEME_COLOR),
            voice_tone=self.analyze_voice(digests),
            social_links=social,
            contact=contact,
        )
