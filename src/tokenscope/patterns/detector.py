"""
Rule-based UI pattern detection, variant clustering and catalog selection.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import groupby
from typing import Dict, List, Optional, Sequence

import structlog

from tokenscope.config import PatternConfig
from tokenscope.patterns.rules import RULES, PatternRule
from tokenscope.protocols import DomCandidate
from tokenscope.schemas import PatternAccessibility, PatternContent, PatternVariant, UIPattern

logger = structlog.get_logger(__name__)

OTHER_VARIANT = "other"


def fingerprint(candidate: DomCandidate) -> str:
    """Text-free shape signature: tag plus run-length-collapsed child tags."""
    collapsed = []
    for tag, run in groupby(t.lower() for t in candidate.child_tags):
        count = sum(1 for _ in run)
        collapsed.append(f"{tag}+" if count > 1 else tag)
    return f"{candidate.tag.lower()}>{','.join(collapsed)}"


@dataclass(frozen=True)
class PatternMatch:
    candidate: DomCandidate
    type: str
    score: float
    confidence: float
    signature: str
    sequence: int


@dataclass
class PatternDetection:
    matches: List[PatternMatch] = field(default_factory=list)
    catalog: List[UIPattern] = field(default_factory=list)
    variants: List[PatternVariant] = field(default_factory=list)
    fragmentation: float = 0.0
    candidate_count: int = 0

    @property
    def consistency(self) -> Optional[float]:
        """Instance-weighted mean confidence, penalized by variant fragmentation."""
        if not self.matches:
            return None
        mean = sum(m.confidence for m in self.matches) / len(self.matches)
        return mean * (1.0 - 0.5 * self.fragmentation)


class PatternDetector:
    def __init__(self, config: Optional[PatternConfig] = None) -> None:
        self.config = config or PatternConfig()

    # --- classification ---

    @staticmethod
    def completeness(candidate: DomCandidate, rule: PatternRule) -> float:
        signals = (rule.is_semantic(candidate), bool(candidate.aria_attributes))
        return sum(signals) / len(signals)

    def classify(self, candidate: DomCandidate, sequence: int = 0) -> Optional[PatternMatch]:
        best_rule: Optional[PatternRule] = None
        best_score = 0.0
        for rule in RULES:
            score = min(1.0, rule.score(candidate))
            # Strict comparison keeps the earlier-declared type on ties.
            if score > best_score + 1e-9:
                best_rule, best_score = rule, score
        if best_rule is None or best_score < self.config.min_type_score:
            return None
        confidence = best_score * (0.7 + 0.3 * self.completeness(candidate, best_rule))
        return PatternMatch(
            candidate=candidate,
            type=best_rule.type.value,
            score=round(best_score, 4),
            confidence=round(min(1.0, max(0.0, confidence)), 4),
            signature=fingerprint(candidate),
            sequence=sequence,
        )

    def classify_all(self, candidates: Sequence[DomCandidate], start: int = 0) -> List[PatternMatch]:
        matches = []
        for offset, candidate in enumerate(candidates):
            match = self.classify(candidate, sequence=start + offset)
            if match is not None:
                matches.append(match)
        return matches

    # --- variants & catalog ---

    def _variants(self, matches: Sequence[PatternMatch]):
        by_type: Dict[str, Dict[str, List[PatternMatch]]] = {}
        for match in matches:
            by_type.setdefault(match.type, {}).setdefault(match.signature, []).append(match)

        names: Dict[tuple, str] = {}
        variants: List[PatternVariant] = []
        extra_groups = 0
        for type_, groups in by_type.items():
            extra_groups += len(groups) - 1
            other: List[PatternMatch] = []
            index = 0
            for signature, members in groups.items():
                if len(members) < self.config.min_variant_instances:
                    other.extend(members)
                    names[(type_, signature)] = OTHER_VARIANT
                    continue
                index += 1
                name = f"{type_}-{index}"
                names[(type_, signature)] = name
                variants.append(self._variant(type_, name, [signature], members))
            if other:
                signatures = list(dict.fromkeys(m.signature for m in other))
                variants.append(self._variant(type_, OTHER_VARIANT, signatures, other))

        # Share of "extra" shapes beyond one per type, relative to the most possible.
        possible = len(matches) - len(by_type)
        fragmentation = extra_groups / possible if possible > 0 else 0.0
        return names, variants, fragmentation

    @staticmethod
    def _variant(type_: str, name: str, signatures: List[str], members: Sequence[PatternMatch]) -> PatternVariant:
        return PatternVariant(
            type=type_,
            name=name,
            signatures=signatures,
            instances=len(members),
            mean_confidence=round(sum(m.confidence for m in members) / len(members), 4),
        )

    @staticmethod
    def _to_pattern(match: PatternMatch, variant: str) -> UIPattern:
        c = match.candidate
        aria = [a.lower() for a in c.aria_attributes]
        return UIPattern(
            type=match.type,
            variant=variant,
            confidence=match.confidence,
            signature=match.signature,
            order=c.order,
            url=c.url,
            viewport=c.viewport,
            accessibility=PatternAccessibility(
                has_aria_labels=any(a.startswith(("aria-label", "aria-labelledby")) for a in aria),
                has_roles=c.role is not None,
                keyboard_navigable=c.tabindex_count > 0 or (c.link_count + c.button_count + c.input_count) > 0,
                semantic_html=any(rule.is_semantic(c) for rule in RULES),
            ),
            content=PatternContent(
                headings=len(c.heading_levels),
                text_length=len(c.text),
                links=c.link_count,
                images=c.image_count,
            ),
        )

    def build(self, matches: Sequence[PatternMatch], candidate_count: int = 0) -> PatternDetection:
        names, variants, fragmentation = self._variants(matches)

        catalog: List[UIPattern] = []
        by_type: Dict[str, List[PatternMatch]] = {}
        for match in matches:
            if match.confidence >= self.config.min_confidence:
                by_type.setdefault(match.type, []).append(match)
        for type_, published in by_type.items():
            ranked = sorted(published, key=lambda m: (-m.confidence, m.sequence))
            for match in ranked[: self.config.max_patterns_per_type]:
                catalog.append(self._to_pattern(match, names[(type_, match.signature)]))

        logger.debug(
            "Patterns detected",
            candidates=candidate_count,
            matches=len(matches),
            published=len(catalog),
            fragmentation=round(fragmentation, 3),
        )
        return PatternDetection(
            matches=list(matches),
            catalog=catalog,
            variants=variants,
            fragmentation=fragmentation,
            candidate_count=candidate_count,
        )

    def detect(self, candidates: Sequence[DomCandidate]) -> PatternDetection:
        return self.build(self.classify_all(candidates), candidate_count=len(candidates))

    def consolidate(self, detections: Sequence[PatternDetection]) -> PatternDetection:
        """Merge per-page detections into one site-level detection, preserving page order."""
        matches: List[PatternMatch] = []
        for detection in detections:
            for match in detection.matches:
                matches.append(
                    PatternMatch(
                        candidate=match.candidate,
                        type=match.type,
                        score=match.score,
                        confidence=match.confidence,
                        signature=match.signature,
                        sequence=len(matches),
                    )
                )
        return self.build(matches, candidate_count=sum(d.candidate_count for d in detections))
