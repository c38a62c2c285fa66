"""
Weighted structural predicates for each UI pattern type.

Weights within a type sum to 1, so a type score is already in [0, 1].
``aria-*`` attributes never appear in a predicate; they only affect
confidence through signal completeness.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, Tuple

from tokenscope.protocols import DomCandidate, PatternType

Predicate = Callable[[DomCandidate], bool]


def _class_has(*words: str) -> Predicate:
    def check(candidate: DomCandidate) -> bool:
        names = " ".join(candidate.class_names).lower()
        return any(word in names for word in words)

    return check


def _landmark(tags: FrozenSet[str], roles: FrozenSet[str]) -> Predicate:
    def check(candidate: DomCandidate) -> bool:
        return candidate.tag.lower() in tags or (candidate.role or "").lower() in roles

    return check


@dataclass(frozen=True)
class PatternRule:
    type: PatternType
    semantic_tags: FrozenSet[str]
    semantic_roles: FrozenSet[str]
    predicates: Tuple[Tuple[float, Predicate], ...]

    def score(self, candidate: DomCandidate) -> float:
        return sum(weight for weight, predicate in self.predicates if predicate(candidate))

    def is_semantic(self, candidate: DomCandidate) -> bool:
        return _landmark(self.semantic_tags, self.semantic_roles)(candidate)


def _rule(type_: PatternType, tags, roles, landmark_weight: float, *predicates: Tuple[float, Predicate]) -> PatternRule:
    tags, roles = frozenset(tags), frozenset(roles)
    return PatternRule(type_, tags, roles, ((landmark_weight, _landmark(tags, roles)),) + predicates)


# Declaration order is the tie-break order for equal type scores.
RULES: Tuple[PatternRule, ...] = (
    _rule(
        PatternType.NAVIGATION,
        {"nav"},
        {"navigation", "menubar"},
        0.4,
        (0.3, lambda c: c.link_count >= 3),
        (0.15, lambda c: "li" in c.child_tags or "ul" in c.child_tags or c.similar_child_count >= 3),
        (0.15, _class_has("nav", "menu")),
    ),
    _rule(
        PatternType.HERO,
        {"header", "section"},
        {"banner"},
        0.1,
        (0.25, lambda c: c.is_first_section),
        (0.3, lambda c: 1 in c.heading_levels),
        (0.2, lambda c: 1 <= c.button_count + min(c.link_count, 3) <= 4),
        (0.15, lambda c: c.image_count >= 1 or _class_has("hero", "banner", "jumbotron")(c)),
    ),
    _rule(
        PatternType.CARDS,
        {"section", "ul", "ol"},
        {"list", "feed"},
        0.1,
        (0.45, lambda c: c.similar_child_count >= 3),
        (0.15, lambda c: len(c.heading_levels) >= 2),
        (0.1, lambda c: c.image_count >= 2),
        (0.2, _class_has("card", "tile", "grid")),
    ),
    _rule(
        PatternType.FORM,
        {"form"},
        {"form", "search"},
        0.4,
        (0.35, lambda c: c.input_count >= 1),
        (0.25, lambda c: c.button_count >= 1),
    ),
    _rule(
        PatternType.TABLE,
        {"table"},
        {"table", "grid"},
        0.5,
        (0.3, lambda c: c.cell_count >= 4),
        (0.2, lambda c: c.header_cell_count >= 1),
    ),
    _rule(
        PatternType.PRICING,
        {"section"},
        {"region"},
        0.1,
        (0.45, lambda c: c.price_count >= 2),
        (0.15, lambda c: c.similar_child_count >= 2),
        (0.15, lambda c: c.button_count >= 1),
        (0.15, _class_has("pricing", "plan", "price")),
    ),
    _rule(
        PatternType.FOOTER,
        {"footer"},
        {"contentinfo"},
        0.5,
        (0.25, lambda c: c.is_last_section),
        (0.15, lambda c: c.link_count >= 3),
        (0.1, _class_has("footer")),
    ),
)

RULES_BY_TYPE: Dict[PatternType, PatternRule] = {rule.type: rule for rule in RULES}
