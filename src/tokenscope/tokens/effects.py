"""
Effect tokens: border radii, shadows, transitions and transforms.
"""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Sequence

from tokenscope.protocols import EffectSample
from tokenscope.schemas import EffectsSystem
from tokenscope.tokens.units import parse_duration, parse_length

FULL_RADIUS_PX = 9999.0
SHADOW_NAMES = ("sm", "md", "lg", "xl", "2xl")
TRANSITION_NAMES = ("fast", "normal", "slow")
_LENGTH_RE = re.compile(r"-?\d*\.?\d+px")


def shadow_blur(value: str) -> float:
    """Blur radius of the first shadow layer (third length), 0 when absent."""
    lengths = _LENGTH_RE.findall(value.split(",")[0])
    if len(lengths) >= 3:
        return abs(float(lengths[2][:-2]))
    return 0.0


def transition_duration(value: str) -> float:
    for part in value.replace(",", " ").split():
        duration = parse_duration(part)
        if duration is not None:
            return duration
    return 0.0


@dataclass
class EffectsAnalysis:
    effects: EffectsSystem
    border_radius: Dict[str, float]
    sample_count: int = 0


class EffectsNormalizer:
    def _radius(self, values: Counter) -> Dict[str, float]:
        regular: Counter = Counter()
        full = False
        for value, count in values.items():
            if value.strip().endswith("%"):
                full = True
                continue
            px = parse_length(value)
            if px is None or px <= 0:
                continue
            if px >= 999:
                full = True
            else:
                regular[px] += count
        common = sorted(px for px, _ in regular.most_common(3))
        names = {1: ("medium",), 2: ("small", "large"), 3: ("small", "medium", "large")}.get(len(common), ())
        radius = {name: px for name, px in zip(names, common)}
        if full:
            radius["full"] = FULL_RADIUS_PX
        return radius

    def normalize(self, samples: Sequence[EffectSample]) -> EffectsAnalysis:
        by_property: Dict[str, Counter] = {}
        for sample in samples:
            value = sample.value.strip()
            if value and value != "none":
                by_property.setdefault(sample.property, Counter())[value] += 1

        shadows_top = [v for v, _ in by_property.get("box-shadow", Counter()).most_common(len(SHADOW_NAMES))]
        shadows = dict(zip(SHADOW_NAMES, sorted(shadows_top, key=shadow_blur)))

        transitions_top = [v for v, _ in by_property.get("transition", Counter()).most_common(len(TRANSITION_NAMES))]
        transitions = dict(zip(TRANSITION_NAMES, sorted(transitions_top, key=transition_duration)))

        transforms_top: List[str] = [v for v, _ in by_property.get("transform", Counter()).most_common(5)]
        transforms = {f"transform-{i}": value for i, value in enumerate(transforms_top, start=1)}

        return EffectsAnalysis(
            effects=EffectsSystem(shadows=shadows, transitions=transitions, transforms=transforms),
            border_radius=self._radius(by_property.get("border-radius", Counter())),
            sample_count=len(samples),
        )
