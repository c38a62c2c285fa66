"""
Spacing base-unit detection, spacing scale and layout feature summary.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import structlog

from tokenscope.config import LayoutConfig, SpacingConfig
from tokenscope.errors import InsufficientSampleData, StructuralFitFailure
from tokenscope.protocols import SpacingSample, StyleFeatureSample
from tokenscope.schemas import Flag, LayoutSystem, SpacingSystem
from tokenscope.tokens.units import parse_length

logger = structlog.get_logger(__name__)

NAMED_STEPS = ("xs", "sm", "md", "lg", "xl", "xxl")
GAP_PROPERTIES = frozenset({"gap", "row-gap", "column-gap", "grid-gap"})
DEPRECATED_FEATURES = frozenset(
    {"float-layout", "table-layout", "element:font", "element:center", "element:marquee", "element:frameset"}
)


def nearest_multiple(value: float, unit: int) -> int:
    return max(1, int(round(value / unit)))


def fits_unit(value: float, unit: int, tolerance: float) -> bool:
    return abs(value - nearest_multiple(value, unit) * unit) <= tolerance * unit


@dataclass
class SpacingAnalysis:
    spacing: SpacingSystem
    sample_count: int = 0
    fitting_count: int = 0
    flags: List[Flag] = field(default_factory=list)

    @property
    def regularity(self) -> Optional[float]:
        if self.sample_count == 0:
            return None
        return self.fitting_count / self.sample_count


class SpacingDetector:
    def __init__(self, config: Optional[SpacingConfig] = None, root_font_size_px: float = 16.0) -> None:
        self.config = config or SpacingConfig()
        self.root_font_size_px = root_font_size_px

    def detect_base_unit(self, values: Sequence[float]) -> Optional[int]:
        """Pick the candidate unit that fits the most distinct values; ties go to the larger unit."""
        distinct = sorted(set(values))
        best: Optional[Tuple[int, int]] = None
        for unit in self.config.candidate_units:
            fitted = sum(1 for v in distinct if fits_unit(v, unit, self.config.tolerance))
            if fitted == 0:
                continue
            if best is None or (fitted, unit) > best:
                best = (fitted, unit)
        return best[1] if best else None

    def analyze(self, samples: Sequence[SpacingSample]) -> SpacingAnalysis:
        values: List[float] = []
        usage: Counter = Counter()
        for sample in samples:
            px = parse_length(sample.value, self.root_font_size_px)
            if px is None or px <= 0:
                continue
            values.append(round(px, 2))
            usage[sample.property] += 1

        if not values:
            error = InsufficientSampleData("No usable spacing samples", component="spacing")
            return SpacingAnalysis(spacing=SpacingSystem(), flags=[error.to_flag()])

        base = self.detect_base_unit(values)
        if base is None:
            error = StructuralFitFailure(
                "No candidate base unit fits the observed spacing",
                component="spacing",
                details={"candidates": self.config.candidate_units},
            )
            spacing = SpacingSystem(irregular=sorted(set(values)), regularity=0.0, usage=dict(usage))
            return SpacingAnalysis(spacing=spacing, sample_count=len(values), flags=[error.to_flag()])

        groups: Dict[int, List[float]] = {}
        irregular: List[float] = []
        for value in values:
            if fits_unit(value, base, self.config.tolerance):
                groups.setdefault(nearest_multiple(value, base), []).append(value)
            else:
                irregular.append(value)

        multiples = sorted({nearest_multiple(sum(g) / len(g), base) for g in groups.values()})
        if len(multiples) <= len(NAMED_STEPS):
            scale = {NAMED_STEPS[i]: float(m * base) for i, m in enumerate(multiples)}
        else:
            scale = {str(m): float(m * base) for m in multiples}

        fitting = len(values) - len(irregular)
        spacing = SpacingSystem(
            base=base,
            scale=scale,
            irregular=sorted(set(irregular)),
            regularity=round(fitting / len(values), 4),
            usage=dict(usage),
        )
        logger.debug("Spacing analyzed", base=base, steps=len(scale), irregular=len(spacing.irregular))
        return SpacingAnalysis(spacing=spacing, sample_count=len(values), fitting_count=fitting)


@dataclass
class LayoutAnalysis:
    layout: LayoutSystem
    feature_count: int = 0

    @property
    def modernity_checks(self) -> Optional[Dict[str, bool]]:
        """Deterministic modern-CSS checklist; None when no features were reported."""
        if self.feature_count == 0:
            return None
        layout = self.layout
        return {
            "grid": layout.uses_grid,
            "flexbox": layout.uses_flex,
            "custom_properties": layout.uses_custom_properties,
            "media_queries": layout.uses_media_queries,
            "no_deprecated_features": not layout.deprecated_features,
        }


class LayoutAnalyzer:
    def __init__(self, config: Optional[LayoutConfig] = None) -> None:
        self.config = config or LayoutConfig()

    def _valued(self, counts: Counter, prefix: str) -> Counter:
        out: Counter = Counter()
        for feature, count in counts.items():
            if feature.startswith(prefix):
                px = parse_length(feature[len(prefix):])
                if px is not None:
                    out[px] += count
        return out

    def _breakpoints(self, widths: Counter) -> Dict[str, int]:
        detected: Dict[str, int] = {}
        for width, _ in widths.most_common():
            name, reference = min(self.config.breakpoints.items(), key=lambda kv: abs(kv[1] - width))
            if abs(reference - width) <= reference * 0.1 and name not in detected:
                detected[name] = int(width)
        return dict(sorted(detected.items(), key=lambda kv: kv[1]))

    def analyze(
        self, features: Sequence[StyleFeatureSample], spacing: Sequence[SpacingSample] = ()
    ) -> LayoutAnalysis:
        counts: Counter = Counter()
        for sample in features:
            counts[sample.feature.strip().lower()] += sample.count

        low, high = self.config.gutter_range
        gaps: Counter = Counter()
        for sample in spacing:
            if sample.property not in GAP_PROPERTIES:
                continue
            px = parse_length(sample.value)
            if px is not None and low <= px <= high:
                gaps[px] += 1
        low, high = self.config.container_range
        containers = Counter(
            {px: n for px, n in self._valued(counts, "container:").items() if low <= px <= high}
        )

        layout = LayoutSystem(
            uses_grid=counts["display:grid"] > 0,
            uses_flex=counts["display:flex"] > 0,
            uses_custom_properties=counts["custom-properties"] > 0,
            uses_media_queries=counts["media-queries"] > 0 or bool(self._valued(counts, "media:")),
            uses_container_queries=counts["container-queries"] > 0,
            deprecated_features=sorted(f for f in counts if f in DEPRECATED_FEATURES and counts[f] > 0),
            gutter=gaps.most_common(1)[0][0] if gaps else None,
            container_width=containers.most_common(1)[0][0] if containers else None,
            breakpoints=self._breakpoints(self._valued(counts, "media:")),
        )
        return LayoutAnalysis(layout=layout, feature_count=sum(counts.values()))
