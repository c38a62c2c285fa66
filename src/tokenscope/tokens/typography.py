"""
Typography analysis: font families, modular scale fitting and hierarchy.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import numpy as np
import structlog

from tokenscope.config import TypographyConfig
from tokenscope.errors import InsufficientSampleData, StructuralFitFailure
from tokenscope.protocols import FontSample
from tokenscope.schemas import Flag, ScaleFit, Typography, TypographyStep
from tokenscope.tokens.units import parse_length

logger = structlog.get_logger(__name__)

GENERIC_FAMILIES = frozenset(
    {"serif", "sans-serif", "monospace", "cursive", "fantasy", "system-ui", "ui-sans-serif", "ui-serif",
     "ui-monospace", "-apple-system", "blinkmacsystemfont", "inherit", "initial"}
)
HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")
BODY_TAGS = frozenset({"p", "body", "li", "td", "dd", "blockquote", "article", "main"})
SMALL_TAGS = frozenset({"small", "caption", "figcaption", "sub", "sup"})


def parse_font_stack(stack: str) -> Optional[str]:
    """Return the first non-generic family of a CSS font stack."""
    for raw in stack.split(","):
        family = raw.strip().strip("'\"").strip()
        if family and family.lower() not in GENERIC_FAMILIES:
            return family
    return None


def recommended_line_height(size_px: float) -> float:
    if size_px <= 14:
        return 1.5
    if size_px <= 18:
        return 1.6
    if size_px <= 24:
        return 1.4
    if size_px <= 32:
        return 1.3
    return 1.2


def step_name(offset: int) -> str:
    """Name a scale step by its distance from the body size."""
    if offset == 0:
        return "base"
    if offset == 1:
        return "lg"
    if offset == 2:
        return "xl"
    if offset > 2:
        return f"{offset - 1}xl"
    if offset == -1:
        return "sm"
    if offset == -2:
        return "xs"
    return f"{-offset - 1}xs"


def _mode(values: Sequence):
    present = [v for v in values if v is not None]
    if not present:
        return None
    return Counter(present).most_common(1)[0][0]


@dataclass
class TypographyAnalysis:
    typography: Typography
    sizes: List[float] = field(default_factory=list)
    sample_count: int = 0
    flags: List[Flag] = field(default_factory=list)

    @property
    def hierarchy_score(self) -> Optional[float]:
        """Heading monotonicity blended with scale-ratio consistency, in [0, 1]."""
        if len(self.sizes) < 2:
            return None
        hierarchy = self.typography.hierarchy
        levels = [hierarchy[tag].size_px for tag in HEADING_TAGS if tag in hierarchy]
        pairs = list(zip(levels, levels[1:]))
        monotonic = sum(1 for a, b in pairs if a > b) / len(pairs) if pairs else 1.0

        ratios = np.array(self.sizes[1:]) / np.array(self.sizes[:-1])
        cv = float(np.std(ratios) / np.mean(ratios)) if len(ratios) > 1 else 0.0
        return round(0.5 * monotonic + 0.5 * (1.0 - min(1.0, cv)), 4)


class TypographyAnalyzer:
    def __init__(self, config: Optional[TypographyConfig] = None) -> None:
        self.config = config or TypographyConfig()

    def _resolve(self, sample: FontSample) -> Optional[float]:
        px = parse_length(sample.size, self.config.root_font_size_px)
        if px is None or px <= 0:
            return None
        return round(px * 2) / 2

    def fit_modular_scale(self, sizes: Sequence[float]) -> ScaleFit:
        """Least-squares fit of log(size_i) = log(base) + i * log(ratio).

        Raises StructuralFitFailure when the residual exceeds tolerance.
        """
        if len(sizes) < 3:
            raise StructuralFitFailure(
                "Too few distinct font sizes to fit a modular scale",
                component="typography",
                details={"sizes": len(sizes)},
            )
        index = np.arange(len(sizes), dtype=np.float64)
        logs = np.log(np.asarray(sizes, dtype=np.float64))
        slope, intercept = np.polyfit(index, logs, 1)
        residual = float(np.sqrt(np.mean((logs - (intercept + slope * index)) ** 2)))
        ratio = float(np.exp(slope))
        base = float(np.exp(intercept))
        if residual > self.config.fit_tolerance or ratio <= 1.0:
            raise StructuralFitFailure(
                "Font sizes do not follow a modular scale",
                component="typography",
                details={"residual": round(residual, 4), "ratio": round(ratio, 4)},
            )
        nearest = min(self.config.named_ratios, key=lambda r: abs(r - ratio)) if self.config.named_ratios else None
        return ScaleFit(
            fitted=True,
            base_px=round(base, 2),
            ratio=round(ratio, 4),
            residual=round(residual, 4),
            nearest_named_ratio=nearest,
        )

    def _step(self, samples: Sequence[FontSample], size_px: float) -> TypographyStep:
        return TypographyStep(
            size_px=size_px,
            line_height=_mode([s.line_height for s in samples]),
            font_family=_mode([parse_font_stack(s.family) for s in samples]),
            font_weight=_mode([s.weight for s in samples]),
            letter_spacing=_mode([s.letter_spacing for s in samples if s.letter_spacing not in (None, "normal")]),
            count=len(samples),
        )

    def _hierarchy(self, resolved: Sequence[tuple]) -> Dict[str, TypographyStep]:
        groups: Dict[str, List[tuple]] = {}
        for px, sample in resolved:
            tag = sample.tag.lower()
            if tag in HEADING_TAGS:
                groups.setdefault(tag, []).append((px, sample))
            elif tag in BODY_TAGS:
                groups.setdefault("body", []).append((px, sample))
            elif tag in SMALL_TAGS:
                groups.setdefault("small", []).append((px, sample))
        hierarchy: Dict[str, TypographyStep] = {}
        for name in (*HEADING_TAGS, "body", "small"):
            if name in groups:
                sizes = [px for px, _ in groups[name]]
                hierarchy[name] = self._step([s for _, s in groups[name]], round(float(np.mean(sizes)), 2))
        return hierarchy

    def analyze(self, samples: Sequence[FontSample]) -> TypographyAnalysis:
        resolved = []
        for sample in samples:
            px = self._resolve(sample)
            if px is not None:
                resolved.append((px, sample))
        if not resolved:
            error = InsufficientSampleData("No usable font samples", component="typography")
            return TypographyAnalysis(typography=Typography(), flags=[error.to_flag()])

        flags: List[Flag] = []
        family_counts = Counter(f for f in (parse_font_stack(s.family) for _, s in resolved) if f)
        families = [name for name, _ in family_counts.most_common(self.config.max_font_families)]

        by_size: Dict[float, List[FontSample]] = {}
        for px, sample in resolved:
            by_size.setdefault(px, []).append(sample)
        sizes = sorted(by_size)

        body_sizes = Counter(px for px, s in resolved if s.tag.lower() in BODY_TAGS)
        body_size = (body_sizes or Counter(px for px, _ in resolved)).most_common(1)[0][0]
        body_index = sizes.index(body_size)

        try:
            fit = self.fit_modular_scale(sizes)
        except StructuralFitFailure as e:
            logger.info("Falling back to discrete type scale", reason=e.message, **e.details)
            flags.append(e.to_flag())
            fit = ScaleFit(fitted=False)

        # Steps publish observed sizes; the fit is reported separately.
        scale: Dict[str, TypographyStep] = {}
        line_heights: Dict[str, float] = {}
        for i, size in enumerate(sizes):
            name = step_name(i - body_index)
            step = self._step(by_size[size], size)
            scale[name] = step
            line_heights[name] = step.line_height or recommended_line_height(size)

        letter_spacing = Counter(
            s.letter_spacing for _, s in resolved if s.letter_spacing and s.letter_spacing != "normal"
        )
        typography = Typography(
            families=families,
            scale=scale,
            hierarchy=self._hierarchy(resolved),
            modular_scale=fit.ratio if fit.fitted else None,
            fit=fit,
            weights=sorted({s.weight for _, s in resolved}),
            line_heights=line_heights,
            letter_spacing=[value for value, _ in letter_spacing.most_common()],
        )
        return TypographyAnalysis(typography=typography, sizes=sizes, sample_count=len(resolved), flags=flags)
