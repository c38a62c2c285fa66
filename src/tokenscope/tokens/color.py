"""
Color normalization: perceptual clustering, role assignment and contrast.

Clusters are formed in CIE L*a*b* space (D65) using the CIE76 distance.
A cluster's canonical value is always its most frequent exact sample, so
published tokens are colors a designer actually used, never blends.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import structlog

from tokenscope.config import ColorConfig
from tokenscope.errors import InsufficientSampleData
from tokenscope.protocols import ColorContext, ColorSample
from tokenscope.schemas import ColorSystem, ColorToken, ContrastIssue, Flag
from tokenscope.tokens.units import parse_color, rgba_to_hsl, to_hex

logger = structlog.get_logger(__name__)

RGB = Tuple[int, int, int]


def rgb_to_lab(rgb: np.ndarray) -> np.ndarray:
    """Convert an (N, 3) RGB array (0-255) to CIE L*a*b*."""
    rgb_norm = rgb.astype(np.float64) / 255.0

    mask = rgb_norm > 0.04045
    rgb_linear = np.where(mask, ((rgb_norm + 0.055) / 1.055) ** 2.4, rgb_norm / 12.92)

    r, g, b = rgb_linear[:, 0], rgb_linear[:, 1], rgb_linear[:, 2]
    x = r * 0.4124564 + g * 0.3575761 + b * 0.1804375
    y = r * 0.2126729 + g * 0.7151522 + b * 0.0721750
    z = r * 0.0193339 + g * 0.1191920 + b * 0.9503041

    # D65 reference white
    xn, yn, zn = 0.95047, 1.0, 1.08883
    x, y, z = x / xn, y / yn, z / zn

    epsilon = 0.008856
    kappa = 903.3
    fx = np.where(x > epsilon, np.cbrt(x), (kappa * x + 16) / 116)
    fy = np.where(y > epsilon, np.cbrt(y), (kappa * y + 16) / 116)
    fz = np.where(z > epsilon, np.cbrt(z), (kappa * z + 16) / 116)

    L = 116 * fy - 16
    a = 500 * (fx - fy)
    b_val = 200 * (fy - fz)

    return np.column_stack([L, a, b_val])


def relative_luminance(rgb: RGB) -> float:
    def channel(c: int) -> float:
        c = c / 255.0
        return c / 12.92 if c <= 0.03928 else ((c + 0.055) / 1.055) ** 2.4

    return 0.2126 * channel(rgb[0]) + 0.7152 * channel(rgb[1]) + 0.0722 * channel(rgb[2])


def contrast_ratio(fg: RGB, bg: RGB) -> float:
    """WCAG 2.x contrast ratio between two colors, in [1, 21]."""
    lum_fg = relative_luminance(fg)
    lum_bg = relative_luminance(bg)
    lighter = max(lum_fg, lum_bg)
    darker = min(lum_fg, lum_bg)
    return (lighter + 0.05) / (darker + 0.05)


def _hex_to_rgb(value: str) -> RGB:
    return int(value[1:3], 16), int(value[3:5], 16), int(value[5:7], 16)


@dataclass
class ColorCluster:
    seed: str
    lab: np.ndarray
    values: Counter = field(default_factory=Counter)
    samples: List[ColorSample] = field(default_factory=list)
    prominence: float = 0.0

    @property
    def canonical(self) -> str:
        return self.seed

    @property
    def rgb(self) -> RGB:
        return _hex_to_rgb(self.seed)

    @property
    def chroma(self) -> float:
        return float(np.hypot(self.lab[1], self.lab[2]))

    @property
    def lightness(self) -> float:
        return float(self.lab[0])


@dataclass
class ColorNormalization:
    system: ColorSystem
    total_samples: int = 0
    clustered_samples: int = 0
    unparseable: int = 0
    contrast_checks: int = 0
    clusters: List[ColorCluster] = field(default_factory=list)
    flags: List[Flag] = field(default_factory=list)

    @property
    def consistency(self) -> Optional[float]:
        if self.total_samples == 0:
            return None
        return self.clustered_samples / self.total_samples


class ColorNormalizer:
    """Groups raw color samples into canonical color tokens."""

    def __init__(self, config: Optional[ColorConfig] = None) -> None:
        self.config = config or ColorConfig()

    # --- parsing & clustering ---

    def _parse(self, samples: Sequence[ColorSample]) -> Tuple[List[Tuple[str, ColorSample]], int]:
        parsed: List[Tuple[str, ColorSample]] = []
        unparseable = 0
        for sample in samples:
            rgba = parse_color(sample.value)
            if rgba is None:
                unparseable += 1
                continue
            r, g, b, alpha = rgba
            if alpha <= 0.0:
                # Fully transparent colors are not design decisions.
                unparseable += 1
                continue
            parsed.append((to_hex((r, g, b)), sample))
        return parsed, unparseable

    def cluster(self, parsed: Sequence[Tuple[str, ColorSample]]) -> List[ColorCluster]:
        """Greedy, order-deterministic ΔE clustering.

        Distinct values are visited by frequency (desc) then first appearance,
        so every cluster seed is the mode of its cluster.
        """
        counts: Counter = Counter()
        first_seen: Dict[str, int] = {}
        for index, (value, _) in enumerate(parsed):
            counts[value] += 1
            first_seen.setdefault(value, index)
        if not counts:
            return []

        ordered = sorted(counts, key=lambda v: (-counts[v], first_seen[v]))
        labs = rgb_to_lab(np.array([_hex_to_rgb(v) for v in ordered]))

        clusters: List[ColorCluster] = []
        assignment: Dict[str, ColorCluster] = {}
        for value, lab in zip(ordered, labs):
            target = None
            if clusters:
                seeds = np.array([c.lab for c in clusters])
                distances = np.linalg.norm(seeds - lab, axis=1)
                within = np.nonzero(distances < self.config.delta_e_threshold)[0]
                if within.size:
                    target = clusters[int(within[0])]
            if target is None:
                target = ColorCluster(seed=value, lab=lab)
                clusters.append(target)
            assignment[value] = target

        for value, sample in parsed:
            cluster = assignment[value]
            cluster.values[value] += 1
            cluster.samples.append(sample)
            cluster.prominence += self._weight(sample)
        return clusters

    def _is_large_text(self, sample: ColorSample) -> bool:
        size = sample.font_size_px
        if size is None:
            return False
        if size >= self.config.large_text_px:
            return True
        return size >= self.config.large_bold_text_px and (sample.font_weight or 400) >= 700

    def _weight(self, sample: ColorSample) -> float:
        weight = sample.area if sample.area > 0 else 1.0
        if sample.context is ColorContext.BACKGROUND or (
            sample.context is ColorContext.TEXT and self._is_large_text(sample)
        ):
            weight *= 1.5
        return weight

    # --- roles ---

    def _semantic_name(self, cluster: ColorCluster) -> Optional[str]:
        hue, _, _ = rgba_to_hsl(*cluster.rgb)
        for name, ranges in self.config.semantic_hues.items():
            if any(low <= hue <= high for low, high in ranges):
                return name
        return None

    def _has_cue(self, cluster: ColorCluster, name: str) -> bool:
        words = self.config.semantic_cues.get(name, [])
        for sample in cluster.samples:
            cue = (sample.semantic_cue or "").lower()
            if cue and any(word in cue for word in words):
                return True
        return False

    def _assign_roles(self, clusters: List[ColorCluster]) -> Dict[int, Tuple[str, Optional[str]]]:
        """Map cluster index to (usage, key)."""
        roles: Dict[int, Tuple[str, Optional[str]]] = {}
        by_prominence = sorted(range(len(clusters)), key=lambda i: -clusters[i].prominence)

        neutrals = [i for i in by_prominence if clusters[i].chroma < self.config.neutral_chroma_max]
        for rank, i in enumerate(sorted(neutrals, key=lambda i: -clusters[i].lightness), start=1):
            roles[i] = ("neutral", f"neutral-{rank * 100}")

        chromatic = [i for i in by_prominence if i not in roles]
        brand: List[int] = []
        unconfirmed: List[int] = []
        taken_semantic = set()
        for i in chromatic:
            name = self._semantic_name(clusters[i])
            if name is None:
                brand.append(i)
            elif name not in taken_semantic and self._has_cue(clusters[i], name):
                roles[i] = ("semantic", name)
                taken_semantic.add(name)
            else:
                unconfirmed.append(i)

        # A semantic hue without its cue is an accent. It stands in as primary
        # only when the palette has no other chromatic color.
        if not brand and unconfirmed:
            brand.append(unconfirmed.pop(0))
        for usage, i in zip(("primary", "secondary"), brand):
            roles[i] = (usage, None)
        if unconfirmed:
            roles[unconfirmed[0]] = ("accent", None)
        elif len(brand) > 2:
            roles[brand[2]] = ("accent", None)
        return roles

    # --- contrast ---

    def _contrast(self, cluster: ColorCluster) -> Tuple[Optional[float], Optional[str], Optional[ContrastIssue]]:
        text_samples = [s for s in cluster.samples if s.context is ColorContext.TEXT and s.background]
        backgrounds: Counter = Counter()
        for sample in text_samples:
            rgba = parse_color(sample.background or "")
            if rgba is not None and rgba[3] > 0:
                backgrounds[to_hex(rgba[:3])] += 1
        if not backgrounds:
            return None, None, None

        background = backgrounds.most_common(1)[0][0]
        ratio = round(contrast_ratio(cluster.rgb, _hex_to_rgb(background)), 2)
        large = all(self._is_large_text(s) for s in text_samples)
        required = self.config.contrast_large if large else self.config.contrast_normal
        issue = None
        if ratio < required:
            issue = ContrastIssue(
                foreground=cluster.canonical,
                background=background,
                ratio=ratio,
                required=required,
                large_text=large,
                sample_count=len(text_samples),
            )
        return ratio, background, issue

    # --- entry point ---

    def normalize(self, samples: Sequence[ColorSample]) -> ColorNormalization:
        parsed, unparseable = self._parse(samples)
        if not parsed:
            error = InsufficientSampleData("No usable color samples", component="color")
            logger.debug("Color normalization skipped", unparseable=unparseable)
            return ColorNormalization(system=ColorSystem(), unparseable=unparseable, flags=[error.to_flag()])

        clusters = self.cluster(parsed)
        roles = self._assign_roles(clusters)

        tokens: Dict[int, ColorToken] = {}
        issues: List[ContrastIssue] = []
        contrast_checks = 0
        for i, cluster in enumerate(clusters):
            ratio, background, issue = self._contrast(cluster)
            if ratio is not None:
                contrast_checks += 1
            if issue is not None:
                issues.append(issue)
            usage = roles.get(i, ("palette", None))[0]
            tokens[i] = ColorToken(
                value=cluster.canonical,
                usage=usage,
                contrast=ratio,
                background=background,
                count=len(cluster.samples),
                prominence=round(cluster.prominence, 3),
                members=[value for value, _ in cluster.values.most_common()],
            )

        single = {usage: tokens[i] for i, (usage, key) in roles.items() if key is None}
        neutral = {key: tokens[i] for i, (usage, key) in roles.items() if usage == "neutral" and key}
        neutral = dict(sorted(neutral.items(), key=lambda kv: int(kv[0].split("-")[1])))
        semantic = {key: tokens[i] for i, (usage, key) in roles.items() if usage == "semantic" and key}
        palette_order = sorted(range(len(clusters)), key=lambda i: -clusters[i].prominence)

        system = ColorSystem(
            primary=single.get("primary"),
            secondary=single.get("secondary"),
            accent=single.get("accent"),
            neutral=neutral,
            semantic=semantic,
            palette=[tokens[i] for i in palette_order],
            contrast_issues=issues,
        )
        clustered = sum(len(c.samples) for c in clusters if len(c.samples) >= self.config.min_cluster_size)
        logger.debug(
            "Colors normalized",
            samples=len(parsed),
            clusters=len(clusters),
            contrast_issues=len(issues),
        )
        return ColorNormalization(
            system=system,
            total_samples=len(parsed),
            clustered_samples=clustered,
            unparseable=unparseable,
            contrast_checks=contrast_checks,
            clusters=clusters,
        )
