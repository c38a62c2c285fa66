"""
CSS value parsing helpers shared by the token normalizers.
"""

from __future__ import annotations

import re
from typing import Optional, Tuple

RGBA = Tuple[int, int, int, float]

NAMED_COLORS = {
    "black": (0, 0, 0),
    "white": (255, 255, 255),
    "red": (255, 0, 0),
    "green": (0, 128, 0),
    "blue": (0, 0, 255),
    "yellow": (255, 255, 0),
    "orange": (255, 165, 0),
    "purple": (128, 0, 128),
    "gray": (128, 128, 128),
    "grey": (128, 128, 128),
    "silver": (192, 192, 192),
    "navy": (0, 0, 128),
    "teal": (0, 128, 128),
    "maroon": (128, 0, 0),
}

_FUNC_RE = re.compile(r"^(rgba?|hsla?)\(([^)]+)\)$")
_HEX_RE = re.compile(r"^#([0-9a-f]{3,8})$")
_NUMBER_RE = re.compile(r"^(-?\d*\.?\d+)([a-z%]*)$")


def rgba_to_hsl(r: float, g: float, b: float) -> Tuple[float, float, float]:
    """Return (hue degrees, saturation 0-1, lightness 0-1)."""
    r /= 255.0
    g /= 255.0
    b /= 255.0
    maxc = max(r, g, b)
    minc = min(r, g, b)
    l = (minc + maxc) / 2.0
    if minc == maxc:
        return 0.0, 0.0, l
    if l <= 0.5:
        s = (maxc - minc) / (maxc + minc)
    else:
        s = (maxc - minc) / (2.0 - maxc - minc)
    rc = (maxc - r) / (maxc - minc)
    gc = (maxc - g) / (maxc - minc)
    bc = (maxc - b) / (maxc - minc)
    if r == maxc:
        h = bc - gc
    elif g == maxc:
        h = 2.0 + rc - bc
    else:
        h = 4.0 + gc - rc
    h = (h / 6.0) % 1.0
    return h * 360.0, s, l


def _hsl_to_rgb(h: float, s: float, l: float) -> Tuple[int, int, int]:
    def hue_to_channel(p: float, q: float, t: float) -> float:
        t %= 1.0
        if t < 1 / 6:
            return p + (q - p) * 6 * t
        if t < 1 / 2:
            return q
        if t < 2 / 3:
            return p + (q - p) * (2 / 3 - t) * 6
        return p

    if s == 0:
        v = round(l * 255)
        return v, v, v
    q = l * (1 + s) if l < 0.5 else l + s - l * s
    p = 2 * l - q
    h /= 360.0
    return (
        round(hue_to_channel(p, q, h + 1 / 3) * 255),
        round(hue_to_channel(p, q, h) * 255),
        round(hue_to_channel(p, q, h - 1 / 3) * 255),
    )


def _channel(part: str) -> int:
    if part.endswith("%"):
        return round(float(part[:-1]) * 2.55)
    return round(float(part))


def _alpha(part: str) -> float:
    if part.endswith("%"):
        return float(part[:-1]) / 100.0
    return float(part)


def parse_color(value: str) -> Optional[RGBA]:
    """Parse hex, rgb()/rgba(), hsl()/hsla() and a few named colors."""
    if not value:
        return None
    value = value.strip().lower()
    if value in {"transparent", "none", "currentcolor", "inherit", "initial"}:
        return None
    if value in NAMED_COLORS:
        r, g, b = NAMED_COLORS[value]
        return r, g, b, 1.0

    func_match = _FUNC_RE.match(value)
    if func_match:
        name, body = func_match.groups()
        parts = [p for p in re.split(r"[,\s/]+", body.strip()) if p]
        if len(parts) < 3:
            return None
        try:
            alpha = _alpha(parts[3]) if len(parts) > 3 else 1.0
            if name.startswith("rgb"):
                r, g, b = (min(255, max(0, _channel(p))) for p in parts[:3])
            else:
                hue = float(parts[0].replace("deg", ""))
                sat = float(parts[1].rstrip("%")) / 100.0
                light = float(parts[2].rstrip("%")) / 100.0
                r, g, b = _hsl_to_rgb(hue % 360.0, sat, light)
        except ValueError:
            return None
        return r, g, b, alpha

    hex_match = _HEX_RE.match(value)
    if hex_match:
        h = hex_match.group(1)
        if len(h) in {3, 4}:
            r = int(h[0] * 2, 16)
            g = int(h[1] * 2, 16)
            b = int(h[2] * 2, 16)
            a = int(h[3] * 2, 16) / 255.0 if len(h) == 4 else 1.0
            return r, g, b, a
        if len(h) in {6, 8}:
            r = int(h[0:2], 16)
            g = int(h[2:4], 16)
            b = int(h[4:6], 16)
            a = int(h[6:8], 16) / 255.0 if len(h) == 8 else 1.0
            return r, g, b, a
    return None


def to_hex(rgb: Tuple[int, int, int]) -> str:
    return "#{:02X}{:02X}{:02X}".format(*rgb)


def parse_length(value: str, root_font_size: float = 16.0) -> Optional[float]:
    """Resolve a CSS length to pixels. Percentages and keywords resolve to None."""
    if not value:
        return None
    value = value.strip().lower()
    if value in {"auto", "normal", "none", "inherit", "initial"}:
        return None
    match = _NUMBER_RE.match(value)
    if not match:
        return None
    number, unit = float(match.group(1)), match.group(2)
    if unit in {"", "px"}:
        return number
    if unit in {"rem", "em"}:
        return number * root_font_size
    if unit == "pt":
        return number * 4.0 / 3.0
    return None


def parse_duration(value: str) -> Optional[float]:
    """Resolve a CSS time to milliseconds."""
    if not value:
        return None
    value = value.strip().lower()
    try:
        if value.endswith("ms"):
            return float(value[:-2])
        if value.endswith("s"):
            return float(value[:-1]) * 1000.0
    except ValueError:
        return None
    return None
