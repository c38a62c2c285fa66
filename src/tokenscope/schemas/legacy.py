"""
Legacy (``legacy-v1``) schema shapes.

These mirror the design-token, brand-profile and content-inventory shapes
consumed by older tooling. They use camelCase field names on the wire.
"""

from __future__ import annotations

import re
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

_PX_RE = re.compile(r"^\s*(-?\d+(?:\.\d+)?)px\s*$")
_HEADING_RE = re.compile(r"^h[1-6]$")


def format_px(value: float) -> str:
    text = repr(float(value))
    if text.endswith(".0"):
        text = text[:-2]
    return f"{text}px"


def parse_px(value: str) -> float:
    match = _PX_RE.match(value)
    if not match:
        raise ValueError(f"expected a pixel length like '16px', got {value!r}")
    return float(match.group(1))


def normalize_px(value: str) -> str:
    return format_px(parse_px(value))


class LegacyModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    def to_dict(self) -> Dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# --- Design tokens ---


class LegacyColorToken(LegacyModel):
    value: str
    contrast: Optional[float] = None


class LegacyColors(LegacyModel):
    primary: Dict[str, LegacyColorToken] = Field(default_factory=dict)
    neutral: Dict[str, LegacyColorToken] = Field(default_factory=dict)
    semantic: Dict[str, LegacyColorToken] = Field(default_factory=dict)
    accent: Optional[Dict[str, LegacyColorToken]] = None


class LegacyTypographyToken(LegacyModel):
    font_family: str
    font_size: str
    font_weight: int
    line_height: float
    letter_spacing: Optional[str] = None

    @field_validator("font_size")
    @classmethod
    def normalize_size(cls, v: str) -> str:
        return normalize_px(v)


class LegacyTypography(LegacyModel):
    headings: Dict[str, LegacyTypographyToken] = Field(default_factory=dict)
    body: LegacyTypographyToken
    small: LegacyTypographyToken

    @field_validator("headings")
    @classmethod
    def heading_keys(cls, v: Dict[str, LegacyTypographyToken]) -> Dict[str, LegacyTypographyToken]:
        for key in v:
            if not _HEADING_RE.match(key):
                raise ValueError(f"heading keys must be h1..h6, got {key!r}")
        return v


class LegacyEffects(LegacyModel):
    shadows: Dict[str, str] = Field(default_factory=dict)
    transitions: Dict[str, str] = Field(default_factory=dict)
    transforms: Optional[Dict[str, str]] = None


class LegacyBorderRadius(LegacyModel):
    small: str
    medium: str
    large: str
    full: str

    @field_validator("small", "medium", "large", "full")
    @classmethod
    def normalize_radius(cls, v: str) -> str:
        return normalize_px(v)


class LegacyBreakpoints(LegacyModel):
    mobile: int
    tablet: int
    desktop: int
    wide: int


class LegacyDesignTokens(LegacyModel):
    colors: LegacyColors
    typography: LegacyTypography
    spacing: Dict[str, str] = Field(default_factory=dict)
    effects: LegacyEffects
    border_radius: LegacyBorderRadius
    breakpoints: LegacyBreakpoints

    @field_validator("spacing")
    @classmethod
    def spacing_scale(cls, v: Dict[str, str]) -> Dict[str, str]:
        normalized = {name: normalize_px(value) for name, value in v.items()}
        sizes = [parse_px(value) for value in normalized.values()]
        for previous, current in zip(sizes, sizes[1:]):
            if current <= previous:
                raise ValueError("spacing values must be strictly increasing")
        return normalized


# --- Brand profile ---


class LegacyVoiceTone(LegacyModel):
    primary: str
    attributes: List[str] = Field(default_factory=list)


class LegacyBrandProfile(LegacyModel):
    name: str
    tagline: Optional[str] = None
    logo: Optional[str] = None
    theme_color: Optional[str] = None
    voice_tone: LegacyVoiceTone


# --- Content inventory ---


class LegacyPage(LegacyModel):
    url: str
    title: str
    content: str
    word_count: int


class LegacyContentInventory(LegacyModel):
    pages: List[LegacyPage] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)
