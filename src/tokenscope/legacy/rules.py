"""
Field rule tables for the ``legacy-v1`` schemas.

Each rule pairs a dotted path in the legacy camelCase dump with a dotted
path in the current snake_case dump, plus the value transform for each
direction. Rules apply in order, so a rule that writes a whole mapping must
come before rules that write keys inside it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Tuple

from tokenscope.schemas.legacy import format_px, parse_px

Note = Callable[[str], None]

MISSING = object()

_HEADING_RE = re.compile(r"^h[1-6]$")

# Values written into legacy-required fields the current model leaves empty.
DEFAULT_FONT_FAMILY = "inherit"
DEFAULT_FONT_WEIGHT = 400
DEFAULT_LINE_HEIGHT = 1.5
PARAGRAPH_SEPARATOR = "\n\n"


def _same(value: Any) -> Any:
    return value


def _same_legacy(value: Any, note: Note) -> Any:
    return value


@dataclass(frozen=True)
class FieldRule:
    legacy: str
    current: str
    to_current: Callable[[Any], Any] = _same
    to_legacy: Callable[[Any, Note], Any] = _same_legacy
    default: Any = MISSING
    omit_empty: bool = False


def get_path(data: Any, path: str) -> Any:
    """Value at a dotted path, or ``MISSING`` when absent or None."""
    node = data
    for key in path.split("."):
        if not isinstance(node, dict) or node.get(key) is None:
            return MISSING
        node = node[key]
    return node


def set_path(data: Dict[str, Any], path: str, value: Any) -> None:
    """Write ``value`` at a dotted path, merging into an existing mapping."""
    keys = path.split(".")
    node = data
    for key in keys[:-1]:
        if not isinstance(node.get(key), dict):
            node[key] = {}
        node = node[key]
    leaf = keys[-1]
    if isinstance(node.get(leaf), dict) and isinstance(value, dict):
        merge_missing(node[leaf], value)
    else:
        node[leaf] = value


def merge_missing(target: Dict[str, Any], source: Dict[str, Any]) -> None:
    """Copy keys of ``source`` that ``target`` lacks, recursing into mappings."""
    for key, value in source.items():
        if key not in target:
            target[key] = value
        elif isinstance(target[key], dict) and isinstance(value, dict):
            merge_missing(target[key], value)


def diff_paths(
    original: Any, produced: Any, path: Tuple[str, ...] = (), into_lists: bool = False
) -> List[Tuple[Tuple[str, ...], Any]]:
    """Paths under ``original`` whose value ``produced`` lacks or changes.

    Keys only present in ``produced`` are ignored. With ``into_lists`` equal
    length lists are compared item by item under a ``[]`` path segment.
    """
    if isinstance(original, dict) and isinstance(produced, dict):
        found: List[Tuple[Tuple[str, ...], Any]] = []
        for key, value in original.items():
            if key not in produced:
                found.append((path + (key,), value))
            else:
                found.extend(diff_paths(value, produced[key], path + (key,), into_lists))
        return found
    if into_lists and isinstance(original, list) and isinstance(produced, list) and len(original) == len(produced):
        found = []
        for original_item, produced_item in zip(original, produced):
            found.extend(diff_paths(original_item, produced_item, path + ("[]",), into_lists))
        return found
    return [] if original == produced else [(path, original)]


def _compact(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


# --- Design tokens ---


def _color_to_current(usage: str) -> Callable[[Any], Any]:
    def convert(token: Dict[str, Any]) -> Dict[str, Any]:
        return _compact({"value": token["value"], "usage": usage, "contrast": token.get("contrast")})

    return convert


def _color_to_legacy(token: Dict[str, Any], note: Note) -> Dict[str, Any]:
    return _compact({"value": token["value"], "contrast": token.get("contrast")})


def _color_map_to_current(usage: str) -> Callable[[Any], Any]:
    convert = _color_to_current(usage)
    return lambda tokens: {name: convert(token) for name, token in tokens.items()}


def _color_map_to_legacy(tokens: Dict[str, Any], note: Note) -> Dict[str, Any]:
    return {name: _color_to_legacy(token, note) for name, token in tokens.items()}


def _step_to_current(token: Dict[str, Any]) -> Dict[str, Any]:
    return _compact(
        {
            "size_px": parse_px(token["fontSize"]),
            "font_family": token["fontFamily"],
            "font_weight": token["fontWeight"],
            "line_height": token["lineHeight"],
            "letter_spacing": token.get("letterSpacing"),
        }
    )


def _step_to_legacy(step: Dict[str, Any], note: Note) -> Dict[str, Any]:
    family = step.get("font_family")
    weight = step.get("font_weight")
    line_height = step.get("line_height")
    if family is None:
        note("fontFamily")
        family = DEFAULT_FONT_FAMILY
    if weight is None:
        note("fontWeight")
        weight = DEFAULT_FONT_WEIGHT
    if line_height is None:
        note("lineHeight")
        line_height = DEFAULT_LINE_HEIGHT
    return _compact(
        {
            "fontFamily": family,
            "fontSize": format_px(step["size_px"]),
            "fontWeight": weight,
            "lineHeight": line_height,
            "letterSpacing": step.get("letter_spacing"),
        }
    )


def _headings_to_current(headings: Dict[str, Any]) -> Dict[str, Any]:
    return {name: _step_to_current(token) for name, token in headings.items()}


def _headings_to_legacy(hierarchy: Dict[str, Any], note: Note) -> Dict[str, Any]:
    return {
        name: _step_to_legacy(step, lambda field, name=name: note(f"{name}.{field}"))
        for name, step in hierarchy.items()
        if _HEADING_RE.match(name)
    }


def _px_map_to_current(values: Dict[str, str]) -> Dict[str, float]:
    return {name: parse_px(value) for name, value in values.items()}


def _px_map_to_legacy(values: Dict[str, float], note: Note) -> Dict[str, str]:
    return {name: format_px(value) for name, value in values.items()}


def _px_to_current(value: str) -> float:
    return parse_px(value)


def _px_to_legacy(value: float, note: Note) -> str:
    return format_px(value)


def _step_default(size: str) -> Dict[str, Any]:
    return {
        "fontFamily": DEFAULT_FONT_FAMILY,
        "fontSize": size,
        "fontWeight": DEFAULT_FONT_WEIGHT,
        "lineHeight": DEFAULT_LINE_HEIGHT,
    }


DESIGN_TOKEN_RULES: Tuple[FieldRule, ...] = (
    FieldRule("colors.primary.main", "colors.primary", _color_to_current("primary"), _color_to_legacy),
    FieldRule("colors.primary.secondary", "colors.secondary", _color_to_current("secondary"), _color_to_legacy),
    FieldRule("colors.accent.main", "colors.accent", _color_to_current("accent"), _color_to_legacy),
    FieldRule("colors.neutral", "colors.neutral", _color_map_to_current("neutral"), _color_map_to_legacy),
    FieldRule("colors.semantic", "colors.semantic", _color_map_to_current("semantic"), _color_map_to_legacy),
    FieldRule("typography.headings", "typography.hierarchy", _headings_to_current, _headings_to_legacy),
    FieldRule(
        "typography.body", "typography.hierarchy.body", _step_to_current, _step_to_legacy, default=_step_default("16px")
    ),
    FieldRule(
        "typography.small",
        "typography.hierarchy.small",
        _step_to_current,
        _step_to_legacy,
        default=_step_default("14px"),
    ),
    FieldRule("spacing", "spacing.scale", _px_map_to_current, _px_map_to_legacy),
    FieldRule("effects.shadows", "effects.shadows"),
    FieldRule("effects.transitions", "effects.transitions"),
    FieldRule("effects.transforms", "effects.transforms", omit_empty=True),
    FieldRule("borderRadius.small", "border_radius.small", _px_to_current, _px_to_legacy, default="0px"),
    FieldRule("borderRadius.medium", "border_radius.medium", _px_to_current, _px_to_legacy, default="0px"),
    FieldRule("borderRadius.large", "border_radius.large", _px_to_current, _px_to_legacy, default="0px"),
    FieldRule("borderRadius.full", "border_radius.full", _px_to_current, _px_to_legacy, default="9999px"),
    FieldRule("breakpoints.mobile", "breakpoints.mobile", default=375),
    FieldRule("breakpoints.tablet", "breakpoints.tablet", default=768),
    FieldRule("breakpoints.desktop", "breakpoints.desktop", default=1440),
    FieldRule("breakpoints.wide", "breakpoints.wide", default=1920),
)


# --- Brand profile ---

BRAND_PROFILE_RULES: Tuple[FieldRule, ...] = (
    FieldRule("name", "name", default=""),
    FieldRule("tagline", "tagline"),
    FieldRule("logo", "logo.src"),
    FieldRule("themeColor", "theme_color"),
    FieldRule("voiceTone.primary", "voice_tone.primary", default="professional"),
    FieldRule("voiceTone.attributes", "voice_tone.attributes"),
)


# --- Content inventory ---


def _pages_to_current(pages: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [
        {
            "url": page["url"],
            "title": page["title"],
            "text": page["content"].split(PARAGRAPH_SEPARATOR),
            "word_count": page["wordCount"],
        }
        for page in pages
    ]


def _pages_to_legacy(pages: List[Dict[str, Any]], note: Note) -> List[Dict[str, Any]]:
    return [
        {
            "url": page["url"],
            "title": page["title"],
            "content": PARAGRAPH_SEPARATOR.join(page["text"]),
            "wordCount": page["word_count"],
        }
        for page in pages
    ]


def _keywords_to_current(words: List[str]) -> List[Dict[str, Any]]:
    return [{"word": word} for word in words]


def _keywords_to_legacy(keywords: List[Dict[str, Any]], note: Note) -> List[str]:
    return [keyword["word"] for keyword in keywords]


CONTENT_INVENTORY_RULES: Tuple[FieldRule, ...] = (
    FieldRule("pages", "pages", _pages_to_current, _pages_to_legacy),
    FieldRule("keywords", "keywords", _keywords_to_current, _keywords_to_legacy),
)
