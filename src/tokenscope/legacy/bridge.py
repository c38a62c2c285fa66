"""
Bidirectional conversion between the current models and ``legacy-v1``.

Forward (``to_legacy``) applies the rule table to the current model's dump,
fills legacy-required fields the current model leaves empty with
documented defaults, and restores any legacy data preserved under
``legacy:`` extension keys. Backward (``from_legacy``) applies the rules in
reverse and preserves whatever the forward transform would not reproduce
under ``legacy:`` extension keys, so ``legacy -> current -> legacy`` is
exact.
"""

from __future__ import annotations

import copy
import functools
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Type, Union

import structlog
from pydantic import BaseModel

from tokenscope.errors import SchemaBridgeLossy
from tokenscope.legacy.rules import (
    BRAND_PROFILE_RULES,
    CONTENT_INVENTORY_RULES,
    DESIGN_TOKEN_RULES,
    MISSING,
    FieldRule,
    diff_paths,
    get_path,
    set_path,
)
from tokenscope.schemas import (
    BrandProfile,
    ContentInventory,
    DesignTokens,
    ExtensionValue,
    Flag,
    LegacyBrandProfile,
    LegacyContentInventory,
    LegacyDesignTokens,
)
from tokenscope.schemas.legacy import LegacyModel

logger = structlog.get_logger(__name__)

SUPPORTED_VERSIONS = ("legacy-v1",)
LEGACY_PREFIX = "legacy:"


@dataclass(frozen=True)
class SchemaPair:
    current: Type[BaseModel]
    legacy: Type[LegacyModel]
    rules: Tuple[FieldRule, ...]


SCHEMAS: Dict[str, SchemaPair] = {
    "design-tokens": SchemaPair(DesignTokens, LegacyDesignTokens, DESIGN_TOKEN_RULES),
    "brand-profile": SchemaPair(BrandProfile, LegacyBrandProfile, BRAND_PROFILE_RULES),
    "content-inventory": SchemaPair(ContentInventory, LegacyContentInventory, CONTENT_INVENTORY_RULES),
}


@dataclass
class ConversionResult:
    value: BaseModel
    schema: str
    version: str
    dropped: List[str] = field(default_factory=list)
    defaulted: List[str] = field(default_factory=list)
    flags: List[Flag] = field(default_factory=list)

    @property
    def lossy(self) -> bool:
        return bool(self.dropped)


def _is_empty(value: Any) -> bool:
    return value in ({}, [], "")


def _note(defaulted: List[str], prefix: str, sub: str) -> None:
    defaulted.append(f"{prefix}.{sub}")


def _join(path: Tuple[str, ...]) -> str:
    return ".".join(path).replace(".[]", "[]")


class LegacySchemaBridge:
    def __init__(self, default_version: str = "legacy-v1") -> None:
        self.default_version = default_version

    def _resolve(self, schema: Optional[str], version: Optional[str], value: Any) -> Tuple[str, SchemaPair, str]:
        version = version or self.default_version
        if version not in SUPPORTED_VERSIONS:
            raise ValueError(f"Unsupported legacy schema version: {version!r}")
        if schema is None:
            schema = next(
                (name for name, pair in SCHEMAS.items() if isinstance(value, (pair.current, pair.legacy))), None
            )
        if schema not in SCHEMAS:
            raise ValueError(f"Unknown legacy schema: {schema!r}")
        return schema, SCHEMAS[schema], version

    @staticmethod
    def _forward(pair: SchemaPair, current: Dict[str, Any], defaulted: List[str]) -> Dict[str, Any]:
        legacy: Dict[str, Any] = {}
        for rule in pair.rules:
            value = get_path(current, rule.current)
            if value is MISSING or (rule.omit_empty and _is_empty(value)):
                if rule.default is not MISSING:
                    set_path(legacy, rule.legacy, copy.deepcopy(rule.default))
                    defaulted.append(rule.legacy)
                continue
            set_path(legacy, rule.legacy, rule.to_legacy(value, functools.partial(_note, defaulted, rule.legacy)))
        return legacy

    @staticmethod
    def _backward(pair: SchemaPair, legacy: Dict[str, Any]) -> Dict[str, Any]:
        current: Dict[str, Any] = {}
        for rule in pair.rules:
            value = get_path(legacy, rule.legacy)
            if value is MISSING:
                continue
            set_path(current, rule.current, rule.to_current(value))
        return current

    def to_legacy(
        self,
        current: Union[DesignTokens, BrandProfile, ContentInventory],
        version: Optional[str] = None,
        schema: Optional[str] = None,
    ) -> ConversionResult:
        schema, pair, version = self._resolve(schema, version, current)
        if not isinstance(current, pair.current):
            current = pair.current.model_validate(current)

        dump = current.model_dump(mode="json")
        defaulted: List[str] = []
        legacy = self._forward(pair, dump, defaulted)
        for key, extension in current.extensions.items():
            if key.startswith(LEGACY_PREFIX):
                set_path(legacy, key[len(LEGACY_PREFIX) :], copy.deepcopy(extension.unwrap()))
        value = pair.legacy.model_validate(legacy)

        # Anything the legacy shape cannot carry back is reported as dropped.
        original = current.model_dump(mode="json", exclude_defaults=True)
        extensions = {k: v for k, v in original.get("extensions", {}).items() if not k.startswith(LEGACY_PREFIX)}
        if extensions:
            original["extensions"] = extensions
        else:
            original.pop("extensions", None)
        rebuilt = pair.current.model_validate(self._backward(pair, value.to_dict()))
        produced = rebuilt.model_dump(mode="json", exclude_defaults=True)
        dropped = sorted({_join(path) for path, _ in diff_paths(original, produced, into_lists=True)})

        flags: List[Flag] = []
        if dropped:
            error = SchemaBridgeLossy(
                f"Conversion to {version} dropped {len(dropped)} field(s)",
                component="legacy",
                details={"schema": schema, "dropped": ", ".join(dropped)},
            )
            logger.warning("Lossy legacy conversion", schema=schema, version=version, dropped=dropped)
            flags.append(error.to_flag())
        return ConversionResult(
            value=value,
            schema=schema,
            version=version,
            dropped=dropped,
            defaulted=sorted(set(defaulted)),
            flags=flags,
        )

    def from_legacy(
        self,
        legacy: Union[LegacyModel, Dict[str, Any]],
        version: Optional[str] = None,
        schema: Optional[str] = None,
    ) -> ConversionResult:
        schema, pair, version = self._resolve(schema, version, legacy)
        if not isinstance(legacy, pair.legacy):
            legacy = pair.legacy.model_validate(legacy)
        source = legacy.to_dict()

        current = self._backward(pair, source)
        reproduced = pair.legacy.model_validate(self._forward(pair, current, [])).to_dict()
        extensions = {
            LEGACY_PREFIX + ".".join(path): ExtensionValue.wrap(value).model_dump(mode="json")
            for path, value in diff_paths(source, reproduced)
        }
        if extensions:
            current["extensions"] = extensions
            logger.debug("Preserved legacy-only fields", schema=schema, fields=sorted(extensions))
        return ConversionResult(value=pair.current.model_validate(current), schema=schema, version=version)
