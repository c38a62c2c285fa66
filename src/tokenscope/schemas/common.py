"""
Shared building blocks for the canonical result models.
"""

from __future__ import annotations

from typing import Any, Dict, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

ExtensionKind = Literal["string", "number", "boolean", "object", "array"]


class FrozenModel(BaseModel):
    """Immutable base for every published model."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-compatible dictionary of this model."""
        return self.model_dump(mode="json")


class Flag(FrozenModel):
    """Explicit marker for a degraded or partial outcome."""

    kind: str
    component: str = ""
    message: str = ""
    details: Dict[str, str] = Field(default_factory=dict)


class ExtensionValue(FrozenModel):
    """Tagged passthrough value for custom tokens and preserved legacy data."""

    kind: ExtensionKind
    value: Any

    @model_validator(mode="after")
    def check_kind(self) -> "ExtensionValue":
        expected = {
            "string": (str,),
            "number": (int, float),
            "boolean": (bool,),
            "object": (dict,),
            "array": (list,),
        }[self.kind]
        value_ok = isinstance(self.value, expected)
        if self.kind == "number" and isinstance(self.value, bool):
            value_ok = False
        if not value_ok:
            raise ValueError(f"value {self.value!r} does not match kind '{self.kind}'")
        return self

    @classmethod
    def wrap(cls, value: Any) -> "ExtensionValue":
        if isinstance(value, bool):
            return cls(kind="boolean", value=value)
        if isinstance(value, (int, float)):
            return cls(kind="number", value=value)
        if isinstance(value, str):
            return cls(kind="string", value=value)
        if isinstance(value, dict):
            return cls(kind="object", value=value)
        if isinstance(value, (list, tuple)):
            return cls(kind="array", value=list(value))
        raise TypeError(f"Unsupported extension value type: {type(value).__name__}")

    def unwrap(self) -> Any:
        return self.value
