"""
Conversion between the current models and older schema versions.
"""

from .bridge import SCHEMAS, SUPPORTED_VERSIONS, ConversionResult, LegacySchemaBridge
from .rules import FieldRule

__all__ = [
    "SCHEMAS",
    "SUPPORTED_VERSIONS",
    "ConversionResult",
    "FieldRule",
    "LegacySchemaBridge",
]
