"""
Error taxonomy for tokenscope.

Stages raise these internally; the stage boundary converts them into
``Flag`` records attached to the result so that a degraded stage never
aborts the run.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from tokenscope.schemas.common import Flag


class TokenscopeError(Exception):
    """Base class for all tokenscope errors."""

    kind = "error"

    def __init__(self, message: str, component: str = "", details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.component = component
        self.details = dict(details or {})

    def to_flag(self, component: Optional[str] = None) -> Flag:
        return Flag(
            kind=self.kind,
            component=component or self.component,
            message=self.message,
            details={k: str(v) for k, v in self.details.items()},
        )


class InsufficientSampleData(TokenscopeError):
    """Raised when a sub-score or token group has no samples to work from."""

    kind = "insufficient_sample_data"


class StructuralFitFailure(TokenscopeError):
    """Raised when a typography scale or spacing grid cannot be fitted."""

    kind = "structural_fit_failure"


class GraphIncomplete(TokenscopeError):
    """Raised when the site graph is built from a partial crawl."""

    kind = "graph_incomplete"


class SchemaBridgeLossy(TokenscopeError):
    """Raised when a legacy conversion drops information."""

    kind = "schema_bridge_lossy"


class CollectorFault(TokenscopeError):
    """Raised when the Collector failed to deliver a page."""

    kind = "collector_fault"


class SampleContractError(ValueError):
    """Raised when a single sample violates the Collector contract."""

    def __init__(self, reason: str, message: str = "") -> None:
        super().__init__(message or reason)
        self.reason = reason
