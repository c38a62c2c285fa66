"""
Defines Prometheus metrics for extraction runs.
"""

from __future__ import annotations

from typing import Any, Dict

from prometheus_client import REGISTRY as _PROM_REGISTRY
from prometheus_client import Counter as _OrigCounter
from prometheus_client import Histogram as _OrigHistogram

# ---------------------------------------------------------------------------
# Duplicate-safe Prometheus metric wrappers
# ---------------------------------------------------------------------------
# Module re-imports (test suites, reloads) must not raise duplicate
# registration errors, so existing collectors are reused by name.


def _duplicate_safe_factory(metric_cls):
    """Return a factory that reuses an existing collector if already present."""

    def _factory(name: str, documentation: str, *args, **kwargs):  # type: ignore[override]
        existing = _PROM_REGISTRY._names_to_collectors.get(name)
        if existing is not None:
            return existing  # type: ignore[return-value]

        try:
            return metric_cls(name, documentation, *args, **kwargs)  # type: ignore[call-arg]
        except ValueError:
            # Registration lost the race; fall back to the now-existing collector.
            return _PROM_REGISTRY._names_to_collectors[name]  # type: ignore[return-value]

    return _factory


Counter = _duplicate_safe_factory(_OrigCounter)  # type: ignore[assignment]
Histogram = _duplicate_safe_factory(_OrigHistogram)  # type: ignore[assignment]


def _create_metrics() -> Dict[str, Any]:
    return {
        "pages_processed": Counter(
            "tokenscope_pages_processed_total",
            "Pages processed by the extraction pipeline",
            ["outcome"],
        ),
        "samples_rejected": Counter(
            "tokenscope_samples_rejected_total",
            "Raw samples rejected at intake",
            ["reason"],
        ),
        "flags_raised": Counter(
            "tokenscope_flags_raised_total",
            "Degradation flags attached to results",
            ["kind"],
        ),
        "stage_duration_seconds": Histogram(
            "tokenscope_stage_duration_seconds",
            "Time taken by a pipeline stage",
            ["stage"],
            buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 5.0],
        ),
        "quality_score": Histogram(
            "tokenscope_quality_score",
            "Distribution of overall design quality scores",
            buckets=[0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8, 0.9, 1.0],
        ),
    }


METRICS: Dict[str, Any] = _create_metrics()

# Example usage:
# METRICS["pages_processed"].labels(outcome="ok").inc()
