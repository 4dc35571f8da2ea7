"""Prometheus metric definitions shared across natalengine components."""

from __future__ import annotations

from collections.abc import Iterable

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Histogram

__all__ = [
    "CHART_BUILD_DURATION",
    "COMPUTE_ERRORS",
    "ORACLE_SESSIONS",
    "ensure_metrics_registered",
]


CHART_BUILD_DURATION = Histogram(
    "natalengine_chart_build_duration_seconds",
    "Duration of chart, transit and lunar computations.",
    ("operation",),
    registry=None,
)

COMPUTE_ERRORS = Counter(
    "natalengine_compute_errors_total",
    "Count of runtime failures across chart computations.",
    ("component", "error"),
    registry=None,
)

ORACLE_SESSIONS = Counter(
    "natalengine_oracle_sessions_total",
    "Swiss ephemeris sessions opened, grouped by outcome.",
    ("outcome",),
    registry=None,
)


def _iter_metrics() -> Iterable[Counter | Histogram]:
    yield CHART_BUILD_DURATION
    yield COMPUTE_ERRORS
    yield ORACLE_SESSIONS


def ensure_metrics_registered(
    registry: CollectorRegistry | None = None,
) -> None:
    """Register shared metrics with ``registry`` if not already present."""

    target = registry or REGISTRY
    for metric in _iter_metrics():
        try:
            target.register(metric)
        except ValueError:
            # Prometheus raises when a metric name already exists in the registry.
            continue
