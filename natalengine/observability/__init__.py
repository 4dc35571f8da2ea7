"""Runtime observability primitives for natalengine modules."""

from __future__ import annotations

from .metrics import (
    CHART_BUILD_DURATION,
    COMPUTE_ERRORS,
    ORACLE_SESSIONS,
    ensure_metrics_registered,
)

__all__ = [
    "CHART_BUILD_DURATION",
    "COMPUTE_ERRORS",
    "ORACLE_SESSIONS",
    "ensure_metrics_registered",
]
