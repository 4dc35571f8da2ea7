"""Aspect and configuration detectors."""

from __future__ import annotations

from .aspects import (
    Aspect,
    classify_separation,
    detect_aspects,
    detect_cross_aspects,
    tightest_per_pair,
)
from .configurations import (
    ChartConfiguration,
    ConfigurationType,
    detect_configurations,
)

__all__ = [
    "Aspect",
    "ChartConfiguration",
    "ConfigurationType",
    "classify_separation",
    "detect_aspects",
    "detect_configurations",
    "detect_cross_aspects",
    "tightest_per_pair",
]
