"""natalengine package bootstrap and curated public API surface."""

from __future__ import annotations

import logging
from importlib import import_module
from importlib.metadata import PackageNotFoundError, version as _get_version
from typing import Any

LOG = logging.getLogger(__name__)

try:
    __version__ = _get_version("natalengine")
except PackageNotFoundError:  # pragma: no cover - metadata may be unavailable in source checkouts
    __version__ = "0.0.0"


def get_version() -> str:
    """Return the resolved natalengine package version."""

    return __version__


_PUBLIC_EXPORTS: dict[str, str] = {
    "BirthEvent": "natalengine.chart.natal",
    "ChartConfig": "natalengine.chart.config",
    "NatalChart": "natalengine.chart.natal",
    "build_chart": "natalengine.chart.natal",
    "assemble_chart": "natalengine.chart.natal",
    "TransitContact": "natalengine.chart.transits",
    "compute_transits": "natalengine.chart.transits",
    "top_transits": "natalengine.chart.transits",
    "MoonPhase": "natalengine.chart.lunar",
    "compute_moon_phase": "natalengine.chart.lunar",
    "moon_phase": "natalengine.chart.lunar",
    "City": "natalengine.geo.cities",
    "CityAtlas": "natalengine.geo.cities",
    "CityLookupError": "natalengine.geo.cities",
    "UnrecognizedCity": "natalengine.geo.cities",
    "MissingTimezoneOffset": "natalengine.geo.cities",
    "OracleUnavailable": "natalengine.ephemeris.oracle",
    "OracleComputationError": "natalengine.ephemeris.oracle",
    "HouseComputationFailed": "natalengine.ephemeris.oracle",
    "CuspInvariantError": "natalengine.core.houses",
    "OrbProfile": "natalengine.scoring.orb",
    "load_orb_profile": "natalengine.scoring.orb",
    "Settings": "natalengine.config.settings",
    "load_settings": "natalengine.config.settings",
}

__all__ = ["__version__", "get_version", *_PUBLIC_EXPORTS]


def __getattr__(name: str) -> Any:
    try:
        module_name = _PUBLIC_EXPORTS[name]
    except KeyError as exc:
        raise AttributeError(f"module 'natalengine' has no attribute '{name}'") from exc
    value = getattr(import_module(module_name), name)
    globals()[name] = value
    return value


def __dir__() -> list[str]:
    return sorted(set(__all__) | set(globals().keys()))
