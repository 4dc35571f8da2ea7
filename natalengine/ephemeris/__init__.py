"""Ephemeris oracle contract and the Swiss Ephemeris session."""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any

__all__ = [
    "BodyPosition",
    "EphemerisOracle",
    "HouseComputationFailed",
    "HousePositions",
    "OracleComputationError",
    "OracleFactory",
    "OracleUnavailable",
    "SwissEphemerisAdapter",
]

if TYPE_CHECKING:  # pragma: no cover - import cycle guard for static analysis
    from .oracle import (
        BodyPosition,
        EphemerisOracle,
        HouseComputationFailed,
        HousePositions,
        OracleComputationError,
        OracleFactory,
        OracleUnavailable,
    )
    from .swisseph_adapter import SwissEphemerisAdapter

_LAZY_ATTRS: dict[str, tuple[str, str]] = {
    "BodyPosition": ("oracle", "BodyPosition"),
    "EphemerisOracle": ("oracle", "EphemerisOracle"),
    "HouseComputationFailed": ("oracle", "HouseComputationFailed"),
    "HousePositions": ("oracle", "HousePositions"),
    "OracleComputationError": ("oracle", "OracleComputationError"),
    "OracleFactory": ("oracle", "OracleFactory"),
    "OracleUnavailable": ("oracle", "OracleUnavailable"),
    "SwissEphemerisAdapter": ("swisseph_adapter", "SwissEphemerisAdapter"),
}


def __getattr__(name: str) -> Any:
    try:
        module_name, attr_name = _LAZY_ATTRS[name]
    except KeyError as exc:
        raise AttributeError(name) from exc
    module = import_module(f".{module_name}", __name__)
    value = getattr(module, attr_name)
    globals()[name] = value
    return value


def __dir__() -> list[str]:
    return sorted(set(__all__) | set(globals().keys()))
