"""Ephemeris oracle contract consumed by the chart assembler."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol, runtime_checkable

__all__ = [
    "BodyPosition",
    "EphemerisOracle",
    "HouseComputationFailed",
    "HousePositions",
    "OracleComputationError",
    "OracleFactory",
    "OracleUnavailable",
]


class OracleUnavailable(RuntimeError):
    """Raised when the ephemeris backend cannot be loaded or initialised."""


class OracleComputationError(RuntimeError):
    """Raised when the ephemeris backend reports an error for a body."""

    def __init__(
        self,
        message: str,
        *,
        body: str | None = None,
        julian_day: float | None = None,
    ) -> None:
        super().__init__(message)
        self.body = body
        self.julian_day = julian_day


class HouseComputationFailed(RuntimeError):
    """Raised when house cusps cannot be computed for a moment and place."""

    def __init__(
        self,
        message: str,
        *,
        latitude: float,
        longitude: float,
        system: str,
    ) -> None:
        super().__init__(message)
        self.latitude = latitude
        self.longitude = longitude
        self.system = system


@dataclass(frozen=True, slots=True)
class BodyPosition:
    """Structured ephemeris output for a single body."""

    body: str
    julian_day: float
    longitude: float
    latitude: float
    distance_au: float
    speed_longitude: float


@dataclass(frozen=True, slots=True)
class HousePositions:
    """Container for house cusps and angles."""

    system: str
    cusps: tuple[float, ...]
    ascendant: float
    midheaven: float

    def to_dict(self) -> Mapping[str, object]:
        return {
            "system": self.system,
            "cusps": list(self.cusps),
            "ascendant": self.ascendant,
            "midheaven": self.midheaven,
        }


@runtime_checkable
class EphemerisOracle(Protocol):
    """Minimal surface a chart build needs from an ephemeris session."""

    def julian_day(self, moment: datetime) -> float: ...

    def body_position(
        self, jd_ut: float, body_code: int, body_name: str
    ) -> BodyPosition: ...

    def lunar_node(self, jd_ut: float) -> BodyPosition: ...

    def houses(
        self, jd_ut: float, latitude: float, longitude: float
    ) -> HousePositions: ...

    def close(self) -> None: ...


OracleFactory = Callable[[], Awaitable[EphemerisOracle]]
