"""Body identifiers and the placement record stored on a natal chart."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from .signs import SignPlacement, resolve_sign

__all__ = [
    "NORTH_NODE",
    "NODE_NAMES",
    "PLANET_CODES",
    "PLANET_NAMES",
    "SOUTH_NODE",
    "ChartBody",
]

# Swiss Ephemeris body indexes (Sun=0 … Pluto=9) remain stable across releases.
PLANET_CODES: Mapping[str, int] = MappingProxyType(
    {
        "Sun": 0,
        "Moon": 1,
        "Mercury": 2,
        "Venus": 3,
        "Mars": 4,
        "Jupiter": 5,
        "Saturn": 6,
        "Uranus": 7,
        "Neptune": 8,
        "Pluto": 9,
    }
)
PLANET_NAMES: tuple[str, ...] = tuple(PLANET_CODES)

NORTH_NODE = "North Node"
SOUTH_NODE = "South Node"
NODE_NAMES: tuple[str, ...] = (NORTH_NODE, SOUTH_NODE)


@dataclass(frozen=True, slots=True)
class ChartBody:
    """A planet or lunar node placed in a chart.

    ``is_node`` marks the two synthetic lunar-node entries; they never receive
    rulerships and are skipped by configuration detection.
    """

    name: str
    longitude: float
    latitude: float = 0.0
    distance_au: float = 0.0
    speed_longitude: float = 0.0
    is_node: bool = False
    house: int | None = None
    rules_houses: tuple[int, ...] = ()

    @property
    def placement(self) -> SignPlacement:
        return resolve_sign(self.longitude)

    @property
    def sign(self) -> str:
        return self.placement.sign

    @property
    def degrees(self) -> float:
        return self.placement.degrees

    @property
    def retrograde(self) -> bool:
        return self.speed_longitude < 0.0

    def to_dict(self) -> dict[str, object]:
        placement = self.placement
        return {
            "name": self.name,
            "sign": placement.sign,
            "degrees": placement.degrees,
            "house": self.house,
            "longitude": self.longitude,
            "latitude": self.latitude,
            "distance_au": self.distance_au,
            "speed": self.speed_longitude,
            "retrograde": self.retrograde,
            "is_node": self.is_node,
            "rules_houses": list(self.rules_houses),
        }
