"""Multi-body aspect patterns: grand trines, T-squares and stelliums."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from itertools import combinations

from ..core.bodies import ChartBody
from ..scoring.orb import OrbProfile
from .aspects import detect_aspects

__all__ = [
    "STELLIUM_MIN_BODIES",
    "ChartConfiguration",
    "ConfigurationType",
    "detect_configurations",
]

STELLIUM_MIN_BODIES = 3


class ConfigurationType(str, Enum):
    """Pattern tags; grand cross, yod and kite are reserved and never emitted."""

    GRAND_TRINE = "grand_trine"
    T_SQUARE = "t_square"
    STELLIUM = "stellium"
    GRAND_CROSS = "grand_cross"
    YOD = "yod"
    KITE = "kite"

    @property
    def implemented(self) -> bool:
        return self in _IMPLEMENTED

    @classmethod
    def implemented_types(cls) -> tuple[ConfigurationType, ...]:
        return tuple(member for member in cls if member.implemented)


_IMPLEMENTED = frozenset(
    {
        ConfigurationType.GRAND_TRINE,
        ConfigurationType.T_SQUARE,
        ConfigurationType.STELLIUM,
    }
)


@dataclass(frozen=True, slots=True)
class ChartConfiguration:
    """A detected pattern and the bodies taking part in it."""

    kind: ConfigurationType
    bodies: tuple[str, ...]
    description: str
    apex: str | None = None
    house: int | None = None

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "type": self.kind.value,
            "planets": list(self.bodies),
            "description": self.description,
        }
        if self.apex is not None:
            payload["apex"] = self.apex
        if self.house is not None:
            payload["house"] = self.house
        return payload


class _AspectGraph:
    """Pairwise aspect relationships classified under a pattern orb profile."""

    def __init__(self, bodies: Sequence[ChartBody], profile: OrbProfile) -> None:
        self._edges: dict[frozenset[str], set[str]] = defaultdict(set)
        for hit in detect_aspects(bodies, profile):
            self._edges[hit.pair].add(hit.name)

    def has(self, body_a: str, body_b: str, aspect_name: str) -> bool:
        return aspect_name in self._edges.get(frozenset((body_a, body_b)), ())


def _join(names: Sequence[str]) -> str:
    if len(names) <= 1:
        return "".join(names)
    return ", ".join(names[:-1]) + " and " + names[-1]


def _grand_trines(names: Sequence[str], graph: _AspectGraph) -> list[ChartConfiguration]:
    found: list[ChartConfiguration] = []
    for a, b, c in combinations(names, 3):
        if (
            graph.has(a, b, "Trine")
            and graph.has(b, c, "Trine")
            and graph.has(a, c, "Trine")
        ):
            found.append(
                ChartConfiguration(
                    kind=ConfigurationType.GRAND_TRINE,
                    bodies=(a, b, c),
                    description=f"Grand trine: {_join((a, b, c))} in mutual trine.",
                )
            )
    return found


def _t_squares(names: Sequence[str], graph: _AspectGraph) -> list[ChartConfiguration]:
    found: list[ChartConfiguration] = []
    for a, b, c in combinations(names, 3):
        for base_a, base_b, apex in ((a, b, c), (a, c, b), (b, c, a)):
            if not graph.has(base_a, base_b, "Opposition"):
                continue
            if graph.has(base_a, apex, "Square") and graph.has(base_b, apex, "Square"):
                found.append(
                    ChartConfiguration(
                        kind=ConfigurationType.T_SQUARE,
                        bodies=(base_a, base_b, apex),
                        description=(
                            f"T-square: {base_a} opposite {base_b}, "
                            f"both square {apex} at the apex."
                        ),
                        apex=apex,
                    )
                )
    return found


def _stelliums(bodies: Sequence[ChartBody]) -> list[ChartConfiguration]:
    by_house: dict[int, list[str]] = defaultdict(list)
    for body in bodies:
        if body.house is not None:
            by_house[body.house].append(body.name)

    found: list[ChartConfiguration] = []
    for house in sorted(by_house):
        members = by_house[house]
        if len(members) >= STELLIUM_MIN_BODIES:
            found.append(
                ChartConfiguration(
                    kind=ConfigurationType.STELLIUM,
                    bodies=tuple(members),
                    description=f"Stellium in house {house}: {_join(members)}.",
                    house=house,
                )
            )
    return found


def detect_configurations(
    bodies: Sequence[ChartBody],
    profile: OrbProfile,
) -> list[ChartConfiguration]:
    """Detect grand trines, T-squares and stelliums among non-node bodies.

    Pair relationships are classified from the body longitudes with
    ``profile`` alone, so the chart's aspect orbs never widen or narrow a
    pattern. Overlapping patterns are all reported.
    """

    planets = [body for body in bodies if not body.is_node]
    names = [body.name for body in planets]
    graph = _AspectGraph(planets, profile)

    configurations: list[ChartConfiguration] = []
    configurations.extend(_grand_trines(names, graph))
    configurations.extend(_t_squares(names, graph))
    configurations.extend(_stelliums(planets))
    return configurations
