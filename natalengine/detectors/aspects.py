"""Aspect detection between chart bodies."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from itertools import combinations
from typing import Protocol

from ..scoring.orb import ASPECT_TYPES, AspectType, OrbProfile
from ..utils.angles import separation

__all__ = [
    "Aspect",
    "classify_separation",
    "detect_aspects",
    "detect_cross_aspects",
    "tightest_per_pair",
]


class _HasLongitude(Protocol):
    name: str
    longitude: float


@dataclass(frozen=True, slots=True)
class Aspect:
    """Aspect between two bodies within the tolerance of an orb profile."""

    body_a: str
    body_b: str
    aspect: AspectType
    separation: float
    orb: float

    @property
    def name(self) -> str:
        return self.aspect.name

    @property
    def symbol(self) -> str:
        return self.aspect.symbol

    @property
    def angle(self) -> float:
        return self.aspect.angle

    @property
    def pair(self) -> frozenset[str]:
        return frozenset((self.body_a, self.body_b))

    def involves(self, body: str) -> bool:
        return body in (self.body_a, self.body_b)

    def to_dict(self) -> dict[str, object]:
        return {
            "body_a": self.body_a,
            "body_b": self.body_b,
            "aspect": self.aspect.name,
            "symbol": self.aspect.symbol,
            "angle": self.aspect.angle,
            "separation": self.separation,
            "orb": self.orb,
        }


def _longitudes(
    bodies: Iterable[_HasLongitude] | Mapping[str, float],
) -> list[tuple[str, float]]:
    if isinstance(bodies, Mapping):
        return [(str(name), float(lon)) for name, lon in bodies.items()]
    return [(body.name, float(body.longitude)) for body in bodies]


def classify_separation(
    body_a: str,
    body_b: str,
    angle: float,
    profile: OrbProfile,
    aspect_types: Sequence[AspectType] = ASPECT_TYPES,
) -> list[Aspect]:
    """Return every aspect type whose orb tolerance admits ``angle``.

    More than one record is possible when tolerances overlap.
    """

    hits: list[Aspect] = []
    for aspect in aspect_types:
        orb = abs(angle - aspect.angle)
        if orb <= profile.tolerance_for(aspect):
            hits.append(
                Aspect(
                    body_a=body_a,
                    body_b=body_b,
                    aspect=aspect,
                    separation=angle,
                    orb=orb,
                )
            )
    return hits


def detect_aspects(
    bodies: Iterable[_HasLongitude] | Mapping[str, float],
    profile: OrbProfile,
    *,
    aspect_types: Sequence[AspectType] = ASPECT_TYPES,
) -> list[Aspect]:
    """Detect aspects for every unordered body pair, tightest orb first."""

    hits: list[Aspect] = []
    for (name_a, lon_a), (name_b, lon_b) in combinations(_longitudes(bodies), 2):
        angle = separation(lon_a, lon_b)
        hits.extend(classify_separation(name_a, name_b, angle, profile, aspect_types))
    hits.sort(key=lambda hit: hit.orb)
    return hits


def detect_cross_aspects(
    moving: Iterable[_HasLongitude] | Mapping[str, float],
    targets: Iterable[_HasLongitude] | Mapping[str, float],
    profile: OrbProfile,
    *,
    aspect_types: Sequence[AspectType] = ASPECT_TYPES,
) -> list[Aspect]:
    """Detect aspects from each ``moving`` body to each ``targets`` body.

    ``body_a`` is always the moving body. Used for transits against a natal
    chart, where a body may legitimately aspect its own natal position.
    """

    target_positions = _longitudes(targets)
    hits: list[Aspect] = []
    for name_a, lon_a in _longitudes(moving):
        for name_b, lon_b in target_positions:
            angle = separation(lon_a, lon_b)
            hits.extend(
                classify_separation(name_a, name_b, angle, profile, aspect_types)
            )
    hits.sort(key=lambda hit: hit.orb)
    return hits


def tightest_per_pair(aspects: Iterable[Aspect]) -> list[Aspect]:
    """Keep only the minimum-orb aspect for each body pair, tightest first."""

    best: dict[tuple[str, str], Aspect] = {}
    for hit in aspects:
        key = (hit.body_a, hit.body_b)
        current = best.get(key)
        if current is None or hit.orb < current.orb:
            best[key] = hit
    return sorted(best.values(), key=lambda hit: hit.orb)
