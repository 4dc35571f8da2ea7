"""Aspect definitions and orb tolerance profiles sourced from packaged JSON."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from functools import lru_cache
from importlib import resources as importlib_resources
from types import MappingProxyType
from typing import Any

__all__ = [
    "ASPECT_TYPES",
    "NATAL_PROFILE",
    "PATTERN_PROFILE",
    "TRANSIT_PROFILE",
    "AspectType",
    "OrbProfile",
    "aspect_type",
    "available_profiles",
    "load_orb_profile",
]

NATAL_PROFILE = "natal"
TRANSIT_PROFILE = "transit"
PATTERN_PROFILE = "pattern"


@dataclass(frozen=True, slots=True)
class AspectType:
    """Named angular relationship with its exact angle and display symbol."""

    name: str
    angle: float
    symbol: str

    def to_dict(self) -> dict[str, object]:
        return {"name": self.name, "angle": self.angle, "symbol": self.symbol}


@lru_cache(maxsize=1)
def _load_policy() -> Mapping[str, Any]:
    resource = importlib_resources.files("natalengine.profiles").joinpath(
        "orb_profiles.json"
    )
    return json.loads(resource.read_text(encoding="utf-8"))


def _aspect_types() -> tuple[AspectType, ...]:
    return tuple(
        AspectType(
            name=str(entry["name"]),
            angle=float(entry["angle"]),
            symbol=str(entry["symbol"]),
        )
        for entry in _load_policy()["aspects"]
    )


ASPECT_TYPES: tuple[AspectType, ...] = _aspect_types()
_ASPECTS_BY_NAME: Mapping[str, AspectType] = MappingProxyType(
    {aspect.name.lower(): aspect for aspect in ASPECT_TYPES}
)


def aspect_type(name: str) -> AspectType:
    """Return the :class:`AspectType` registered under ``name``."""

    try:
        return _ASPECTS_BY_NAME[name.strip().lower()]
    except KeyError as exc:
        options = ", ".join(aspect.name for aspect in ASPECT_TYPES)
        raise KeyError(f"Unknown aspect '{name}'. Valid options: {options}") from exc


@dataclass(frozen=True)
class OrbProfile:
    """Per-aspect orb tolerances used by one detection context.

    Natal analysis, daily transits and pattern detection each get their own
    profile; detectors receive the profile explicitly.
    """

    name: str
    orbs: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        normalized: dict[str, float] = {}
        for key, value in dict(self.orbs).items():
            canonical = aspect_type(key).name
            orb = float(value)
            if orb < 0.0:
                raise ValueError(
                    f"Orb for '{canonical}' in profile '{self.name}' must be >= 0"
                )
            normalized[canonical] = orb
        missing = [a.name for a in ASPECT_TYPES if a.name not in normalized]
        if missing:
            raise ValueError(
                f"Orb profile '{self.name}' is missing tolerances for: "
                + ", ".join(missing)
            )
        object.__setattr__(self, "orbs", MappingProxyType(normalized))

    def tolerance_for(self, aspect: AspectType | str) -> float:
        name = aspect.name if isinstance(aspect, AspectType) else aspect_type(aspect).name
        return self.orbs[name]

    def with_overrides(self, overrides: Mapping[str, float] | None) -> OrbProfile:
        """Return a copy of the profile with ``overrides`` applied."""

        if not overrides:
            return self
        merged = dict(self.orbs)
        for key, value in overrides.items():
            merged[aspect_type(key).name] = float(value)
        return OrbProfile(name=self.name, orbs=merged)

    @classmethod
    def uniform(cls, name: str, orb: float) -> OrbProfile:
        return cls(name=name, orbs={aspect.name: orb for aspect in ASPECT_TYPES})

    def to_dict(self) -> dict[str, object]:
        return {"name": self.name, "orbs": dict(self.orbs)}


def available_profiles() -> tuple[str, ...]:
    return tuple(sorted(_load_policy()["profiles"]))


@lru_cache(maxsize=None)
def load_orb_profile(name: str) -> OrbProfile:
    """Return the packaged orb profile called ``name``."""

    key = name.strip().lower()
    profiles: Mapping[str, Mapping[str, float]] = _load_policy()["profiles"]
    if key not in profiles:
        options = ", ".join(sorted(profiles))
        raise KeyError(f"Unknown orb profile '{name}'. Valid options: {options}")
    return OrbProfile(name=key, orbs=profiles[key])
