"""City records with fixed UTC offsets and a small in-memory atlas."""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

__all__ = [
    "City",
    "CityAtlas",
    "CityLookupError",
    "MissingTimezoneOffset",
    "UnrecognizedCity",
]

_OFFSET_KEYS: tuple[str, ...] = ("utc_offset", "timezone", "tz_offset")


class CityLookupError(ValueError):
    """Base class for rejected birth-place records."""


class UnrecognizedCity(CityLookupError):
    """Raised when a city is unknown or lacks usable coordinates."""


class MissingTimezoneOffset(CityLookupError):
    """Raised when a city record carries no fixed UTC offset."""


def _finite(value: Any) -> float | None:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


@dataclass(frozen=True, slots=True)
class City:
    """Birth place with coordinates and a static UTC offset in hours."""

    name: str
    latitude: float
    longitude: float
    utc_offset: float

    def __post_init__(self) -> None:
        if not -90.0 <= self.latitude <= 90.0:
            raise UnrecognizedCity(
                f"City '{self.name}' has latitude {self.latitude} outside [-90, 90]"
            )
        if not -180.0 <= self.longitude <= 180.0:
            raise UnrecognizedCity(
                f"City '{self.name}' has longitude {self.longitude} outside [-180, 180]"
            )
        if not -14.0 <= self.utc_offset <= 14.0:
            raise MissingTimezoneOffset(
                f"City '{self.name}' has UTC offset {self.utc_offset} outside [-14, 14]"
            )

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> City:
        """Validate a caller-supplied city mapping.

        The UTC offset may be stored as ``utc_offset``, ``timezone`` or
        ``tz_offset`` (hours, fractional allowed).
        """

        name = str(record.get("name") or "").strip()
        if not name:
            raise UnrecognizedCity("City record has no name")
        latitude = _finite(record.get("latitude", record.get("lat")))
        longitude = _finite(record.get("longitude", record.get("lon")))
        if latitude is None or longitude is None:
            raise UnrecognizedCity(f"City '{name}' is missing latitude/longitude")
        offset: float | None = None
        for key in _OFFSET_KEYS:
            if record.get(key) is not None:
                offset = _finite(record[key])
                break
        if offset is None:
            raise MissingTimezoneOffset(f"City '{name}' has no fixed UTC offset")
        return cls(name=name, latitude=latitude, longitude=longitude, utc_offset=offset)

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "utc_offset": self.utc_offset,
        }


def _normalize_token(name: str) -> str:
    return " ".join(name.strip().casefold().split())


class CityAtlas:
    """Case-insensitive lookup of known cities."""

    def __init__(self, cities: Iterable[City] = ()) -> None:
        self._cities: dict[str, City] = {}
        for city in cities:
            self.add(city)

    def add(self, city: City) -> None:
        self._cities[_normalize_token(city.name)] = city

    def get(self, name: str) -> City:
        try:
            return self._cities[_normalize_token(name)]
        except KeyError as exc:
            raise UnrecognizedCity(f"Unknown city '{name}'") from exc

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and _normalize_token(name) in self._cities

    def __len__(self) -> int:
        return len(self._cities)

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> CityAtlas:
        return cls(City.from_record(record) for record in records)

    @classmethod
    def from_yaml(cls, path: str | Path) -> CityAtlas:
        """Load an atlas from a YAML list of city mappings."""

        with Path(path).open("r", encoding="utf-8") as handle:
            raw = yaml.safe_load(handle) or []
        if isinstance(raw, Mapping):
            raw = raw.get("cities", [])
        if not isinstance(raw, list):
            raise ValueError(f"City atlas at {path} must be a list of records")
        return cls.from_records(raw)
