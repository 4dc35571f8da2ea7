"""Birth-place records consumed by chart builds."""

from __future__ import annotations

from .cities import (
    City,
    CityAtlas,
    CityLookupError,
    MissingTimezoneOffset,
    UnrecognizedCity,
)

__all__ = [
    "City",
    "CityAtlas",
    "CityLookupError",
    "MissingTimezoneOffset",
    "UnrecognizedCity",
]
