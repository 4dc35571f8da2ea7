"""Zodiac sign lookup for ecliptic longitudes."""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType

from ..utils.angles import norm360

__all__ = [
    "SIGN_GLYPHS",
    "SIGN_WIDTH_DEG",
    "ZODIAC_SIGNS",
    "SignPlacement",
    "resolve_sign",
    "sign_index",
    "sign_name",
]

SIGN_WIDTH_DEG = 30.0

ZODIAC_SIGNS: Sequence[str] = (
    "Aries",
    "Taurus",
    "Gemini",
    "Cancer",
    "Leo",
    "Virgo",
    "Libra",
    "Scorpio",
    "Sagittarius",
    "Capricorn",
    "Aquarius",
    "Pisces",
)

SIGN_GLYPHS: Mapping[str, str] = MappingProxyType(
    dict(zip(ZODIAC_SIGNS, "♈♉♊♋♌♍♎♏♐♑♒♓"))
)


@dataclass(frozen=True, slots=True)
class SignPlacement:
    """Sign name plus the degree offset inside that sign."""

    index: int
    degrees: float

    @property
    def sign(self) -> str:
        return ZODIAC_SIGNS[self.index]

    @property
    def glyph(self) -> str:
        return SIGN_GLYPHS[self.sign]

    def to_dict(self) -> dict[str, object]:
        return {"sign": self.sign, "degrees": self.degrees}


def sign_index(longitude: float) -> int:
    """Return the zero-based zodiac sign index for ``longitude`` in degrees."""

    return int(math.floor(norm360(longitude) / SIGN_WIDTH_DEG)) % 12


def sign_name(index: int) -> str:
    """Return the canonical sign name for ``index`` (0 = Aries)."""

    return ZODIAC_SIGNS[index % len(ZODIAC_SIGNS)]


def resolve_sign(longitude: float) -> SignPlacement:
    """Map ``longitude`` onto its sign and the degrees within it.

    The longitude is normalized first so slightly out-of-range ephemeris output
    such as ``360.0001`` or ``-0.0005`` lands in the expected sign.
    """

    lon = norm360(longitude)
    index = int(math.floor(lon / SIGN_WIDTH_DEG)) % 12
    degrees = lon - index * SIGN_WIDTH_DEG
    if degrees < 0.0:
        degrees = 0.0
    return SignPlacement(index=index, degrees=degrees)
