"""Pure chart geometry: signs, bodies, houses and rulerships."""

from __future__ import annotations

from .bodies import NODE_NAMES, PLANET_CODES, ChartBody
from .houses import CuspInvariantError, HouseCusp, build_house_cusps, house_of
from .rulership import SIGN_RULERS, compute_rulerships
from .signs import ZODIAC_SIGNS, SignPlacement, resolve_sign, sign_index, sign_name

__all__ = [
    "ChartBody",
    "CuspInvariantError",
    "HouseCusp",
    "NODE_NAMES",
    "PLANET_CODES",
    "SIGN_RULERS",
    "SignPlacement",
    "ZODIAC_SIGNS",
    "build_house_cusps",
    "compute_rulerships",
    "house_of",
    "resolve_sign",
    "sign_index",
    "sign_name",
]
