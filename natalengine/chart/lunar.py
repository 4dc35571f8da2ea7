"""Moon phase snapshot derived from Sun and Moon longitudes."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime

from ..core.bodies import PLANET_CODES
from ..core.signs import SignPlacement, resolve_sign
from ..ephemeris.oracle import OracleFactory
from ..observability import COMPUTE_ERRORS
from ..utils.angles import norm360
from .config import ChartConfig
from .natal import default_oracle_factory

__all__ = ["MoonPhase", "PHASE_NAMES", "compute_moon_phase", "moon_phase"]


PHASE_NAMES = (
    "New Moon",
    "Waxing Crescent",
    "First Quarter",
    "Waxing Gibbous",
    "Full Moon",
    "Waning Gibbous",
    "Last Quarter",
    "Waning Crescent",
)

# Exclusive upper fraction bound per phase; past the last bound wraps to New Moon.
_PHASE_BOUNDS = tuple(
    zip((0.03, 0.22, 0.28, 0.47, 0.53, 0.72, 0.78, 0.97), PHASE_NAMES, strict=True)
)


@dataclass(frozen=True, slots=True)
class MoonPhase:
    """Lunar phase at one instant."""

    elongation: float
    fraction: float
    illumination: int
    name: str
    moon_sign: SignPlacement

    @property
    def waxing(self) -> bool:
        return self.elongation < 180.0

    def to_dict(self) -> dict[str, object]:
        return {
            "phase": self.name,
            "elongation": self.elongation,
            "fraction": self.fraction,
            "illumination": self.illumination,
            "moon_sign": self.moon_sign.sign,
            "moon_degrees": self.moon_sign.degrees,
        }


def _phase_name(fraction: float) -> str:
    for bound, name in _PHASE_BOUNDS:
        if fraction < bound:
            return name
    return "New Moon"


def moon_phase(sun_longitude: float, moon_longitude: float) -> MoonPhase:
    """Classify the phase from the Moon's elongation east of the Sun."""

    elongation = norm360(moon_longitude - sun_longitude)
    fraction = elongation / 360.0
    illumination = round(100 * (1 - math.cos(math.radians(elongation))) / 2)
    return MoonPhase(
        elongation=elongation,
        fraction=fraction,
        illumination=int(illumination),
        name=_phase_name(fraction),
        moon_sign=resolve_sign(moon_longitude),
    )


async def compute_moon_phase(
    moment: datetime,
    *,
    oracle_factory: OracleFactory | None = None,
    config: ChartConfig | None = None,
) -> MoonPhase:
    factory = oracle_factory or default_oracle_factory(config)
    try:
        oracle = await factory()
        try:
            jd_ut = oracle.julian_day(moment)
            sun = oracle.body_position(jd_ut, PLANET_CODES["Sun"], "Sun")
            moon = oracle.body_position(jd_ut, PLANET_CODES["Moon"], "Moon")
        finally:
            oracle.close()
    except Exception as exc:
        COMPUTE_ERRORS.labels(component="moon_phase", error=exc.__class__.__name__).inc()
        raise
    return moon_phase(sun.longitude, moon.longitude)
