"""Same-day transit contacts against a natal chart."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from time import perf_counter

from ..core.bodies import PLANET_CODES
from ..detectors.aspects import Aspect, detect_cross_aspects
from ..ephemeris.oracle import OracleFactory
from ..observability import CHART_BUILD_DURATION, COMPUTE_ERRORS
from ..scoring.orb import OrbProfile
from .config import ChartConfig
from .natal import DEFAULT_TOP_N, NatalChart, default_oracle_factory

LOG = logging.getLogger(__name__)

__all__ = ["TransitContact", "compute_transits", "top_transits"]


@dataclass(frozen=True, slots=True)
class TransitContact:
    """Aspect between a transiting planet and a natal planet."""

    moment: datetime
    julian_day: float
    transiting_body: str
    natal_body: str
    aspect: Aspect

    @property
    def aspect_name(self) -> str:
        return self.aspect.name

    @property
    def separation(self) -> float:
        return self.aspect.separation

    @property
    def orb(self) -> float:
        return self.aspect.orb

    def to_dict(self) -> dict[str, object]:
        return {
            "moment": self.moment.isoformat(),
            "julian_day": self.julian_day,
            "transiting": self.transiting_body,
            "natal": self.natal_body,
            "aspect": self.aspect.name,
            "symbol": self.aspect.symbol,
            "separation": self.aspect.separation,
            "orb": self.aspect.orb,
        }


async def compute_transits(
    chart: NatalChart,
    moment: datetime,
    *,
    oracle_factory: OracleFactory | None = None,
    profile: OrbProfile | None = None,
    config: ChartConfig | None = None,
) -> list[TransitContact]:
    """Return transit contacts at ``moment`` sorted tightest-first.

    Only the ten natal planets are targets; the lunar nodes are skipped.
    """

    chart_config = config or ChartConfig()
    orbs = profile or chart_config.transit_orbs()
    factory = oracle_factory or default_oracle_factory(chart_config)
    start = perf_counter()
    try:
        oracle = await factory()
        try:
            jd_ut = oracle.julian_day(moment)
            transiting = [
                oracle.body_position(jd_ut, code, name)
                for name, code in PLANET_CODES.items()
            ]
        finally:
            oracle.close()
    except Exception as exc:
        COMPUTE_ERRORS.labels(component="transits", error=exc.__class__.__name__).inc()
        LOG.warning(
            {
                "event": "transit_computation_failed",
                "moment": moment.isoformat(),
                "error": exc.__class__.__name__,
                "reason": str(exc),
            }
        )
        raise
    finally:
        CHART_BUILD_DURATION.labels(operation="transits").observe(perf_counter() - start)

    natal_positions = {body.name: body.longitude for body in chart.planets}
    moving = {position.body: position.longitude for position in transiting}
    hits = detect_cross_aspects(moving, natal_positions, orbs)
    return [
        TransitContact(
            moment=moment,
            julian_day=jd_ut,
            transiting_body=hit.body_a,
            natal_body=hit.body_b,
            aspect=hit,
        )
        for hit in hits
    ]


def top_transits(
    contacts: Sequence[TransitContact], n: int = DEFAULT_TOP_N
) -> list[TransitContact]:
    return list(contacts[: max(0, n)])
