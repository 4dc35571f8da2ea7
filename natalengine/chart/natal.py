"""Natal chart assembly from a birth event and an ephemeris oracle."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime, time, timedelta, timezone
from time import perf_counter
from types import MappingProxyType
from typing import Any

from ..core.bodies import NORTH_NODE, PLANET_CODES, SOUTH_NODE, ChartBody
from ..core.houses import HouseCusp, build_house_cusps, house_of
from ..core.rulership import compute_rulerships
from ..core.signs import SignPlacement, resolve_sign
from ..detectors.aspects import Aspect, detect_aspects
from ..detectors.configurations import ChartConfiguration, detect_configurations
from ..ephemeris.oracle import BodyPosition, EphemerisOracle, OracleFactory
from ..geo.cities import City
from ..observability import CHART_BUILD_DURATION, COMPUTE_ERRORS
from ..scoring.orb import OrbProfile
from ..utils import json as json_utils
from ..utils.angles import norm360
from .config import ChartConfig

LOG = logging.getLogger(__name__)

DEFAULT_TOP_N = 4

__all__ = [
    "DEFAULT_TOP_N",
    "BirthEvent",
    "ChartAngle",
    "NatalChart",
    "assemble_chart",
    "build_chart",
    "default_oracle_factory",
    "derive_south_node",
    "parse_clock_time",
]


def parse_clock_time(value: str | time) -> time:
    """Parse an ``HH:MM`` civil clock reading."""

    if isinstance(value, time):
        return value.replace(second=0, microsecond=0, tzinfo=None)
    text = str(value).strip()
    hours, sep, minutes = text.partition(":")
    if not sep or not hours.isdigit() or not minutes.isdigit():
        raise ValueError(f"Birth time must be formatted HH:MM, got '{value}'")
    return time(hour=int(hours), minute=int(minutes))


@dataclass(frozen=True, slots=True)
class BirthEvent:
    """Civil birth date and clock time at a city with a fixed UTC offset.

    ``city`` may be given as a raw mapping; it is validated immediately so a
    record without coordinates or offset is rejected before any ephemeris
    work starts.
    """

    date: date
    time: time
    city: City
    name: str | None = None

    def __post_init__(self) -> None:
        city = self.city
        if isinstance(city, Mapping):
            city = City.from_record(city)
        elif not isinstance(city, City):
            raise TypeError(f"city must be a City or mapping, got {type(city).__name__}")
        object.__setattr__(self, "city", city)

        birth_date = self.date
        if isinstance(birth_date, datetime):
            birth_date = birth_date.date()
        elif isinstance(birth_date, str):
            birth_date = date.fromisoformat(birth_date)
        object.__setattr__(self, "date", birth_date)
        object.__setattr__(self, "time", parse_clock_time(self.time))

    @property
    def local_datetime(self) -> datetime:
        offset = timezone(timedelta(hours=self.city.utc_offset))
        return datetime.combine(self.date, self.time, tzinfo=offset)

    @property
    def utc_moment(self) -> datetime:
        """Return the birth instant in UTC; no DST rules are applied."""

        return self.local_datetime.astimezone(UTC)

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "date": self.date.isoformat(),
            "time": self.time.strftime("%H:%M"),
            "city": self.city.to_dict(),
            "utc": self.utc_moment.isoformat(),
        }


@dataclass(frozen=True, slots=True)
class ChartAngle:
    """Angular point such as the Ascendant or Midheaven."""

    name: str
    longitude: float

    @property
    def placement(self) -> SignPlacement:
        return resolve_sign(self.longitude)

    @property
    def sign(self) -> str:
        return self.placement.sign

    def to_dict(self) -> dict[str, object]:
        placement = self.placement
        return {
            "sign": placement.sign,
            "degrees": placement.degrees,
            "longitude": self.longitude,
        }


@dataclass(frozen=True)
class NatalChart:
    """Immutable result of one chart build."""

    birth: BirthEvent
    julian_day: float
    planets: tuple[ChartBody, ...]
    ascendant: ChartAngle
    midheaven: ChartAngle
    houses: tuple[HouseCusp, ...]
    aspects: tuple[Aspect, ...]
    nodes: tuple[ChartBody, ChartBody]
    configurations: tuple[ChartConfiguration, ...]
    metadata: Mapping[str, object] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def bodies(self) -> tuple[ChartBody, ...]:
        return self.planets + self.nodes

    def body(self, name: str) -> ChartBody:
        for candidate in self.bodies:
            if candidate.name == name:
                return candidate
        raise KeyError(name)

    def top_aspects(self, limit: int = DEFAULT_TOP_N) -> tuple[Aspect, ...]:
        """Return the ``limit`` tightest aspects."""

        return self.aspects[: max(0, limit)]

    def to_dict(self) -> dict[str, Any]:
        return {
            "birth": self.birth.to_dict(),
            "julian_day": self.julian_day,
            "planets": [body.to_dict() for body in self.planets],
            "ascendant": self.ascendant.to_dict(),
            "midheaven": self.midheaven.to_dict(),
            "house_cusps": [cusp.to_dict() for cusp in self.houses],
            "aspects": [aspect.to_dict() for aspect in self.aspects],
            "nodes": [node.to_dict() for node in self.nodes],
            "configurations": [config.to_dict() for config in self.configurations],
            "metadata": dict(self.metadata),
        }

    def to_json(self) -> bytes:
        """Serialize the chart as the opaque blob stored by persistence."""

        return json_utils.dumps(self.to_dict())

    def summary_fields(self) -> dict[str, object]:
        """Flattened scalar fields stored next to the blob for querying."""

        return {
            "name": self.birth.name,
            "birth_date": self.birth.date.isoformat(),
            "birth_time": self.birth.time.strftime("%H:%M"),
            "city": self.birth.city.name,
            "sun_sign": self.body("Sun").sign,
            "ascendant_sign": self.ascendant.sign,
        }


def derive_south_node(north: ChartBody) -> ChartBody:
    """Return the south node mirrored from ``north``.

    The longitude is ``(north + 180) mod 360``. Its speed is defined as the
    negation of the north node's speed; this is a modelling convention since
    the nodes are one geometric axis rather than independent bodies.
    """

    return ChartBody(
        name=SOUTH_NODE,
        longitude=norm360(north.longitude + 180.0),
        latitude=-north.latitude,
        distance_au=north.distance_au,
        speed_longitude=-north.speed_longitude,
        is_node=True,
    )


def _placed(position: BodyPosition, cusps: Sequence[HouseCusp], **extra: Any) -> ChartBody:
    longitude = norm360(position.longitude)
    return ChartBody(
        name=position.body,
        longitude=longitude,
        latitude=position.latitude,
        distance_au=position.distance_au,
        speed_longitude=position.speed_longitude,
        house=house_of(longitude, cusps),
        **extra,
    )


def assemble_chart(
    birth: BirthEvent,
    oracle: EphemerisOracle,
    *,
    config: ChartConfig | None = None,
    aspect_orbs: OrbProfile | None = None,
    pattern_orbs: OrbProfile | None = None,
) -> NatalChart:
    """Compute every chart component with an already-open ``oracle``.

    Houses come first since body houses depend on them, then the ten planets,
    the lunar nodes, aspects over all twelve bodies, and finally patterns.
    """

    chart_config = config or ChartConfig()
    aspect_orbs = aspect_orbs or chart_config.aspect_orbs()
    pattern_orbs = pattern_orbs or chart_config.pattern_orbs()

    jd_ut = oracle.julian_day(birth.utc_moment)
    house_positions = oracle.houses(jd_ut, birth.city.latitude, birth.city.longitude)
    cusps = build_house_cusps(house_positions.cusps)
    rulerships = compute_rulerships(cusps, PLANET_CODES)

    planets = tuple(
        _placed(
            oracle.body_position(jd_ut, code, name),
            cusps,
            rules_houses=rulerships.get(name, ()),
        )
        for name, code in PLANET_CODES.items()
    )

    north_position = replace(oracle.lunar_node(jd_ut), body=NORTH_NODE)
    north = _placed(north_position, cusps, is_node=True)
    south = derive_south_node(north)
    nodes = (north, replace(south, house=house_of(south.longitude, cusps)))

    all_bodies = planets + nodes
    aspects = detect_aspects(all_bodies, aspect_orbs)
    configurations = detect_configurations(all_bodies, pattern_orbs)

    metadata: dict[str, object] = {
        "house_system": chart_config.house_system,
        "nodes_variant": chart_config.nodes_variant,
        "aspect_profile": aspect_orbs.name,
        "pattern_profile": pattern_orbs.name,
    }
    mode = getattr(oracle, "mode", None)
    if mode is not None:
        metadata["ephemeris_mode"] = mode

    return NatalChart(
        birth=birth,
        julian_day=jd_ut,
        planets=planets,
        ascendant=ChartAngle("Ascendant", norm360(house_positions.ascendant)),
        midheaven=ChartAngle("Midheaven", norm360(house_positions.midheaven)),
        houses=cusps,
        aspects=tuple(aspects),
        nodes=nodes,
        configurations=tuple(configurations),
        metadata=MappingProxyType(metadata),
    )


def default_oracle_factory(config: ChartConfig | None = None, **options: Any) -> OracleFactory:
    """Return a factory opening a Swiss Ephemeris session for ``config``."""

    from ..ephemeris.swisseph_adapter import SwissEphemerisAdapter

    chart_config = config or ChartConfig()

    async def _open() -> EphemerisOracle:
        return await SwissEphemerisAdapter.from_chart_config(chart_config, **options)

    return _open


async def build_chart(
    birth: BirthEvent,
    *,
    config: ChartConfig | None = None,
    oracle_factory: OracleFactory | None = None,
    aspect_orbs: OrbProfile | None = None,
    pattern_orbs: OrbProfile | None = None,
) -> NatalChart:
    """Open an ephemeris session, assemble the chart and release the session.

    Any oracle failure (unavailable backend, rejected house request, body
    error) propagates unchanged; no partial chart is returned. The session is
    closed on both success and failure.
    """

    chart_config = config or ChartConfig()
    factory = oracle_factory or default_oracle_factory(chart_config)
    start = perf_counter()
    try:
        oracle = await factory()
        try:
            chart = assemble_chart(
                birth,
                oracle,
                config=chart_config,
                aspect_orbs=aspect_orbs,
                pattern_orbs=pattern_orbs,
            )
        finally:
            oracle.close()
    except Exception as exc:
        COMPUTE_ERRORS.labels(component="natal_chart", error=exc.__class__.__name__).inc()
        LOG.warning(
            {
                "event": "chart_build_failed",
                "city": birth.city.name,
                "error": exc.__class__.__name__,
                "reason": str(exc),
            }
        )
        raise
    finally:
        CHART_BUILD_DURATION.labels(operation="natal").observe(perf_counter() - start)
    return chart
