from __future__ import annotations

import asyncio
from datetime import UTC, date, datetime, time

import orjson
import pytest
from prometheus_client import CollectorRegistry

from natalengine.chart.config import ChartConfig
from natalengine.chart.natal import (
    DEFAULT_TOP_N,
    BirthEvent,
    NatalChart,
    assemble_chart,
    build_chart,
    parse_clock_time,
)
from natalengine.config.settings import Settings
from natalengine.core.bodies import NORTH_NODE, PLANET_CODES, SOUTH_NODE
from natalengine.detectors.configurations import ConfigurationType
from natalengine.ephemeris.oracle import HouseComputationFailed, OracleUnavailable
from natalengine.geo.cities import City, MissingTimezoneOffset, UnrecognizedCity
from natalengine.observability import ensure_metrics_registered
from natalengine.scoring.orb import OrbProfile


def _birth(london) -> BirthEvent:
    return BirthEvent(date="1990-05-17", time="14:30", city=london, name="Ada")


def _error_count(registry: CollectorRegistry, error: str) -> float:
    value = registry.get_sample_value(
        "natalengine_compute_errors_total",
        {"component": "natal_chart", "error": error},
    )
    return value or 0.0


# ---------------------------------------------------------------------------
# Birth events
# ---------------------------------------------------------------------------


def test_birth_event_converts_fixed_offset_to_utc() -> None:
    city = City(name="Moscow", latitude=55.75, longitude=37.62, utc_offset=3)
    birth = BirthEvent(date=date(1990, 5, 17), time="01:15", city=city)
    assert birth.utc_moment == datetime(1990, 5, 16, 22, 15, tzinfo=UTC)


def test_birth_event_supports_fractional_offsets() -> None:
    city = City(name="Mumbai", latitude=19.07, longitude=72.88, utc_offset=5.5)
    birth = BirthEvent(date="2000-01-01", time=time(12, 0), city=city)
    assert birth.utc_moment == datetime(2000, 1, 1, 6, 30, tzinfo=UTC)


@pytest.mark.parametrize("raw", ["1430", "14-30", "", "ab:cd"])
def test_clock_time_must_be_hh_mm(raw: str) -> None:
    with pytest.raises(ValueError):
        parse_clock_time(raw)


def test_clock_time_range_checked() -> None:
    with pytest.raises(ValueError):
        parse_clock_time("24:10")


def test_city_record_rejected_before_any_oracle_call(stub_oracle) -> None:
    with pytest.raises(MissingTimezoneOffset):
        BirthEvent(
            date="1990-05-17",
            time="14:30",
            city={"name": "Nowhere", "latitude": 10.0, "longitude": 10.0},
        )
    with pytest.raises(UnrecognizedCity):
        BirthEvent(date="1990-05-17", time="14:30", city={"name": "Lost", "timezone": 1})
    assert stub_oracle.moments == []


# ---------------------------------------------------------------------------
# Assembly
# ---------------------------------------------------------------------------


def test_assemble_chart_components(stub_oracle, london) -> None:
    birth = _birth(london)
    chart = assemble_chart(birth, stub_oracle)

    assert isinstance(chart, NatalChart)
    assert stub_oracle.moments == [datetime(1990, 5, 17, 14, 30, tzinfo=UTC)]
    assert stub_oracle.house_requests == [(51.5074, -0.1278)]
    assert [body.name for body in chart.planets] == list(PLANET_CODES)
    assert len(chart.houses) == 12
    assert chart.ascendant.sign == "Aries"
    assert chart.midheaven.sign == "Capricorn"

    houses = {body.name: body.house for body in chart.planets}
    assert houses == {
        "Sun": 1,
        "Moon": 5,
        "Mercury": 4,
        "Venus": 4,
        "Mars": 4,
        "Jupiter": 9,
        "Saturn": 10,
        "Uranus": 7,
        "Neptune": 12,
        "Pluto": 7,
    }
    assert chart.body("Mars").rules_houses == (1, 8)
    assert chart.body("Moon").rules_houses == (4,)
    assert chart.body("Mercury").retrograde
    assert not chart.body("Sun").retrograde


def test_nodes_are_antipodal_with_negated_speed(stub_oracle, london) -> None:
    chart = assemble_chart(_birth(london), stub_oracle)
    north, south = chart.nodes
    assert north.name == NORTH_NODE
    assert south.name == SOUTH_NODE
    assert north.longitude == pytest.approx(40.0)
    assert south.longitude == pytest.approx(220.0)
    assert south.speed_longitude == pytest.approx(-north.speed_longitude)
    assert north.house == 2
    assert south.house == 8
    assert north.rules_houses == ()
    assert south.is_node


def test_aspects_cover_nodes_and_stay_sorted(stub_oracle, london) -> None:
    chart = assemble_chart(_birth(london), stub_oracle)
    orbs = [aspect.orb for aspect in chart.aspects]
    assert orbs == sorted(orbs)

    node_axis = [
        aspect
        for aspect in chart.aspects
        if aspect.pair == frozenset((NORTH_NODE, SOUTH_NODE))
    ]
    assert len(node_axis) == 1
    assert node_axis[0].name == "Opposition"
    assert node_axis[0].orb == pytest.approx(0.0)
    assert chart.top_aspects(4) == chart.aspects[:4]


def test_configurations(stub_oracle, london) -> None:
    chart = assemble_chart(_birth(london), stub_oracle)
    by_kind: dict[ConfigurationType, list] = {}
    for config in chart.configurations:
        by_kind.setdefault(config.kind, []).append(config)

    (grand_trine,) = by_kind[ConfigurationType.GRAND_TRINE]
    assert set(grand_trine.bodies) == {"Sun", "Moon", "Jupiter"}

    (stellium,) = by_kind[ConfigurationType.STELLIUM]
    assert stellium.house == 4
    assert set(stellium.bodies) == {"Mercury", "Venus", "Mars"}

    assert any(
        config.apex == "Uranus" and set(config.bodies[:2]) == {"Venus", "Saturn"}
        for config in by_kind[ConfigurationType.T_SQUARE]
    )
    for config in chart.configurations:
        assert NORTH_NODE not in config.bodies
        assert SOUTH_NODE not in config.bodies


def test_explicit_orb_profiles_are_used(stub_oracle, london) -> None:
    tight = OrbProfile.uniform("tight", 0.0)
    chart = assemble_chart(
        _birth(london), stub_oracle, aspect_orbs=tight, pattern_orbs=tight
    )
    assert all(aspect.orb == 0.0 for aspect in chart.aspects)
    assert chart.metadata["aspect_profile"] == "tight"


def test_patterns_use_pattern_orbs_only(stub_oracle, london) -> None:
    # Sun-Moon and Moon-Jupiter trines are 3° wide, past the 2° transit orb.
    stub_oracle.longitudes["Moon"] = 133.0
    chart = assemble_chart(
        _birth(london), stub_oracle, config=ChartConfig(aspect_profile="transit")
    )

    assert not any(
        aspect.pair == frozenset(("Sun", "Moon")) for aspect in chart.aspects
    )
    trines = [
        config
        for config in chart.configurations
        if config.kind is ConfigurationType.GRAND_TRINE
    ]
    assert [set(config.bodies) for config in trines] == [{"Sun", "Moon", "Jupiter"}]


def test_metadata_is_read_only(stub_oracle, london) -> None:
    chart = assemble_chart(_birth(london), stub_oracle)
    with pytest.raises(TypeError):
        chart.metadata["house_system"] = "koch"  # type: ignore[index]
    assert chart.to_dict()["metadata"]["house_system"] == "placidus"


def test_top_aspects_default(stub_oracle, london) -> None:
    chart = assemble_chart(_birth(london), stub_oracle)
    assert chart.top_aspects() == chart.aspects[:DEFAULT_TOP_N]
    assert Settings(aspects={"top_n": 1}).top_aspects(chart) == chart.aspects[:1]
    assert Settings(aspects={"top_n": 0}).top_aspects(chart) == ()


def test_serialization(stub_oracle, london) -> None:
    chart = assemble_chart(_birth(london), stub_oracle, config=ChartConfig())
    payload = orjson.loads(chart.to_json())

    assert payload["birth"]["utc"] == "1990-05-17T14:30:00+00:00"
    assert len(payload["planets"]) == 10
    assert len(payload["house_cusps"]) == 12
    assert payload["ascendant"]["sign"] == "Aries"
    assert {node["name"] for node in payload["nodes"]} == {NORTH_NODE, SOUTH_NODE}
    assert payload["metadata"]["house_system"] == "placidus"
    assert payload["metadata"]["ephemeris_mode"] == "stub"

    assert chart.summary_fields() == {
        "name": "Ada",
        "birth_date": "1990-05-17",
        "birth_time": "14:30",
        "city": "London",
        "sun_sign": "Aries",
        "ascendant_sign": "Aries",
    }


# ---------------------------------------------------------------------------
# Async build and session lifecycle
# ---------------------------------------------------------------------------


def test_build_chart_closes_session(stub_oracle, oracle_factory, london) -> None:
    chart = asyncio.run(
        build_chart(_birth(london), oracle_factory=oracle_factory(stub_oracle))
    )
    assert chart.body("Sun").sign == "Aries"
    assert stub_oracle.close_calls == 1


def test_house_failure_aborts_build(make_oracle, oracle_factory, london) -> None:
    registry = CollectorRegistry()
    ensure_metrics_registered(registry)
    before = _error_count(registry, "HouseComputationFailed")

    oracle = make_oracle(fail_houses=True)
    with pytest.raises(HouseComputationFailed) as excinfo:
        asyncio.run(build_chart(_birth(london), oracle_factory=oracle_factory(oracle)))

    assert excinfo.value.latitude == pytest.approx(51.5074)
    assert oracle.body_requests == []
    assert oracle.close_calls == 1
    assert _error_count(registry, "HouseComputationFailed") == before + 1


def test_unavailable_oracle_propagates(london) -> None:
    async def _broken():
        raise OracleUnavailable("pyswisseph missing")

    with pytest.raises(OracleUnavailable):
        asyncio.run(build_chart(_birth(london), oracle_factory=_broken))


def test_concurrent_builds_use_independent_sessions(
    make_oracle, oracle_factory, london
) -> None:
    first = make_oracle()
    second = make_oracle(longitudes={**dict.fromkeys(PLANET_CODES, 0.0), "Sun": 200.0})

    async def _run():
        return await asyncio.gather(
            build_chart(_birth(london), oracle_factory=oracle_factory(first)),
            build_chart(_birth(london), oracle_factory=oracle_factory(second)),
        )

    chart_a, chart_b = asyncio.run(_run())
    assert chart_a.body("Sun").sign == "Aries"
    assert chart_b.body("Sun").sign == "Libra"
    assert first.close_calls == second.close_calls == 1
