from __future__ import annotations

import asyncio
from datetime import UTC, datetime

import pytest

from natalengine.chart.natal import BirthEvent, assemble_chart
from natalengine.chart.transits import compute_transits, top_transits
from natalengine.config.settings import Settings
from natalengine.core.bodies import NODE_NAMES, PLANET_CODES
from natalengine.scoring.orb import OrbProfile

MOMENT = datetime(2024, 3, 1, 9, 0, tzinfo=UTC)


@pytest.fixture()
def natal_chart(stub_oracle, london):
    birth = BirthEvent(date="1990-05-17", time="14:30", city=london)
    return assemble_chart(birth, stub_oracle)


@pytest.fixture()
def transit_oracle(make_oracle):
    # 345° is out of orb of every natal planet; Sun and Mars carry the contacts.
    longitudes = dict.fromkeys(PLANET_CODES, 345.0)
    longitudes.update({"Sun": 40.5, "Mars": 131.0})
    return make_oracle(longitudes=longitudes)


def test_contacts_sorted_tightest_first(natal_chart, transit_oracle, oracle_factory) -> None:
    contacts = asyncio.run(
        compute_transits(natal_chart, MOMENT, oracle_factory=oracle_factory(transit_oracle))
    )

    assert transit_oracle.moments == [MOMENT]
    assert transit_oracle.close_calls == 1
    summary = [(c.transiting_body, c.natal_body, c.aspect_name) for c in contacts]
    assert summary == [
        ("Sun", "Moon", "Square"),
        ("Sun", "Venus", "Sextile"),
        ("Sun", "Saturn", "Trine"),
        ("Mars", "Sun", "Trine"),
        ("Mars", "Moon", "Conjunction"),
        ("Mars", "Jupiter", "Trine"),
        ("Mars", "Uranus", "Sextile"),
    ]
    assert [c.orb for c in contacts] == pytest.approx([0.5] * 3 + [1.0] * 4)


def test_lunar_nodes_are_not_targets(natal_chart, transit_oracle, oracle_factory) -> None:
    # Transiting Sun at 40.5° sits on the natal North Node at 40°.
    contacts = asyncio.run(
        compute_transits(natal_chart, MOMENT, oracle_factory=oracle_factory(transit_oracle))
    )
    assert all(contact.natal_body not in NODE_NAMES for contact in contacts)


def test_profile_override(natal_chart, transit_oracle, oracle_factory) -> None:
    contacts = asyncio.run(
        compute_transits(
            natal_chart,
            MOMENT,
            oracle_factory=oracle_factory(transit_oracle),
            profile=OrbProfile.uniform("exacting", 0.75),
        )
    )
    assert {c.transiting_body for c in contacts} == {"Sun"}


def test_top_transits(natal_chart, transit_oracle, oracle_factory) -> None:
    contacts = asyncio.run(
        compute_transits(natal_chart, MOMENT, oracle_factory=oracle_factory(transit_oracle))
    )
    top = top_transits(contacts, 4)
    assert top == contacts[:4]
    assert top_transits(contacts) == contacts[:4]
    assert top_transits(contacts, 0) == []
    assert Settings(aspects={"top_n": 2}).top_transits(contacts) == contacts[:2]
    assert top[0].to_dict()["symbol"] == "□"
