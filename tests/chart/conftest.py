from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime

import pytest

from natalengine.ephemeris.oracle import (
    BodyPosition,
    HouseComputationFailed,
    HousePositions,
)

EQUAL_CUSPS = tuple(float(degree) for degree in range(0, 360, 30))

# Sun/Moon/Jupiter in grand trine; Mercury/Venus/Mars stacked in house 4;
# Saturn opposite Venus with Uranus square both.
DEFAULT_LONGITUDES: Mapping[str, float] = {
    "Sun": 10.0,
    "Moon": 130.0,
    "Mercury": 95.0,
    "Venus": 100.0,
    "Mars": 115.0,
    "Jupiter": 250.0,
    "Saturn": 280.0,
    "Uranus": 190.0,
    "Neptune": 333.0,
    "Pluto": 205.0,
}


class StubOracle:
    """In-memory ephemeris session with fixed positions."""

    def __init__(
        self,
        longitudes: Mapping[str, float] | None = None,
        *,
        node_longitude: float = 40.0,
        node_speed: float = -0.053,
        cusps: tuple[float, ...] = EQUAL_CUSPS,
        ascendant: float = 0.0,
        midheaven: float = 270.0,
        fail_houses: bool = False,
        julian_day: float = 2_451_545.0,
    ) -> None:
        self.longitudes = dict(longitudes or DEFAULT_LONGITUDES)
        self.node_longitude = node_longitude
        self.node_speed = node_speed
        self.cusps = cusps
        self.ascendant = ascendant
        self.midheaven = midheaven
        self.fail_houses = fail_houses
        self.jd = julian_day
        self.moments: list[datetime] = []
        self.house_requests: list[tuple[float, float]] = []
        self.body_requests: list[str] = []
        self.close_calls = 0
        self.mode = "stub"

    def julian_day(self, moment: datetime) -> float:
        self.moments.append(moment)
        return self.jd

    def body_position(self, jd_ut: float, body_code: int, body_name: str) -> BodyPosition:
        self.body_requests.append(body_name)
        return BodyPosition(
            body=body_name,
            julian_day=jd_ut,
            longitude=self.longitudes[body_name],
            latitude=0.0,
            distance_au=1.0,
            speed_longitude=-0.1 if body_name == "Mercury" else 0.5,
        )

    def lunar_node(self, jd_ut: float) -> BodyPosition:
        return BodyPosition(
            body="mean_node",
            julian_day=jd_ut,
            longitude=self.node_longitude,
            latitude=0.0,
            distance_au=0.0,
            speed_longitude=self.node_speed,
        )

    def houses(self, jd_ut: float, latitude: float, longitude: float) -> HousePositions:
        self.house_requests.append((latitude, longitude))
        if self.fail_houses:
            raise HouseComputationFailed(
                "placidus undefined at this latitude",
                latitude=latitude,
                longitude=longitude,
                system="placidus",
            )
        return HousePositions(
            system="P",
            cusps=self.cusps,
            ascendant=self.ascendant,
            midheaven=self.midheaven,
        )

    def close(self) -> None:
        self.close_calls += 1


def factory_for(oracle: StubOracle):
    async def _open() -> StubOracle:
        return oracle

    return _open


@pytest.fixture()
def stub_oracle() -> StubOracle:
    return StubOracle()


@pytest.fixture()
def london() -> dict[str, object]:
    return {"name": "London", "latitude": 51.5074, "longitude": -0.1278, "timezone": 0}


@pytest.fixture()
def oracle_factory():
    """Return a helper wrapping a stub oracle in an async session factory."""

    return factory_for


@pytest.fixture()
def make_oracle():
    return StubOracle
