from __future__ import annotations

import pytest

from natalengine.geo.cities import (
    City,
    CityAtlas,
    CityLookupError,
    MissingTimezoneOffset,
    UnrecognizedCity,
)


def test_from_record_accepts_offset_aliases() -> None:
    for key in ("utc_offset", "timezone", "tz_offset"):
        city = City.from_record({"name": "Kyiv", "lat": 50.45, "lon": 30.52, key: 2})
        assert city.utc_offset == 2.0
        assert city.latitude == pytest.approx(50.45)


def test_from_record_requires_coordinates() -> None:
    with pytest.raises(UnrecognizedCity):
        City.from_record({"name": "Atlantis", "timezone": 0})
    with pytest.raises(UnrecognizedCity):
        City.from_record({"latitude": 1.0, "longitude": 1.0, "timezone": 0})
    with pytest.raises(UnrecognizedCity):
        City.from_record({"name": "Bad", "latitude": "north", "longitude": 1.0, "timezone": 0})


def test_from_record_requires_offset() -> None:
    with pytest.raises(MissingTimezoneOffset):
        City.from_record({"name": "Paris", "latitude": 48.85, "longitude": 2.35})
    with pytest.raises(CityLookupError):
        City.from_record(
            {"name": "Paris", "latitude": 48.85, "longitude": 2.35, "timezone": None}
        )


@pytest.mark.parametrize(
    "latitude, longitude, offset, error",
    [
        (91.0, 0.0, 0.0, UnrecognizedCity),
        (0.0, 181.0, 0.0, UnrecognizedCity),
        (0.0, 0.0, 15.0, MissingTimezoneOffset),
    ],
)
def test_city_ranges(latitude, longitude, offset, error) -> None:
    with pytest.raises(error):
        City(name="Edge", latitude=latitude, longitude=longitude, utc_offset=offset)


def test_atlas_lookup_is_case_insensitive() -> None:
    atlas = CityAtlas.from_records(
        [
            {"name": "New  York", "latitude": 40.71, "longitude": -74.0, "timezone": -5},
            {"name": "Tokyo", "latitude": 35.68, "longitude": 139.69, "timezone": 9},
        ]
    )
    assert len(atlas) == 2
    assert "new york" in atlas
    assert atlas.get("TOKYO").utc_offset == 9.0
    with pytest.raises(UnrecognizedCity):
        atlas.get("Springfield")


def test_atlas_from_yaml(tmp_path) -> None:
    path = tmp_path / "cities.yaml"
    path.write_text(
        "cities:\n"
        "  - name: Novosibirsk\n"
        "    latitude: 55.03\n"
        "    longitude: 82.92\n"
        "    timezone: 7\n",
        encoding="utf-8",
    )
    atlas = CityAtlas.from_yaml(path)
    assert atlas.get("novosibirsk").to_dict() == {
        "name": "Novosibirsk",
        "latitude": 55.03,
        "longitude": 82.92,
        "utc_offset": 7.0,
    }


def test_atlas_from_yaml_rejects_scalars(tmp_path) -> None:
    path = tmp_path / "cities.yaml"
    path.write_text("just text\n", encoding="utf-8")
    with pytest.raises(ValueError):
        CityAtlas.from_yaml(path)
