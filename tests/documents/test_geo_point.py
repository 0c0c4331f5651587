from __future__ import annotations

import pytest

from docbuilder.domain.documents.geo_point import (
    UNRESOLVED,
    build_geo_point,
    parse_coordinate,
    resolve_geo_columns,
)
from docbuilder.domain.documents.models import GeoFieldSpec, GeoPoint


def test_default_spec():
    spec = GeoFieldSpec.from_options()

    assert spec.latitude_names == frozenset({"latitude", "lat"})
    assert spec.longitude_names == frozenset({"longitude", "lon"})
    assert spec.location_field_name == "location"


def test_empty_string_is_not_replaced_by_default():
    spec = GeoFieldSpec.from_options(latitude_field_names="")

    assert spec.latitude_names == frozenset({""})


def test_resolve_last_match_wins_for_both_sets():
    spec = GeoFieldSpec.from_options()
    columns = resolve_geo_columns(["LON", "Latitude", "lat", "longitude"], spec)

    assert columns.latitude_index == 2
    assert columns.longitude_index == 3
    assert columns.resolved


def test_resolve_without_matches():
    columns = resolve_geo_columns(["id", "name"], GeoFieldSpec.from_options())

    assert columns.latitude_index == UNRESOLVED
    assert columns.longitude_index == UNRESOLVED
    assert not columns.resolved
    assert not columns.is_geo_column(0)


def test_parse_coordinate():
    assert parse_coordinate("12.5") == 12.5
    assert parse_coordinate("-0.3") == -0.3
    assert parse_coordinate("1e2") == 100.0
    assert parse_coordinate("abc") is None
    assert parse_coordinate("NaN") is None
    assert parse_coordinate("-Infinity") is None


@pytest.mark.parametrize(
    "value, expected",
    [
        (" 12.5 ", 12.5),
        (".5", 0.5),
        ("5.", 5.0),
        ("+1E-2", 0.01),
        ("1.5d", 1.5),
        ("2F", 2.0),
        ("1_000", None),
        ("0x1p3", None),
        ("1e999", None),
        ("\u0661\u0662", None),
        ("1.2.3", None),
        ("e5", None),
    ],
)
def test_parse_coordinate_accepts_only_decimal_notation(value, expected):
    assert parse_coordinate(value) == expected


def test_build_geo_point_requires_both_values():
    assert build_geo_point("1", "2") == GeoPoint(lat=1.0, lon=2.0)
    assert build_geo_point("1", "") is None
    assert build_geo_point("x", "2") is None


def test_geo_point_renders_as_lat_lon_object():
    assert GeoPoint(1.5, -2.0).to_dict() == {"lat": 1.5, "lon": -2.0}
