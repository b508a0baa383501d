import pytest

from balloonwatch.core.geo import (
    bounds_of,
    normalize,
    path_portion,
    planar_distance,
    squared_planar_distance,
)
from balloonwatch.models.geo import GeoPoint


def test_squared_planar_distance_is_degree_space():
    a = GeoPoint(lat=0.0, lon=0.0)
    b = GeoPoint(lat=3.0, lon=4.0)

    assert squared_planar_distance(a, b) == 25.0
    assert planar_distance(a, b) == 5.0
    assert squared_planar_distance(a, a) == 0.0


def test_bounds_of_contains_points_with_padding():
    points = [GeoPoint(lat=10.0, lon=20.0), GeoPoint(lat=12.0, lon=18.0)]

    bounds = bounds_of(points, padding_deg=0.5)

    assert bounds is not None
    assert bounds.south_west == GeoPoint(lat=9.5, lon=17.5)
    assert bounds.north_east == GeoPoint(lat=12.5, lon=20.5)


def test_bounds_of_clamps_to_valid_range_and_handles_empty():
    assert bounds_of([]) is None

    bounds = bounds_of([GeoPoint(lat=89.8, lon=179.9)], padding_deg=1.0)

    assert bounds is not None
    assert bounds.north_east.lat == 90.0
    assert bounds.north_east.lon == 180.0


def test_normalize_clamps_latitude_and_wraps_longitude():
    assert normalize(95.0, 10.0) == (90.0, 10.0)
    assert normalize(-91.0, 10.0) == (-90.0, 10.0)
    lat, lon = normalize(0.0, 181.0)
    assert lat == 0.0
    assert lon == pytest.approx(-179.0)
    assert normalize(12.0, 180.0) == (12.0, 180.0)


def test_path_portion_reveals_prefix():
    points = list(range(10))

    assert path_portion(points, 0.0) == []
    assert path_portion(points, 0.01) == [0]
    assert path_portion(points, 0.5) == [0, 1, 2, 3, 4]
    assert path_portion(points, 1.0) == points
    assert path_portion(points, 2.0) == points
