import pytest
from src.domain.models.geo import GeoPoint


def test_geo_point_accepts_valid_coordinates() -> None:
    p = GeoPoint(lat=39.7684, lon=-86.1581)
    assert p.lat == 39.7684
    assert p.lon == -86.1581


@pytest.mark.parametrize(
    ("lat", "lon"),
    [
        (-90.0001, 0.0),
        (90.0001, 0.0),
        (0.0, -180.0001),
        (0.0, 180.0001),
        (float("nan"), 0.0),
        (0.0, float("nan")),
    ],
)
def test_geo_point_rejects_out_of_range_coordinates(lat: float, lon: float) -> None:
    with pytest.raises(ValueError):
        GeoPoint(lat=lat, lon=lon)


def test_as_lonlat_uses_geojson_order() -> None:
    assert GeoPoint(lat=39.0, lon=-86.0).as_lonlat() == (-86.0, 39.0)


def test_displacement_is_largest_axis_difference() -> None:
    a = GeoPoint(lat=39.0, lon=-86.0)
    b = GeoPoint(lat=39.01, lon=-86.03)
    assert b.displacement_deg(a) == pytest.approx(0.03)
    assert a.displacement_deg(a) == 0.0
