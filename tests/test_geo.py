"""
DevCamper API — Radius Search Geometry Tests
=============================================
"""

import math

import pytest

from devcamper.services import geo

BOSTON = (42.3505, -71.1054)
LOWELL = (42.6334, -71.3162)  # ~22 miles from Boston
NEW_YORK = (40.7128, -74.0060)  # ~190 miles from Boston


class TestCentralAngle:
    def test_same_point_is_zero(self):
        assert geo.central_angle(*BOSTON, *BOSTON) == pytest.approx(0.0)

    def test_boston_to_new_york_distance(self):
        miles = geo.central_angle(*BOSTON, *NEW_YORK) * geo.EARTH_RADIUS_MILES
        assert miles == pytest.approx(190, abs=5)

    def test_antipodes_is_pi(self):
        assert geo.central_angle(0, 0, 0, 180) == pytest.approx(math.pi)


class TestWithinCap:
    def test_nearby_point_inside(self):
        radius = geo.angular_radius(30)
        assert geo.within_cap(*BOSTON, *LOWELL, radius)

    def test_far_point_outside(self):
        radius = geo.angular_radius(30)
        assert not geo.within_cap(*BOSTON, *NEW_YORK, radius)

    def test_radius_is_distance_over_earth_radius(self):
        assert geo.angular_radius(3963) == pytest.approx(1.0)


class TestBoundingBox:
    def test_box_contains_every_point_of_the_cap(self):
        radius = geo.angular_radius(100)
        box = geo.bounding_box(*BOSTON, radius)
        # Sample the cap boundary
        lat0, lng0 = map(math.radians, BOSTON)
        for bearing in range(0, 360, 15):
            b = math.radians(bearing)
            lat = math.asin(
                math.sin(lat0) * math.cos(radius) + math.cos(lat0) * math.sin(radius) * math.cos(b)
            )
            lng = lng0 + math.atan2(
                math.sin(b) * math.sin(radius) * math.cos(lat0),
                math.cos(radius) - math.sin(lat0) * math.sin(lat),
            )
            lat_d, lng_d = math.degrees(lat), math.degrees(lng)
            assert box.min_lat - 1e-9 <= lat_d <= box.max_lat + 1e-9
            assert box.min_lng - 1e-9 <= lng_d <= box.max_lng + 1e-9

    def test_box_crossing_antimeridian(self):
        box = geo.bounding_box(0.0, 179.9, geo.angular_radius(50))
        assert box.crosses_antimeridian
        assert box.min_lng > 179
        assert box.max_lng < -179

    def test_cap_over_pole_spans_all_longitudes(self):
        box = geo.bounding_box(89.9, 0.0, geo.angular_radius(100))
        assert box.max_lat == pytest.approx(90.0)
        assert box.min_lng == pytest.approx(-180.0)
        assert box.max_lng == pytest.approx(180.0)
        assert not box.crosses_antimeridian
