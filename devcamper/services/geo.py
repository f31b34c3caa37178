"""
DevCamper API — Spherical Geometry for Radius Search
=====================================================

What:  The math behind GET /bootcamps/radius/{zipcode}/{distance}.

    angular radius  r = distance / 3963            (Earth radius in miles)
    a point P lies in the spherical cap around C iff central_angle(C, P) <= r

How the search uses it:
    1. bounding_box(C, r) gives a lat/lng rectangle that contains the cap;
       the store filters on it using the (latitude, longitude) index.
    2. within_cap() is applied to the candidates for the exact answer.

The bounding box follows the standard construction: latitude ± r, and a
longitude half-width of asin(sin r / cos lat). Caps touching a pole span
every longitude; boxes crossing ±180° are split by the caller.
"""

import math
from dataclasses import dataclass

EARTH_RADIUS_MILES = 3963.0

_MIN_LAT = -math.pi / 2
_MAX_LAT = math.pi / 2
_MIN_LNG = -math.pi
_MAX_LNG = math.pi


def angular_radius(distance_miles: float) -> float:
    """Radians subtended by `distance_miles` along the Earth's surface."""
    return distance_miles / EARTH_RADIUS_MILES


def central_angle(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Haversine central angle in radians between two points given in degrees."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = phi2 - phi1
    dlmb = math.radians(lng2 - lng1)
    h = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
    return 2 * math.asin(min(1.0, math.sqrt(h)))


def within_cap(center_lat: float, center_lng: float, lat: float, lng: float, radius: float) -> bool:
    return central_angle(center_lat, center_lng, lat, lng) <= radius


@dataclass(frozen=True)
class BoundingBox:
    """Degrees. When min_lng > max_lng the box wraps across the antimeridian."""

    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float

    @property
    def crosses_antimeridian(self) -> bool:
        return self.min_lng > self.max_lng


def bounding_box(center_lat: float, center_lng: float, radius: float) -> BoundingBox:
    lat = math.radians(center_lat)
    lng = math.radians(center_lng)

    min_lat = lat - radius
    max_lat = lat + radius

    if min_lat > _MIN_LAT and max_lat < _MAX_LAT:
        delta = math.asin(min(1.0, math.sin(radius) / math.cos(lat)))
        min_lng = lng - delta
        if min_lng < _MIN_LNG:
            min_lng += 2 * math.pi
        max_lng = lng + delta
        if max_lng > _MAX_LNG:
            max_lng -= 2 * math.pi
    else:
        # Cap contains a pole
        min_lat = max(min_lat, _MIN_LAT)
        max_lat = min(max_lat, _MAX_LAT)
        min_lng, max_lng = _MIN_LNG, _MAX_LNG

    return BoundingBox(
        min_lat=math.degrees(min_lat),
        max_lat=math.degrees(max_lat),
        min_lng=math.degrees(min_lng),
        max_lng=math.degrees(max_lng),
    )
