"""
Geo utilities.

Great-circle distance on a spherical earth and radius containment.
Points are GeoPoint instances or plain (latitude, longitude) tuples in
decimal degrees.
"""

import math
from dataclasses import dataclass
from typing import Union

from .errors import InvalidCoordinate, InvalidRadius


EARTH_RADIUS_KM = 6371.0
KM_PER_MILE = 1.609344


@dataclass(frozen=True)
class GeoPoint:
    """A latitude/longitude pair in decimal degrees."""

    latitude: float
    longitude: float

    def to_dict(self) -> dict:
        return {"latitude": self.latitude, "longitude": self.longitude}

    @classmethod
    def from_dict(cls, data: dict) -> "GeoPoint":
        return cls(latitude=float(data["latitude"]), longitude=float(data["longitude"]))


PointLike = Union[GeoPoint, tuple[float, float]]


def validate_point(point: PointLike, field: str = "point") -> tuple[float, float]:
    """
    Normalize a point to a (lat, lng) tuple, checking ranges.

    Raises:
        InvalidCoordinate: If either component is missing, not finite,
            or outside [-90, 90] / [-180, 180]
    """
    if isinstance(point, GeoPoint):
        lat, lng = point.latitude, point.longitude
    else:
        try:
            lat, lng = point
        except (TypeError, ValueError):
            raise InvalidCoordinate(field, "Expected a (latitude, longitude) pair", point)

    try:
        lat = float(lat)
        lng = float(lng)
    except (TypeError, ValueError):
        raise InvalidCoordinate(field, "Coordinates must be numeric", point)

    if not (math.isfinite(lat) and -90.0 <= lat <= 90.0):
        raise InvalidCoordinate(field, "Latitude must be between -90 and 90", lat)
    if not (math.isfinite(lng) and -180.0 <= lng <= 180.0):
        raise InvalidCoordinate(field, "Longitude must be between -180 and 180", lng)

    return lat, lng


def distance(point_a: PointLike, point_b: PointLike) -> float:
    """Haversine distance in kilometers between two points."""
    lat1, lng1 = validate_point(point_a, "point_a")
    lat2, lng2 = validate_point(point_b, "point_b")

    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)

    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    # a can round slightly above 1.0 for antipodal points
    c = 2 * math.asin(math.sqrt(min(1.0, a)))
    return EARTH_RADIUS_KM * c


def validate_radius(radius_km: float, field: str = "radius_km") -> float:
    """Return radius as float, raising InvalidRadius unless positive and finite."""
    try:
        radius = float(radius_km)
    except (TypeError, ValueError):
        raise InvalidRadius(field, "Radius must be numeric", radius_km)
    if not math.isfinite(radius) or radius <= 0:
        raise InvalidRadius(field, "Radius must be positive", radius_km)
    return radius


def within_radius(center: PointLike, point: PointLike, radius_km: float) -> bool:
    """True if point lies within radius_km of center (inclusive)."""
    radius = validate_radius(radius_km)
    return distance(center, point) <= radius


def miles_to_km(miles: float) -> float:
    return miles * KM_PER_MILE


def km_to_miles(km: float) -> float:
    return km / KM_PER_MILE
