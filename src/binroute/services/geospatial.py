"""Geospatial helper functions."""

from __future__ import annotations

import math

from ..errors import InvalidCoordinateError
from ..models.domain import GeoPoint

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def haversine_distance_km(a: GeoPoint, b: GeoPoint) -> float:
    return haversine_km(a.latitude, a.longitude, b.latitude, b.longitude)


def is_valid_point(point: GeoPoint) -> bool:
    lat, lon = point.latitude, point.longitude
    if not (math.isfinite(lat) and math.isfinite(lon)):
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0


def validate_point(point: GeoPoint, label: str | None = None) -> GeoPoint:
    """Return the point unchanged, or raise InvalidCoordinateError if it is unusable."""

    if not is_valid_point(point):
        raise InvalidCoordinateError(point.latitude, point.longitude, label)
    return point
