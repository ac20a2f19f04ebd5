"""Greedy nearest-neighbour ordering of bins and route metrics.

The ordering is a construction heuristic, not a TSP solver: from the current
position it always drives to the closest bin still waiting, so the total
distance is usually good but never guaranteed minimal.
"""

from __future__ import annotations

import math
from typing import Sequence

from ...config import settings
from ...models.domain import BinLocation, GeoPoint
from ..geospatial import haversine_distance_km, validate_point
from .models import RouteMetrics


def default_start() -> GeoPoint:
    return GeoPoint(settings.default_start_latitude, settings.default_start_longitude)


def optimize_route(bins: Sequence[BinLocation], start: GeoPoint | None = None) -> list[BinLocation]:
    """Order bins by repeatedly visiting the nearest unvisited one.

    Args:
        bins: Bins to visit, in caller order. Caller order decides ties.
        start: Where the collector sets off from. Defaults to the configured
            fallback location.

    Returns:
        A permutation of ``bins`` in visiting order.

    Raises:
        InvalidCoordinateError: If the start or any bin location is non-finite
            or out of range.
    """
    current = validate_point(start if start is not None else default_start(), "start")
    for item in bins:
        validate_point(item.location, item.bin_id)

    route: list[BinLocation] = []
    remaining = list(bins)
    while remaining:
        nearest_index = 0
        nearest_distance = haversine_distance_km(current, remaining[0].location)
        for index in range(1, len(remaining)):
            distance = haversine_distance_km(current, remaining[index].location)
            # strict comparison keeps the earliest bin on ties
            if distance < nearest_distance:
                nearest_distance = distance
                nearest_index = index
        nearest = remaining.pop(nearest_index)
        route.append(nearest)
        current = nearest.location
    return route


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with ties going up; the builtin round sends ties to the even digit."""
    scale = 10**digits
    return math.floor(value * scale + 0.5) / scale


def total_distance_km(route: Sequence[BinLocation]) -> float:
    total = 0.0
    for previous, following in zip(route, route[1:]):
        total += haversine_distance_km(previous.location, following.location)
    return round_half_up(total, 2)


def compute_route_metrics(
    route: Sequence[BinLocation],
    *,
    average_speed_kmh: float | None = None,
    service_minutes_per_stop: float | None = None,
) -> RouteMetrics:
    """Distance between consecutive stops plus driving and emptying time.

    The leg from the start location to the first bin is not counted.

    Raises:
        InvalidCoordinateError: If any stop location is non-finite or out of range.
    """
    speed = average_speed_kmh if average_speed_kmh is not None else settings.average_speed_kmh
    per_stop = (
        service_minutes_per_stop if service_minutes_per_stop is not None else settings.service_minutes_per_stop
    )
    if speed <= 0:
        raise ValueError("average_speed_kmh must be positive.")
    if per_stop < 0:
        raise ValueError("service_minutes_per_stop must not be negative.")
    for stop in route:
        validate_point(stop.location, stop.bin_id)

    distance = total_distance_km(route)
    driving_minutes = (distance / speed) * 60
    collection_minutes = len(route) * per_stop
    return RouteMetrics(
        total_distance_km=distance,
        estimated_time_minutes=int(round_half_up(driving_minutes + collection_minutes)),
    )
