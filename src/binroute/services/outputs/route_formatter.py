"""Serializers for optimized routes."""

from __future__ import annotations

import csv
import io

from ..geospatial import haversine_distance_km
from ..routing.models import OptimizedRoute


def route_to_json(collector_id: str, route: OptimizedRoute) -> dict:
    return {
        "collector_id": collector_id,
        "start": {"latitude": route.start.latitude, "longitude": route.start.longitude},
        "total_distance_km": route.metrics.total_distance_km,
        "estimated_time_minutes": route.metrics.estimated_time_minutes,
        "stops": [
            {
                "order": order,
                "bin_id": stop.bin_id,
                "latitude": stop.location.latitude,
                "longitude": stop.location.longitude,
            }
            for order, stop in enumerate(route.stops, start=1)
        ],
    }


def route_to_csv(collector_id: str, route: OptimizedRoute) -> str:
    buffer = io.StringIO()
    fieldnames = [
        "collector_id",
        "order",
        "bin_id",
        "latitude",
        "longitude",
        "distance_from_prev_km",
    ]
    writer = csv.DictWriter(buffer, fieldnames=fieldnames)
    writer.writeheader()
    previous = None
    for order, stop in enumerate(route.stops, start=1):
        # first row has no previous bin; the start leg is not part of the route distance
        leg = haversine_distance_km(previous.location, stop.location) if previous else 0.0
        writer.writerow(
            {
                "collector_id": collector_id,
                "order": order,
                "bin_id": stop.bin_id,
                "latitude": stop.location.latitude,
                "longitude": stop.location.longitude,
                "distance_from_prev_km": round(leg, 3),
            }
        )
        previous = stop
    return buffer.getvalue()
