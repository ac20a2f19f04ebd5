"""Routing domain models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from ...models.domain import BinLocation, GeoPoint


@dataclass(frozen=True, slots=True)
class RouteMetrics:
    total_distance_km: float
    estimated_time_minutes: int


@dataclass(slots=True)
class OptimizedRoute:
    start: GeoPoint
    stops: List[BinLocation]
    metrics: RouteMetrics
