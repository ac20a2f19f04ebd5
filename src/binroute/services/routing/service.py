"""Collector route orchestration service."""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Sequence

from ...data.sources import DataSource
from ...errors import NotFoundError
from ...models.domain import BinLocation, Collector, GeoPoint, RouteItem, RouteItemStatus
from ...persistence.filesystem import FileStorage
from ...schemas.routing import (
    CollectBinResponse,
    CurrentRouteItemModel,
    CurrentRouteResponse,
    GeoPointModel,
    OptimizeRouteRequest,
    OptimizeRouteResponse,
    RouteBinDetails,
    RouteMetricsModel,
    RouteMetricsRequest,
    RouteStopModel,
)
from ..outputs.route_formatter import route_to_csv, route_to_json
from .models import OptimizedRoute
from .optimizer import compute_route_metrics, default_start, optimize_route

logger = logging.getLogger(__name__)

# Serializes load-modify-save sequences on bins and collectors within this process.
# Stores shared by several processes still resolve concurrent writes last-write-wins.
record_lock = threading.RLock()


def _point(model: GeoPointModel | None) -> GeoPoint | None:
    if model is None:
        return None
    return GeoPoint(latitude=model.latitude, longitude=model.longitude)


def _point_model(point: GeoPoint) -> GeoPointModel:
    return GeoPointModel(latitude=point.latitude, longitude=point.longitude)


def load_collector(source: DataSource, collector_id: str) -> Collector:
    collector = source.get_collector(collector_id).unwrap()
    if collector is None:
        raise NotFoundError(f"Collector '{collector_id}' not found")
    return collector


def build_optimized_route(stops: Sequence[BinLocation], start: GeoPoint | None = None) -> OptimizedRoute:
    origin = start if start is not None else default_start()
    ordered = optimize_route(stops, origin)
    return OptimizedRoute(start=origin, stops=ordered, metrics=compute_route_metrics(ordered))


def _persist_run(collector_id: str, route: OptimizedRoute) -> str:
    storage = FileStorage()
    run_dir = storage.make_run_directory(collector_id)
    storage.write_json(run_dir / "summary.json", route_to_json(collector_id, route))
    storage.write_text(run_dir / "route.csv", route_to_csv(collector_id, route))
    logger.info(f"Persisted route run for collector {collector_id} to {run_dir}")
    return str(run_dir)


def optimize_collector_route(
    source: DataSource,
    collector_id: str,
    payload: OptimizeRouteRequest,
) -> OptimizeRouteResponse:
    """Order the requested bins and make the result the collector's current route."""
    bins = source.get_bins(payload.bin_ids).unwrap() or []
    requested = {bin_id.strip() for bin_id in payload.bin_ids if bin_id.strip()}
    missing = requested - {item.bin_id for item in bins}
    if missing:
        logger.warning(f"Ignoring unknown bins for collector {collector_id}: {sorted(missing)}")

    route = build_optimized_route([item.as_location() for item in bins], _point(payload.start_location))

    with record_lock:
        collector = load_collector(source, collector_id)
        collector.current_route = [
            RouteItem(bin_id=stop.bin_id, order=order, status=RouteItemStatus.PENDING)
            for order, stop in enumerate(route.stops, start=1)
        ]
        source.save_collector(collector).unwrap()

    output_dir = _persist_run(collector_id, route) if payload.persist else None

    return OptimizeRouteResponse(
        collector_id=collector_id,
        start_location=_point_model(route.start),
        route=[
            RouteStopModel(order=order, bin_id=stop.bin_id, location=_point_model(stop.location))
            for order, stop in enumerate(route.stops, start=1)
        ],
        total_distance_km=route.metrics.total_distance_km,
        estimated_time_minutes=route.metrics.estimated_time_minutes,
        output_dir=output_dir,
    )


def route_metrics(payload: RouteMetricsRequest) -> RouteMetricsModel:
    stops = [
        BinLocation(bin_id=stop.bin_id, location=GeoPoint(stop.location.latitude, stop.location.longitude))
        for stop in payload.stops
    ]
    metrics = compute_route_metrics(
        stops,
        average_speed_kmh=payload.average_speed_kmh,
        service_minutes_per_stop=payload.service_minutes_per_stop,
    )
    return RouteMetricsModel(
        total_distance_km=metrics.total_distance_km,
        estimated_time_minutes=metrics.estimated_time_minutes,
    )


def get_current_route(source: DataSource, collector_id: str) -> CurrentRouteResponse:
    collector = load_collector(source, collector_id)
    bins = source.get_bins([item.bin_id for item in collector.current_route]).unwrap() or []
    by_id = {item.bin_id: item for item in bins}

    items: list[CurrentRouteItemModel] = []
    for route_item in collector.current_route:
        bin_record = by_id.get(route_item.bin_id)
        details = None
        if bin_record is not None:
            details = RouteBinDetails(
                waste_type=bin_record.waste_type,
                location=_point_model(bin_record.location),
                address=bin_record.address,
                fill_level=bin_record.fill_level,
                status=bin_record.status,
            )
        items.append(
            CurrentRouteItemModel(
                bin_id=route_item.bin_id,
                order=route_item.order,
                status=route_item.status,
                bin=details,
            )
        )

    return CurrentRouteResponse(
        collector_id=collector_id,
        route=items,
        total_bins=len(items),
        completed_bins=sum(1 for item in items if item.status == RouteItemStatus.COMPLETED),
        pending_bins=sum(1 for item in items if item.status == RouteItemStatus.PENDING),
    )


def update_route_item_status(
    source: DataSource,
    collector_id: str,
    bin_id: str,
    status: RouteItemStatus,
) -> RouteItem:
    with record_lock:
        collector = load_collector(source, collector_id)
        route_item = collector.find_route_item(bin_id)
        if route_item is None:
            raise NotFoundError(f"Bin '{bin_id}' is not in the current route")
        route_item.status = status
        source.save_collector(collector).unwrap()
    return route_item


def collect_bin(
    source: DataSource,
    collector_id: str,
    bin_id: str,
    now: datetime | None = None,
) -> CollectBinResponse:
    """Empty a bin and tick it off the collector's route when it is on it."""
    now = now or datetime.now(timezone.utc)
    with record_lock:
        collector = load_collector(source, collector_id)
        bin_record = source.get_bin(bin_id).unwrap()
        if bin_record is None:
            raise NotFoundError(f"Bin '{bin_id}' not found")

        bin_record.mark_collected(now)
        source.save_bin(bin_record).unwrap()

        route_item = collector.find_route_item(bin_id)
        if route_item is not None:
            route_item.status = RouteItemStatus.COMPLETED
            source.save_collector(collector).unwrap()

    return CollectBinResponse(
        bin_id=bin_id,
        collection_date=now,
        next_collection_date=bin_record.next_collection_date,
        route_item_completed=route_item is not None,
    )
