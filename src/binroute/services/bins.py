"""Bin listing, collector overviews and supervisor bin management."""

from __future__ import annotations

from typing import Sequence

from ..data.sources import DataSource
from ..errors import NotFoundError
from ..models.domain import Bin, BinStatus, Collector, RouteItemStatus, WasteType
from ..schemas.bins import (
    AssignBinsResponse,
    BinMapModel,
    BinModel,
    CollectorDashboardResponse,
    CollectorSummaryModel,
    DashboardOverview,
)
from ..schemas.routing import GeoPointModel
from .routing.service import load_collector, record_lock

FULL_FILL_LEVEL = 90.0

# 1-based fill level bands as (lower bound inclusive, upper bound exclusive)
FILL_LEVEL_BANDS: dict[int, tuple[float, float | None]] = {
    1: (0.0, 25.0),
    2: (25.0, 50.0),
    3: (50.0, 75.0),
    4: (75.0, FULL_FILL_LEVEL),
    5: (FULL_FILL_LEVEL, None),
}


def bin_to_model(bin_record: Bin) -> BinModel:
    return BinModel(
        bin_id=bin_record.bin_id,
        location=GeoPointModel(latitude=bin_record.location.latitude, longitude=bin_record.location.longitude),
        address=bin_record.address,
        zone=bin_record.zone,
        waste_type=bin_record.waste_type,
        capacity=bin_record.capacity,
        fill_level=bin_record.fill_level,
        status=bin_record.status,
        last_collected=bin_record.last_collected,
        next_collection_date=bin_record.next_collection_date,
    )


def bin_to_map_model(bin_record: Bin) -> BinMapModel:
    return BinMapModel(
        id=bin_record.bin_id,
        waste_type=bin_record.waste_type,
        location=GeoPointModel(latitude=bin_record.location.latitude, longitude=bin_record.location.longitude),
        fill_level=bin_record.fill_level,
        status=bin_record.status,
        last_collected=bin_record.last_collected,
        next_collection=bin_record.next_collection_date,
        color=bin_record.fill_color,
    )


def in_fill_band(fill_level: float, band: int) -> bool:
    if band not in FILL_LEVEL_BANDS:
        raise ValueError(f"Fill level band must be between 1 and {len(FILL_LEVEL_BANDS)}, got {band}")
    lower, upper = FILL_LEVEL_BANDS[band]
    # band 1 also takes readings below zero
    if band > 1 and fill_level < lower:
        return False
    return upper is None or fill_level < upper


def list_collector_bins(source: DataSource, collector_id: str) -> list[BinMapModel]:
    collector = load_collector(source, collector_id)
    bins = source.get_bins(collector.assigned_bin_ids).unwrap() or []
    return [bin_to_map_model(item) for item in bins]


def _route_progress(collector: Collector) -> tuple[int, int]:
    completed = sum(1 for item in collector.current_route if item.status == RouteItemStatus.COMPLETED)
    return len(collector.current_route), completed


def collector_dashboard(source: DataSource, collector_id: str) -> CollectorDashboardResponse:
    """Assigned bins for the map plus the counts shown at the top of the collector dashboard."""
    collector = load_collector(source, collector_id)
    bins = source.get_bins(collector.assigned_bin_ids).unwrap() or []
    route_total, route_completed = _route_progress(collector)
    return CollectorDashboardResponse(
        collector_id=collector_id,
        overview=DashboardOverview(
            total_assigned_bins=len(collector.assigned_bin_ids),
            full_bins=sum(1 for item in bins if item.fill_level >= FULL_FILL_LEVEL),
            offline_bins=sum(1 for item in bins if item.status == BinStatus.OFFLINE),
            route_total=route_total,
            route_completed=route_completed,
        ),
        assigned_bins=[bin_to_map_model(item) for item in bins],
    )


def list_collectors(source: DataSource) -> list[CollectorSummaryModel]:
    collectors = source.list_collectors().unwrap() or []
    summaries = []
    for collector in sorted(collectors, key=lambda item: item.collector_id):
        route_total, route_completed = _route_progress(collector)
        summaries.append(
            CollectorSummaryModel(
                collector_id=collector.collector_id,
                name=collector.name,
                assigned_bin_ids=list(collector.assigned_bin_ids),
                route_total=route_total,
                route_completed=route_completed,
            )
        )
    return summaries


def list_bins(
    source: DataSource,
    status: BinStatus | None = None,
    waste_type: WasteType | None = None,
    fill_band: int | None = None,
    zone: str | None = None,
) -> list[BinModel]:
    bins = source.get_bins().unwrap() or []
    if status is not None:
        bins = [item for item in bins if item.status == status]
    if waste_type is not None:
        bins = [item for item in bins if item.waste_type == waste_type]
    if fill_band is not None:
        bins = [item for item in bins if in_fill_band(item.fill_level, fill_band)]
    if zone:
        bins = [item for item in bins if item.zone.lower() == zone.strip().lower()]
    # fullest first so supervisors see what needs collecting
    bins.sort(key=lambda item: item.fill_level, reverse=True)
    return [bin_to_model(item) for item in bins]


def update_bin_status(source: DataSource, bin_id: str, status: BinStatus) -> BinModel:
    with record_lock:
        bin_record = source.get_bin(bin_id).unwrap()
        if bin_record is None:
            raise NotFoundError(f"Bin '{bin_id}' not found")
        bin_record.status = status
        source.save_bin(bin_record).unwrap()
    return bin_to_model(bin_record)


def assign_bins(source: DataSource, collector_id: str, bin_ids: Sequence[str]) -> AssignBinsResponse:
    """Replace a collector's assigned bins. Every bin must exist."""
    requested = list(dict.fromkeys(bin_id.strip() for bin_id in bin_ids if bin_id.strip()))
    with record_lock:
        collector = load_collector(source, collector_id)
        found = {item.bin_id for item in source.get_bins(requested).unwrap() or []}
        unknown = [bin_id for bin_id in requested if bin_id not in found]
        if unknown:
            raise ValueError(f"Unknown bins: {', '.join(unknown)}")
        collector.assigned_bin_ids = requested
        source.save_collector(collector).unwrap()
    return AssignBinsResponse(collector_id=collector_id, assigned_bin_ids=requested)
