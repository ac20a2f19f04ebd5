"""Routing request/response schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from ..models.domain import BinStatus, RouteItemStatus, WasteType


class GeoPointModel(BaseModel):
    latitude: float
    longitude: float


class BinLocationModel(BaseModel):
    bin_id: str
    location: GeoPointModel


class OptimizeRouteRequest(BaseModel):
    bin_ids: List[str] = Field(..., description="Bins to visit. Unknown IDs are ignored.")
    start_location: Optional[GeoPointModel] = Field(
        default=None,
        description="Where the collector sets off. Defaults to the configured depot location.",
    )
    persist: bool = Field(default=False, description="Write the run summary and CSV to the data root.")


class RouteStopModel(BaseModel):
    order: int
    bin_id: str
    location: GeoPointModel


class OptimizeRouteResponse(BaseModel):
    collector_id: str
    start_location: GeoPointModel
    route: List[RouteStopModel]
    total_distance_km: float
    estimated_time_minutes: int
    output_dir: Optional[str] = None


class RouteMetricsRequest(BaseModel):
    stops: List[BinLocationModel] = Field(..., description="Bins in visiting order.")
    average_speed_kmh: Optional[float] = Field(default=None, gt=0)
    service_minutes_per_stop: Optional[float] = Field(default=None, ge=0)


class RouteMetricsModel(BaseModel):
    total_distance_km: float
    estimated_time_minutes: int


class RouteBinDetails(BaseModel):
    waste_type: WasteType
    location: GeoPointModel
    address: str
    fill_level: float
    status: BinStatus


class CurrentRouteItemModel(BaseModel):
    bin_id: str
    order: int
    status: RouteItemStatus
    bin: Optional[RouteBinDetails] = None


class CurrentRouteResponse(BaseModel):
    collector_id: str
    route: List[CurrentRouteItemModel]
    total_bins: int
    completed_bins: int
    pending_bins: int


class RouteStatusUpdate(BaseModel):
    status: RouteItemStatus


class CollectBinRequest(BaseModel):
    bin_id: str


class CollectBinResponse(BaseModel):
    bin_id: str
    collection_date: datetime
    next_collection_date: Optional[datetime]
    route_item_completed: bool
