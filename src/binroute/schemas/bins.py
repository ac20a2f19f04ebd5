"""Bin request/response schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from ..models.domain import BinStatus, WasteType
from .routing import GeoPointModel


class BinModel(BaseModel):
    bin_id: str
    location: GeoPointModel
    address: str
    zone: str
    waste_type: WasteType
    capacity: float
    fill_level: float
    status: BinStatus
    last_collected: Optional[datetime] = None
    next_collection_date: Optional[datetime] = None


class BinMapModel(BaseModel):
    """Bin as drawn on the collector map."""

    id: str
    waste_type: WasteType
    location: GeoPointModel
    fill_level: float
    status: BinStatus
    last_collected: Optional[datetime] = None
    next_collection: Optional[datetime] = None
    color: str


class BinStatusUpdate(BaseModel):
    status: BinStatus


class AssignBinsRequest(BaseModel):
    collector_id: str
    bin_ids: List[str] = Field(..., min_length=1)


class AssignBinsResponse(BaseModel):
    collector_id: str
    assigned_bin_ids: List[str]


class CollectorSummaryModel(BaseModel):
    collector_id: str
    name: str
    assigned_bin_ids: List[str]
    route_total: int
    route_completed: int


class DashboardOverview(BaseModel):
    total_assigned_bins: int
    full_bins: int
    offline_bins: int
    route_total: int
    route_completed: int


class CollectorDashboardResponse(BaseModel):
    collector_id: str
    overview: DashboardOverview
    assigned_bins: List[BinMapModel]
