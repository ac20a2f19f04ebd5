"""Collector endpoints: assigned bins, route optimization and collection."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, status

from ...data.sources import DataSource
from ...models.domain import Role
from ...schemas.bins import BinMapModel, CollectorDashboardResponse
from ...schemas.routing import (
    CollectBinRequest,
    CollectBinResponse,
    CurrentRouteResponse,
    OptimizeRouteRequest,
    OptimizeRouteResponse,
    RouteStatusUpdate,
)
from ...services.bins import collector_dashboard, list_collector_bins
from ...services.routing import service as routing_service
from ..dependencies import Caller, get_data_source, require_role
from ..errors import to_http_error

router = APIRouter(prefix="/collector", tags=["collector"])

collector_only = require_role(Role.COLLECTOR)


@router.get("/dashboard", response_model=CollectorDashboardResponse, status_code=status.HTTP_200_OK)
def dashboard(
    caller: Caller = Depends(collector_only),
    source: DataSource = Depends(get_data_source),
) -> CollectorDashboardResponse:
    try:
        return collector_dashboard(source, caller.user_id)
    except Exception as exc:
        raise to_http_error(exc, "load collector dashboard") from exc


@router.get("/bins", response_model=List[BinMapModel], status_code=status.HTTP_200_OK)
def assigned_bins(
    caller: Caller = Depends(collector_only),
    source: DataSource = Depends(get_data_source),
) -> List[BinMapModel]:
    """Assigned bins formatted for the map, colour-coded by fill level."""
    try:
        return list_collector_bins(source, caller.user_id)
    except Exception as exc:
        raise to_http_error(exc, "load assigned bins") from exc


@router.post("/optimize-route", response_model=OptimizeRouteResponse, status_code=status.HTTP_200_OK)
def optimize_route(
    payload: OptimizeRouteRequest,
    caller: Caller = Depends(collector_only),
    source: DataSource = Depends(get_data_source),
) -> OptimizeRouteResponse:
    try:
        return routing_service.optimize_collector_route(source, caller.user_id, payload)
    except Exception as exc:
        raise to_http_error(exc, "optimize route") from exc


@router.post("/collect-bin", response_model=CollectBinResponse, status_code=status.HTTP_200_OK)
def collect_bin(
    payload: CollectBinRequest,
    caller: Caller = Depends(collector_only),
    source: DataSource = Depends(get_data_source),
) -> CollectBinResponse:
    try:
        return routing_service.collect_bin(source, caller.user_id, payload.bin_id)
    except Exception as exc:
        raise to_http_error(exc, "mark bin as collected") from exc


@router.get("/route", response_model=CurrentRouteResponse, status_code=status.HTTP_200_OK)
def current_route(
    caller: Caller = Depends(collector_only),
    source: DataSource = Depends(get_data_source),
) -> CurrentRouteResponse:
    try:
        return routing_service.get_current_route(source, caller.user_id)
    except Exception as exc:
        raise to_http_error(exc, "load current route") from exc


@router.put("/route/{bin_id}/status", status_code=status.HTTP_200_OK)
def update_route_status(
    bin_id: str,
    payload: RouteStatusUpdate,
    caller: Caller = Depends(collector_only),
    source: DataSource = Depends(get_data_source),
) -> dict:
    try:
        item = routing_service.update_route_item_status(source, caller.user_id, bin_id, payload.status)
    except Exception as exc:
        raise to_http_error(exc, "update route status") from exc
    return {
        "success": True,
        "bin_id": item.bin_id,
        "order": item.order,
        "status": item.status.value,
    }
