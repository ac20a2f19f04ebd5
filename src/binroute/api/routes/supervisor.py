"""Supervisor endpoints for bin oversight and assignment."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from ...data.sources import DataSource
from ...models.domain import BinStatus, Role, WasteType
from ...schemas.bins import (
    AssignBinsRequest,
    AssignBinsResponse,
    BinModel,
    BinStatusUpdate,
    CollectorSummaryModel,
)
from ...services import bins as bin_service
from ..dependencies import Caller, get_data_source, require_role
from ..errors import to_http_error

router = APIRouter(prefix="/supervisor", tags=["supervisor"])

supervisor_only = require_role(Role.SUPERVISOR)


@router.get("/collectors", response_model=List[CollectorSummaryModel], status_code=status.HTTP_200_OK)
def list_collectors(
    caller: Caller = Depends(supervisor_only),
    source: DataSource = Depends(get_data_source),
) -> List[CollectorSummaryModel]:
    try:
        return bin_service.list_collectors(source)
    except Exception as exc:
        raise to_http_error(exc, "list collectors") from exc


@router.get("/bins", response_model=List[BinModel], status_code=status.HTTP_200_OK)
def list_bins(
    bin_status: Optional[BinStatus] = Query(default=None, alias="status", description="Filter by bin status"),
    waste_type: Optional[WasteType] = Query(default=None, alias="wasteType", description="Filter by waste type"),
    fill_level: Optional[int] = Query(
        default=None,
        ge=1,
        le=5,
        alias="fillLevel",
        description="Fill band: 1 <25%, 2 25-50%, 3 50-75%, 4 75-90%, 5 >=90%",
    ),
    zone: Optional[str] = Query(default=None, description="Filter by zone name"),
    caller: Caller = Depends(supervisor_only),
    source: DataSource = Depends(get_data_source),
) -> List[BinModel]:
    try:
        return bin_service.list_bins(
            source,
            status=bin_status,
            waste_type=waste_type,
            fill_band=fill_level,
            zone=zone,
        )
    except Exception as exc:
        raise to_http_error(exc, "list bins") from exc


@router.put("/bins/{bin_id}/status", response_model=BinModel, status_code=status.HTTP_200_OK)
def update_bin_status(
    bin_id: str,
    payload: BinStatusUpdate,
    caller: Caller = Depends(supervisor_only),
    source: DataSource = Depends(get_data_source),
) -> BinModel:
    try:
        return bin_service.update_bin_status(source, bin_id, payload.status)
    except Exception as exc:
        raise to_http_error(exc, "update bin status") from exc


@router.put("/assign-bins", response_model=AssignBinsResponse, status_code=status.HTTP_200_OK)
def assign_bins(
    payload: AssignBinsRequest,
    caller: Caller = Depends(supervisor_only),
    source: DataSource = Depends(get_data_source),
) -> AssignBinsResponse:
    try:
        return bin_service.assign_bins(source, payload.collector_id, payload.bin_ids)
    except Exception as exc:
        raise to_http_error(exc, "assign bins") from exc
