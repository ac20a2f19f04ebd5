"""Stateless routing calculations."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from ...schemas.routing import RouteMetricsModel, RouteMetricsRequest
from ...services.routing.service import route_metrics

router = APIRouter(prefix="/routing", tags=["routing"])


@router.post("/metrics", response_model=RouteMetricsModel, status_code=status.HTTP_200_OK)
def metrics(payload: RouteMetricsRequest) -> RouteMetricsModel:
    """Distance and time for bins already in visiting order."""
    try:
        return route_metrics(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
