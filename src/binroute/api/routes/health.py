"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ...data.sources import DataSource
from ..dependencies import get_data_source

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/data-sources", status_code=status.HTTP_200_OK)
def health_data_sources(source: DataSource = Depends(get_data_source)) -> dict:
    """Report which bin stores answer a trivial query."""
    providers = getattr(source, "providers", [source])
    checks = []
    for provider in providers:
        result = provider.list_collectors()
        entry = {"source": provider.name, "healthy": result.ok}
        if not result.ok:
            entry["error"] = result.error
        checks.append(entry)
    return {"sources": checks, "healthy": any(check["healthy"] for check in checks)}
