"""Demo records used when no database is reachable."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from ..models.domain import Bin, BinStatus, Collector, GeoPoint, WasteType


def demo_bins(now: datetime | None = None) -> list[Bin]:
    now = now or datetime.now(timezone.utc)
    return [
        Bin(
            bin_id="BIN001",
            location=GeoPoint(28.6139, 77.2090),
            waste_type=WasteType.ORGANIC,
            address="Delhi, India",
            zone="Central Delhi",
            capacity=100.0,
            fill_level=75.0,
            status=BinStatus.ACTIVE,
            next_collection_date=now + timedelta(days=7),
        ),
        Bin(
            bin_id="BIN002",
            location=GeoPoint(28.6140, 77.2091),
            waste_type=WasteType.PLASTIC,
            address="Delhi, India",
            zone="Central Delhi",
            capacity=100.0,
            fill_level=90.0,
            status=BinStatus.ACTIVE,
            next_collection_date=now + timedelta(days=7),
        ),
    ]


def demo_collectors() -> list[Collector]:
    return [
        Collector(
            collector_id="3",
            name="Demo Collector",
            assigned_bin_ids=["BIN001", "BIN002"],
        )
    ]
