"""Bin and collector stores with an explicit fallback chain.

Every store answers with a ``LookupResult`` instead of raising, so the
``FallbackDataSource`` can try its providers in order and move on when one
of them is unreachable. Only provider failures fall through; a lookup that
succeeds with no record ends the chain.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Generic, Iterable, Optional, Protocol, Sequence, TypeVar

from ..config import settings
from ..db.supabase import get_supabase_client
from ..errors import DataSourceError
from ..models.domain import Bin, BinStatus, Collector, GeoPoint, RouteItem, RouteItemStatus, WasteType
from .seed import demo_bins, demo_collectors

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(slots=True)
class LookupResult(Generic[T]):
    value: Optional[T] = None
    error: Optional[str] = None
    source: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Optional[T]:
        if self.error is not None:
            raise DataSourceError(self.error)
        return self.value


class DataSource(Protocol):
    name: str

    def get_bins(self, bin_ids: Sequence[str] | None = None) -> LookupResult[list[Bin]]: ...

    def get_bin(self, bin_id: str) -> LookupResult[Bin]: ...

    def save_bin(self, bin_record: Bin) -> LookupResult[Bin]: ...

    def list_collectors(self) -> LookupResult[list[Collector]]: ...

    def get_collector(self, collector_id: str) -> LookupResult[Collector]: ...

    def save_collector(self, collector: Collector) -> LookupResult[Collector]: ...


def _unique(ids: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    ordered: list[str] = []
    for value in ids:
        key = value.strip()
        if key and key not in seen:
            seen.add(key)
            ordered.append(key)
    return ordered


def _in_request_order(bins: Iterable[Bin], bin_ids: Sequence[str] | None) -> list[Bin]:
    """Return bins in the order the caller asked for them; unknown ids are dropped."""
    if bin_ids is None:
        return list(bins)
    by_id = {item.bin_id: item for item in bins}
    return [by_id[bin_id] for bin_id in _unique(bin_ids) if bin_id in by_id]


class InMemoryDataSource:
    """Process-local store; hands out copies so callers never share mutable records."""

    name = "memory"

    def __init__(self, bins: Iterable[Bin] = (), collectors: Iterable[Collector] = ()) -> None:
        self._bins: dict[str, Bin] = {item.bin_id: copy.deepcopy(item) for item in bins}
        self._collectors: dict[str, Collector] = {
            collector.collector_id: copy.deepcopy(collector) for collector in collectors
        }

    @classmethod
    def with_demo_data(cls) -> "InMemoryDataSource":
        return cls(bins=demo_bins(), collectors=demo_collectors())

    def get_bins(self, bin_ids: Sequence[str] | None = None) -> LookupResult[list[Bin]]:
        bins = _in_request_order(self._bins.values(), bin_ids)
        return LookupResult(value=[copy.deepcopy(item) for item in bins], source=self.name)

    def get_bin(self, bin_id: str) -> LookupResult[Bin]:
        found = self._bins.get(bin_id)
        return LookupResult(value=copy.deepcopy(found) if found else None, source=self.name)

    def save_bin(self, bin_record: Bin) -> LookupResult[Bin]:
        self._bins[bin_record.bin_id] = copy.deepcopy(bin_record)
        return LookupResult(value=bin_record, source=self.name)

    def list_collectors(self) -> LookupResult[list[Collector]]:
        return LookupResult(value=[copy.deepcopy(c) for c in self._collectors.values()], source=self.name)

    def get_collector(self, collector_id: str) -> LookupResult[Collector]:
        found = self._collectors.get(collector_id)
        return LookupResult(value=copy.deepcopy(found) if found else None, source=self.name)

    def save_collector(self, collector: Collector) -> LookupResult[Collector]:
        self._collectors[collector.collector_id] = copy.deepcopy(collector)
        return LookupResult(value=collector, source=self.name)


def _parse_datetime(value: Any) -> datetime | None:
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def bin_from_row(row: dict[str, Any]) -> Bin:
    return Bin(
        bin_id=str(row["bin_id"]),
        location=GeoPoint(float(row["latitude"]), float(row["longitude"])),
        waste_type=WasteType(row.get("waste_type") or WasteType.MIXED.value),
        address=row.get("address") or "",
        zone=row.get("zone") or "",
        capacity=float(row.get("capacity") or 0.0),
        fill_level=float(row.get("fill_level") or 0.0),
        status=BinStatus(row.get("status") or BinStatus.ACTIVE.value),
        last_collected=_parse_datetime(row.get("last_collected")),
        collection_frequency_days=int(row.get("collection_frequency_days") or settings.collection_frequency_days),
        next_collection_date=_parse_datetime(row.get("next_collection_date")),
    )


def bin_to_row(bin_record: Bin) -> dict[str, Any]:
    return {
        "bin_id": bin_record.bin_id,
        "latitude": bin_record.location.latitude,
        "longitude": bin_record.location.longitude,
        "waste_type": bin_record.waste_type.value,
        "address": bin_record.address,
        "zone": bin_record.zone,
        "capacity": bin_record.capacity,
        "fill_level": bin_record.fill_level,
        "status": bin_record.status.value,
        "last_collected": bin_record.last_collected.isoformat() if bin_record.last_collected else None,
        "collection_frequency_days": bin_record.collection_frequency_days,
        "next_collection_date": (
            bin_record.next_collection_date.isoformat() if bin_record.next_collection_date else None
        ),
    }


def collector_from_row(row: dict[str, Any]) -> Collector:
    route = [
        RouteItem(
            bin_id=str(item["bin_id"]),
            order=int(item["order"]),
            status=RouteItemStatus(item.get("status") or RouteItemStatus.PENDING.value),
        )
        for item in (row.get("current_route") or [])
    ]
    return Collector(
        collector_id=str(row["collector_id"]),
        name=row.get("name") or "",
        assigned_bin_ids=[str(bin_id) for bin_id in (row.get("assigned_bin_ids") or [])],
        current_route=route,
    )


def collector_to_row(collector: Collector) -> dict[str, Any]:
    return {
        "collector_id": collector.collector_id,
        "name": collector.name,
        "assigned_bin_ids": list(collector.assigned_bin_ids),
        "current_route": [
            {"bin_id": item.bin_id, "order": item.order, "status": item.status.value}
            for item in collector.current_route
        ],
    }


class SupabaseDataSource:
    """Persistent store backed by the ``bins`` and ``collectors`` tables."""

    name = "supabase"

    def __init__(self, client: Any) -> None:
        self.client = client

    def _run(self, action: str, call: Callable[[], T]) -> LookupResult[T]:
        try:
            return LookupResult(value=call(), source=self.name)
        except Exception as exc:
            return LookupResult(error=f"{action} failed: {exc}", source=self.name)

    def get_bins(self, bin_ids: Sequence[str] | None = None) -> LookupResult[list[Bin]]:
        def query() -> list[Bin]:
            request = self.client.table("bins").select("*")
            if bin_ids is not None:
                ids = _unique(bin_ids)
                if not ids:
                    return []
                request = request.in_("bin_id", ids)
            response = request.execute()
            return _in_request_order((bin_from_row(row) for row in response.data or []), bin_ids)

        return self._run("get_bins", query)

    def get_bin(self, bin_id: str) -> LookupResult[Bin]:
        def query() -> Bin | None:
            response = self.client.table("bins").select("*").eq("bin_id", bin_id).limit(1).execute()
            return bin_from_row(response.data[0]) if response.data else None

        return self._run("get_bin", query)

    def save_bin(self, bin_record: Bin) -> LookupResult[Bin]:
        def query() -> Bin:
            self.client.table("bins").upsert(bin_to_row(bin_record), on_conflict="bin_id").execute()
            return bin_record

        return self._run("save_bin", query)

    def list_collectors(self) -> LookupResult[list[Collector]]:
        def query() -> list[Collector]:
            response = self.client.table("collectors").select("*").execute()
            return [collector_from_row(row) for row in response.data or []]

        return self._run("list_collectors", query)

    def get_collector(self, collector_id: str) -> LookupResult[Collector]:
        def query() -> Collector | None:
            response = (
                self.client.table("collectors").select("*").eq("collector_id", collector_id).limit(1).execute()
            )
            return collector_from_row(response.data[0]) if response.data else None

        return self._run("get_collector", query)

    def save_collector(self, collector: Collector) -> LookupResult[Collector]:
        def query() -> Collector:
            self.client.table("collectors").upsert(
                collector_to_row(collector), on_conflict="collector_id"
            ).execute()
            return collector

        return self._run("save_collector", query)


@dataclass
class FallbackDataSource:
    """Tries each provider in order and returns the first answer that is not an error.

    Writes follow the reads: a write only moves on to the next provider when the
    failing one is also unreadable, so a record is never saved somewhere the next
    read will not look.
    """

    providers: list[DataSource] = field(default_factory=list)
    name: str = "fallback"

    def _first_ok(self, operation: str, call: Callable[[DataSource], LookupResult[T]]) -> LookupResult[T]:
        errors: list[str] = []
        for provider in self.providers:
            result = call(provider)
            if result.ok:
                return result
            logger.warning(f"Data source '{provider.name}' unavailable for {operation}: {result.error}")
            errors.append(f"{provider.name}: {result.error}")
        detail = "; ".join(errors) if errors else "no providers configured"
        return LookupResult(error=f"All data sources failed for {operation} ({detail})", source=self.name)

    def _write(self, operation: str, call: Callable[[DataSource], LookupResult[T]]) -> LookupResult[T]:
        errors: list[str] = []
        for provider in self.providers:
            result = call(provider)
            if result.ok:
                return result
            errors.append(f"{provider.name}: {result.error}")
            if provider.list_collectors().ok:
                logger.error(f"Data source '{provider.name}' rejected {operation} while still serving reads: {result.error}")
                return LookupResult(error=f"{operation} rejected by {provider.name}: {result.error}", source=self.name)
            logger.warning(f"Data source '{provider.name}' unavailable for {operation}: {result.error}")
        detail = "; ".join(errors) if errors else "no providers configured"
        return LookupResult(error=f"All data sources failed for {operation} ({detail})", source=self.name)

    def get_bins(self, bin_ids: Sequence[str] | None = None) -> LookupResult[list[Bin]]:
        return self._first_ok("get_bins", lambda p: p.get_bins(bin_ids))

    def get_bin(self, bin_id: str) -> LookupResult[Bin]:
        return self._first_ok("get_bin", lambda p: p.get_bin(bin_id))

    def save_bin(self, bin_record: Bin) -> LookupResult[Bin]:
        return self._write("save_bin", lambda p: p.save_bin(bin_record))

    def list_collectors(self) -> LookupResult[list[Collector]]:
        return self._first_ok("list_collectors", lambda p: p.list_collectors())

    def get_collector(self, collector_id: str) -> LookupResult[Collector]:
        return self._first_ok("get_collector", lambda p: p.get_collector(collector_id))

    def save_collector(self, collector: Collector) -> LookupResult[Collector]:
        return self._write("save_collector", lambda p: p.save_collector(collector))


def build_data_source() -> FallbackDataSource:
    """Supabase first when configured, then the in-memory store."""
    providers: list[DataSource] = []
    client = get_supabase_client()
    if client is not None:
        providers.append(SupabaseDataSource(client))
    memory = InMemoryDataSource.with_demo_data() if settings.use_demo_data else InMemoryDataSource()
    providers.append(memory)
    return FallbackDataSource(providers=providers)
