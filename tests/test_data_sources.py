from types import SimpleNamespace

import pytest

from src.binroute.data.sources import (
    FallbackDataSource,
    InMemoryDataSource,
    LookupResult,
    SupabaseDataSource,
    bin_from_row,
    bin_to_row,
    collector_from_row,
    collector_to_row,
)
from src.binroute.errors import DataSourceError
from src.binroute.models.domain import (
    Bin,
    BinStatus,
    Collector,
    GeoPoint,
    RouteItem,
    RouteItemStatus,
    WasteType,
)
from src.binroute.services import bins as bin_service


def _bin(bin_id: str, fill: float = 10.0) -> Bin:
    return Bin(
        bin_id=bin_id,
        location=GeoPoint(28.6, 77.2),
        waste_type=WasteType.PAPER,
        address="Somewhere",
        zone="North",
        capacity=120.0,
        fill_level=fill,
    )


class BrokenSource:
    name = "broken"

    def __init__(self):
        self.calls = 0

    def _fail(self, *args, **kwargs):
        self.calls += 1
        return LookupResult(error="connection refused", source=self.name)

    get_bins = get_bin = save_bin = list_collectors = get_collector = save_collector = _fail


class FakeQuery:
    def __init__(self, table: "FakeTable"):
        self.table = table
        self.filters: list[tuple] = []

    def select(self, *_):
        return self

    def in_(self, column, values):
        self.filters.append(("in", column, list(values)))
        return self

    def eq(self, column, value):
        self.filters.append(("eq", column, value))
        return self

    def limit(self, _):
        return self

    def upsert(self, row, on_conflict=None):
        self.table.upserts.append((row, on_conflict))
        return self

    def execute(self):
        rows = list(self.table.rows)
        for kind, column, value in self.filters:
            if kind == "eq":
                rows = [row for row in rows if row[column] == value]
            else:
                rows = [row for row in rows if row[column] in value]
        return SimpleNamespace(data=rows)


class FakeTable:
    def __init__(self, rows):
        self.rows = rows
        self.upserts: list[tuple] = []


class FakeClient:
    def __init__(self, tables):
        self.tables = tables

    def table(self, name):
        return FakeQuery(self.tables[name])


def test_memory_source_returns_copies():
    source = InMemoryDataSource(bins=[_bin("B1", fill=40.0)])

    fetched = source.get_bin("B1").unwrap()
    fetched.fill_level = 0.0

    assert source.get_bin("B1").unwrap().fill_level == 40.0


def test_memory_source_keeps_request_order_and_skips_unknown_ids():
    source = InMemoryDataSource(bins=[_bin("B1"), _bin("B2"), _bin("B3")])
    bins = source.get_bins(["B3", "missing", "B1", "B3"]).unwrap()
    assert [item.bin_id for item in bins] == ["B3", "B1"]


def test_demo_data_has_collector_with_assigned_bins():
    source = InMemoryDataSource.with_demo_data()
    collector = source.get_collector("3").unwrap()
    assert collector.assigned_bin_ids == ["BIN001", "BIN002"]
    assert len(source.get_bins(collector.assigned_bin_ids).unwrap()) == 2


def test_fallback_skips_failing_provider():
    broken = BrokenSource()
    chain = FallbackDataSource(providers=[broken, InMemoryDataSource(bins=[_bin("B1")])])

    result = chain.get_bin("B1")

    assert result.ok
    assert result.source == "memory"
    assert result.value.bin_id == "B1"
    assert broken.calls == 1


def test_fallback_does_not_fall_through_on_missing_record():
    first = InMemoryDataSource()
    second = InMemoryDataSource(bins=[_bin("B1")])
    chain = FallbackDataSource(providers=[first, second])

    result = chain.get_bin("B1")

    assert result.ok
    assert result.value is None


def test_fallback_reports_every_failure():
    chain = FallbackDataSource(providers=[BrokenSource(), BrokenSource()])
    result = chain.list_collectors()

    assert not result.ok
    assert result.error.count("connection refused") == 2
    with pytest.raises(DataSourceError):
        result.unwrap()


def test_empty_fallback_chain_is_an_error():
    assert not FallbackDataSource().get_bins().ok


def test_supabase_source_reads_and_writes_rows():
    bins_table = FakeTable([bin_to_row(_bin("B1")), bin_to_row(_bin("B2", fill=80.0))])
    collectors_table = FakeTable([])
    source = SupabaseDataSource(FakeClient({"bins": bins_table, "collectors": collectors_table}))

    bins = source.get_bins(["B2", "B1"]).unwrap()
    assert [item.bin_id for item in bins] == ["B2", "B1"]
    assert bins[0].fill_level == 80.0

    assert source.get_bin("nope").unwrap() is None

    collector = Collector(collector_id="c1", name="Ravi", current_route=[RouteItem("B1", 1)])
    source.save_collector(collector).unwrap()
    row, conflict = collectors_table.upserts[0]
    assert conflict == "collector_id"
    assert row["current_route"] == [{"bin_id": "B1", "order": 1, "status": "pending"}]


def test_supabase_source_turns_exceptions_into_results():
    class ExplodingClient:
        def table(self, name):
            raise ConnectionError("network down")

    result = SupabaseDataSource(ExplodingClient()).get_bins()

    assert not result.ok
    assert "network down" in result.error


def test_row_conversion_round_trips_enums_and_dates():
    original = _bin("B7")
    original.status = BinStatus.MAINTENANCE
    restored = bin_from_row(bin_to_row(original))
    assert restored == original

    row = collector_to_row(
        Collector("c9", "Asha", ["B7"], [RouteItem("B7", 1, RouteItemStatus.COMPLETED)])
    )
    assert collector_from_row(row).current_route[0].status is RouteItemStatus.COMPLETED


class ReadOnlySource(InMemoryDataSource):
    name = "supabase"

    def save_bin(self, bin_record):
        return LookupResult(error="permission denied", source=self.name)

    def save_collector(self, collector):
        return LookupResult(error="permission denied", source=self.name)


def test_rejected_write_does_not_land_in_fallback():
    primary = ReadOnlySource(bins=[_bin("B1")])
    memory = InMemoryDataSource(bins=[_bin("B1")])
    chain = FallbackDataSource(providers=[primary, memory])

    updated = chain.get_bin("B1").unwrap()
    updated.status = BinStatus.MAINTENANCE
    result = chain.save_bin(updated)

    assert not result.ok
    assert "permission denied" in result.error
    assert memory.get_bin("B1").unwrap().status == BinStatus.ACTIVE
    assert chain.get_bin("B1").unwrap().status == BinStatus.ACTIVE
    with pytest.raises(DataSourceError):
        chain.save_collector(Collector(collector_id="c1", name="Ravi")).unwrap()


def test_service_update_fails_when_primary_rejects_writes():
    chain = FallbackDataSource(providers=[ReadOnlySource(bins=[_bin("B1")]), InMemoryDataSource(bins=[_bin("B1")])])

    with pytest.raises(DataSourceError):
        bin_service.update_bin_status(chain, "B1", BinStatus.MAINTENANCE)
    assert chain.get_bin("B1").unwrap().status == BinStatus.ACTIVE


def test_writes_fall_through_when_provider_is_down():
    memory = InMemoryDataSource(bins=[_bin("B1")])
    chain = FallbackDataSource(providers=[BrokenSource(), memory])

    updated = chain.get_bin("B1").unwrap()
    updated.fill_level = 77.0
    result = chain.save_bin(updated)

    assert result.ok
    assert result.source == "memory"
    assert chain.get_bin("B1").unwrap().fill_level == 77.0
