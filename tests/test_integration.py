import pytest
from fastapi.testclient import TestClient

from src.binroute.api.dependencies import get_data_source
from src.binroute.data.sources import FallbackDataSource, InMemoryDataSource, LookupResult
from src.binroute.main import create_app
from src.binroute.models.domain import Bin, BinStatus, Collector, GeoPoint, WasteType

COLLECTOR = {"X-User-Id": "c1", "X-User-Role": "collector"}
SUPERVISOR = {"X-User-Id": "s1", "X-User-Role": "supervisor"}


def _bin(bin_id: str, lat: float, lon: float, fill: float = 30.0) -> Bin:
    return Bin(
        bin_id=bin_id,
        location=GeoPoint(lat, lon),
        waste_type=WasteType.ORGANIC,
        address="Delhi, India",
        zone="Central",
        capacity=100.0,
        fill_level=fill,
    )


@pytest.fixture
def memory() -> InMemoryDataSource:
    return InMemoryDataSource(
        bins=[
            _bin("A", 28.6140, 77.2091, fill=92.0),
            _bin("B", 19.0760, 72.8777),
            _bin("C", 28.7041, 77.1025),
        ],
        collectors=[Collector(collector_id="c1", name="Demo Collector", assigned_bin_ids=["A", "B"])],
    )


@pytest.fixture
def api_client(memory: InMemoryDataSource) -> TestClient:
    app = create_app()
    app.dependency_overrides[get_data_source] = lambda: memory
    return TestClient(app)


def test_health(api_client: TestClient):
    assert api_client.get("/api/health").json() == {"status": "ok"}


def test_data_source_health_reports_failures(memory: InMemoryDataSource):
    class Down:
        name = "supabase"

        def list_collectors(self):
            return LookupResult(error="timeout", source=self.name)

    app = create_app()
    app.dependency_overrides[get_data_source] = lambda: FallbackDataSource(providers=[Down(), memory])
    payload = TestClient(app).get("/api/health/data-sources").json()

    assert payload["healthy"] is True
    assert payload["sources"][0] == {"source": "supabase", "healthy": False, "error": "timeout"}
    assert payload["sources"][1] == {"source": "memory", "healthy": True}


def test_optimize_then_collect_flow(api_client: TestClient):
    response = api_client.post(
        "/api/collector/optimize-route",
        json={"bin_ids": ["B", "A"], "start_location": {"latitude": 28.6139, "longitude": 77.2090}},
        headers=COLLECTOR,
    )
    assert response.status_code == 200
    payload = response.json()
    assert [stop["bin_id"] for stop in payload["route"]] == ["A", "B"]
    assert 1140 < payload["total_distance_km"] < 1165
    assert payload["estimated_time_minutes"] == round(payload["total_distance_km"] / 20 * 60 + 10)

    collected = api_client.post("/api/collector/collect-bin", json={"bin_id": "A"}, headers=COLLECTOR)
    assert collected.status_code == 200
    assert collected.json()["route_item_completed"] is True

    skipped = api_client.put("/api/collector/route/B/status", json={"status": "skipped"}, headers=COLLECTOR)
    assert skipped.status_code == 200
    assert skipped.json()["status"] == "skipped"

    route = api_client.get("/api/collector/route", headers=COLLECTOR).json()
    assert [item["status"] for item in route["route"]] == ["completed", "skipped"]
    assert route["completed_bins"] == 1
    assert route["pending_bins"] == 0
    assert route["route"][0]["bin"]["fill_level"] == 0


def test_collector_bins_for_map(api_client: TestClient):
    response = api_client.get("/api/collector/bins", headers=COLLECTOR)
    assert response.status_code == 200
    assert [(item["id"], item["color"]) for item in response.json()] == [("A", "red"), ("B", "green")]


def test_invalid_start_location_is_bad_request(api_client: TestClient):
    response = api_client.post(
        "/api/collector/optimize-route",
        json={"bin_ids": ["A"], "start_location": {"latitude": 95.0, "longitude": 77.0}},
        headers=COLLECTOR,
    )
    assert response.status_code == 400
    assert "Invalid coordinate" in response.json()["detail"]


def test_not_found_errors(api_client: TestClient):
    assert api_client.post("/api/collector/collect-bin", json={"bin_id": "Z"}, headers=COLLECTOR).status_code == 404
    assert api_client.put(
        "/api/collector/route/A/status", json={"status": "completed"}, headers=COLLECTOR
    ).status_code == 404
    unknown_collector = {"X-User-Id": "ghost", "X-User-Role": "collector"}
    assert api_client.get("/api/collector/route", headers=unknown_collector).status_code == 404


@pytest.mark.parametrize(
    "headers",
    [
        {},
        {"X-User-Id": "c1"},
        {"X-User-Id": "c1", "X-User-Role": "admin"},
        {"X-User-Id": "u1", "X-User-Role": "user"},
        SUPERVISOR,
    ],
)
def test_collector_endpoints_require_collector_role(api_client: TestClient, headers: dict):
    assert api_client.get("/api/collector/route", headers=headers).status_code == 403


def test_supervisor_manages_bins(api_client: TestClient):
    listed = api_client.get("/api/supervisor/bins", headers=SUPERVISOR)
    assert listed.status_code == 200
    assert [item["bin_id"] for item in listed.json()] == ["A", "B", "C"]

    updated = api_client.put("/api/supervisor/bins/C/status", json={"status": "maintenance"}, headers=SUPERVISOR)
    assert updated.status_code == 200
    filtered = api_client.get("/api/supervisor/bins", params={"status": "maintenance"}, headers=SUPERVISOR)
    assert [item["bin_id"] for item in filtered.json()] == ["C"]

    assigned = api_client.put(
        "/api/supervisor/assign-bins", json={"collector_id": "c1", "bin_ids": ["C"]}, headers=SUPERVISOR
    )
    assert assigned.status_code == 200
    assert [item["id"] for item in api_client.get("/api/collector/bins", headers=COLLECTOR).json()] == ["C"]

    rejected = api_client.put(
        "/api/supervisor/assign-bins", json={"collector_id": "c1", "bin_ids": ["NOPE"]}, headers=SUPERVISOR
    )
    assert rejected.status_code == 400
    assert api_client.get("/api/supervisor/bins", headers=COLLECTOR).status_code == 403


def test_store_outage_is_service_unavailable():
    class Down:
        name = "supabase"

        def __getattr__(self, _):
            return lambda *args, **kwargs: LookupResult(error="timeout", source="supabase")

    app = create_app()
    app.dependency_overrides[get_data_source] = lambda: FallbackDataSource(providers=[Down()])
    response = TestClient(app).get("/api/collector/route", headers=COLLECTOR)
    assert response.status_code == 503


def test_metrics_endpoint(api_client: TestClient):
    response = api_client.post(
        "/api/routing/metrics",
        json={
            "stops": [
                {"bin_id": "a", "location": {"latitude": 0.0, "longitude": 0.0}},
                {"bin_id": "b", "location": {"latitude": 0.0, "longitude": 1.0}},
            ],
            "service_minutes_per_stop": 0,
        },
    )
    assert response.status_code == 200
    assert response.json() == {"total_distance_km": 111.19, "estimated_time_minutes": 334}

    empty = api_client.post("/api/routing/metrics", json={"stops": []})
    assert empty.json() == {"total_distance_km": 0.0, "estimated_time_minutes": 0}


def test_metrics_endpoint_rejects_invalid_coordinates(api_client: TestClient):
    response = api_client.post(
        "/api/routing/metrics",
        json={
            "stops": [
                {"bin_id": "a", "location": {"latitude": 0.0, "longitude": 0.0}},
                {"bin_id": "b", "location": {"latitude": 500.0, "longitude": 0.0}},
            ]
        },
    )
    assert response.status_code == 400
    assert "for b" in response.json()["detail"]


def test_rejected_write_is_service_unavailable(memory: InMemoryDataSource):
    class ReadOnly(InMemoryDataSource):
        name = "supabase"

        def save_bin(self, bin_record):
            return LookupResult(error="permission denied", source=self.name)

    primary = ReadOnly(bins=[_bin("C", 28.7041, 77.1025)])
    app = create_app()
    app.dependency_overrides[get_data_source] = lambda: FallbackDataSource(providers=[primary, memory])
    client = TestClient(app)

    response = client.put("/api/supervisor/bins/C/status", json={"status": "maintenance"}, headers=SUPERVISOR)

    assert response.status_code == 503
    assert memory.get_bin("C").unwrap().status == BinStatus.ACTIVE
    listed = client.get("/api/supervisor/bins", headers=SUPERVISOR).json()
    assert [item["status"] for item in listed] == ["active"]


def test_collector_dashboard(api_client: TestClient, memory: InMemoryDataSource):
    offline = memory.get_bin("B").unwrap()
    offline.status = BinStatus.OFFLINE
    memory.save_bin(offline)

    response = api_client.get("/api/collector/dashboard", headers=COLLECTOR)

    assert response.status_code == 200
    payload = response.json()
    assert payload["collector_id"] == "c1"
    assert payload["overview"] == {
        "total_assigned_bins": 2,
        "full_bins": 1,
        "offline_bins": 1,
        "route_total": 0,
        "route_completed": 0,
    }
    assert [item["id"] for item in payload["assigned_bins"]] == ["A", "B"]
    assert api_client.get("/api/collector/dashboard", headers=SUPERVISOR).status_code == 403


def test_supervisor_lists_collectors(api_client: TestClient):
    response = api_client.get("/api/supervisor/collectors", headers=SUPERVISOR)

    assert response.status_code == 200
    assert response.json() == [
        {
            "collector_id": "c1",
            "name": "Demo Collector",
            "assigned_bin_ids": ["A", "B"],
            "route_total": 0,
            "route_completed": 0,
        }
    ]
    assert api_client.get("/api/supervisor/collectors", headers=COLLECTOR).status_code == 403


def test_supervisor_filters_bins_by_fill_level_and_waste_type(api_client: TestClient, memory: InMemoryDataSource):
    glass = memory.get_bin("C").unwrap()
    glass.waste_type = WasteType.GLASS
    memory.save_bin(glass)

    full = api_client.get("/api/supervisor/bins", params={"fillLevel": 5}, headers=SUPERVISOR)
    assert [item["bin_id"] for item in full.json()] == ["A"]

    low = api_client.get("/api/supervisor/bins", params={"fillLevel": 2}, headers=SUPERVISOR)
    assert [item["bin_id"] for item in low.json()] == ["B", "C"]

    by_type = api_client.get("/api/supervisor/bins", params={"wasteType": "glass"}, headers=SUPERVISOR)
    assert [item["bin_id"] for item in by_type.json()] == ["C"]

    assert api_client.get("/api/supervisor/bins", params={"fillLevel": 6}, headers=SUPERVISOR).status_code == 422
    assert api_client.get("/api/supervisor/bins", params={"wasteType": "lava"}, headers=SUPERVISOR).status_code == 422
