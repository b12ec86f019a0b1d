from fastapi.testclient import TestClient
import pytest

from apps.route_server.main import NO_BINS_MESSAGE, NO_VALID_BINS_MESSAGE, app
from apps.route_server.tools.points import PointStoreError


@pytest.fixture()
def client(monkeypatch) -> TestClient:
    monkeypatch.delenv("ROUTE_PROFILE", raising=False)
    return TestClient(app)


def _fake_store(monkeypatch, records):
    requested = []

    async def fake_load_points(area_id, settings, **kwargs):  # type: ignore[no-untyped-def]
        requested.append(area_id)
        return records

    monkeypatch.setattr("apps.route_server.main.load_points", fake_load_points)
    return requested


def test_health(client: TestClient):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_optimize_orders_stops(client: TestClient, monkeypatch):
    _fake_store(
        monkeypatch,
        [
            {"binId": "A", "location": "Depot", "category": "general", "latitude": 0, "longitude": 0},
            {"binId": "B", "location": "North", "category": "organic", "latitude": 0, "longitude": 3},
            {"binId": "C", "location": "East", "category": "recyclable", "latitude": 4, "longitude": 0},
        ],
    )

    response = client.post("/routes/optimize", json={})
    assert response.status_code == 200
    data = response.json()

    assert [(s["order"], s["id"]) for s in data["optimizedRoute"]] == [(1, "A"), (2, "B"), (3, "C")]
    assert data["totalBins"] == 3
    assert data["areaId"] == "all"
    assert data["totalDistance"] == pytest.approx(8.0)
    assert data["sequenceMethod"] == "nearest_neighbor"
    assert "message" not in data
    assert "groupId" not in data["optimizedRoute"][0]
    assert data["optimizedRoute"][1] == {
        "order": 2,
        "id": "B",
        "location": "North",
        "category": "organic",
        "latitude": 0.0,
        "longitude": 3.0,
    }


def test_optimize_echoes_area(client: TestClient, monkeypatch, sample_bins):
    requested = _fake_store(monkeypatch, sample_bins[4:])

    response = client.post("/routes/optimize", json={"areaId": "DEHIWALA"})
    data = response.json()

    assert requested == ["DEHIWALA"]
    assert data["areaId"] == "DEHIWALA"
    assert [s["id"] for s in data["optimizedRoute"]] == ["BIN-006", "BIN-007"]
    assert data["optimizedRoute"][0]["groupId"] == "DEHIWALA"


def test_blank_area_means_all(client: TestClient, monkeypatch, sample_bins):
    requested = _fake_store(monkeypatch, sample_bins)

    response = client.post("/routes/optimize", json={"areaId": "  "})

    assert requested == [None]
    assert response.json()["areaId"] == "all"


def test_no_bins(client: TestClient, monkeypatch):
    _fake_store(monkeypatch, [])

    data = client.post("/routes/optimize", json={"areaId": "KANDY"}).json()

    assert data["optimizedRoute"] == []
    assert data["totalBins"] == 0
    assert data["areaId"] == "KANDY"
    assert data["message"] == NO_BINS_MESSAGE


def test_no_valid_bins(client: TestClient, monkeypatch):
    _fake_store(monkeypatch, [{"binId": "X", "latitude": None, "longitude": "n/a"}])

    data = client.post("/routes/optimize", json={}).json()

    assert data["optimizedRoute"] == []
    assert data["totalBins"] == 0
    assert data["message"] == NO_VALID_BINS_MESSAGE


def test_skipped_bins_reported(client: TestClient, monkeypatch, bins_with_bad_coordinates):
    _fake_store(monkeypatch, bins_with_bad_coordinates)

    data = client.post("/routes/optimize", json={}).json()

    assert data["totalBins"] == 3
    assert data["warnings"] == ["5 bin(s) skipped: missing or non-finite coordinates"]


def test_route_widget(client: TestClient, monkeypatch, sample_bins):
    _fake_store(monkeypatch, sample_bins[4:])

    data = client.post("/routes/optimize", json={}).json()
    widget = data["_meta"]["openai"]["outputTemplate"]

    assert widget["widget"] == "geo.routePlayback"
    props = widget["props"]
    assert props["center"]["lat"] == pytest.approx((6.8566 + 6.8335) / 2)
    assert props["path"][0] == {"lat": 6.8566, "lng": 79.8779}
    assert props["stops"][1]["label"] == "Stop 2/2; BIN-007 @ Mount Lavinia Beach"


def test_store_failure_is_bad_gateway(client: TestClient, monkeypatch):
    async def broken_store(area_id, settings, **kwargs):  # type: ignore[no-untyped-def]
        raise PointStoreError("Bin store unavailable after 3 attempts")

    monkeypatch.setattr("apps.route_server.main.load_points", broken_store)

    response = client.post("/routes/optimize", json={})

    assert response.status_code == 502
    assert "unavailable" in response.json()["detail"]


def test_point_limit_is_unprocessable(client: TestClient, monkeypatch, random_points):
    monkeypatch.setenv("ROUTE_PROFILE", "two-opt")
    _fake_store(monkeypatch, random_points * 7)

    response = client.post("/routes/optimize", json={})

    assert response.status_code == 422
    assert "350 points > 300" in response.json()["detail"]


def test_bad_profile_is_server_error(client: TestClient, monkeypatch):
    monkeypatch.setenv("ROUTE_PROFILE", "missing-profile")

    response = client.post("/routes/optimize", json={})

    assert response.status_code == 500
    assert "missing-profile" in response.json()["detail"]


def test_seed_data_end_to_end(client: TestClient):
    """Default profile reads the bundled Colombo seed file."""
    response = client.post("/routes/optimize", json={"areaId": "COLOMBO-CENTRAL"})
    data = response.json()

    assert [s["id"] for s in data["optimizedRoute"]] == [
        "BIN-001",
        "BIN-003",
        "BIN-004",
        "BIN-002",
        "BIN-008",
        "BIN-005",
    ]
    assert data["totalBins"] == 6


def test_missing_ids_reported_separately(client: TestClient, monkeypatch, sample_bins):
    _fake_store(monkeypatch, sample_bins[:2] + [{"latitude": 6.9, "longitude": 79.86}, {"binId": "X"}])

    data = client.post("/routes/optimize", json={}).json()

    assert data["totalBins"] == 2
    assert data["warnings"] == [
        "1 bin(s) skipped: missing or non-finite coordinates",
        "1 bin(s) skipped: missing id",
    ]


def test_route_planned_in_threadpool(client: TestClient, monkeypatch, sample_bins):
    """Tour construction runs off the event loop."""
    from starlette.concurrency import run_in_threadpool

    offloaded = []

    async def recording_threadpool(func, *args, **kwargs):  # type: ignore[no-untyped-def]
        offloaded.append(func.__name__)
        return await run_in_threadpool(func, *args, **kwargs)

    _fake_store(monkeypatch, sample_bins)
    monkeypatch.setattr("apps.route_server.main.run_in_threadpool", recording_threadpool)

    response = client.post("/routes/optimize", json={})

    assert response.status_code == 200
    assert "plan_route" in offloaded
    assert "screen_points" in offloaded


def test_integer_ids_serialised_verbatim(client: TestClient, monkeypatch):
    _fake_store(
        monkeypatch,
        [
            {"binId": 101, "areaId": 7, "latitude": 0, "longitude": 0},
            {"binId": None, "latitude": 0, "longitude": 1},
            {"binId": 102, "latitude": 0, "longitude": 2},
        ],
    )

    data = client.post("/routes/optimize", json={}).json()

    assert [s["id"] for s in data["optimizedRoute"]] == ["101", "102"]
    assert data["optimizedRoute"][0]["groupId"] == "7"
    assert data["warnings"] == ["1 bin(s) skipped: missing id"]
