from fastapi.testclient import TestClient

from porttrack.config import get_settings
from porttrack.main import app
from porttrack.services.auth_service import decode_session_token
from porttrack.services.port_store import get_port_store


async def test_responses_include_x_request_id(api_client) -> None:
    resp = await api_client.get("/health")
    assert resp.status_code == 200
    assert resp.headers.get("x-request-id")


async def test_incoming_request_id_is_echoed(api_client) -> None:
    resp = await api_client.get("/health", headers={"X-Request-ID": "abc-123"})
    assert resp.headers["x-request-id"] == "abc-123"


async def test_health_reports_status_and_services(api_client) -> None:
    resp = await api_client.get("/health")
    payload = resp.json()
    assert payload["status"] == "healthy"
    assert payload["environment"] == "test"
    assert payload["version"] == "1.0.0"
    assert payload["uptime"] >= 0
    assert "timestamp" in payload
    assert payload["services"] == {"fluentd": "disabled", "prometheus": "active"}


async def test_index_describes_service(api_client) -> None:
    resp = await api_client.get("/")
    assert resp.status_code == 200
    assert resp.json() == {
        "name": "porttrack-api",
        "version": "1.0.0",
        "author": "PortTrack Operations",
        "email": "ops@porttrack.local",
    }


async def test_index_author_comes_from_settings(api_client, monkeypatch) -> None:
    monkeypatch.setenv("AUTHOR_NAME", "Harbour Ops")
    monkeypatch.setenv("AUTHOR_EMAIL", "harbour@example.org")
    get_settings.cache_clear()
    payload = (await api_client.get("/")).json()
    assert payload["author"] == "Harbour Ops"
    assert payload["email"] == "harbour@example.org"


async def test_api_status_aggregates_port_state(api_client) -> None:
    resp = await api_client.get("/api/v1/status")
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["api"] == "PortTrack API"
    assert payload["status"] == "operational"
    assert payload["services"]["logging"] == "local_only"
    port = payload["port_status"]
    # Seed: SHIP001 docked, SHIP003 loading.
    assert port["active_ships"] == 2
    assert port["total_berths"] == 24
    assert port["available_berths"] == 22
    assert port["active_staff"] == 3


async def test_api_status_is_recomputed_after_berthing(api_client) -> None:
    resp = await api_client.post("/api/v1/ships/SHIP002/berth", json={"berthNumber": "C-15"})
    assert resp.status_code == 200

    port = (await api_client.get("/api/v1/status")).json()["port_status"]
    assert port["active_ships"] == 3
    assert port["available_berths"] == 21


async def test_list_ships_returns_all_seeded_vessels(api_client) -> None:
    resp = await api_client.get("/api/v1/ships")
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["total"] == 3
    assert [s["id"] for s in payload["ships"]] == ["SHIP001", "SHIP002", "SHIP003"]
    assert payload["ships"][0]["location"] == {"lat": 40.7128, "lng": -74.006}
    assert "timestamp" in payload


async def test_list_ships_filters_by_status(api_client) -> None:
    resp = await api_client.get("/api/v1/ships", params={"status": "docked"})
    payload = resp.json()
    assert payload["total"] == 1
    assert payload["ships"][0]["status"] == "docked"


async def test_list_ships_filters_are_conjunctive(api_client) -> None:
    resp = await api_client.get("/api/v1/ships", params={"status": "docked", "type": "tanker"})
    assert resp.json()["total"] == 0

    resp = await api_client.get("/api/v1/ships", params={"status": "loading", "type": "bulk_carrier"})
    assert [s["id"] for s in resp.json()["ships"]] == ["SHIP003"]


async def test_list_ships_empty_filter_value_is_ignored(api_client) -> None:
    resp = await api_client.get("/api/v1/ships?status=&type=")
    assert resp.json()["total"] == 3


async def test_get_ship_returns_details_in_camel_case(api_client) -> None:
    resp = await api_client.get("/api/v1/ships/SHIP001")
    assert resp.status_code == 200
    ship = resp.json()
    assert ship["id"] == "SHIP001"
    assert ship["berthNumber"] == "A-12"
    assert ship["arrivalTime"] == "2024-01-15T08:30:00Z"
    assert ship["cargo"] == {"containers": 245, "weight": 4500}


async def test_get_ship_omits_missing_berth(api_client) -> None:
    ship = (await api_client.get("/api/v1/ships/SHIP002")).json()
    assert "berthNumber" not in ship
    assert ship["estimatedArrival"] == "2024-01-15T14:00:00Z"


async def test_get_unknown_ship_returns_404(api_client, telemetry) -> None:
    resp = await api_client.get("/api/v1/ships/NONEXISTENT")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Ship not found"}
    assert telemetry.named("ship_not_found")[0]["shipId"] == "NONEXISTENT"


async def test_berth_ship_docks_vessel(api_client, injector) -> None:
    resp = await api_client.post("/api/v1/ships/SHIP002/berth", json={"berthNumber": "C-15"})
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["message"] == "Ship berthed successfully"
    assert payload["ship"]["status"] == "docked"
    assert payload["ship"]["berthNumber"] == "C-15"
    assert payload["ship"]["arrivalTime"]
    operation = payload["operation"]
    assert operation["type"] == "berth"
    assert operation["shipId"] == "SHIP002"
    assert operation["outcome"] == "success"
    assert operation["details"] == {"berthNumber": "C-15", "previousStatus": "approaching"}
    assert injector.calls == [0.10]

    ship = (await api_client.get("/api/v1/ships/SHIP002")).json()
    assert ship["status"] == "docked"


async def test_berth_missing_berth_number_returns_400(api_client, injector) -> None:
    resp = await api_client.post("/api/v1/ships/SHIP002/berth", json={})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Berth number is required"}

    resp = await api_client.post("/api/v1/ships/SHIP002/berth", json={"berthNumber": ""})
    assert resp.status_code == 400

    resp = await api_client.post("/api/v1/ships/SHIP002/berth")
    assert resp.status_code == 400

    # Validation happens before the failure draw.
    assert injector.calls == []


async def test_berth_unknown_ship_returns_404_before_failure_draw(api_client, injector) -> None:
    injector.fail = True
    resp = await api_client.post("/api/v1/ships/NONEXISTENT/berth", json={"berthNumber": "A-01"})
    assert resp.status_code == 404
    assert resp.json() == {"error": "Ship not found"}
    assert injector.calls == []


async def test_berth_injected_failure_leaves_store_untouched(api_client, injector, telemetry) -> None:
    injector.fail = True
    resp = await api_client.post("/api/v1/ships/SHIP002/berth", json={"berthNumber": "C-15"})
    assert resp.status_code == 500
    assert resp.json() == {"error": "Berthing operation failed"}

    store = get_port_store()
    assert store.get_vessel("SHIP002").status == "approaching"
    assert store.get_vessel("SHIP002").berth_number is None
    assert store.operations_count() == 0

    failure = telemetry.named("critical_berthing_operation_failed")[0]
    assert failure["level"] == "error"
    assert failure["reason"] == "simulated_failure"


async def test_berth_unknown_ship_returns_404_whatever_the_berth_value(api_client, injector) -> None:
    for berth in (15, None, ["A", 1], {"n": 1}, True):
        resp = await api_client.post("/api/v1/ships/NONEXISTENT/berth", json={"berthNumber": berth})
        assert resp.status_code == 404
        assert resp.json() == {"error": "Ship not found"}

    resp = await api_client.post("/api/v1/ships/NONEXISTENT/berth", json=["C-15"])
    assert resp.status_code == 404
    assert injector.calls == []


async def test_berth_non_object_body_counts_as_missing_berth(api_client) -> None:
    resp = await api_client.post("/api/v1/ships/SHIP002/berth", json=["C-15"])
    assert resp.status_code == 400
    assert resp.json() == {"error": "Berth number is required"}


async def test_berth_accepts_numeric_berth_number(api_client) -> None:
    resp = await api_client.post("/api/v1/ships/SHIP002/berth", json={"berthNumber": 15})
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["ship"]["berthNumber"] == "15"
    assert payload["operation"]["details"]["berthNumber"] == "15"


async def test_berth_rejects_unusable_berth_values_on_known_ship(api_client, injector) -> None:
    for berth in (0, False, [], {"n": 1}):
        resp = await api_client.post("/api/v1/ships/SHIP002/berth", json={"berthNumber": berth})
        assert resp.status_code == 400
        assert resp.json() == {"error": "Berth number is required"}
    assert injector.calls == []


async def test_berth_rejects_unparseable_body(api_client) -> None:
    resp = await api_client.post(
        "/api/v1/ships/SHIP002/berth",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid request body"}


async def test_unexpected_fault_returns_generic_500_and_emits_error(api_client, telemetry, monkeypatch) -> None:
    store = get_port_store()

    def boom(*args, **kwargs):
        raise RuntimeError("index corrupted")

    monkeypatch.setattr(store, "list_vessels", boom)
    resp = await api_client.get("/api/v1/ships")
    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal server error"}

    event = telemetry.named("ships_list_failed")[0]
    assert event["level"] == "error"
    assert event["error"] == "index corrupted"
    assert event["error_type"] == "RuntimeError"


async def test_list_staff_and_filters(api_client) -> None:
    payload = (await api_client.get("/api/v1/staff")).json()
    assert payload["total"] == 4
    assert payload["staff"][0]["location"] == "Control Tower"

    payload = (await api_client.get("/api/v1/staff", params={"role": "port_manager"})).json()
    assert [s["id"] for s in payload["staff"]] == ["STAFF001"]

    payload = (await api_client.get("/api/v1/staff", params={"shift": "day", "active": "true"})).json()
    assert payload["total"] == 3
    assert all(s["active"] and s["shift"] == "day" for s in payload["staff"])


async def test_staff_active_filter_only_accepts_literal_true(api_client) -> None:
    for value in ("false", "True", "1", "yes"):
        payload = (await api_client.get("/api/v1/staff", params={"active": value})).json()
        assert [s["id"] for s in payload["staff"]] == ["STAFF003"]


async def test_operations_lists_recorded_berthings(api_client) -> None:
    payload = (await api_client.get("/api/v1/operations")).json()
    assert payload == {"operations": [], "total": 0, "timestamp": payload["timestamp"]}

    await api_client.post("/api/v1/ships/SHIP002/berth", json={"berthNumber": "C-15"})
    await api_client.post("/api/v1/ships/SHIP003/berth", json={"berthNumber": "B-09"})

    payload = (await api_client.get("/api/v1/operations")).json()
    assert payload["total"] == 2
    assert [op["shipId"] for op in payload["operations"]] == ["SHIP002", "SHIP003"]


async def test_cargo_tracking(api_client) -> None:
    resp = await api_client.get("/api/v1/cargo/tracking/SHIP001")
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["shipId"] == "SHIP001"
    assert payload["shipName"] == "Atlantic Voyager"
    assert payload["location"] == "A-12"
    assert payload["coordinates"] == {"lat": 40.7128, "lng": -74.006}
    assert "lastUpdate" in payload

    at_sea = (await api_client.get("/api/v1/cargo/tracking/SHIP002")).json()
    assert at_sea["location"] == "At sea"


async def test_cargo_tracking_unknown_ship(api_client) -> None:
    resp = await api_client.get("/api/v1/cargo/tracking/NONEXISTENT")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Ship not found"}


async def test_routes_catalog(api_client) -> None:
    payload = (await api_client.get("/api/v1/routes")).json()
    assert payload["total"] == 3
    assert payload["routes"][0]["name"] == "Main Channel"
    assert len(payload["routes"][0]["coordinates"]) == 2


async def test_login_success_returns_signed_token(api_client, telemetry) -> None:
    resp = await api_client.post("/api/v1/auth/login", json={"username": "testuser", "password": "testpass"})
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["message"] == "Authentication successful"
    claims = decode_session_token(payload["token"])
    assert claims["sub"] == "testuser"
    assert claims["iss"] == "porttrack-api"
    assert telemetry.named("authentication_succeeded")


async def test_login_missing_credentials_always_fails(api_client, injector, telemetry) -> None:
    for body in ({}, {"password": "testpass"}, {"username": "testuser"}, {"username": "", "password": "x"}):
        resp = await api_client.post("/api/v1/auth/login", json=body)
        assert resp.status_code == 401
        assert resp.json() == {"error": "Authentication failed"}

    assert injector.calls == []
    reasons = {e["reason"] for e in telemetry.named("authentication_failure")}
    assert reasons == {"missing_credentials"}


async def test_login_non_string_credentials_fail_as_missing(api_client, injector, telemetry) -> None:
    bodies = (
        {"username": 123, "password": "x"},
        {"username": "u", "password": ["x"]},
        {"username": None, "password": None},
        ["testuser", "testpass"],
    )
    for body in bodies:
        resp = await api_client.post("/api/v1/auth/login", json=body)
        assert resp.status_code == 401
        assert resp.json() == {"error": "Authentication failed"}

    assert injector.calls == []
    reasons = [e["reason"] for e in telemetry.named("authentication_failure")]
    assert reasons == ["missing_credentials"] * len(bodies)


async def test_login_simulated_failure_has_same_response_shape(api_client, injector, telemetry) -> None:
    injector.fail = True
    resp = await api_client.post("/api/v1/auth/login", json={"username": "testuser", "password": "testpass"})
    assert resp.status_code == 401
    assert resp.json() == {"error": "Authentication failed"}
    assert injector.calls == [0.15]
    assert telemetry.named("authentication_failure")[0]["reason"] == "invalid_credentials"


async def test_unknown_route_returns_route_not_found(api_client, telemetry) -> None:
    resp = await api_client.get("/non-existent-route")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Route not found"}
    assert telemetry.named("route_not_found")[0]["path"] == "/non-existent-route"


def test_shutdown_drains_telemetry_sink(telemetry) -> None:
    with TestClient(app) as client:
        assert client.get("/health").status_code == 200
        assert telemetry.named("server_started")
        assert telemetry.end_timeouts == []

    assert telemetry.named("server_shutting_down")
    assert telemetry.end_timeouts == [5.0]
