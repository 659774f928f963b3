from __future__ import annotations

from datetime import datetime, timezone

from porttrack.models.schemas import NavigationRoute, Personnel, Position, Vessel


def seed_vessels() -> list[Vessel]:
    return [
        Vessel(
            id="SHIP001",
            name="Atlantic Voyager",
            type="container",
            status="docked",
            arrival_time=datetime(2024, 1, 15, 8, 30, tzinfo=timezone.utc),
            berth_number="A-12",
            captain="John Smith",
            cargo={"containers": 245, "weight": 4500},
            location=Position(lat=40.7128, lng=-74.0060),
        ),
        Vessel(
            id="SHIP002",
            name="Pacific Explorer",
            type="tanker",
            status="approaching",
            estimated_arrival=datetime(2024, 1, 15, 14, 0, tzinfo=timezone.utc),
            captain="Maria Garcia",
            cargo={"type": "crude_oil", "volume": 85000},
            location=Position(lat=40.7000, lng=-74.0200),
        ),
        Vessel(
            id="SHIP003",
            name="Mediterranean Star",
            type="bulk_carrier",
            status="loading",
            berth_number="B-08",
            captain="Ahmed Hassan",
            cargo={"type": "grain", "weight": 12000},
            location=Position(lat=40.7150, lng=-74.0080),
        ),
    ]


def seed_personnel() -> list[Personnel]:
    return [
        Personnel(id="STAFF001", name="Carlos Rodriguez", role="port_manager", shift="day", active=True, location="Control Tower"),
        Personnel(id="STAFF002", name="Lisa Chen", role="crane_operator", shift="day", active=True, location="Berth A-12"),
        Personnel(id="STAFF003", name="Mohammed Ali", role="security_guard", shift="night", active=False, location="Gate 1"),
        Personnel(id="STAFF004", name="Anna Kowalski", role="customs_officer", shift="day", active=True, location="Customs Office"),
    ]


def navigation_routes() -> list[NavigationRoute]:
    """Static channel catalog served by /api/v1/routes."""

    return [
        NavigationRoute(
            id="ROUTE001",
            name="Main Channel",
            status="open",
            depth=15.5,
            width=200,
            traffic="moderate",
            coordinates=[Position(lat=40.7128, lng=-74.0060), Position(lat=40.7150, lng=-74.0040)],
        ),
        NavigationRoute(
            id="ROUTE002",
            name="North Entrance",
            status="restricted",
            depth=12.0,
            width=150,
            traffic="low",
            coordinates=[Position(lat=40.7200, lng=-74.0100), Position(lat=40.7180, lng=-74.0080)],
        ),
        NavigationRoute(
            id="ROUTE003",
            name="South Basin",
            status="open",
            depth=18.0,
            width=300,
            traffic="high",
            coordinates=[Position(lat=40.7100, lng=-74.0120), Position(lat=40.7120, lng=-74.0100)],
        ),
    ]
