from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


VESSEL_STATUSES: tuple[str, ...] = ("approaching", "docked", "loading", "departing")
# Statuses that occupy a berth.
IN_PORT_STATUSES: frozenset[str] = frozenset({"docked", "loading"})

OperationType = Literal["berth", "loading", "unloading", "inspection", "refueling"]
OperationOutcome = Literal["success", "failure"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Position(CamelModel):
    lat: float
    lng: float


class Vessel(CamelModel):
    id: str
    name: str
    type: str
    status: str
    captain: str | None = None
    berth_number: str | None = None
    arrival_time: datetime | None = None
    estimated_arrival: datetime | None = None
    cargo: dict[str, Any] = Field(default_factory=dict)
    location: Position


class Personnel(CamelModel):
    id: str
    name: str
    role: str
    shift: Literal["day", "night"]
    active: bool
    location: str


class OperationRecord(CamelModel):
    id: str
    type: OperationType
    ship_id: str
    timestamp: datetime
    details: dict[str, Any] = Field(default_factory=dict)
    outcome: OperationOutcome = "success"


class CargoView(CamelModel):
    ship_id: str
    ship_name: str
    cargo: dict[str, Any]
    status: str
    location: str
    coordinates: Position
    last_update: datetime


class NavigationRoute(CamelModel):
    id: str
    name: str
    status: Literal["open", "restricted", "closed"]
    depth: float
    width: int
    traffic: Literal["low", "moderate", "high"]
    coordinates: list[Position]


class RequestBody(CamelModel):
    @classmethod
    def from_body(cls, body: Any):
        """Build from a decoded JSON body; anything but an object reads as empty."""

        return cls.model_validate(body) if isinstance(body, dict) else cls()


class BerthRequest(RequestBody):
    # Raw JSON value; the handler checks the vessel before judging it.
    berth_number: Any = None

    def berth_label(self) -> str | None:
        """The berth as a string, or None when no usable berth was given."""

        value = self.berth_number
        if isinstance(value, str):
            return value or None
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value) if value else None
        return None


class LoginRequest(RequestBody):
    username: Any = None
    password: Any = None

    def credentials(self) -> tuple[str | None, str | None]:
        """Username and password, each None unless it is a non-empty string."""

        return (
            self.username if isinstance(self.username, str) and self.username else None,
            self.password if isinstance(self.password, str) and self.password else None,
        )


class ShipsResponse(CamelModel):
    ships: list[Vessel]
    total: int
    timestamp: datetime


class BerthResponse(CamelModel):
    message: str
    ship: Vessel
    operation: OperationRecord


class StaffResponse(CamelModel):
    staff: list[Personnel]
    total: int
    timestamp: datetime


class OperationsResponse(CamelModel):
    operations: list[OperationRecord]
    total: int
    timestamp: datetime


class RoutesResponse(CamelModel):
    routes: list[NavigationRoute]
    total: int
    timestamp: datetime


class LoginResponse(CamelModel):
    message: str
    token: str


class HealthResponse(BaseModel):
    status: Literal["healthy", "degraded", "unhealthy"]
    timestamp: datetime
    uptime: float
    environment: str
    version: str
    services: dict[str, str]


class PortStatus(BaseModel):
    active_ships: int
    total_berths: int
    available_berths: int
    active_staff: int
    weather: dict[str, str]


class StatusResponse(BaseModel):
    api: str
    version: str
    status: str
    services: dict[str, str]
    port_status: PortStatus
