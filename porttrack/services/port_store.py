from __future__ import annotations

import time
from collections import Counter
from collections.abc import Callable
from datetime import datetime, timezone
from threading import RLock

from porttrack.config import get_settings
from porttrack.models.schemas import (
    IN_PORT_STATUSES,
    CargoView,
    OperationRecord,
    Personnel,
    Vessel,
)
from porttrack.observability.metrics import get_metrics
from porttrack.services.seed_data import seed_personnel, seed_vessels

StatusListener = Callable[[dict[str, int]], None]


class PortStoreError(Exception):
    """Base class for domain errors raised by the port store."""


class VesselNotFoundError(PortStoreError):
    def __init__(self, vessel_id: str) -> None:
        super().__init__(f"Vessel {vessel_id} not found")
        self.vessel_id = vessel_id


class BerthValidationError(PortStoreError):
    pass


class PortStore:
    """Thread-safe, process-local port state (resets on restart).

    Callers only ever receive copies; the single mutation path is
    `berth_vessel`, which runs under the store lock together with the
    status listeners so the published status counts never lag a mutation.
    """

    def __init__(
        self,
        vessels: list[Vessel] | None = None,
        personnel: list[Personnel] | None = None,
        recent_limit: int = 50,
    ) -> None:
        if recent_limit < 1:
            raise ValueError("recent_limit must be at least 1")
        self._lock = RLock()
        self._vessels: dict[str, Vessel] = {v.id: v.model_copy(deep=True) for v in vessels or []}
        self._personnel: list[Personnel] = [p.model_copy() for p in personnel or []]
        self._operations: list[OperationRecord] = []
        self._recent_limit = recent_limit
        self._last_operation_ms = 0
        self._listeners: list[StatusListener] = []

    @classmethod
    def seeded(cls, recent_limit: int = 50) -> PortStore:
        return cls(vessels=seed_vessels(), personnel=seed_personnel(), recent_limit=recent_limit)

    def subscribe(self, listener: StatusListener) -> None:
        """Register a callback receiving fresh vessel counts by status after every mutation."""

        with self._lock:
            self._listeners.append(listener)
            listener(self._count_by_status())

    # Vessels

    def list_vessels(self, status: str | None = None, vessel_type: str | None = None) -> list[Vessel]:
        with self._lock:
            return [
                v.model_copy(deep=True)
                for v in self._vessels.values()
                if (status is None or v.status == status) and (vessel_type is None or v.type == vessel_type)
            ]

    def get_vessel(self, vessel_id: str) -> Vessel:
        with self._lock:
            vessel = self._vessels.get(vessel_id)
            if vessel is None:
                raise VesselNotFoundError(vessel_id)
            return vessel.model_copy(deep=True)

    def berth_vessel(self, vessel_id: str, berth_number: str | None) -> tuple[Vessel, OperationRecord]:
        with self._lock:
            vessel = self._vessels.get(vessel_id)
            if vessel is None:
                raise VesselNotFoundError(vessel_id)
            if not berth_number:
                raise BerthValidationError("Berth number is required")

            now = datetime.now(timezone.utc)
            previous_status = vessel.status
            vessel.status = "docked"
            vessel.berth_number = berth_number
            vessel.arrival_time = now

            operation = OperationRecord(
                id=self._next_operation_id(),
                type="berth",
                ship_id=vessel.id,
                timestamp=now,
                details={"berthNumber": berth_number, "previousStatus": previous_status},
                outcome="success",
            )
            self._operations.append(operation)
            self._notify()
            return vessel.model_copy(deep=True), operation.model_copy(deep=True)

    def count_by_status(self) -> dict[str, int]:
        with self._lock:
            return self._count_by_status()

    def in_port_count(self) -> int:
        with self._lock:
            return sum(1 for v in self._vessels.values() if v.status in IN_PORT_STATUSES)

    def cargo_status(self, vessel_id: str) -> CargoView:
        vessel = self.get_vessel(vessel_id)
        return CargoView(
            ship_id=vessel.id,
            ship_name=vessel.name,
            cargo=vessel.cargo,
            status=vessel.status,
            location=vessel.berth_number or "At sea",
            coordinates=vessel.location,
            last_update=datetime.now(timezone.utc),
        )

    # Personnel

    def list_personnel(
        self,
        role: str | None = None,
        shift: str | None = None,
        active: bool | None = None,
    ) -> list[Personnel]:
        with self._lock:
            return [
                p.model_copy()
                for p in self._personnel
                if (role is None or p.role == role)
                and (shift is None or p.shift == shift)
                and (active is None or p.active == active)
            ]

    def active_personnel_count(self) -> int:
        with self._lock:
            return sum(1 for p in self._personnel if p.active)

    # Operations

    def recent_operations(self) -> list[OperationRecord]:
        with self._lock:
            return [op.model_copy(deep=True) for op in self._operations[-self._recent_limit :]]

    def operations_count(self) -> int:
        with self._lock:
            return len(self._operations)

    def _count_by_status(self) -> dict[str, int]:
        return dict(Counter(v.status for v in self._vessels.values()))

    def _notify(self) -> None:
        counts = self._count_by_status()
        for listener in self._listeners:
            listener(counts)

    def _next_operation_id(self) -> str:
        # Epoch millis, bumped so ids stay strictly increasing within one process.
        now_ms = int(time.time() * 1000)
        self._last_operation_ms = max(now_ms, self._last_operation_ms + 1)
        return f"OP{self._last_operation_ms}"


_STORE: PortStore | None = None


def build_port_store() -> PortStore:
    """Seeded store wired to the vessel-status gauges."""

    store = PortStore.seeded(recent_limit=get_settings().recent_operations_limit)
    store.subscribe(lambda counts: get_metrics().refresh_vessel_status(counts))
    return store


def get_port_store() -> PortStore:
    global _STORE
    if _STORE is None:
        _STORE = build_port_store()
    return _STORE


def set_port_store(store: PortStore | None) -> None:
    global _STORE
    _STORE = store
