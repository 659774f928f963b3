from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from porttrack.api.errors import handle_unexpected
from porttrack.models.schemas import StaffResponse
from porttrack.observability.telemetry import TelemetrySink, get_telemetry_sink
from porttrack.services.port_store import PortStore, get_port_store

router = APIRouter(prefix="/api/v1", tags=["staff"])


@router.get("/staff", response_model=StaffResponse)
async def list_staff(
    role: str | None = None,
    shift: str | None = None,
    active: str | None = None,
    store: PortStore = Depends(get_port_store),
    telemetry: TelemetrySink = Depends(get_telemetry_sink),
) -> StaffResponse:
    with handle_unexpected(telemetry, "staff_list_failed"):
        # Only the literal "true" selects active staff; any other value (even "") selects inactive.
        active_flag = None if active is None else active == "true"
        staff = store.list_personnel(role=role or None, shift=shift or None, active=active_flag)
        telemetry.info(
            "staff_list_requested",
            count=len(staff),
            filters={"role": role, "shift": shift, "active": active},
        )
        return StaffResponse(staff=staff, total=len(staff), timestamp=datetime.now(timezone.utc))
