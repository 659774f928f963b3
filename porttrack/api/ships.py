from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request

from porttrack.api.errors import handle_unexpected
from porttrack.config import get_settings
from porttrack.models.schemas import BerthRequest, BerthResponse, ShipsResponse, Vessel
from porttrack.observability.metrics import get_metrics
from porttrack.observability.telemetry import TelemetrySink, get_telemetry_sink
from porttrack.services.failure_injector import FailureInjector, get_failure_injector
from porttrack.services.port_store import PortStore, VesselNotFoundError, get_port_store

router = APIRouter(prefix="/api/v1", tags=["ships"])


@router.get("/ships", response_model=ShipsResponse, response_model_exclude_none=True)
async def list_ships(
    request: Request,
    status: str | None = None,
    vessel_type: str | None = Query(default=None, alias="type"),
    store: PortStore = Depends(get_port_store),
    telemetry: TelemetrySink = Depends(get_telemetry_sink),
) -> ShipsResponse:
    with handle_unexpected(telemetry, "ships_list_failed"):
        # Empty query values mean "no filter".
        ships = store.list_vessels(status=status or None, vessel_type=vessel_type or None)
        telemetry.info(
            "ships_list_requested",
            count=len(ships),
            filters={"status": status, "type": vessel_type},
            request_id=request.headers.get("x-request-id", "unknown"),
        )
        return ShipsResponse(ships=ships, total=len(ships), timestamp=datetime.now(timezone.utc))


@router.get("/ships/{ship_id}", response_model=Vessel, response_model_exclude_none=True)
async def get_ship(
    ship_id: str,
    store: PortStore = Depends(get_port_store),
    telemetry: TelemetrySink = Depends(get_telemetry_sink),
) -> Vessel:
    with handle_unexpected(telemetry, "ship_details_failed", shipId=ship_id):
        try:
            ship = store.get_vessel(ship_id)
        except VesselNotFoundError as exc:
            telemetry.warn("ship_not_found", shipId=ship_id)
            raise HTTPException(status_code=404, detail="Ship not found") from exc

        telemetry.info("ship_details_requested", shipId=ship.id, shipName=ship.name)
        return ship


@router.post("/ships/{ship_id}/berth", response_model=BerthResponse, response_model_exclude_none=True)
async def berth_ship(
    ship_id: str,
    body: Any = Body(default=None),
    store: PortStore = Depends(get_port_store),
    injector: FailureInjector = Depends(get_failure_injector),
    telemetry: TelemetrySink = Depends(get_telemetry_sink),
) -> BerthResponse:
    berth_number = BerthRequest.from_body(body).berth_label()

    with handle_unexpected(telemetry, "berth_operation_error", shipId=ship_id):
        try:
            ship = store.get_vessel(ship_id)
        except VesselNotFoundError as exc:
            telemetry.warn("berth_failed_ship_not_found", shipId=ship_id)
            raise HTTPException(status_code=404, detail="Ship not found") from exc

        if not berth_number:
            telemetry.warn("berth_failed_missing_berth_number", shipId=ship_id)
            raise HTTPException(status_code=400, detail="Berth number is required")

        # Validation above always runs before the simulated failure draw.
        if injector.should_fail(get_settings().berth_failure_rate):
            get_metrics().record_critical_failure("berth")
            telemetry.error(
                "critical_berthing_operation_failed",
                shipId=ship.id,
                berth=berth_number,
                reason="simulated_failure",
            )
            raise HTTPException(status_code=500, detail="Berthing operation failed")

        ship, operation = store.berth_vessel(ship_id, berth_number)
        get_metrics().record_port_operation("berth", "success")

        telemetry.info(
            "ship_berthed",
            shipId=ship.id,
            shipName=ship.name,
            berth=berth_number,
            previousStatus=operation.details["previousStatus"],
            operationId=operation.id,
        )
        return BerthResponse(message="Ship berthed successfully", ship=ship, operation=operation)
