from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException

from porttrack.api.errors import handle_unexpected
from porttrack.models.schemas import CargoView, OperationsResponse, RoutesResponse
from porttrack.observability.telemetry import TelemetrySink, get_telemetry_sink
from porttrack.services.port_store import PortStore, VesselNotFoundError, get_port_store
from porttrack.services.seed_data import navigation_routes

router = APIRouter(prefix="/api/v1", tags=["operations"])


@router.get("/operations", response_model=OperationsResponse)
async def list_operations(
    store: PortStore = Depends(get_port_store),
    telemetry: TelemetrySink = Depends(get_telemetry_sink),
) -> OperationsResponse:
    with handle_unexpected(telemetry, "operations_list_failed"):
        recent = store.recent_operations()
        telemetry.info(
            "operations_list_requested",
            count=len(recent),
            totalOperations=store.operations_count(),
        )
        return OperationsResponse(operations=recent, total=len(recent), timestamp=datetime.now(timezone.utc))


@router.get("/cargo/tracking/{ship_id}", response_model=CargoView)
async def track_cargo(
    ship_id: str,
    store: PortStore = Depends(get_port_store),
    telemetry: TelemetrySink = Depends(get_telemetry_sink),
) -> CargoView:
    with handle_unexpected(telemetry, "cargo_tracking_failed", shipId=ship_id):
        try:
            cargo = store.cargo_status(ship_id)
        except VesselNotFoundError as exc:
            telemetry.warn("cargo_tracking_ship_not_found", shipId=ship_id)
            raise HTTPException(status_code=404, detail="Ship not found") from exc

        telemetry.info("cargo_tracking_requested", shipId=cargo.ship_id, status=cargo.status)
        return cargo


@router.get("/routes", response_model=RoutesResponse)
async def list_routes(telemetry: TelemetrySink = Depends(get_telemetry_sink)) -> RoutesResponse:
    with handle_unexpected(telemetry, "routes_list_failed"):
        routes = navigation_routes()
        telemetry.info("routes_information_requested", routeCount=len(routes))
        return RoutesResponse(routes=routes, total=len(routes), timestamp=datetime.now(timezone.utc))
