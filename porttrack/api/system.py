from __future__ import annotations

from datetime import datetime, timezone
from time import monotonic

from fastapi import APIRouter, Depends, Response

from porttrack.api.errors import handle_unexpected
from porttrack.config import get_settings
from porttrack.models.schemas import HealthResponse, PortStatus, StatusResponse
from porttrack.observability.metrics import get_metrics
from porttrack.observability.telemetry import TelemetrySink, get_telemetry_sink
from porttrack.services.port_store import PortStore, get_port_store

router = APIRouter(tags=["system"])

_STARTED_AT = monotonic()

_WEATHER = {
    "condition": "clear",
    "wind_speed": "15 knots",
    "visibility": "10 nautical miles",
}


@router.get("/")
async def index() -> dict[str, str]:
    settings = get_settings()
    return {
        "name": settings.service_name,
        "version": settings.app_version,
        "author": settings.author_name,
        "email": settings.author_email,
    }


@router.get("/health", response_model=HealthResponse)
async def health(telemetry: TelemetrySink = Depends(get_telemetry_sink)) -> HealthResponse:
    settings = get_settings()
    response = HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        uptime=round(monotonic() - _STARTED_AT, 3),
        environment=settings.environment,
        version=settings.app_version,
        services={
            "fluentd": "connected" if telemetry.forwarding else "disabled",
            "prometheus": "active",
        },
    )
    telemetry.info("health_check_requested", uptime=response.uptime, services=response.services)
    return response


@router.get("/metrics")
async def metrics() -> Response:
    """Prometheus text exposition for scraping."""

    registry = get_metrics()
    return Response(content=registry.render(), media_type=registry.content_type)


@router.get("/api/v1/status", response_model=StatusResponse)
async def api_status(
    store: PortStore = Depends(get_port_store),
    telemetry: TelemetrySink = Depends(get_telemetry_sink),
) -> StatusResponse:
    with handle_unexpected(telemetry, "api_status_failed"):
        settings = get_settings()
        # Derived fresh on every call.
        in_port = store.in_port_count()
        port_status = PortStatus(
            active_ships=in_port,
            total_berths=settings.total_berths,
            available_berths=settings.total_berths - in_port,
            active_staff=store.active_personnel_count(),
            weather=_WEATHER,
        )
        telemetry.info("api_status_requested", port_status=port_status.model_dump())
        return StatusResponse(
            api="PortTrack API",
            version=settings.app_version,
            status="operational",
            services={
                "database": "in_memory",
                "authentication": "simulated",
                "monitoring": "enabled",
                "logging": "fluentd_connected" if telemetry.forwarding else "local_only",
            },
            port_status=port_status,
        )
