from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from porttrack.api.auth import router as auth_router
from porttrack.api.errors import register_exception_handlers
from porttrack.api.operations import router as operations_router
from porttrack.api.ships import router as ships_router
from porttrack.api.staff import router as staff_router
from porttrack.api.system import router as system_router
from porttrack.config import get_settings
from porttrack.observability.logging import configure_logging
from porttrack.observability.middleware import RequestContextMiddleware
from porttrack.observability.telemetry import get_telemetry_sink
from porttrack.services.port_store import get_port_store


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level, service=settings.service_name)

    app = FastAPI(title="PortTrack API", version=settings.app_version)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    # Added last so it wraps CORS too and measures every response.
    app.add_middleware(RequestContextMiddleware)
    register_exception_handlers(app)

    app.include_router(system_router)
    app.include_router(ships_router)
    app.include_router(staff_router)
    app.include_router(operations_router)
    app.include_router(auth_router)

    @app.on_event("startup")
    def _startup() -> None:
        # Seeds the store and publishes the initial vessel-status gauges.
        get_port_store()
        get_telemetry_sink().info(
            "server_started",
            port=settings.port,
            environment=settings.environment,
            fluentd_enabled=settings.fluentd_enabled,
            fluentd_address=settings.fluentd_address,
        )

    @app.on_event("shutdown")
    def _shutdown() -> None:
        sink = get_telemetry_sink()
        sink.info("server_shutting_down")
        sink.end(timeout=get_settings().telemetry_flush_timeout_seconds)

    return app


app = create_app()
