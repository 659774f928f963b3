from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from porttrack.observability.telemetry import TelemetrySink, get_telemetry_sink


INTERNAL_ERROR = "Internal server error"


@contextmanager
def handle_unexpected(telemetry: TelemetrySink, event: str, **fields: Any) -> Iterator[None]:
    """Turn any non-HTTP exception into a logged 500.

    HTTPExceptions raised inside the block pass through untouched.
    """

    try:
        yield
    except HTTPException:
        raise
    except Exception as exc:
        telemetry.error(event, error=str(exc), error_type=type(exc).__name__, **fields)
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR) from exc


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        detail = exc.detail
        if exc.status_code == 404 and request.scope.get("route") is None:
            get_telemetry_sink().warn(
                "route_not_found",
                method=request.method,
                path=request.url.path,
                user_agent=request.headers.get("user-agent"),
            )
            detail = "Route not found"
        return JSONResponse(status_code=exc.status_code, content={"error": detail}, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        get_telemetry_sink().warn(
            "request_validation_failed",
            path=request.url.path,
            errors=[error.get("msg") for error in exc.errors()],
        )
        return JSONResponse(status_code=400, content={"error": "Invalid request body"})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        get_telemetry_sink().error(
            "unhandled_application_error",
            error=str(exc),
            error_type=type(exc).__name__,
            url=str(request.url),
            method=request.method,
        )
        return JSONResponse(status_code=500, content={"error": INTERNAL_ERROR})
