from __future__ import annotations

import uuid
from time import perf_counter
from typing import Any, Callable

import structlog
from starlette.datastructures import Headers, MutableHeaders

from porttrack.observability.metrics import get_metrics
from porttrack.observability.telemetry import get_telemetry_sink


def route_label(scope: dict[str, Any]) -> str:
    """Matched route template, falling back to the raw path for unmatched requests."""

    route = scope.get("route")
    template = getattr(route, "path", None)
    if isinstance(template, str):
        return template
    return str(scope.get("path", ""))


class RequestContextMiddleware:
    """Adds request_id context, access logs, and HTTP metrics for every request."""

    def __init__(self, app: Callable[..., Any]) -> None:
        self.app = app

    async def __call__(self, scope: dict[str, Any], receive: Callable[..., Any], send: Callable[..., Any]) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        request_headers = Headers(scope=scope)
        request_id = request_headers.get("x-request-id") or str(uuid.uuid4())
        path = scope.get("path")
        method = scope.get("method", "GET")

        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            path=path,
            method=method,
        )

        start = perf_counter()
        status_code: int = 500
        content_length: str | None = None

        async def send_wrapper(message: dict[str, Any]) -> None:
            nonlocal status_code, content_length

            if message.get("type") == "http.response.start":
                status_code = int(message.get("status", 500))
                headers = MutableHeaders(scope=message)
                headers["X-Request-ID"] = request_id
                content_length = headers.get("content-length")

            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            elapsed = perf_counter() - start

            # Update metrics first so they update even if logging misbehaves.
            get_metrics().observe_http_request(
                method=method,
                route=route_label(scope),
                status_code=status_code,
                elapsed_s=elapsed,
            )

            client = scope.get("client")
            query = scope.get("query_string", b"").decode("latin-1")
            get_telemetry_sink().info(
                "http_request",
                url=f"{path}?{query}" if query else path,
                status_code=status_code,
                elapsed_ms=round(elapsed * 1000.0, 2),
                content_length=content_length,
                user_agent=request_headers.get("user-agent"),
                ip=client[0] if client else None,
            )

            structlog.contextvars.clear_contextvars()
