from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException

from porttrack.api.errors import handle_unexpected
from porttrack.config import get_settings
from porttrack.models.schemas import LoginRequest, LoginResponse
from porttrack.observability.metrics import get_metrics
from porttrack.observability.telemetry import TelemetrySink, get_telemetry_sink
from porttrack.services.auth_service import create_session_token
from porttrack.services.failure_injector import FailureInjector, get_failure_injector

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


@router.post("/login", response_model=LoginResponse)
async def login(
    body: Any = Body(default=None),
    injector: FailureInjector = Depends(get_failure_injector),
    telemetry: TelemetrySink = Depends(get_telemetry_sink),
) -> LoginResponse:
    """Simulated login: there is no user directory, failures are drawn at random."""

    username, password = LoginRequest.from_body(body).credentials()

    with handle_unexpected(telemetry, "login_error"):
        missing = not username or not password
        if missing or injector.should_fail(get_settings().auth_failure_rate):
            get_metrics().record_auth_failure("login")
            telemetry.warn(
                "authentication_failure",
                username=username or "missing",
                reason="missing_credentials" if missing else "invalid_credentials",
            )
            raise HTTPException(status_code=401, detail="Authentication failed")

        telemetry.info("authentication_succeeded", username=username)
        return LoginResponse(message="Authentication successful", token=create_session_token(username))
