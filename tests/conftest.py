from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

from porttrack.config import get_settings
from porttrack.main import app
from porttrack.observability.metrics import reset_metrics
from porttrack.observability.telemetry import TelemetrySink, set_telemetry_sink
from porttrack.services.failure_injector import set_failure_injector
from porttrack.services.port_store import build_port_store, set_port_store


class StubFailureInjector:
    """Deterministic injector: always or never fails, and remembers what it was asked."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls: list[float] = []

    def should_fail(self, probability: float) -> bool:
        self.calls.append(probability)
        return self.fail


class RecordingTelemetrySink(TelemetrySink):
    def __init__(self) -> None:
        super().__init__(service="porttrack-api", environment="test")
        self.events: list[dict[str, Any]] = []
        self.end_timeouts: list[float] = []

    def emit(self, level: str, event: str, **fields: Any) -> None:
        self.events.append({"level": level, "event": event, **fields})

    def named(self, event: str) -> list[dict[str, Any]]:
        return [e for e in self.events if e["event"] == event]

    def end(self, timeout: float = 5.0) -> bool:
        self.end_timeouts.append(timeout)
        return super().end(timeout)


@pytest.fixture(autouse=True)
def test_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setenv("JWT_SECRET", "porttrack-test-secret-with-at-least-32-bytes")
    monkeypatch.setenv("FLUENTD_ENABLED", "false")
    get_settings.cache_clear()

    reset_metrics()
    set_port_store(build_port_store())
    set_failure_injector(StubFailureInjector(fail=False))
    set_telemetry_sink(RecordingTelemetrySink())

    yield

    set_port_store(None)
    set_failure_injector(None)
    set_telemetry_sink(None)
    get_settings.cache_clear()


@pytest.fixture
def injector() -> StubFailureInjector:
    stub = StubFailureInjector(fail=False)
    set_failure_injector(stub)
    return stub


@pytest.fixture
def telemetry() -> RecordingTelemetrySink:
    sink = RecordingTelemetrySink()
    set_telemetry_sink(sink)
    return sink


@pytest.fixture
async def api_client() -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
