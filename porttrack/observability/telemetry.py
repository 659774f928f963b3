from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Any

import structlog
from fluent import asyncsender

from porttrack.config import Settings, get_settings


logger = logging.getLogger(__name__)


class FluentdForwarder:
    """Ships telemetry records to Fluentd over the forward protocol.

    fluent-logger's async sender owns the queue and the delivery thread. The
    queue is circular, so `submit` never blocks: when it is full the oldest
    pending record is dropped. Transport errors stay inside the sender.
    """

    def __init__(
        self,
        host: str,
        port: int,
        *,
        tag: str = "porttrack",
        timeout: float = 3.0,
        max_queue: int = 10_000,
    ) -> None:
        self.dropped = 0
        self._sender = asyncsender.FluentSender(
            tag,
            host=host,
            port=port,
            timeout=timeout,
            queue_maxsize=max_queue,
            queue_circular=True,
            queue_overflow_handler=self._on_overflow,
        )
        self._closed = threading.Event()
        self._closer: threading.Thread | None = None

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def submit(self, label: str, record: dict[str, Any]) -> bool:
        if self._closed.is_set():
            return False
        return bool(self._sender.emit(label, record))

    def close(self, timeout: float) -> bool:
        """Stop accepting records and wait up to `timeout` seconds for the backlog to drain."""

        if self._closer is None:
            self._closed.set()
            # FluentSender.close joins its delivery thread without a deadline.
            self._closer = threading.Thread(target=self._sender.close, name="fluentd-drain", daemon=True)
            self._closer.start()
        self._closer.join(timeout)
        drained = not self._closer.is_alive()
        if not drained:
            logger.warning("telemetry drain timed out after %.1fs", timeout)
        return drained

    def _on_overflow(self, _pending: Any) -> None:
        self.dropped += 1


class TelemetrySink:
    """Structured event emitter: local structlog output plus optional forwarding."""

    def __init__(
        self,
        service: str,
        environment: str,
        forwarder: FluentdForwarder | None = None,
    ) -> None:
        self.service = service
        self.environment = environment
        self.forwarder = forwarder
        self._log = structlog.get_logger("telemetry")

    @property
    def forwarding(self) -> bool:
        return self.forwarder is not None and not self.forwarder.closed

    def emit(self, level: str, event: str, **fields: Any) -> None:
        log_method = getattr(self._log, "warning" if level == "warn" else level, self._log.info)
        log_method(event, **fields)

        if self.forwarder is None:
            return
        record = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": level,
            "message": event,
            "service": self.service,
            "environment": self.environment,
            **fields,
        }
        self.forwarder.submit(level, record)

    def info(self, event: str, **fields: Any) -> None:
        self.emit("info", event, **fields)

    def warn(self, event: str, **fields: Any) -> None:
        self.emit("warn", event, **fields)

    def error(self, event: str, **fields: Any) -> None:
        self.emit("error", event, **fields)

    def end(self, timeout: float = 5.0) -> bool:
        if self.forwarder is None:
            return True
        drained = self.forwarder.close(timeout)
        self._log.info("telemetry_sink_closed", drained=drained, dropped=self.forwarder.dropped)
        return drained


def build_telemetry_sink(settings: Settings) -> TelemetrySink:
    forwarder = None
    if settings.fluentd_enabled:
        forwarder = FluentdForwarder(
            settings.fluentd_host,
            settings.fluentd_port,
            timeout=settings.fluentd_timeout_seconds,
            max_queue=settings.telemetry_queue_size,
        )
    return TelemetrySink(service=settings.service_name, environment=settings.environment, forwarder=forwarder)


_SINK: TelemetrySink | None = None


def get_telemetry_sink() -> TelemetrySink:
    global _SINK
    if _SINK is None:
        _SINK = build_telemetry_sink(get_settings())
    return _SINK


def set_telemetry_sink(sink: TelemetrySink | None) -> None:
    global _SINK
    _SINK = sink
