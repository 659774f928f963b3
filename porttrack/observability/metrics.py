from __future__ import annotations

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    GC_COLLECTOR,
    PLATFORM_COLLECTOR,
    PROCESS_COLLECTOR,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

from porttrack.models.schemas import VESSEL_STATUSES


class PortMetrics:
    """Prometheus metrics on a dedicated registry (resets on restart)."""

    content_type = CONTENT_TYPE_LATEST

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        if registry is None:
            registry = CollectorRegistry(auto_describe=True)
            # Runtime metrics for the process, like the default client collectors.
            for collector in (PROCESS_COLLECTOR, PLATFORM_COLLECTOR, GC_COLLECTOR):
                registry.register(collector)
        self.registry = registry
        self._ship_statuses: set[str] = set(VESSEL_STATUSES)

        self.http_request_duration = Histogram(
            "http_request_duration_seconds",
            "Duration of HTTP requests in seconds",
            labelnames=["method", "route", "status_code"],
            buckets=(0.1, 0.5, 1.0, 2.0, 5.0),
            registry=registry,
        )
        self.http_requests_total = Counter(
            "http_requests_total",
            "Total number of HTTP requests",
            labelnames=["method", "route", "status_code"],
            registry=registry,
        )
        self.active_ships = Gauge(
            "porttrack_active_ships_total",
            "Total number of active ships in port",
            labelnames=["status"],
            registry=registry,
        )
        self.port_operations_total = Counter(
            "porttrack_operations_total",
            "Total number of port operations",
            labelnames=["operation_type", "status"],
            registry=registry,
        )
        self.critical_operations_failed = Counter(
            "porttrack_critical_operations_failed_total",
            "Total number of failed critical operations",
            labelnames=["operation_type"],
            registry=registry,
        )
        self.auth_failures_total = Counter(
            "porttrack_auth_failures_total",
            "Total authentication failures",
            labelnames=["type"],
            registry=registry,
        )

    def observe_http_request(self, method: str, route: str, status_code: int, elapsed_s: float) -> None:
        labels = {"method": method, "route": route, "status_code": str(status_code)}
        self.http_request_duration.labels(**labels).observe(elapsed_s)
        self.http_requests_total.labels(**labels).inc()

    def record_port_operation(self, operation_type: str, outcome: str) -> None:
        self.port_operations_total.labels(operation_type=operation_type, status=outcome).inc()

    def record_critical_failure(self, operation_type: str) -> None:
        self.critical_operations_failed.labels(operation_type=operation_type).inc()

    def record_auth_failure(self, failure_type: str) -> None:
        self.auth_failures_total.labels(type=failure_type).inc()

    def refresh_vessel_status(self, counts: dict[str, int]) -> None:
        """Overwrite every status gauge from a full count snapshot.

        Every status ever published that is missing from the snapshot is set
        to zero, so a vessel leaving a status never leaves a stale level behind.
        """

        self._ship_statuses.update(counts)
        for status in self._ship_statuses:
            self.active_ships.labels(status=status).set(counts.get(status, 0))

    def render(self) -> bytes:
        return generate_latest(self.registry)


_METRICS: PortMetrics | None = None


def get_metrics() -> PortMetrics:
    global _METRICS
    if _METRICS is None:
        _METRICS = PortMetrics()
    return _METRICS


def reset_metrics() -> None:
    """Start over with a fresh registry (used by tests)."""

    global _METRICS
    _METRICS = PortMetrics()
