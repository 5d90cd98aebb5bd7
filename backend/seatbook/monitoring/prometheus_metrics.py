"""
Prometheus metrics for the seat reservation engine.

Everything lives on a private registry exposed by `GET /metrics`. Service
timings come from `BaseService.measure_operation`; lock and calendar counters
are recorded by the modules that own those concerns.
"""

from typing import Optional

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

REGISTRY = CollectorRegistry()

operation_seconds = Histogram(
    "seatbook_service_operation_duration_seconds",
    "Wall time of service operations",
    ["service", "operation"],
    registry=REGISTRY,
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)

operations_total = Counter(
    "seatbook_service_operations_total",
    "Service operations by outcome",
    ["service", "operation", "status"],
    registry=REGISTRY,
)

# Rejections (conflict, banned, invalid interval) are counted here by class name
operation_errors_total = Counter(
    "seatbook_errors_total",
    "Service operations that raised, by exception type",
    ["service", "operation", "error_type"],
    registry=REGISTRY,
)

reservation_lock_total = Counter(
    "seatbook_reservation_lock_total",
    "Reservation lock outcomes",
    ["action", "outcome"],
    registry=REGISTRY,
)

blackout_windows_inserted_total = Counter(
    "seatbook_blackout_windows_inserted_total",
    "Blackout windows written, by origin",
    ["reason"],
    registry=REGISTRY,
)


class PrometheusMetrics:
    """Recording helpers plus exposition for the private registry."""

    def record_service_operation(
        self,
        service: str,
        operation: str,
        duration: float,
        status: str = "success",
        error_type: Optional[str] = None,
    ) -> None:
        operation_seconds.labels(service=service, operation=operation).observe(duration)
        operations_total.labels(service=service, operation=operation, status=status).inc()
        if error_type:
            operation_errors_total.labels(
                service=service, operation=operation, error_type=error_type
            ).inc()

    def record_reservation_lock(self, action: str, outcome: str) -> None:
        """`action` is acquire|release; `outcome` is success|timeout|error|redis_unavailable."""
        reservation_lock_total.labels(action=action, outcome=outcome).inc()

    def record_blackout_insert(self, reason: str, count: int = 1) -> None:
        if count > 0:
            blackout_windows_inserted_total.labels(reason=reason).inc(count)

    def get_metrics(self) -> bytes:
        return generate_latest(REGISTRY)

    def get_content_type(self) -> str:
        return CONTENT_TYPE_LATEST


prometheus_metrics = PrometheusMetrics()
