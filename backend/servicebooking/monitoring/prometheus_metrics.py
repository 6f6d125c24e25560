"""
Prometheus metrics for the booking engine.

Fed by the ``@measure_operation`` decorator on service methods and by the
booking lock helpers.
"""

from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

# Custom registry so embedding applications keep their default one clean
REGISTRY = CollectorRegistry()

service_operation_duration_seconds = Histogram(
    "servicebooking_service_operation_duration_seconds",
    "Service operation duration in seconds",
    ["service", "operation"],
    registry=REGISTRY,
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

service_operations_total = Counter(
    "servicebooking_service_operations_total",
    "Total number of service operations",
    ["service", "operation", "status"],
    registry=REGISTRY,
)

errors_total = Counter(
    "servicebooking_errors_total",
    "Total number of errors",
    ["service", "operation", "error_type"],
    registry=REGISTRY,
)

booking_lock_events_total = Counter(
    "servicebooking_booking_lock_events_total",
    "Booking lock acquire/release outcomes",
    ["action", "outcome"],
    registry=REGISTRY,
)


class PrometheusMetrics:
    """Thin facade so callers do not touch metric objects directly."""

    @staticmethod
    def record_service_operation(
        service: str,
        operation: str,
        duration: float,
        status: str = "success",
        error_type: Optional[str] = None,
    ) -> None:
        service_operation_duration_seconds.labels(service=service, operation=operation).observe(
            duration
        )
        service_operations_total.labels(service=service, operation=operation, status=status).inc()
        if error_type:
            errors_total.labels(service=service, operation=operation, error_type=error_type).inc()

    @staticmethod
    def record_booking_lock(action: str, outcome: str) -> None:
        booking_lock_events_total.labels(action=action, outcome=outcome).inc()

    @staticmethod
    def get_metrics() -> bytes:
        return generate_latest(REGISTRY)


prometheus_metrics = PrometheusMetrics()
