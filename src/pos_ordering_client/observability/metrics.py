"""Custom metrics for the POS ordering client."""

from opentelemetry import metrics

meter = metrics.get_meter("pos-client")

checkout_success_counter = meter.create_counter(
    name="checkout_success_total",
    description="Total number of transactions accepted by the backend",
    unit="1",
)

checkout_failure_counter = meter.create_counter(
    name="checkout_failure_total",
    description="Total number of checkouts that kept the cart",
    unit="1",
)

# Writes applied locally while the backend was unreachable or rejected them
degraded_write_counter = meter.create_counter(
    name="degraded_write_total",
    description="Writes that succeeded locally but not on the backend",
    unit="1",
)

backend_response_time = meter.create_histogram(
    name="backend_response_time_seconds",
    description="Response time for POS backend calls",
    unit="s",
)


def record_checkout_success(item_count: int) -> None:
    """Record a transaction accepted by the backend.

    Args:
        item_count: Number of units in the checked out cart
    """
    checkout_success_counter.add(1, {"item_count": item_count})


def record_checkout_failure(reason: str) -> None:
    """Record a checkout that did not reach the backend.

    Args:
        reason: Short failure reason (e.g., "empty_cart", "backend_error")
    """
    checkout_failure_counter.add(1, {"reason": reason})


def record_degraded_write(component: str, operation: str) -> None:
    """Record a write that was only applied locally.

    Args:
        component: Component that performed the write (e.g., "payment_methods")
        operation: Operation name (e.g., "persist", "delete_custom")
    """
    degraded_write_counter.add(1, {"component": component, "operation": operation})


def record_backend_call(method: str, path: str, duration_seconds: float) -> None:
    """Record a POS backend call.

    Args:
        method: HTTP method
        path: Route template relative to the backend base URL (e.g., "/tables/{id}")
        duration_seconds: Duration in seconds
    """
    backend_response_time.record(duration_seconds, {"method": method, "path": path})
