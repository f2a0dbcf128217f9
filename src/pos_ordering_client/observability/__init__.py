"""OpenTelemetry instrumentation and observability utilities."""

from pos_ordering_client.observability.config import configure_logging, setup_observability
from pos_ordering_client.observability.decorators import traced

__all__ = ["setup_observability", "configure_logging", "traced"]
