"""OpenTelemetry and logging configuration."""

import logging
import os
from typing import Any

from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from pythonjsonlogger import jsonlogger

logger = logging.getLogger(__name__)


def _otlp_endpoint() -> str:
    return os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://localhost:4318").rstrip("/")


def get_service_resource() -> Resource:
    """Create OpenTelemetry resource identifying this terminal.

    Returns:
        Resource with service name, environment and terminal attributes
    """
    attributes = {
        "service.name": os.getenv("OTEL_SERVICE_NAME", "pos-client"),
        "deployment.environment": os.getenv("ENVIRONMENT", "development"),
    }

    terminal_id = os.getenv("POS_TERMINAL_ID")
    if terminal_id:
        attributes["pos.terminal_id"] = terminal_id

    return Resource.create(attributes)


def setup_tracing(resource: Resource, export: bool = True) -> None:
    """Install the global tracer provider.

    Args:
        resource: Service resource for trace identification
        export: Ship spans to the OTLP/HTTP collector
    """
    provider = TracerProvider(resource=resource)
    if export:
        exporter = OTLPSpanExporter(endpoint=f"{_otlp_endpoint()}/v1/traces")
        provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)


def setup_metrics(resource: Resource, export: bool = True) -> None:
    """Install the global meter provider, exporting once a minute when enabled.

    Args:
        resource: Service resource for metric identification
        export: Ship metrics to the OTLP/HTTP collector
    """
    readers: list[PeriodicExportingMetricReader] = []
    if export:
        exporter = OTLPMetricExporter(endpoint=f"{_otlp_endpoint()}/v1/metrics")
        readers.append(PeriodicExportingMetricReader(exporter, export_interval_millis=60000))
    metrics.set_meter_provider(MeterProvider(resource=resource, metric_readers=readers))


def setup_observability(app: Any = None, enable_exporters: bool = True) -> None:
    """Initialize tracing, metrics and auto-instrumentation for the terminal.

    Nothing is exported under ``ENVIRONMENT=test``. Outgoing backend calls
    are always instrumented; the terminal API is instrumented when given.

    Args:
        app: Optional FastAPI application to instrument
        enable_exporters: Whether to enable OTLP exporters
    """
    export = enable_exporters and os.getenv("ENVIRONMENT", "development") != "test"
    resource = get_service_resource()

    setup_tracing(resource, export)
    setup_metrics(resource, export)

    HTTPXClientInstrumentor().instrument()
    if app is not None:
        FastAPIInstrumentor.instrument_app(app)

    if export:
        logger.info(f"OpenTelemetry exporting to {_otlp_endpoint()}")
    else:
        logger.info("OpenTelemetry configured without exporters")


def configure_logging(log_level: str = "INFO") -> None:
    """Send every log record to stderr as one JSON object per line.

    Records carry the service name and, when ``POS_TERMINAL_ID`` is set, the
    terminal id, so logs from several tills can share one sink.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL);
            the ``LOG_LEVEL`` environment variable takes precedence
    """
    level_name = os.getenv("LOG_LEVEL", log_level).upper()
    level = getattr(logging, level_name, logging.INFO)

    static_fields = {"service": os.getenv("OTEL_SERVICE_NAME", "pos-client")}
    terminal_id = os.getenv("POS_TERMINAL_ID")
    if terminal_id:
        static_fields["pos.terminal_id"] = terminal_id

    handler = logging.StreamHandler()
    handler.setFormatter(
        jsonlogger.JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s",
            static_fields=static_fields,
            timestamp=True,
        )
    )

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))

    logger.debug(f"JSON logging configured at {level_name}")
