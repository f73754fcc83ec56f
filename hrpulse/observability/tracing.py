"""OpenTelemetry tracing setup for HRPulse.

Spans are created through the global tracer provider; until
``setup_telemetry`` is called they are non-recording no-ops, so the
aggregation code can trace unconditionally.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger(__name__)

_provider: TracerProvider | None = None


def setup_telemetry(
    service_name: str = "hrpulse",
    environment: str = "development",
    otlp_endpoint: str | None = None,
    enable_console_export: bool = False,
    sample_rate: float = 1.0,
) -> trace.Tracer:
    """Setup OpenTelemetry tracing.

    Args:
        service_name: Name of the service
        environment: Environment (development, production)
        otlp_endpoint: OTLP collector endpoint (e.g., http://localhost:4317)
        enable_console_export: Export spans to console for debugging
        sample_rate: Sampling rate (0.0 to 1.0, 1.0 = all traces)

    Returns:
        Tracer instance
    """
    global _provider

    resource = Resource.create({
        "service.name": service_name,
        "service.namespace": "hrpulse",
        "deployment.environment": environment,
    })

    provider = TracerProvider(resource=resource, sampler=TraceIdRatioBased(sample_rate))

    if otlp_endpoint:
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True)))
        logger.info(f"OTLP tracing enabled: {otlp_endpoint}")

    if enable_console_export:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
        logger.info("Console span export enabled")

    trace.set_tracer_provider(provider)
    _provider = provider

    logger.info(f"Telemetry initialized: {service_name} ({environment}), sampling {sample_rate:.0%}")

    return get_tracer()


def get_tracer() -> trace.Tracer:
    """Get tracer from the global provider (no-op until configured)."""
    return trace.get_tracer("hrpulse")


@contextmanager
def trace_operation(
    operation_name: str,
    attributes: dict[str, str | int | float] | None = None,
) -> Iterator[trace.Span]:
    """Context manager for tracing an operation.

    Args:
        operation_name: Name of the operation
        attributes: Additional span attributes

    Yields:
        Span object

    Example:
        with trace_operation("dashboard_stats", {"cache_key": key}):
            stats = await self._compute_dashboard_stats()
    """
    with get_tracer().start_as_current_span(
        operation_name,
        attributes=attributes or {},
        record_exception=False,
        set_status_on_exception=False,
    ) as span:
        try:
            yield span
            span.set_status(trace.StatusCode.OK)
        except Exception as e:
            span.record_exception(e)
            span.set_status(trace.StatusCode.ERROR, str(e))
            raise


def add_span_attributes(attributes: dict[str, str | int | float | bool]) -> None:
    """Add attributes to the current span.

    Args:
        attributes: Dictionary of attributes to add
    """
    current_span = trace.get_current_span()
    if current_span.is_recording():
        current_span.set_attributes(attributes)


def shutdown_telemetry() -> None:
    """Flush and shut down the tracer provider created by setup_telemetry."""
    global _provider

    if _provider is not None:
        _provider.shutdown()
        _provider = None
        logger.info("Telemetry shutdown complete")
