"""Observability module for OpenTelemetry tracing."""

from hrpulse.observability.tracing import (
    add_span_attributes,
    get_tracer,
    setup_telemetry,
    shutdown_telemetry,
    trace_operation,
)

__all__ = [
    "add_span_attributes",
    "get_tracer",
    "setup_telemetry",
    "shutdown_telemetry",
    "trace_operation",
]
