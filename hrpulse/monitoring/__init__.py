"""Prometheus instrumentation for HRPulse."""
