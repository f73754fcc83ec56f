"""Resilience module for timeouts and partial-failure tolerant fan-out."""

from hrpulse.resilience.fanout import QueryTimeoutError, degrade, fan_out, with_timeout
from hrpulse.resilience.result import Result

__all__ = [
    "degrade",
    "fan_out",
    "QueryTimeoutError",
    "Result",
    "with_timeout",
]
