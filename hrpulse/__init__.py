"""HRPulse - dashboard statistics aggregation over an unreliable collection store."""

__version__ = "0.1.0"
