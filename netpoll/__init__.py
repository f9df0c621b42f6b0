"""Network device telemetry collector."""

__version__ = "0.1.0"
