class OTelemetryError(Exception):
    """Base class for all otelemetry exceptions."""


class ConfigError(OTelemetryError):
    """Raised for missing/malformed configuration or resource options."""


class TransportError(OTelemetryError):
    """Raised when an exporter transport cannot be initialized."""


class ShutdownTimeoutError(OTelemetryError):
    """Raised when a flush/shutdown deadline expires before pending data is exported."""


__all__ = [
    "OTelemetryError",
    "ConfigError",
    "TransportError",
    "ShutdownTimeoutError",
]
