"""Thin OpenTelemetry wrapper: resource/provider construction plus a logging facade."""

__version__ = "0.3.0"

from otelemetry.config import (  # noqa: E402
    Collector,
    Config,
    ExporterKind,
    LoggerOptions,
    OTLPProtocol,
    Service,
)
from otelemetry.core.exceptions import (  # noqa: E402
    ConfigError,
    OTelemetryError,
    ShutdownTimeoutError,
    TransportError,
)
from otelemetry.logs import Log, TelemetryLogger  # noqa: E402
from otelemetry.records import KeyValue, LogRecord, attribute, build_record  # noqa: E402
from otelemetry.resource import (  # noqa: E402
    ResourceOption,
    build_resource,
    with_attributes,
    with_container,
    with_host,
    with_os,
    with_process,
)
from otelemetry.severity import Severity  # noqa: E402
from otelemetry.telemetry import Telemetry, new  # noqa: E402

__all__ = [
    "Collector",
    "Config",
    "ConfigError",
    "ExporterKind",
    "KeyValue",
    "Log",
    "LogRecord",
    "LoggerOptions",
    "OTLPProtocol",
    "OTelemetryError",
    "ResourceOption",
    "Service",
    "Severity",
    "ShutdownTimeoutError",
    "Telemetry",
    "TelemetryLogger",
    "TransportError",
    "attribute",
    "build_record",
    "build_resource",
    "new",
    "with_attributes",
    "with_container",
    "with_host",
    "with_os",
    "with_process",
]
