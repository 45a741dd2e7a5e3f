from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional, Type, TypeVar

from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_NAMESPACE, SERVICE_VERSION
from pydantic import BaseModel, Field, field_validator

from otelemetry.core.exceptions import ConfigError
from otelemetry.records import attribute
from otelemetry.resource import ResourceOption, with_attributes
from otelemetry.settings import TelemetrySettings, get_settings

_E = TypeVar("_E", bound=Enum)


class ExporterKind(str, Enum):
    OTLP = "otlp"
    STDOUT = "stdout"
    NONE = "none"


class OTLPProtocol(str, Enum):
    GRPC = "grpc"
    HTTP_PROTOBUF = "http/protobuf"


class Service(BaseModel):
    """Identity of the emitting service. ``name`` is required at construction time."""

    model_config = {"frozen": True}

    name: str = ""
    namespace: str = ""
    version: str = ""


class Collector(BaseModel):
    """
    OTLP collector transport target.

    Attributes:
        host (str): Collector host name or address.
        port (str): Collector port; kept as text so malformed values surface as transport errors.
        protocol (OTLPProtocol): OTLP wire protocol.
        insecure (bool): Use a plaintext channel (gRPC only).
        headers (Dict[str, str]): Extra request headers/metadata.
        timeout (float): Per-export timeout in seconds.
    """

    model_config = {"frozen": True}

    host: str = "localhost"
    port: str = "4317"
    protocol: OTLPProtocol = OTLPProtocol.GRPC
    insecure: bool = True
    headers: Dict[str, str] = Field(default_factory=dict)
    timeout: float = 10.0

    @field_validator("port", mode="before")
    @classmethod
    def _coerce_port(cls, value: int | str | None) -> str:
        return "" if value is None else str(value).strip()

    @property
    def endpoint(self) -> str:
        return f"{self.host}:{self.port}"


class LoggerOptions(BaseModel):
    """Batch processor tuning for the log pipeline. Validated by the SDK."""

    model_config = {"frozen": True}

    schedule_delay_millis: float = 1000
    max_export_batch_size: int = 512
    max_queue_size: int = 2048
    export_timeout_millis: float = 30000


class Config(BaseModel):
    """Everything needed to construct a ``Telemetry`` handle."""

    service: Service = Field(default_factory=Service)
    collector: Collector = Field(default_factory=Collector)
    resource_options: Optional[List[ResourceOption]] = None
    logs_exporter: ExporterKind = ExporterKind.OTLP
    traces_exporter: ExporterKind = ExporterKind.NONE
    metrics_exporter: ExporterKind = ExporterKind.NONE
    logger: LoggerOptions = Field(default_factory=LoggerOptions)
    set_global: bool = False
    shutdown_on_exit: bool = False

    model_config = {
        "frozen": True,
        "arbitrary_types_allowed": True,
    }

    @classmethod
    def from_settings(cls, settings: TelemetrySettings | None = None) -> "Config":
        """Build a config from environment settings (read fresh when omitted)."""
        settings = settings or get_settings()
        extras = dict(settings.resource_attributes_map)
        # OTEL_SERVICE_* wins; resource attributes only fill what it leaves unset.
        service = Service(
            name=settings.service_name or extras.get(SERVICE_NAME, ""),
            namespace=settings.service_namespace or extras.get(SERVICE_NAMESPACE, ""),
            version=settings.service_version or extras.get(SERVICE_VERSION, ""),
        )
        for key in (SERVICE_NAME, SERVICE_NAMESPACE, SERVICE_VERSION):
            extras.pop(key, None)
        options: Optional[List[ResourceOption]] = None
        if extras:
            options = [with_attributes(*(attribute(k, v) for k, v in extras.items()))]
        return cls(
            service=service,
            collector=Collector(
                host=settings.collector_host,
                port=settings.collector_port,
                protocol=_coerce_enum(
                    OTLPProtocol, settings.exporter_otlp_protocol, "OTEL_EXPORTER_OTLP_PROTOCOL"
                ),
                insecure=settings.exporter_otlp_insecure,
                headers=dict(settings.parsed_headers),
                timeout=settings.exporter_otlp_timeout,
            ),
            resource_options=options,
            logs_exporter=_coerce_enum(
                ExporterKind, settings.logs_exporter, "OTEL_LOGS_EXPORTER"
            ),
            traces_exporter=_coerce_enum(
                ExporterKind, settings.traces_exporter, "OTEL_TRACES_EXPORTER"
            ),
            metrics_exporter=_coerce_enum(
                ExporterKind, settings.metrics_exporter, "OTEL_METRICS_EXPORTER"
            ),
        )


def _coerce_enum(enum_cls: Type[_E], value: str, name: str) -> _E:
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ConfigError(f"{name}={value!r} is not one of: {allowed}") from None


__all__ = [
    "Collector",
    "Config",
    "ExporterKind",
    "LoggerOptions",
    "OTLPProtocol",
    "Service",
]
