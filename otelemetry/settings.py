"""Environment-sourced telemetry settings powered by Pydantic.

Environment matrix:

| Section   | Environment Variable            | Default     | Purpose                                   |
|-----------|---------------------------------|-------------|-------------------------------------------|
| Service   | `OTEL_SERVICE_NAME`             | `""`        | Logical service identifier (required)     |
| Service   | `OTEL_SERVICE_NAMESPACE`        | `""`        | Service namespace                         |
| Service   | `OTEL_SERVICE_VERSION`          | `""`        | Service version                           |
| Collector | `OTEL_COLLECTOR_HOST`           | `localhost` | OTLP collector host                       |
| Collector | `OTEL_COLLECTOR_PORT`           | `4317`      | OTLP collector port                       |
| Collector | `OTEL_EXPORTER_OTLP_PROTOCOL`   | `grpc`      | `grpc` or `http/protobuf`                 |
| Collector | `OTEL_EXPORTER_OTLP_INSECURE`   | `true`      | Plaintext transport for gRPC              |
| Collector | `OTEL_EXPORTER_OTLP_HEADERS`    | `None`      | Additional OTLP request headers (k=v,...) |
| Collector | `OTEL_EXPORTER_OTLP_TIMEOUT`    | `10`        | Exporter request timeout (seconds)        |
| Signals   | `OTEL_LOGS_EXPORTER`            | `otlp`      | `otlp`, `stdout` (or `console`), `none`   |
| Signals   | `OTEL_TRACES_EXPORTER`          | `none`      | `otlp`, `stdout` (or `console`), `none`   |
| Signals   | `OTEL_METRICS_EXPORTER`         | `none`      | `otlp`, `stdout` (or `console`), `none`   |
| Resource  | `OTEL_RESOURCE_ATTRIBUTES`      | `None`      | Extra resource attributes (key=value)     |
| Logging   | `LOG_LEVEL`                     | `INFO`      | Level for the library's own diagnostics   |

The settings object is frozen and re-read from the environment on every
``get_settings()`` call.
"""

from __future__ import annotations

from typing import List, Tuple

from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _parse_pairs(raw: str | None) -> Tuple[Tuple[str, str], ...]:
    raw = (raw or "").strip()
    if not raw:
        return tuple()
    pairs: List[Tuple[str, str]] = []
    for part in raw.split(","):
        key, _, value = part.partition("=")
        key = key.strip()
        value = value.strip()
        if key and value:
            pairs.append((key, value))
    return tuple(pairs)


class _SettingsBase(BaseSettings):
    """Common configuration for BaseSettings subclasses."""

    model_config = SettingsConfigDict(
        env_prefix="",
        populate_by_name=True,
        extra="ignore",
        case_sensitive=True,
        frozen=True,
    )


class TelemetrySettings(_SettingsBase):
    """OpenTelemetry service identity and exporter configuration."""

    service_name: str = Field(default="", alias="OTEL_SERVICE_NAME")
    service_namespace: str = Field(default="", alias="OTEL_SERVICE_NAMESPACE")
    service_version: str = Field(default="", alias="OTEL_SERVICE_VERSION")
    collector_host: str = Field(default="localhost", alias="OTEL_COLLECTOR_HOST")
    collector_port: str = Field(default="4317", alias="OTEL_COLLECTOR_PORT")
    exporter_otlp_protocol: str = Field(
        default="grpc", alias="OTEL_EXPORTER_OTLP_PROTOCOL"
    )
    exporter_otlp_insecure: bool = Field(
        default=True, alias="OTEL_EXPORTER_OTLP_INSECURE"
    )
    exporter_otlp_headers: str | None = Field(
        default=None, alias="OTEL_EXPORTER_OTLP_HEADERS"
    )
    exporter_otlp_timeout: float = Field(
        default=10.0, alias="OTEL_EXPORTER_OTLP_TIMEOUT"
    )
    logs_exporter: str = Field(default="otlp", alias="OTEL_LOGS_EXPORTER")
    traces_exporter: str = Field(default="none", alias="OTEL_TRACES_EXPORTER")
    metrics_exporter: str = Field(default="none", alias="OTEL_METRICS_EXPORTER")
    resource_attributes: str | None = Field(
        default=None, alias="OTEL_RESOURCE_ATTRIBUTES"
    )
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    @field_validator("collector_port", mode="before")
    @classmethod
    def _coerce_port(cls, value: int | str | None) -> str:
        if value in (None, ""):
            return "4317"
        return str(value).strip()

    @field_validator("logs_exporter", "traces_exporter", "metrics_exporter")
    @classmethod
    def _normalize_exporter(cls, value: str) -> str:
        value = (value or "none").strip().lower()
        return "stdout" if value == "console" else value

    @computed_field
    @property
    def parsed_headers(self) -> Tuple[Tuple[str, str], ...]:
        return _parse_pairs(self.exporter_otlp_headers)

    @computed_field
    @property
    def resource_attributes_map(self) -> Tuple[Tuple[str, str], ...]:
        return _parse_pairs(self.resource_attributes)


def get_settings() -> TelemetrySettings:
    """Instantiate settings from the current environment."""
    return TelemetrySettings()


def reload_settings() -> TelemetrySettings:
    """Alias for get_settings to maintain a consistent API."""
    return get_settings()


__all__ = ["TelemetrySettings", "get_settings", "reload_settings"]
