"""Exporter factories for the three signals.

OTLP exporters are imported lazily per protocol so that only the transport in
use is loaded. Construction failures surface as ``TransportError``; nothing is
retried here (retry lives inside the SDK exporters).
"""

from __future__ import annotations

import sys
from typing import IO, Any, Callable, Dict, Optional

from loguru import logger

from otelemetry.config import Collector, ExporterKind, OTLPProtocol
from otelemetry.core.exceptions import ConfigError, TransportError

_HTTP_PATHS = {
    "log": "/v1/logs",
    "trace": "/v1/traces",
    "metric": "/v1/metrics",
}


def validate_collector(collector: Collector) -> int:
    """Check the transport target and return the numeric port."""
    host = (collector.host or "").strip()
    if not host or any(ch.isspace() for ch in host):
        raise TransportError(f"invalid collector host: {collector.host!r}")
    try:
        port = int(collector.port)
    except (TypeError, ValueError):
        raise TransportError(f"invalid collector port: {collector.port!r}") from None
    if not 0 < port < 65536:
        raise TransportError(f"collector port out of range: {port}")
    if collector.timeout <= 0:
        raise ConfigError(f"exporter timeout must be positive: {collector.timeout}")
    return port


def _exporter_kwargs(collector: Collector, kind: str) -> Dict[str, Any]:
    port = validate_collector(collector)
    kwargs: Dict[str, Any] = {"timeout": collector.timeout}
    if collector.headers:
        kwargs["headers"] = dict(collector.headers)

    protocol = OTLPProtocol(collector.protocol)
    if protocol is OTLPProtocol.GRPC:
        kwargs["endpoint"] = f"{collector.host}:{port}"
        kwargs["insecure"] = collector.insecure
    elif protocol is OTLPProtocol.HTTP_PROTOBUF:
        scheme = "http" if collector.insecure else "https"
        kwargs["endpoint"] = f"{scheme}://{collector.host}:{port}{_HTTP_PATHS[kind]}"
    else:  # pragma: no cover - enum is closed
        raise ConfigError(f"unsupported OTLP protocol: {collector.protocol!r}")
    return kwargs


def _construct(kind: str, factory: Callable[..., Any], **kwargs: Any) -> Any:
    try:
        exporter = factory(**kwargs)
    except (ConfigError, TransportError):
        raise
    except Exception as exc:
        raise TransportError(f"failed to initialize {kind} exporter: {exc}") from exc
    logger.debug("{} exporter ready: {}", kind, type(exporter).__name__)
    return exporter


def new_log_exporter(
    collector: Collector,
    kind: ExporterKind = ExporterKind.OTLP,
    out: Optional[IO[str]] = None,
):
    """Return a log exporter for ``kind`` (OTLP or stdout)."""
    kind = ExporterKind(kind)
    if kind is ExporterKind.STDOUT:
        from opentelemetry.sdk._logs.export import ConsoleLogRecordExporter

        return _construct("log", ConsoleLogRecordExporter, out=out or sys.stdout)
    if kind is not ExporterKind.OTLP:
        raise ConfigError(f"no log exporter for kind {kind.value!r}")

    kwargs = _exporter_kwargs(collector, "log")
    if collector.protocol is OTLPProtocol.GRPC:
        from opentelemetry.exporter.otlp.proto.grpc._log_exporter import (
            OTLPLogExporter,
        )
    else:
        from opentelemetry.exporter.otlp.proto.http._log_exporter import (
            OTLPLogExporter,
        )
    return _construct("log", OTLPLogExporter, **kwargs)


def new_span_exporter(
    collector: Collector,
    kind: ExporterKind = ExporterKind.OTLP,
    out: Optional[IO[str]] = None,
):
    """Return a span exporter for ``kind`` (OTLP or stdout)."""
    kind = ExporterKind(kind)
    if kind is ExporterKind.STDOUT:
        from opentelemetry.sdk.trace.export import ConsoleSpanExporter

        return _construct("trace", ConsoleSpanExporter, out=out or sys.stdout)
    if kind is not ExporterKind.OTLP:
        raise ConfigError(f"no span exporter for kind {kind.value!r}")

    kwargs = _exporter_kwargs(collector, "trace")
    if collector.protocol is OTLPProtocol.GRPC:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (
            OTLPSpanExporter,
        )
    else:
        from opentelemetry.exporter.otlp.proto.http.trace_exporter import (
            OTLPSpanExporter,
        )
    return _construct("trace", OTLPSpanExporter, **kwargs)


def new_metric_exporter(
    collector: Collector,
    kind: ExporterKind = ExporterKind.OTLP,
    out: Optional[IO[str]] = None,
):
    """Return a metric exporter for ``kind`` (OTLP or stdout)."""
    kind = ExporterKind(kind)
    if kind is ExporterKind.STDOUT:
        from opentelemetry.sdk.metrics.export import ConsoleMetricExporter

        return _construct("metric", ConsoleMetricExporter, out=out or sys.stdout)
    if kind is not ExporterKind.OTLP:
        raise ConfigError(f"no metric exporter for kind {kind.value!r}")

    kwargs = _exporter_kwargs(collector, "metric")
    if collector.protocol is OTLPProtocol.GRPC:
        from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import (
            OTLPMetricExporter,
        )
    else:
        from opentelemetry.exporter.otlp.proto.http.metric_exporter import (
            OTLPMetricExporter,
        )
    return _construct("metric", OTLPMetricExporter, **kwargs)


__all__ = [
    "new_log_exporter",
    "new_metric_exporter",
    "new_span_exporter",
    "validate_collector",
]
