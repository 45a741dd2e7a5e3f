"""Logging facade and log provider construction.

``TelemetryLogger`` turns ``(ctx, message, *attributes)`` into one OpenTelemetry
log record per call and hands it to the underlying logger's ``emit``. It keeps no
state besides the logger handle, so it is safe to share between threads.

``fatal`` only labels the record FATAL; it never exits the process.
"""

from __future__ import annotations

from typing import IO, Optional, Protocol, Union

from loguru import logger
from opentelemetry._logs import Logger as OTelLogger
from opentelemetry.context import Context
from opentelemetry.sdk._logs import LoggerProvider
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from opentelemetry.sdk.resources import Resource

from otelemetry.config import Collector, ExporterKind, LoggerOptions
from otelemetry.core.exceptions import ConfigError
from otelemetry.exporters import new_log_exporter
from otelemetry.records import KeyValue, build_record
from otelemetry.severity import Severity


class Log(Protocol):
    @property
    def logger(self) -> OTelLogger:
        """The underlying OpenTelemetry logger."""
        ...

    def debug(self, ctx: Optional[Context], msg: str, *kv: KeyValue) -> None: ...

    def info(self, ctx: Optional[Context], msg: str, *kv: KeyValue) -> None: ...

    def warning(self, ctx: Optional[Context], msg: str, *kv: KeyValue) -> None: ...

    def error(self, ctx: Optional[Context], msg: str, *kv: KeyValue) -> None: ...

    def fatal(self, ctx: Optional[Context], msg: str, *kv: KeyValue) -> None: ...


class TelemetryLogger:
    """``Log`` implementation backed by an OpenTelemetry logger."""

    __slots__ = ("_logger",)

    def __init__(self, otel_logger: OTelLogger) -> None:
        self._logger = otel_logger

    @property
    def logger(self) -> OTelLogger:
        return self._logger

    def log(
        self,
        ctx: Optional[Context],
        severity: Union[Severity, str],
        msg: str,
        *kv: KeyValue,
    ) -> None:
        if not isinstance(severity, Severity):
            severity = Severity.from_label(severity)
        record = build_record(msg, severity, *kv)
        self._logger.emit(record.to_otel(ctx))

    def debug(self, ctx: Optional[Context], msg: str, *kv: KeyValue) -> None:
        self.log(ctx, Severity.DEBUG, msg, *kv)

    def info(self, ctx: Optional[Context], msg: str, *kv: KeyValue) -> None:
        self.log(ctx, Severity.INFO, msg, *kv)

    def warning(self, ctx: Optional[Context], msg: str, *kv: KeyValue) -> None:
        self.log(ctx, Severity.WARN, msg, *kv)

    def error(self, ctx: Optional[Context], msg: str, *kv: KeyValue) -> None:
        self.log(ctx, Severity.ERROR, msg, *kv)

    def fatal(self, ctx: Optional[Context], msg: str, *kv: KeyValue) -> None:
        self.log(ctx, Severity.FATAL, msg, *kv)


def _batch_processor(exporter, options: LoggerOptions) -> BatchLogRecordProcessor:
    try:
        return BatchLogRecordProcessor(
            exporter,
            schedule_delay_millis=options.schedule_delay_millis,
            max_export_batch_size=options.max_export_batch_size,
            export_timeout_millis=options.export_timeout_millis,
            max_queue_size=options.max_queue_size,
        )
    except ValueError as exc:
        raise ConfigError(f"invalid log batch options: {exc}") from exc


def _provider(
    resource: Resource,
    exporter,
    options: LoggerOptions,
    shutdown_on_exit: bool,
) -> LoggerProvider:
    # Processor first: bad batch options must not leave a provider behind.
    processor = _batch_processor(exporter, options)
    provider = LoggerProvider(resource=resource, shutdown_on_exit=shutdown_on_exit)
    provider.add_log_record_processor(processor)
    return provider


def new_logger_provider(
    collector: Collector,
    resource: Resource,
    options: Optional[LoggerOptions] = None,
    shutdown_on_exit: bool = False,
) -> LoggerProvider:
    """Logger provider batching records to the OTLP collector."""
    exporter = new_log_exporter(collector, ExporterKind.OTLP)
    provider = _provider(resource, exporter, options or LoggerOptions(), shutdown_on_exit)
    logger.info(
        "Logger provider configured (otlp {} {}).",
        collector.protocol.value,
        collector.endpoint,
    )
    return provider


def new_stdout_logger_provider(
    resource: Resource,
    options: Optional[LoggerOptions] = None,
    shutdown_on_exit: bool = False,
    out: Optional[IO[str]] = None,
) -> LoggerProvider:
    """Logger provider batching records to standard output."""
    exporter = new_log_exporter(Collector(), ExporterKind.STDOUT, out=out)
    provider = _provider(resource, exporter, options or LoggerOptions(), shutdown_on_exit)
    logger.info("Logger provider configured (stdout).")
    return provider


__all__ = [
    "Log",
    "TelemetryLogger",
    "new_logger_provider",
    "new_stdout_logger_provider",
]
