"""The ``Telemetry`` handle: construct once, inject everywhere, shut down explicitly.

Usage::

    tel = Telemetry.new(Config(service=Service(name="billing")))
    try:
        tel.log.info(None, "invoice sent", attribute("invoice.id", "inv-42"))
    finally:
        tel.shutdown(timeout=5)

Provider state lives on the handle. Nothing is installed process-wide unless
``Config.set_global`` is set.
"""

from __future__ import annotations

import logging
import math
import time
from typing import List, Optional, Set, Tuple

from loguru import logger
from opentelemetry.instrumentation.logging.handler import LoggingHandler
from opentelemetry.sdk._logs import LoggerProvider
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider

from otelemetry import __version__
from otelemetry.config import Config, ExporterKind
from otelemetry.core.exceptions import ConfigError, ShutdownTimeoutError
from otelemetry.logs import (
    TelemetryLogger,
    new_logger_provider,
    new_stdout_logger_provider,
)
from otelemetry.metrics import new_meter_provider
from otelemetry.resource import build_resource
from otelemetry.traces import new_tracer_provider

_INSTRUMENTATION_NAME = "otelemetry"
_DEFAULT_FLUSH_MILLIS = 30_000


class Telemetry:
    """Owns the logger (and optional tracer/meter) providers for one service."""

    def __init__(
        self,
        config: Config,
        resource: Resource,
        logger_provider: LoggerProvider,
        tracer_provider: Optional[TracerProvider] = None,
        meter_provider: Optional[MeterProvider] = None,
    ) -> None:
        self.config = config
        self.resource = resource
        self.logger_provider = logger_provider
        self.tracer_provider = tracer_provider
        self.meter_provider = meter_provider
        self._log = TelemetryLogger(
            logger_provider.get_logger(
                config.service.name or _INSTRUMENTATION_NAME,
                config.service.version or __version__,
            )
        )
        self._shut_down: Set[str] = set()
        self._closed = False

    @classmethod
    def new(cls, config: Config) -> "Telemetry":
        """
        Build providers for ``config``.

        Raises:
            ConfigError: Missing service name or invalid resource/batch options.
            TransportError: An exporter transport could not be initialized.
        """
        resource = build_resource(config.service, config.resource_options)

        if config.logs_exporter is ExporterKind.OTLP:
            logger_provider = new_logger_provider(
                config.collector, resource, config.logger, config.shutdown_on_exit
            )
        elif config.logs_exporter is ExporterKind.STDOUT:
            logger_provider = new_stdout_logger_provider(
                resource, config.logger, config.shutdown_on_exit
            )
        else:
            # Records are accepted and dropped.
            logger_provider = LoggerProvider(
                resource=resource, shutdown_on_exit=config.shutdown_on_exit
            )

        tracer_provider = None
        meter_provider = None
        try:
            if config.traces_exporter is not ExporterKind.NONE:
                tracer_provider = new_tracer_provider(
                    config.collector,
                    resource,
                    config.traces_exporter,
                    config.shutdown_on_exit,
                )
            if config.metrics_exporter is not ExporterKind.NONE:
                meter_provider = new_meter_provider(
                    config.collector,
                    resource,
                    config.metrics_exporter,
                    config.shutdown_on_exit,
                )
        except Exception:
            for provider in (tracer_provider, logger_provider):
                if provider is not None:
                    provider.shutdown()
            raise

        telemetry = cls(
            config, resource, logger_provider, tracer_provider, meter_provider
        )
        if config.set_global:
            telemetry._install_globals()
        logger.info(
            "Telemetry ready for service {} (logs={}, traces={}, metrics={}).",
            config.service.name,
            config.logs_exporter.value,
            config.traces_exporter.value,
            config.metrics_exporter.value,
        )
        return telemetry

    @property
    def log(self) -> TelemetryLogger:
        return self._log

    def tracer(self, name: str = _INSTRUMENTATION_NAME, version: Optional[str] = None):
        if self.tracer_provider is None:
            raise ConfigError("tracing is disabled for this telemetry handle")
        return self.tracer_provider.get_tracer(name, version)

    def meter(self, name: str = _INSTRUMENTATION_NAME, version: Optional[str] = None):
        if self.meter_provider is None:
            raise ConfigError("metrics are disabled for this telemetry handle")
        return self.meter_provider.get_meter(name, version)

    def logging_handler(self, level: int = logging.NOTSET) -> LoggingHandler:
        """Stdlib ``logging`` handler that forwards records to this logger provider."""
        return LoggingHandler(level=level, logger_provider=self.logger_provider)

    def _providers(self) -> List[Tuple[str, object]]:
        # Configuration order; flushed and shut down in reverse.
        providers: List[Tuple[str, object]] = []
        if self.tracer_provider is not None:
            providers.append(("tracer", self.tracer_provider))
        if self.meter_provider is not None:
            providers.append(("meter", self.meter_provider))
        providers.append(("logger", self.logger_provider))
        return providers

    def _install_globals(self) -> None:
        from opentelemetry import metrics, trace
        from opentelemetry._logs import set_logger_provider

        set_logger_provider(self.logger_provider)
        if self.tracer_provider is not None:
            trace.set_tracer_provider(self.tracer_provider)
        if self.meter_provider is not None:
            metrics.set_meter_provider(self.meter_provider)

    def force_flush(self, timeout: Optional[float] = None) -> None:
        """
        Flush pending telemetry.

        Args:
            timeout (Optional[float]): Overall deadline in seconds; None uses the SDK default.

        Raises:
            ShutdownTimeoutError: If the deadline expires before everything is flushed.
        """
        deadline = _deadline(timeout)
        for name, provider in reversed(self._providers()):
            if name not in self._shut_down:
                self._flush(name, provider, deadline)

    def shutdown(self, timeout: Optional[float] = None) -> None:
        """
        Flush and shut down every provider, logs first.

        An expired deadline raises before any provider is touched, leaving the
        handle open so shutdown can be retried. A retry after a partial failure
        only visits the providers that are still running.

        Raises:
            ShutdownTimeoutError: If the deadline expires or a flush does not complete.
        """
        if self._closed:
            return
        deadline = _deadline(timeout)
        for name, provider in reversed(self._providers()):
            if name in self._shut_down:
                continue
            self._flush(name, provider, deadline)
            provider.shutdown()
            self._shut_down.add(name)
            logger.debug("{} provider shut down.", name)
        self._closed = True
        logger.info("Telemetry shut down for service {}.", self.config.service.name)

    @staticmethod
    def _flush(name: str, provider, deadline: Optional[float]) -> None:
        remaining = _remaining_millis(deadline)
        if remaining <= 0:
            raise ShutdownTimeoutError(f"deadline expired before flushing {name} provider")
        if not provider.force_flush(timeout_millis=remaining):
            raise ShutdownTimeoutError(f"{name} provider did not flush within {remaining}ms")

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self) -> "Telemetry":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()


def _deadline(timeout: Optional[float]) -> Optional[float]:
    if timeout is None:
        return None
    return time.monotonic() + timeout


def _remaining_millis(deadline: Optional[float]) -> int:
    if deadline is None:
        return _DEFAULT_FLUSH_MILLIS
    return math.floor((deadline - time.monotonic()) * 1000)


def new(config: Config) -> Telemetry:
    """Alias for ``Telemetry.new``."""
    return Telemetry.new(config)


__all__ = ["Telemetry", "new"]
