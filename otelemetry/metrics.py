"""Meter provider construction (wiring only; the SDK owns the pipeline)."""

from __future__ import annotations

from typing import IO, Optional

from loguru import logger
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource

from otelemetry.config import Collector, ExporterKind
from otelemetry.exporters import new_metric_exporter


def new_meter_provider(
    collector: Collector,
    resource: Resource,
    kind: ExporterKind = ExporterKind.OTLP,
    shutdown_on_exit: bool = False,
    out: Optional[IO[str]] = None,
    export_interval_millis: float | None = None,
) -> MeterProvider:
    """Meter provider with a periodic reader over the OTLP or stdout exporter."""
    exporter = new_metric_exporter(collector, kind, out=out)
    reader = PeriodicExportingMetricReader(
        exporter, export_interval_millis=export_interval_millis
    )
    provider = MeterProvider(
        resource=resource,
        metric_readers=[reader],
        shutdown_on_exit=shutdown_on_exit,
    )
    logger.info("Meter provider configured ({}).", ExporterKind(kind).value)
    return provider


__all__ = ["new_meter_provider"]
