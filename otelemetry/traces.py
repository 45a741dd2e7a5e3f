"""Tracer provider construction (wiring only; the SDK owns the pipeline)."""

from __future__ import annotations

from typing import IO, Optional

from loguru import logger
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from otelemetry.config import Collector, ExporterKind
from otelemetry.exporters import new_span_exporter


def new_tracer_provider(
    collector: Collector,
    resource: Resource,
    kind: ExporterKind = ExporterKind.OTLP,
    shutdown_on_exit: bool = False,
    out: Optional[IO[str]] = None,
) -> TracerProvider:
    """Tracer provider with a batch span processor over the OTLP or stdout exporter."""
    exporter = new_span_exporter(collector, kind, out=out)
    provider = TracerProvider(resource=resource, shutdown_on_exit=shutdown_on_exit)
    provider.add_span_processor(BatchSpanProcessor(exporter))
    logger.info("Tracer provider configured ({}).", ExporterKind(kind).value)
    return provider


__all__ = ["new_tracer_provider"]
