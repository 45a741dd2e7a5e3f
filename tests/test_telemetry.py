from __future__ import annotations

import logging

import pytest
from opentelemetry._logs import SeverityNumber
from opentelemetry.instrumentation.logging.handler import LoggingHandler
from opentelemetry.sdk._logs import LoggerProvider
from opentelemetry.sdk._logs.export import (
    InMemoryLogRecordExporter,
    SimpleLogRecordProcessor,
)
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.trace import TracerProvider

import otelemetry
from otelemetry.config import Collector, Config, ExporterKind, Service
from otelemetry.core.exceptions import ConfigError, ShutdownTimeoutError, TransportError
from otelemetry.logs import TelemetryLogger
from otelemetry.records import attribute
from otelemetry.resource import with_attributes, with_container, with_host
from otelemetry.telemetry import Telemetry


def _config(**overrides) -> Config:
    values = dict(
        service=Service(name="test-service", namespace="test-namespace", version="1.0.0"),
        collector=Collector(host="localhost", port="4317"),
    )
    values.update(overrides)
    return Config(**values)


@pytest.fixture
def telemetry():
    tel = Telemetry.new(_config(logs_exporter=ExporterKind.STDOUT))
    yield tel
    tel.shutdown(timeout=5)


def test_missing_service_name_fails():
    cfg = _config(service=Service(name="", namespace="test-namespace", version="1.0.0"))
    with pytest.raises(ConfigError):
        otelemetry.new(cfg)


def test_invalid_resource_options_fail():
    with pytest.raises(ConfigError):
        Telemetry.new(_config(resource_options=[with_attributes()]))


def test_empty_resource_options_fail():
    with pytest.raises(ConfigError):
        Telemetry.new(_config(resource_options=[]))


def test_bad_collector_port_fails_with_transport_error():
    with pytest.raises(TransportError):
        Telemetry.new(_config(collector=Collector(host="localhost", port="not-a-port")))


def test_invalid_batch_options_fail():
    cfg = _config(
        logs_exporter=ExporterKind.STDOUT,
        logger=otelemetry.LoggerOptions(max_queue_size=0),
    )
    with pytest.raises(ConfigError):
        Telemetry.new(cfg)


def test_new_with_resources():
    options = [
        with_host(),
        with_container(),
        with_attributes(attribute("pod.name", "test-pod")),
    ]
    tel = Telemetry.new(_config(resource_options=options))
    try:
        assert isinstance(tel.logger_provider, LoggerProvider)
        assert isinstance(tel.log, TelemetryLogger)
        assert tel.resource.attributes["pod.name"] == "test-pod"
        assert tel.resource.attributes["service.name"] == "test-service"
    finally:
        tel.shutdown(timeout=5)


def test_shutdown_with_expired_deadline_fails():
    tel = Telemetry.new(_config())
    try:
        with pytest.raises(ShutdownTimeoutError):
            tel.shutdown(timeout=0)
        assert tel.closed is False
    finally:
        tel.shutdown(timeout=5)
    assert tel.closed is True


def test_force_flush_with_expired_deadline_fails(telemetry):
    with pytest.raises(ShutdownTimeoutError):
        telemetry.force_flush(timeout=-1)


def test_shutdown_is_idempotent(telemetry):
    telemetry.shutdown(timeout=5)
    telemetry.shutdown(timeout=0)
    assert telemetry.closed is True


def test_shutdown_reports_failed_flush(monkeypatch):
    tel = Telemetry.new(_config(logs_exporter=ExporterKind.STDOUT))
    flush_ok = {"logger": False}
    real_flush = tel.logger_provider.force_flush
    monkeypatch.setattr(
        tel.logger_provider,
        "force_flush",
        lambda timeout_millis: flush_ok["logger"] and real_flush(timeout_millis),
    )
    try:
        with pytest.raises(ShutdownTimeoutError):
            tel.shutdown(timeout=5)
        assert tel.closed is False
    finally:
        flush_ok["logger"] = True
        tel.shutdown(timeout=5)
    assert tel.closed is True


def test_shutdown_retry_skips_providers_already_shut_down(monkeypatch):
    tel = Telemetry.new(
        _config(logs_exporter=ExporterKind.STDOUT, traces_exporter=ExporterKind.STDOUT)
    )
    tracer_flushes = {"ok": False}
    real_flush = tel.tracer_provider.force_flush
    monkeypatch.setattr(
        tel.tracer_provider,
        "force_flush",
        lambda timeout_millis: tracer_flushes["ok"] and real_flush(timeout_millis),
    )
    logger_shutdowns = []
    real_shutdown = tel.logger_provider.shutdown
    monkeypatch.setattr(
        tel.logger_provider,
        "shutdown",
        lambda: logger_shutdowns.append("logger") or real_shutdown(),
    )

    # Logs go first and succeed; the tracer flush then fails.
    with pytest.raises(ShutdownTimeoutError):
        tel.shutdown(timeout=5)
    assert logger_shutdowns == ["logger"]
    assert tel.closed is False

    tracer_flushes["ok"] = True
    tel.force_flush(timeout=5)
    tel.shutdown(timeout=5)

    assert logger_shutdowns == ["logger"]
    assert tel.closed is True


def test_log_facade_is_bound_to_provider():
    tel = Telemetry.new(_config(logs_exporter=ExporterKind.NONE))
    exporter = InMemoryLogRecordExporter()
    tel.logger_provider.add_log_record_processor(SimpleLogRecordProcessor(exporter))
    try:
        tel.log.error(None, "charge failed", attribute("invoice.id", "inv-42"))
        tel.force_flush(timeout=5)

        finished = exporter.get_finished_logs()
        assert len(finished) == 1
        record = finished[0].log_record
        assert record.body == "charge failed"
        assert record.severity_text == "ERROR"
        assert record.severity_number is SeverityNumber.ERROR
        assert dict(record.attributes) == {"invoice.id": "inv-42"}
        resource = getattr(finished[0], "resource", None) or record.resource
        assert resource.attributes["service.name"] == "test-service"
        assert resource.attributes["service.namespace"] == "test-namespace"
    finally:
        tel.shutdown(timeout=5)


def test_service_identity_from_resource_attributes(monkeypatch):
    monkeypatch.setenv("OTEL_SERVICE_NAME", "billing")
    monkeypatch.setenv(
        "OTEL_RESOURCE_ATTRIBUTES", "service.namespace=payments,deployment.environment=ci"
    )
    monkeypatch.setenv("OTEL_LOGS_EXPORTER", "none")

    tel = Telemetry.new(Config.from_settings())
    try:
        attrs = tel.resource.attributes
        assert attrs["service.name"] == "billing"
        assert attrs["service.namespace"] == "payments"
        assert attrs["deployment.environment"] == "ci"
    finally:
        tel.shutdown(timeout=5)


def test_service_name_only_in_resource_attributes(monkeypatch):
    monkeypatch.setenv("OTEL_RESOURCE_ATTRIBUTES", "service.name=orders")
    monkeypatch.setenv("OTEL_LOGS_EXPORTER", "none")

    tel = Telemetry.new(Config.from_settings())
    try:
        assert tel.config.service.name == "orders"
        assert tel.resource.attributes["service.name"] == "orders"
    finally:
        tel.shutdown(timeout=5)


def test_disabled_signals_raise(telemetry):
    with pytest.raises(ConfigError):
        telemetry.tracer()
    with pytest.raises(ConfigError):
        telemetry.meter()


def test_optional_tracer_and_meter_providers():
    tel = Telemetry.new(
        _config(
            logs_exporter=ExporterKind.NONE,
            traces_exporter=ExporterKind.STDOUT,
            metrics_exporter=ExporterKind.STDOUT,
        )
    )
    try:
        assert isinstance(tel.tracer_provider, TracerProvider)
        assert isinstance(tel.meter_provider, MeterProvider)
        assert tel.tracer("tests") is not None
        assert tel.meter("tests") is not None
        assert [name for name, _ in tel._providers()] == ["tracer", "meter", "logger"]
    finally:
        tel.shutdown(timeout=5)


def test_logging_handler_bridges_to_provider(telemetry):
    handler = telemetry.logging_handler(logging.WARNING)
    assert isinstance(handler, LoggingHandler)
    assert handler.level == logging.WARNING


def test_context_manager_shuts_down():
    with Telemetry.new(_config(logs_exporter=ExporterKind.STDOUT)) as tel:
        assert tel.closed is False
    assert tel.closed is True
