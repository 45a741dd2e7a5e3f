from __future__ import annotations

from typing import List

import pytest

from otelemetry.config import Service

_OTEL_ENV = (
    "OTEL_SERVICE_NAME",
    "OTEL_SERVICE_NAMESPACE",
    "OTEL_SERVICE_VERSION",
    "OTEL_COLLECTOR_HOST",
    "OTEL_COLLECTOR_PORT",
    "OTEL_EXPORTER_OTLP_PROTOCOL",
    "OTEL_EXPORTER_OTLP_INSECURE",
    "OTEL_EXPORTER_OTLP_HEADERS",
    "OTEL_EXPORTER_OTLP_TIMEOUT",
    "OTEL_LOGS_EXPORTER",
    "OTEL_TRACES_EXPORTER",
    "OTEL_METRICS_EXPORTER",
    "OTEL_RESOURCE_ATTRIBUTES",
    "LOG_LEVEL",
)


class FakeOTelLogger:
    """Stands in for an SDK logger; keeps whatever is emitted."""

    def __init__(self):
        self.records: List[object] = []

    def emit(self, record):
        self.records.append(record)


@pytest.fixture(autouse=True)
def _clean_otel_env(monkeypatch):
    for key in _OTEL_ENV:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def fake_logger():
    return FakeOTelLogger()


@pytest.fixture
def service():
    return Service(name="test-service", namespace="test-namespace", version="1.0.0")
