"""Immutable log records built per emission call."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Dict, NamedTuple, Optional, Tuple

from opentelemetry._logs import LogRecord as OTelLogRecord
from opentelemetry.context import Context
from opentelemetry.util.types import AttributeValue

from otelemetry.severity import Severity


class KeyValue(NamedTuple):
    key: str
    value: AttributeValue


def attribute(key: str, value: AttributeValue) -> KeyValue:
    """Shorthand for building a single record/resource attribute."""
    return KeyValue(key, value)


@dataclass(frozen=True)
class LogRecord:
    """
    A structured log entry.

    Attributes:
        body (str): The log message.
        severity (Severity): Rank of the record; also determines ``severity_text``.
        timestamp (int): Wall-clock time in nanoseconds since the Unix epoch.
        attributes (Tuple[KeyValue, ...]): Ordered attributes, duplicates preserved.
    """

    body: str
    severity: Severity
    timestamp: int
    attributes: Tuple[KeyValue, ...] = ()

    @property
    def severity_text(self) -> str:
        return self.severity.label

    def attributes_map(self) -> Dict[str, AttributeValue]:
        # Later duplicates overwrite earlier ones.
        return {key: value for key, value in self.attributes}

    def to_otel(self, context: Optional[Context] = None) -> OTelLogRecord:
        """Converts to an OpenTelemetry API record scoped to ``context``."""
        return OTelLogRecord(
            timestamp=self.timestamp,
            observed_timestamp=self.timestamp,
            context=context,
            severity_text=self.severity_text,
            severity_number=self.severity.severity_number,
            body=self.body,
            attributes=self.attributes_map(),
        )


def build_record(message: str, severity: Severity, *attributes: KeyValue) -> LogRecord:
    """
    Builds a record for ``message`` at ``severity``, timestamped now.

    Args:
        message (str): The log body; may be empty.
        severity (Severity): The record severity.
        *attributes (KeyValue): Key/value pairs, kept in order.

    Returns:
        LogRecord: The populated record.
    """
    timestamp = time.time_ns()
    return LogRecord(
        body=message,
        severity=severity,
        timestamp=timestamp,
        attributes=tuple(KeyValue(key, value) for key, value in attributes),
    )


__all__ = ["KeyValue", "LogRecord", "attribute", "build_record"]
