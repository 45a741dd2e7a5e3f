"""Ordered severity levels used by the logging facade."""

from __future__ import annotations

from enum import IntEnum

from opentelemetry._logs import SeverityNumber

_ALIASES = {
    "WARNING": "WARN",
    "CRITICAL": "FATAL",
}


class Severity(IntEnum):
    """Closed severity enumeration; values are the OpenTelemetry severity ranks."""

    DEBUG = SeverityNumber.DEBUG.value
    INFO = SeverityNumber.INFO.value
    WARN = SeverityNumber.WARN.value
    ERROR = SeverityNumber.ERROR.value
    FATAL = SeverityNumber.FATAL.value

    @property
    def label(self) -> str:
        return self.name

    @property
    def severity_number(self) -> SeverityNumber:
        return SeverityNumber(self.value)

    @classmethod
    def from_label(cls, value: str) -> "Severity":
        """
        Parses a severity label (case-insensitive).

        Args:
            value (str): The label, e.g. "info" or "WARNING".

        Returns:
            Severity: The matching member.

        Raises:
            ValueError: If the label is not a known severity.
        """
        key = str(value or "").strip().upper()
        key = _ALIASES.get(key, key)
        try:
            return cls[key]
        except KeyError:
            raise ValueError(f"unknown severity label: {value!r}") from None


DEBUG = Severity.DEBUG.label
INFO = Severity.INFO.label
WARN = Severity.WARN.label
ERROR = Severity.ERROR.label
FATAL = Severity.FATAL.label

__all__ = ["Severity", "DEBUG", "INFO", "WARN", "ERROR", "FATAL"]
