"""Loguru configuration for the library's own diagnostics."""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Optional

from loguru import logger

from otelemetry.settings import get_settings

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from otelemetry.config import Service

_LOG_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | "
    "svc={extra[service_name]} | ns={extra[service_namespace]} | "
    "ver={extra[service_version]} | {name}:{line} | {message}"
)


def _std_logging_sink(message) -> None:
    record = message.record
    exc = record["exception"]
    exc_info = (exc.type, exc.value, exc.traceback) if exc else None

    log_record = logging.LogRecord(
        name=record["name"] or "otelemetry",
        level=record["level"].no,
        pathname=record["file"].path,
        lineno=record["line"],
        msg=record["message"],
        args=(),
        exc_info=exc_info,
        func=record["function"],
    )
    for key, value in record["extra"].items():
        setattr(log_record, key, value)

    logging.getLogger(log_record.name).handle(log_record)


def setup_logging(
    *,
    force: bool = False,
    level: Optional[str] = None,
    service: Optional["Service"] = None,
) -> None:
    """Configure Loguru sinks, bridge to stdlib, and attach service metadata."""
    if not force and getattr(setup_logging, "_configured", False):
        return

    logger.remove()

    log_level = (level or get_settings().log_level or "INFO").upper()
    logger.configure(
        extra={
            "service_name": (service.name if service else "") or "-",
            "service_namespace": (service.namespace if service else "") or "-",
            "service_version": (service.version if service else "") or "-",
        }
    )

    logger.add(
        sys.stdout,
        level=log_level,
        format=_LOG_FORMAT,
        enqueue=False,
        backtrace=False,
        diagnose=False,
    )
    logger.add(
        _std_logging_sink,
        level=log_level,
        enqueue=False,
        backtrace=False,
        diagnose=False,
    )
    setup_logging._configured = True  # type: ignore[attr-defined]


__all__ = ["setup_logging"]
