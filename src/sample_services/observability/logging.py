"""
Structured JSON logging with structlog.

Each service builds exactly one logger at startup with :func:`build_logger`
and passes it to the components that log. There is no global structlog
configuration; the logger object carries its own processor chain.

Processor chain:
    1. add_log_level
    2. TimeStamper (ISO-8601, UTC)
    3. add_service_metadata
    4. format_exc_info
    5. JSONRenderer

Output (one line per entry):
    {"event": "email_sent", "email_id": 7, "level": "info",
     "timestamp": "2025-12-26T10:00:00.000000Z", "service.name": "sampleworker"}

Level names follow the vocabulary used by the services' deployment
tooling: ``trace`` and ``debug`` map to DEBUG, ``warn``/``warning`` to
WARNING, ``fatal``/``panic`` to CRITICAL. Anything else is INFO.

Example:
    >>> log = build_logger("debug", service="sampleworker")
    >>> log.bind(email_id=7).info("email_sent")
"""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

import structlog
from structlog.typing import EventDict, FilteringBoundLogger, Processor, WrappedLogger

_LEVELS: dict[str, int] = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
    "panic": logging.CRITICAL,
    "critical": logging.CRITICAL,
}


def parse_level(value: str | None) -> int:
    """Map a level name to a ``logging`` level; unknown names mean INFO."""
    if not value:
        return logging.INFO
    return _LEVELS.get(value.strip().lower(), logging.INFO)


def _service_metadata(service: str) -> Processor:
    def add_service_metadata(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service.name", service)
        return event_dict

    return add_service_metadata


def build_logger(
    level: str | None = "info",
    *,
    service: str = "sample-service",
    stream: TextIO | None = None,
) -> FilteringBoundLogger:
    """Build the process logger.

    Args:
        level: Level name. Invalid values fall back to info instead of failing.
        service: Value of the ``service.name`` field on every entry.
        stream: Output stream; defaults to stdout.
    """
    processors: list[Processor] = [
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _service_metadata(service),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ]

    return structlog.wrap_logger(
        structlog.PrintLogger(file=stream or sys.stdout),
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(parse_level(level)),
        context_class=dict,
    )


def error_fields(error: Exception) -> dict[str, Any]:
    """Fields describing ``error`` for a single log entry."""
    to_dict = getattr(error, "to_dict", None)
    if callable(to_dict):
        return {"error": to_dict()}
    return {"error": {"error_type": type(error).__name__, "message": str(error)}}


__all__ = ["build_logger", "parse_level", "error_fields"]
