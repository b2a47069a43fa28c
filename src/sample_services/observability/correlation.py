"""Log correlation with OpenTelemetry traces.

:func:`logger_with_trace` returns a logger bound with ``trace_id`` and
``span_id`` taken from the current span of an explicit context. Call it at
each log site where the active span may have changed; it never mutates the
context or the logger passed in.

Identifiers are lowercase hex: 32 characters for trace_id, 16 for span_id.
When the context holds no valid span the fields are omitted entirely.
"""

from __future__ import annotations

from typing import Any

from opentelemetry import trace
from opentelemetry.context import Context


def trace_ids(ctx: Context | None) -> tuple[str, str] | None:
    """Return ``(trace_id, span_id)`` for the context's span, or ``None``."""
    if ctx is None:
        return None
    span_context = trace.get_current_span(ctx).get_span_context()
    if not span_context.is_valid:
        return None
    return format(span_context.trace_id, "032x"), format(span_context.span_id, "016x")


def logger_with_trace(logger: Any, ctx: Context | None) -> Any:
    """Bind correlation fields from ``ctx`` onto ``logger``.

    Returns ``logger`` itself when no valid span is active.
    """
    ids = trace_ids(ctx)
    if ids is None:
        return logger
    trace_id, span_id = ids
    return logger.bind(trace_id=trace_id, span_id=span_id)


def trace_fields(ctx: Context | None, fields: dict[str, Any] | None = None) -> dict[str, Any]:
    """Correlation fields merged with ``fields`` (which win on conflict)."""
    result: dict[str, Any] = {}
    ids = trace_ids(ctx)
    if ids is not None:
        result["trace_id"], result["span_id"] = ids
    if fields:
        result.update(fields)
    return result


__all__ = ["trace_ids", "logger_with_trace", "trace_fields"]
