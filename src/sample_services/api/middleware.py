"""Per-request telemetry: server span, correlated log line, HTTP metrics."""

from __future__ import annotations

import time
from typing import Any, Callable

from fastapi import Request, Response
from opentelemetry.trace import SpanKind
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.routing import Match
from starlette.types import ASGIApp

from sample_services.observability.correlation import logger_with_trace
from sample_services.observability.logging import error_fields
from sample_services.observability.metrics import HttpMetrics
from sample_services.observability.tracing import Tracing

UNMATCHED_ROUTE = "<unmatched>"


def route_template(request: Request) -> str:
    """Path template of the matched route (``/items/{id}``), never the raw path.

    Raw paths would give the metrics an unbounded label set.
    """
    route = request.scope.get("route")
    if route is not None and getattr(route, "path", None):
        return route.path

    for candidate in request.app.router.routes:
        match, _ = candidate.matches(request.scope)
        if match == Match.FULL and getattr(candidate, "path", None):
            return candidate.path
    return UNMATCHED_ROUTE


class TelemetryMiddleware(BaseHTTPMiddleware):
    """Trace, log and meter every request.

    This middleware:
    - Continues an incoming W3C trace (``traceparent`` header) or starts a new one
    - Opens a SERVER span named ``"{method} {route}"``
    - Stores the span's context on ``request.state.trace_context``
    - Updates ``http_requests_total`` / ``http_request_duration_seconds`` once
    - Logs ``request_completed`` with trace_id/span_id
    """

    def __init__(self, app: ASGIApp, *, tracing: Tracing, logger: Any, metrics: HttpMetrics):
        super().__init__(app)
        self._tracing = tracing
        self._logger = logger
        self._metrics = metrics

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        method = request.method
        parent = self._tracing.extract(request.headers)
        ctx, span = self._tracing.start_span(
            parent,
            method,
            {"http.request.method": method, "url.path": request.url.path},
            kind=SpanKind.SERVER,
        )
        request.state.trace_context = ctx

        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response

        except Exception as e:
            span.record_error(e)
            logger_with_trace(self._logger, ctx).error(
                "request_failed",
                method=method,
                path=request.url.path,
                **error_fields(e),
            )
            raise

        finally:
            duration = time.perf_counter() - start
            route = route_template(request)

            span.update_name(f"{method} {route}")
            span.set_attributes({"http.route": route, "http.response.status_code": status_code})
            if status_code >= 500:
                span.set_error(f"HTTP {status_code}")
            span.end()

            self._metrics.observe(method, route, status_code, duration)
            logger_with_trace(self._logger, ctx).info(
                "request_completed",
                method=method,
                path=route,
                status_code=status_code,
                duration_ms=round(duration * 1000, 3),
            )


__all__ = ["UNMATCHED_ROUTE", "route_template", "TelemetryMiddleware"]
