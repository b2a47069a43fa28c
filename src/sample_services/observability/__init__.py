"""Observability - logging, metrics, tracing.

Key components:
- logging: structlog JSON logger built once per process
- tracing: OpenTelemetry tracer handle with a no-op fallback
- correlation: trace_id/span_id fields for log entries
- metrics: Prometheus counters, histograms and gauges
- exposition: the /metrics listener
"""

from sample_services.observability.correlation import logger_with_trace, trace_fields, trace_ids
from sample_services.observability.exposition import render_metrics, start_metrics_server
from sample_services.observability.logging import build_logger, error_fields, parse_level
from sample_services.observability.metrics import (
    EMAIL_METRICS,
    TASK_METRICS,
    HttpMetrics,
    PipelineMetricNames,
    PipelineMetrics,
    register_worker_info,
)
from sample_services.observability.tracing import (
    NoopSpan,
    SpanHandle,
    TracedSpan,
    Tracing,
    init_tracer,
)

__all__ = [
    # Logging
    "build_logger",
    "parse_level",
    "error_fields",
    # Tracing
    "Tracing",
    "SpanHandle",
    "TracedSpan",
    "NoopSpan",
    "init_tracer",
    # Correlation
    "logger_with_trace",
    "trace_fields",
    "trace_ids",
    # Metrics
    "PipelineMetricNames",
    "PipelineMetrics",
    "EMAIL_METRICS",
    "TASK_METRICS",
    "HttpMetrics",
    "register_worker_info",
    "start_metrics_server",
    "render_metrics",
]
