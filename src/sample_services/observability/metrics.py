"""Prometheus metrics for observability.

Metrics are registered on an explicit ``CollectorRegistry`` owned by the
service process. Construct each metrics object once at startup: registering
the same name twice on one registry raises ``ValueError``.

Worker metrics (email job):
    worker_emails_sent_total              counter
    worker_emails_failed_total            counter
    worker_email_duration_seconds         histogram
    worker_info{interval}                 gauge, set to 1 at startup

API metrics:
    http_requests_total{method,path,status}
    http_request_duration_seconds{method,path}
"""

from __future__ import annotations

from dataclasses import dataclass

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram


@dataclass(frozen=True)
class PipelineMetricNames:
    """Names and help strings for one job's outcome metrics."""

    succeeded: str
    succeeded_help: str
    failed: str
    failed_help: str
    duration: str
    duration_help: str


EMAIL_METRICS = PipelineMetricNames(
    succeeded="worker_emails_sent_total",
    succeeded_help="Total number of emails sent successfully by the worker",
    failed="worker_emails_failed_total",
    failed_help="Total number of emails that failed to send",
    duration="worker_email_duration_seconds",
    duration_help="Duration of email sending in seconds",
)

TASK_METRICS = PipelineMetricNames(
    succeeded="worker_tasks_processed_total",
    succeeded_help="Total number of tasks processed successfully by the worker",
    failed="worker_tasks_failed_total",
    failed_help="Total number of tasks that failed",
    duration="worker_task_duration_seconds",
    duration_help="Duration of task processing in seconds",
)


class PipelineMetrics:
    """Outcome metrics for one pipeline.

    Exactly one of :meth:`record_success` / :meth:`record_failure` is called
    per invocation, at its terminal point.
    """

    def __init__(self, names: PipelineMetricNames, registry: CollectorRegistry):
        self.names = names
        self.succeeded = Counter(names.succeeded, names.succeeded_help, registry=registry)
        self.failed = Counter(names.failed, names.failed_help, registry=registry)
        self.duration = Histogram(names.duration, names.duration_help, registry=registry)

    def record_success(self, duration_seconds: float) -> None:
        self.duration.observe(duration_seconds)
        self.succeeded.inc()

    def record_failure(self) -> None:
        """Failed attempts are counted but their duration is not observed."""
        self.failed.inc()


def register_worker_info(registry: CollectorRegistry, interval: str) -> Gauge:
    """Register ``worker_info`` and set it once for the configured interval."""
    info = Gauge(
        "worker_info",
        "Information about the worker",
        ["interval"],
        registry=registry,
    )
    info.labels(interval=interval).set(1)
    return info


class HttpMetrics:
    """Per-request API metrics, updated once per completed request."""

    def __init__(self, registry: CollectorRegistry):
        self.requests_total = Counter(
            "http_requests_total",
            "Total number of HTTP requests",
            ["method", "path", "status"],
            registry=registry,
        )
        self.request_duration = Histogram(
            "http_request_duration_seconds",
            "Duration of HTTP requests in seconds",
            ["method", "path"],
            registry=registry,
        )

    def observe(self, method: str, path: str, status_code: int, duration_seconds: float) -> None:
        self.request_duration.labels(method=method, path=path).observe(duration_seconds)
        self.requests_total.labels(method=method, path=path, status=str(status_code)).inc()


__all__ = [
    "PipelineMetricNames",
    "EMAIL_METRICS",
    "TASK_METRICS",
    "PipelineMetrics",
    "register_worker_info",
    "HttpMetrics",
]
