"""Tests for Prometheus metrics and the /metrics listener."""

from __future__ import annotations

import socket
import urllib.request

import pytest

from sample_services.core.errors import ListenerBindError
from sample_services.observability.exposition import render_metrics, start_metrics_server
from sample_services.observability.metrics import (
    EMAIL_METRICS,
    TASK_METRICS,
    HttpMetrics,
    PipelineMetrics,
    register_worker_info,
)


class TestPipelineMetrics:
    def test_success_counts_and_observes(self, registry):
        metrics = PipelineMetrics(EMAIL_METRICS, registry)
        metrics.record_success(0.25)

        assert registry.get_sample_value("worker_emails_sent_total") == 1.0
        assert registry.get_sample_value("worker_emails_failed_total") == 0.0
        assert registry.get_sample_value("worker_email_duration_seconds_count") == 1.0
        assert registry.get_sample_value("worker_email_duration_seconds_sum") == pytest.approx(0.25)

    def test_failure_does_not_observe_duration(self, registry):
        metrics = PipelineMetrics(EMAIL_METRICS, registry)
        metrics.record_failure()

        assert registry.get_sample_value("worker_emails_failed_total") == 1.0
        assert registry.get_sample_value("worker_emails_sent_total") == 0.0
        assert registry.get_sample_value("worker_email_duration_seconds_count") == 0.0

    def test_task_names(self, registry):
        PipelineMetrics(TASK_METRICS, registry).record_success(1.0)
        assert registry.get_sample_value("worker_tasks_processed_total") == 1.0
        assert registry.get_sample_value("worker_task_duration_seconds_count") == 1.0

    def test_double_registration_raises(self, registry):
        PipelineMetrics(EMAIL_METRICS, registry)
        with pytest.raises(ValueError):
            PipelineMetrics(EMAIL_METRICS, registry)


class TestWorkerInfo:
    def test_set_once_with_interval_label(self, registry):
        register_worker_info(registry, "10s")
        assert registry.get_sample_value("worker_info", {"interval": "10s"}) == 1.0


class TestHttpMetrics:
    def test_observe(self, registry):
        metrics = HttpMetrics(registry)
        metrics.observe("GET", "/healthz", 200, 0.002)
        metrics.observe("GET", "/healthz", 200, 0.003)

        assert registry.get_sample_value(
            "http_requests_total", {"method": "GET", "path": "/healthz", "status": "200"}
        ) == 2.0
        assert registry.get_sample_value(
            "http_request_duration_seconds_count", {"method": "GET", "path": "/healthz"}
        ) == 2.0


class TestRenderMetrics:
    def test_text_exposition(self, registry):
        PipelineMetrics(EMAIL_METRICS, registry).record_success(0.1)
        text = render_metrics(registry)
        assert "# TYPE worker_emails_sent_total counter" in text
        assert "worker_emails_sent_total 1.0" in text


def _free_port() -> int:
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.mark.integration
class TestMetricsServer:
    def test_serves_registry(self, registry, logger, log_records):
        register_worker_info(registry, "10s")
        port = _free_port()
        server = start_metrics_server(port, registry, addr="127.0.0.1", logger=logger)
        try:
            with urllib.request.urlopen(f"http://127.0.0.1:{port}/metrics", timeout=5) as resp:
                body = resp.read().decode()
        finally:
            server.shutdown()

        assert 'worker_info{interval="10s"} 1.0' in body
        assert log_records()[-1]["event"] == "metrics_server_started"

    def test_bind_failure_raises(self, registry):
        with socket.socket() as sock:
            sock.bind(("127.0.0.1", 0))
            sock.listen(1)
            port = sock.getsockname()[1]

            with pytest.raises(ListenerBindError) as exc_info:
                start_metrics_server(port, registry, addr="127.0.0.1")
        assert exc_info.value.port == port
