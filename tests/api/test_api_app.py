"""Tests for the sample API: endpoints, per-request telemetry, lifespan."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from opentelemetry.trace import SpanKind, StatusCode

from sample_services.api.app import build_api_services, create_app
from sample_services.api.middleware import UNMATCHED_ROUTE
from sample_services.api.routes import WELCOME_MESSAGE
from sample_services.core.settings import ApiSettings

TRACEPARENT = "00-4bf92f3577b34da6a3ce929d0e0e4736-00f067aa0ba902b7-01"


@pytest.fixture
def services(logger, tracing, registry):
    return build_api_services(ApiSettings(_env_file=None), logger=logger, tracing=tracing, registry=registry)


@pytest.fixture
def app(services):
    return create_app(services=services)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


def requests_total(registry, path, status="200", method="GET"):
    return registry.get_sample_value(
        "http_requests_total", {"method": method, "path": path, "status": status}
    )


class TestEndpoints:
    def test_healthz(self, client):
        for _ in range(3):
            resp = client.get("/healthz")
            assert resp.status_code == 200
            assert resp.json() == {"status": "ok"}

    def test_root(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        assert resp.json() == {"message": WELCOME_MESSAGE}

    def test_healthz_with_tracing_disabled(self, logger, registry, disabled_tracing, log_records):
        services = build_api_services(
            ApiSettings(_env_file=None), logger=logger, tracing=disabled_tracing, registry=registry
        )
        with TestClient(create_app(services=services)) as c:
            assert c.get("/healthz").json() == {"status": "ok"}

        entry = next(r for r in log_records() if r["event"] == "request_completed")
        assert "trace_id" not in entry
        assert requests_total(registry, "/healthz") == 1.0


class TestHttpMetrics:
    def test_counter_once_per_request(self, client, registry):
        client.get("/healthz")
        client.get("/healthz")
        client.get("/")

        assert requests_total(registry, "/healthz") == 2.0
        assert requests_total(registry, "/") == 1.0
        assert registry.get_sample_value(
            "http_request_duration_seconds_count", {"method": "GET", "path": "/healthz"}
        ) == 2.0

    def test_unknown_path_uses_unmatched_label(self, client, registry):
        resp = client.get("/does/not/exist/12345")

        assert resp.status_code == 404
        assert requests_total(registry, UNMATCHED_ROUTE, status="404") == 1.0

    def test_server_error_counted_with_500(self, app, registry, finished_spans):
        @app.get("/boom")
        async def boom():
            raise RuntimeError("kaboom")

        with TestClient(app, raise_server_exceptions=False) as c:
            assert c.get("/boom").status_code == 500

        assert requests_total(registry, "/boom", status="500") == 1.0
        span = finished_spans()["GET /boom"]
        assert span.status.status_code == StatusCode.ERROR
        assert any(e.name == "exception" for e in span.events)


class TestRequestSpans:
    def test_server_span_per_request(self, client, finished_spans):
        client.get("/healthz")

        span = finished_spans()["GET /healthz"]
        assert span.kind == SpanKind.SERVER
        assert span.parent is None
        assert span.attributes["http.route"] == "/healthz"
        assert span.attributes["http.request.method"] == "GET"
        assert span.attributes["http.response.status_code"] == 200

    def test_incoming_traceparent_continued(self, client, finished_spans):
        client.get("/healthz", headers={"traceparent": TRACEPARENT})

        span = finished_spans()["GET /healthz"]
        assert format(span.context.trace_id, "032x") == "4bf92f3577b34da6a3ce929d0e0e4736"
        assert format(span.parent.span_id, "016x") == "00f067aa0ba902b7"

    def test_request_log_correlated(self, client, finished_spans, log_records):
        client.get("/")

        span = finished_spans()["GET /"]
        entry = next(r for r in log_records() if r["event"] == "request_completed")
        assert entry["trace_id"] == format(span.context.trace_id, "032x")
        assert entry["span_id"] == format(span.context.span_id, "016x")
        assert entry["status_code"] == 200
        assert entry["path"] == "/"

        handler_entry = next(r for r in log_records() if r["event"] == "welcome_served")
        assert handler_entry["span_id"] == entry["span_id"]


class TestLifespan:
    def test_shutdown_flushes_tracing(self, app, services, monkeypatch, log_records):
        calls = []
        monkeypatch.setattr(services.tracing, "shutdown", lambda: calls.append(True))

        with TestClient(app) as c:
            c.get("/healthz")
            assert calls == []

        assert calls == [True]
        events = [r["event"] for r in log_records()]
        assert events[0] == "application_started"
        assert events[-1] == "application_stopped"
