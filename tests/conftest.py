"""
Shared pytest fixtures and configuration for sample-services tests.

This module provides:
- An in-memory span exporter and a Tracing object that writes to it
- A debug-level JSON logger writing to a StringIO, plus a line parser
- A fresh Prometheus registry per test

Usage:
    def test_something(tracing, span_exporter, logger, log_records, registry):
        ...
"""

from __future__ import annotations

import json
from io import StringIO
from pathlib import Path
from typing import Any, Callable

import pytest
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from prometheus_client import CollectorRegistry

from sample_services.observability.logging import build_logger
from sample_services.observability.tracing import Tracing, build_resource


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests without an explicit marker as unit tests."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(__file__).parent)
        if "integration" in str(test_path):
            item.add_marker(pytest.mark.integration)

        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Tracing
# =============================================================================


@pytest.fixture
def span_exporter() -> InMemorySpanExporter:
    return InMemorySpanExporter()


@pytest.fixture
def tracing(span_exporter: InMemorySpanExporter) -> Tracing:
    """Enabled tracing that exports synchronously to ``span_exporter``."""
    provider = TracerProvider(resource=build_resource("test-service"))
    provider.add_span_processor(SimpleSpanProcessor(span_exporter))
    handle = Tracing(provider, "test-service")
    yield handle
    handle.shutdown()


@pytest.fixture
def disabled_tracing() -> Tracing:
    return Tracing.disabled()


def spans_by_name(exporter: InMemorySpanExporter) -> dict[str, Any]:
    return {span.name: span for span in exporter.get_finished_spans()}


@pytest.fixture
def finished_spans(span_exporter: InMemorySpanExporter) -> Callable[[], dict[str, Any]]:
    """Finished spans keyed by name."""
    return lambda: spans_by_name(span_exporter)


# =============================================================================
# Logging
# =============================================================================


@pytest.fixture
def log_stream() -> StringIO:
    return StringIO()


@pytest.fixture
def logger(log_stream: StringIO):
    return build_logger("debug", service="test-service", stream=log_stream)


@pytest.fixture
def log_records(log_stream: StringIO) -> Callable[[], list[dict[str, Any]]]:
    """Parse every JSON line written so far."""

    def _records() -> list[dict[str, Any]]:
        return [json.loads(line) for line in log_stream.getvalue().splitlines() if line.strip()]

    return _records


# =============================================================================
# Metrics
# =============================================================================


@pytest.fixture
def registry() -> CollectorRegistry:
    return CollectorRegistry()
