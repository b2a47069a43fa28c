"""sample-services: a demo HTTP API and background worker with trace-correlated
logs, Prometheus metrics and OpenTelemetry tracing."""

__version__ = "1.0.0"
