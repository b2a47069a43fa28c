"""Prometheus ``/metrics`` listener.

Each service exposes its registry on a dedicated port, served from a daemon
thread so it never blocks (or is blocked by) the API or the worker loop.
"""

from __future__ import annotations

from typing import Any

from prometheus_client import CollectorRegistry, generate_latest, start_http_server

from sample_services.core.errors import ListenerBindError


def start_metrics_server(
    port: int,
    registry: CollectorRegistry,
    *,
    addr: str = "0.0.0.0",
    logger: Any = None,
) -> Any:
    """Start serving ``registry`` on ``addr:port``.

    Returns the underlying WSGI server so callers can ``shutdown()`` it.

    Raises:
        ListenerBindError: the port could not be bound.
    """
    try:
        server, _thread = start_http_server(port, addr=addr, registry=registry)
    except OSError as e:
        raise ListenerBindError(port, cause=e) from e

    if logger is not None:
        logger.info("metrics_server_started", addr=addr, port=port)
    return server


def render_metrics(registry: CollectorRegistry) -> str:
    """Text exposition of ``registry``, as served on ``/metrics``."""
    return generate_latest(registry).decode("utf-8")


__all__ = ["start_metrics_server", "render_metrics"]
