"""API process entry point: metrics listener plus uvicorn."""

from __future__ import annotations

import uvicorn

from sample_services.api.app import build_api_services, create_app
from sample_services.core.errors import ListenerBindError
from sample_services.core.settings import ApiSettings
from sample_services.observability.exposition import start_metrics_server
from sample_services.observability.logging import error_fields


def run_api(settings: ApiSettings | None = None) -> int:
    """Serve the API until SIGINT/SIGTERM. Returns the process exit code.

    A port that cannot be bound (API or metrics) is fatal: exit code 1.
    """
    settings = settings or ApiSettings()
    services = build_api_services(settings)
    log = services.logger

    try:
        start_metrics_server(settings.metrics_port, services.registry, logger=log)
    except ListenerBindError as e:
        log.error("metrics_server_failed", **error_fields(e))
        services.tracing.shutdown()
        return 1

    config = uvicorn.Config(
        create_app(settings, services),
        host=settings.host,
        port=settings.port,
        log_config=None,
        access_log=False,
    )
    server = uvicorn.Server(config)

    log.info("api_server_starting", host=settings.host, port=settings.port)
    try:
        server.run()
    except SystemExit as e:
        # uvicorn exits on its own when the port is taken
        log.error("api_server_failed", **error_fields(ListenerBindError(settings.port)))
        return e.code if isinstance(e.code, int) and e.code else 1
    finally:
        services.tracing.shutdown()

    if not server.started:
        log.error("api_server_failed", **error_fields(ListenerBindError(settings.port)))
        return 1
    return 0


__all__ = ["run_api"]
