"""FastAPI application."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any

from fastapi import FastAPI
from prometheus_client import CollectorRegistry

from sample_services import __version__
from sample_services.api import routes
from sample_services.api.middleware import TelemetryMiddleware
from sample_services.core.settings import ApiSettings
from sample_services.observability.logging import build_logger
from sample_services.observability.metrics import HttpMetrics
from sample_services.observability.tracing import Tracing, init_tracer


@dataclass
class ApiServices:
    """Process-wide services shared by every request."""

    settings: ApiSettings
    logger: Any
    tracing: Tracing
    registry: CollectorRegistry
    http_metrics: HttpMetrics


def build_api_services(
    settings: ApiSettings | None = None,
    *,
    logger: Any = None,
    tracing: Tracing | None = None,
    registry: CollectorRegistry | None = None,
) -> ApiServices:
    """Build logger, tracing and metrics once for the API process."""
    settings = settings or ApiSettings()
    log = logger or build_logger(settings.log_level, service=settings.otel_service_name)
    if tracing is None:
        tracing = init_tracer(
            settings.otel_service_name,
            endpoint=settings.otel_exporter_otlp_endpoint,
            environment=settings.environment,
            version=settings.service_version,
            logger=log,
        )
    registry = registry or CollectorRegistry()
    return ApiServices(
        settings=settings,
        logger=log,
        tracing=tracing,
        registry=registry,
        http_metrics=HttpMetrics(registry),
    )


def create_app(settings: ApiSettings | None = None, services: ApiServices | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    services = services or build_api_services(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan handler."""
        services.logger.info("application_started", port=services.settings.port)

        yield

        # Shutdown
        services.tracing.shutdown()
        services.logger.info("application_stopped")

    app = FastAPI(
        title="Sample API",
        description="Health and welcome endpoints with traced, metered requests",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.services = services

    app.add_middleware(
        TelemetryMiddleware,
        tracing=services.tracing,
        logger=services.logger,
        metrics=services.http_metrics,
    )

    app.include_router(routes.router, tags=["Demo"])

    return app


__all__ = ["ApiServices", "build_api_services", "create_app"]
