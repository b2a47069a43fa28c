"""Service settings with Pydantic.

Both services read plain (unprefixed) environment variables such as
``LOG_LEVEL`` and ``OTEL_EXPORTER_OTLP_ENDPOINT``, plus an optional ``.env``
file. Empty variables count as unset, so ``PORT=`` keeps the default.

Order of precedence (highest → lowest):
    1. Constructor keyword arguments
    2. Environment variables
    3. ``.env`` file
    4. Defaults below
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from sample_services.core.durations import resolve_interval

DEFAULT_SECRET_KEY = "default-secret"


class ServiceSettings(BaseSettings):
    """Settings shared by the API and the worker."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
    )

    # ── Observability ────────────────────────────────────────────
    log_level: str = Field(default="info", description="Log level; unknown values mean info")
    otel_service_name: str = Field(default="sample-service", description="service.name resource attribute")
    otel_exporter_otlp_endpoint: str = Field(default="localhost:4317", description="OTLP gRPC collector")
    environment: str = Field(default="development", description="environment resource attribute")
    service_version: str = Field(default="1.0.0", description="service.version resource attribute")

    # ── Network ──────────────────────────────────────────────────
    metrics_port: int = Field(default=9090, description="Prometheus /metrics listener port")


class ApiSettings(ServiceSettings):
    """Settings for the sample API."""

    otel_service_name: str = "sampleapi"
    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=8080, description="API listener port")
    metrics_port: int = 9090


class WorkerSettings(ServiceSettings):
    """Settings for the sample worker."""

    otel_service_name: str = "sampleworker"
    metrics_port: int = 9091

    worker_interval: str = Field(default="", description="Pause between jobs, e.g. 10s or 1m30s")
    worker_job: Literal["email", "task"] = Field(default="email", description="Which simulated job to run")
    secret_key: str | None = Field(default=None, description="Demo secret; not treated as sensitive")
    fail_simulate_enabled: bool = Field(default=False, description="Force the send/save step to fail")

    @field_validator("fail_simulate_enabled", mode="before")
    @classmethod
    def _only_true_enables(cls, value: Any) -> bool:
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() == "true"

    @property
    def interval_seconds(self) -> float:
        """Effective loop interval; malformed values fall back to 10 seconds."""
        return resolve_interval(self.worker_interval)

    @property
    def secret_key_is_default(self) -> bool:
        return not self.secret_key

    def resolved_secret_key(self) -> str:
        return self.secret_key or DEFAULT_SECRET_KEY


__all__ = ["DEFAULT_SECRET_KEY", "ServiceSettings", "ApiSettings", "WorkerSettings"]
