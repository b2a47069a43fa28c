"""
Error taxonomy for the sample services.

Every error raised or returned by the services extends :class:`ServiceError`,
which carries an :class:`ErrorCategory` for routing and a ``to_dict()`` view
for structured logging.

Categories map onto the four handling paths the services implement:

    ┌──────────────┬───────────────────────────────────────────────────┐
    │ Category     │ Handling                                          │
    ├──────────────┼───────────────────────────────────────────────────┤
    │ CONFIG       │ startup problem, logged, service keeps defaults   │
    │ TELEMETRY    │ tracing init failed, degrade to no-op tracing     │
    │ LISTENER     │ HTTP bind failed, fatal, process exits 1          │
    │ PIPELINE     │ simulated step failed, recorded and swallowed     │
    └──────────────┴───────────────────────────────────────────────────┘

Pipeline step errors are never raised across the pipeline boundary. They are
returned inside :class:`~sample_services.core.result.Err`.

Example:
    >>> err = DeliveryError("SMTP server unavailable", step="send_email_smtp")
    >>> err.to_dict()["category"]
    'PIPELINE'
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing."""

    CONFIG = "CONFIG"
    TELEMETRY = "TELEMETRY"
    LISTENER = "LISTENER"
    PIPELINE = "PIPELINE"
    INTERNAL = "INTERNAL"


class ServiceError(Exception):
    """Base exception for all sample service errors."""

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        cause: Exception | None = None,
        **metadata: Any,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.cause = cause
        self.metadata = metadata

        if cause is not None:
            self.__cause__ = cause

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        if self.metadata:
            result["context"] = dict(self.metadata)
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# STARTUP ERRORS
# =============================================================================


class ConfigError(ServiceError):
    """Invalid configuration value."""

    default_category = ErrorCategory.CONFIG


class TracingInitError(ServiceError):
    """Tracer provider could not be built. Non-fatal."""

    default_category = ErrorCategory.TELEMETRY


class ListenerBindError(ServiceError):
    """An HTTP listener could not bind its port. Fatal."""

    default_category = ErrorCategory.LISTENER

    def __init__(self, port: int, cause: Exception | None = None):
        super().__init__(f"failed to bind listener on :{port}", cause=cause, port=port)
        self.port = port


# =============================================================================
# PIPELINE ERRORS
# =============================================================================


class StepError(ServiceError):
    """A pipeline step failed.

    ``step`` names the step that produced the error. The runner fills it in
    when a step returns a plain exception.
    """

    default_category = ErrorCategory.PIPELINE

    def __init__(self, message: str, *, step: str | None = None, cause: Exception | None = None, **metadata: Any):
        super().__init__(message, cause=cause, **metadata)
        self.step = step

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.step is not None:
            result["step"] = self.step
        return result


class ValidationError(StepError):
    """Request failed validation."""


class FetchError(StepError):
    """Input data could not be fetched."""


class DeliveryError(StepError):
    """Outbound delivery (e.g. SMTP) failed."""


class PersistError(StepError):
    """Result could not be saved."""


class UnexpectedStepError(StepError):
    """A step raised instead of returning a Result."""


__all__ = [
    "ErrorCategory",
    "ServiceError",
    "ConfigError",
    "TracingInitError",
    "ListenerBindError",
    "StepError",
    "ValidationError",
    "FetchError",
    "DeliveryError",
    "PersistError",
    "UnexpectedStepError",
]
