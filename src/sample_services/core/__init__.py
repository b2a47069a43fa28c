"""Core primitives: settings, results, errors and duration strings."""

from sample_services.core.durations import format_duration, parse_duration, resolve_interval
from sample_services.core.errors import (
    ConfigError,
    DeliveryError,
    ErrorCategory,
    FetchError,
    ListenerBindError,
    PersistError,
    ServiceError,
    StepError,
    TracingInitError,
    UnexpectedStepError,
    ValidationError,
)
from sample_services.core.result import Err, Ok, Result, try_result

__all__ = [
    # Results
    "Ok",
    "Err",
    "Result",
    "try_result",
    # Errors
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
    # Durations
    "parse_duration",
    "resolve_interval",
    "format_duration",
]
