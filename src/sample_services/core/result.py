"""
Result envelope for consistent success/failure handling.

Pipeline steps return ``Ok[T]`` on success or ``Err[T]`` on failure instead of
raising. The pipeline runner checks each result and short-circuits on the
first ``Err``, so failures flow as values and never as exceptions.

Example:
    >>> def validate(n: int) -> Result[int]:
    ...     return Ok(n) if n > 0 else Err(ValueError("must be positive"))
    >>> validate(3).flat_map(lambda n: Ok(n * 2)).unwrap()
    6
    >>> validate(-1).flat_map(lambda n: Ok(n * 2)).is_err()
    True

Guardrails:
    ❌ DON'T: Call unwrap() on Err - it raises the error
    ✅ DO: Use unwrap_or() or pattern matching to handle errors
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, TypeVar


T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful result containing a value."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        """Get the value. Safe for Ok."""
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def flat_map(self, f: Callable[[T], Result[U]]) -> Result[U]:
        """Chain to another Result-returning function."""
        return f(self.value)

    def map_err(self, f: Callable[[Exception], Exception]) -> Result[T]:
        return self

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[T]):
    """Failed result containing an error.

    ``flat_map`` passes the error through unchanged.
    """

    error: Exception

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> T:
        """Raise the error. Use only when you're sure it's Ok."""
        raise self.error

    def unwrap_or(self, default: T) -> T:
        return default

    def flat_map(self, f: Callable[[T], Result[U]]) -> Result[U]:
        """No-op for Err."""
        return Err(self.error)

    def map_err(self, f: Callable[[Exception], Exception]) -> Result[T]:
        """Transform the error."""
        return Err(f(self.error))

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result = Ok[T] | Err[T]


def try_result(f: Callable[[], T]) -> Result[T]:
    """Execute a zero-argument function and wrap its outcome in a Result.

    This is the bridge between exception-raising code and Result-returning
    code: a return value becomes ``Ok``, any ``Exception`` becomes ``Err``.
    """
    try:
        return Ok(f())
    except Exception as e:
        return Err(e)


__all__ = ["Ok", "Err", "Result", "try_result"]
