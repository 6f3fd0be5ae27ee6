"""
Result envelope for explicit success/failure handling.

``Result[T]`` is either ``Ok(value)`` or ``Err(error)``.  It is used where a
failure is an expected, recoverable branch rather than an exceptional exit,
most notably the typed render attempt of the value formatter: the attempt
returns a ``Result`` and the caller decides to fall back on ``Err``.

Examples:
    >>> try_result(lambda: int("41")).unwrap()
    41
    >>> try_result(lambda: int("forty-one")).is_err()
    True
    >>> try_result(lambda: int("x")).unwrap_or(0)
    0
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


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
        """Get value or default (always returns value for Ok)."""
        return self.value

    def inspect_err(self, f: Callable[[Exception], None]) -> Result[T]:
        """Call f with error for side effects (no-op for Ok)."""
        return self

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[T]):
    """Failed result containing the exception that caused it."""

    error: Exception

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> T:
        """Raise the contained error."""
        raise self.error

    def unwrap_or(self, default: T) -> T:
        return default

    def inspect_err(self, f: Callable[[Exception], None]) -> Result[T]:
        """Call f with the error for side effects, return self."""
        f(self.error)
        return self

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result = Ok[T] | Err[T]


def try_result(f: Callable[[], T]) -> Result[T]:
    """
    Execute a zero-argument function and wrap its outcome.

    Returns ``Ok`` with the return value, or ``Err`` with the raised
    exception.  Wrap calls with arguments in a lambda.
    """
    try:
        return Ok(f())
    except Exception as e:
        return Err(e)


__all__ = ["Ok", "Err", "Result", "try_result"]
