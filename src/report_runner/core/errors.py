"""
Structured error types for report-runner.

Every failure the runner surfaces to a caller is a ``ReportRunnerError``
subclass carrying a category, a retry hint, structured context and the
chained underlying exception.  Formatting problems never appear here: the
value formatter logs and recovers from those on its own.

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────────┐
        │                     ReportRunnerError                         │
        │        (category, retryable, context, cause)                  │
        ├──────────────────────────────────────────────────────────────┤
        │                                                               │
        │  StorageError        ValidationError      ConfigError         │
        │  (STORAGE)           (VALIDATION)         (CONFIG)            │
        │     │                                                         │
        │  LockError           SourceError          JobAlreadyRunning   │
        │  AlreadyLockedError  (SOURCE)             (ORCHESTRATION)     │
        │  WriterError                                                  │
        └──────────────────────────────────────────────────────────────┘

Taxonomy:
    - **Fatal / propagated:** I/O failures opening, writing or closing an
      output file (``WriterError``) and directory-access failures while
      locking (``LockError``).
    - **Benign absence:** a missing processing folder when listing, or a
      missing marker when unlocking. These are not errors at all.

Examples:
    >>> err = LockError("cannot create marker").with_context(
    ...     connection_name="warehouse", job_id=42
    ... )
    >>> err.to_dict()["context"]
    {'connection_name': 'warehouse', 'job_id': 42}
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing."""

    STORAGE = "STORAGE"           # Disk, file system
    SOURCE = "SOURCE"             # Query execution, upstream database
    VALIDATION = "VALIDATION"     # Bad arguments
    CONFIG = "CONFIG"             # Missing config, invalid settings
    ORCHESTRATION = "ORCHESTRATION"  # Job already running, scheduling
    INTERNAL = "INTERNAL"         # Bugs, unexpected state


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Attributes:
        connection_name: Logical connection the operation ran against
        job_id: Report job identifier
        path: File or directory involved
        metadata: Additional key-value pairs
    """

    connection_name: str | None = None
    job_id: int | None = None
    path: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["connection_name", "job_id", "path"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class ReportRunnerError(Exception):
    """
    Base exception for all report-runner errors.

    Subclasses set ``default_category`` and ``default_retryable``; callers
    may override both per instance.  Pass ``cause=`` when wrapping another
    exception so the original traceback is kept as ``__cause__``.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> ReportRunnerError:
        """
        Add context to this error (fluent API).

        Usage:
            raise WriterError("Failed").with_context(path="/tmp/out.csv")
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# STORAGE ERRORS
# =============================================================================


class StorageError(ReportRunnerError):
    """File system error."""

    default_category = ErrorCategory.STORAGE
    default_retryable = False


class LockError(StorageError):
    """Processing folder or lock marker could not be accessed."""

    pass


class AlreadyLockedError(LockError):
    """An exclusive lock was requested for a job whose marker already exists."""

    pass


class WriterError(StorageError):
    """Output file could not be opened, written or closed."""

    pass


# =============================================================================
# OTHER ERRORS
# =============================================================================


class ValidationError(ReportRunnerError):
    """Invalid argument (connection name, delimiter, ...)."""

    default_category = ErrorCategory.VALIDATION
    default_retryable = False


class ConfigError(ReportRunnerError):
    """Configuration error (e.g. no database URL for an export)."""

    default_category = ErrorCategory.CONFIG
    default_retryable = False


class SourceError(ReportRunnerError):
    """The report query failed in the upstream database."""

    default_category = ErrorCategory.SOURCE
    default_retryable = False


class JobAlreadyRunningError(ReportRunnerError):
    """The job id already holds a lock marker for its connection."""

    default_category = ErrorCategory.ORCHESTRATION
    default_retryable = True


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "ReportRunnerError",
    "StorageError",
    "LockError",
    "AlreadyLockedError",
    "WriterError",
    "ValidationError",
    "ConfigError",
    "SourceError",
    "JobAlreadyRunningError",
]
