"""report-runner core -- errors, results, logging, settings and protocols.

Architecture::

    errors.py      Structured error hierarchy (ReportRunnerError, LockError, ...)
    result.py      Result[T] envelope (Ok / Err / try_result)
    logging.py     structlog configuration and module loggers
    settings.py    pydantic-settings configuration (REPORT_RUNNER_*)
    protocols.py   RowCursor and ReportLocationProvider protocols
"""

from report_runner.core.errors import (
    AlreadyLockedError,
    ConfigError,
    ErrorCategory,
    ErrorContext,
    JobAlreadyRunningError,
    LockError,
    ReportRunnerError,
    SourceError,
    StorageError,
    ValidationError,
    WriterError,
)
from report_runner.core.protocols import ReportLocationProvider, RowCursor
from report_runner.core.result import Err, Ok, Result, try_result

__all__ = [
    "AlreadyLockedError",
    "ConfigError",
    "ErrorCategory",
    "ErrorContext",
    "JobAlreadyRunningError",
    "LockError",
    "ReportRunnerError",
    "SourceError",
    "StorageError",
    "ValidationError",
    "WriterError",
    "ReportLocationProvider",
    "RowCursor",
    "Err",
    "Ok",
    "Result",
    "try_result",
]
