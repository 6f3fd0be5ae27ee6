"""Tests for report_runner.core.errors module."""

import pytest

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


class TestErrorContext:
    """Test ErrorContext dataclass."""

    def test_create_empty_context(self):
        ctx = ErrorContext()
        assert ctx.connection_name is None
        assert ctx.job_id is None
        assert ctx.to_dict() == {}

    def test_to_dict_includes_set_fields(self):
        ctx = ErrorContext(connection_name="warehouse", job_id=7, metadata={"attempt": 2})
        assert ctx.to_dict() == {"connection_name": "warehouse", "job_id": 7, "attempt": 2}


class TestReportRunnerError:
    """Test the base class."""

    def test_create_minimal_error(self):
        err = ReportRunnerError("Something failed")
        assert err.message == "Something failed"
        assert err.category == ErrorCategory.INTERNAL
        assert err.retryable is False
        assert str(err) == "Something failed"

    def test_create_with_cause(self):
        cause = OSError("disk full")
        err = WriterError("Cannot write", cause=cause)
        assert err.cause is cause
        assert err.__cause__ is cause

    def test_with_context_fluent_api(self):
        err = LockError("Failed").with_context(connection_name="crm", job_id=3, host="box1")
        assert err.context.connection_name == "crm"
        assert err.context.job_id == 3
        assert err.context.metadata == {"host": "box1"}

    def test_to_dict(self):
        err = SourceError("Query failed", cause=ValueError("bad")).with_context(job_id=1)
        d = err.to_dict()
        assert d["error_type"] == "SourceError"
        assert d["category"] == "SOURCE"
        assert d["context"] == {"job_id": 1}
        assert d["cause"] == "bad"

    def test_repr(self):
        assert repr(ConfigError("x")) == "ConfigError('x', category=CONFIG)"


class TestHierarchy:
    @pytest.mark.parametrize(
        "error_type, category",
        [
            (StorageError, ErrorCategory.STORAGE),
            (LockError, ErrorCategory.STORAGE),
            (AlreadyLockedError, ErrorCategory.STORAGE),
            (WriterError, ErrorCategory.STORAGE),
            (ValidationError, ErrorCategory.VALIDATION),
            (ConfigError, ErrorCategory.CONFIG),
            (SourceError, ErrorCategory.SOURCE),
            (JobAlreadyRunningError, ErrorCategory.ORCHESTRATION),
        ],
    )
    def test_default_categories(self, error_type, category):
        assert error_type("x").category == category

    def test_lock_errors_are_storage_errors(self):
        assert issubclass(AlreadyLockedError, LockError)
        assert issubclass(LockError, StorageError)
        assert issubclass(WriterError, StorageError)

    def test_job_already_running_is_retryable(self):
        assert JobAlreadyRunningError("busy").retryable is True

