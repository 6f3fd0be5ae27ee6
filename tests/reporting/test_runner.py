"""Tests for ReportJobRunner: lock, query, write, unlock against SQLite."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from sqlalchemy import create_engine, text
from structlog.testing import capture_logs

from report_runner.core.errors import (
    AlreadyLockedError,
    JobAlreadyRunningError,
    SourceError,
    ValidationError,
)
from report_runner.core.logging import configure_logging
from report_runner.reporting.concurrency import ConcurrencyCoordinator
from report_runner.reporting.runner import ReportJob, ReportJobRunner

pytestmark = pytest.mark.integration


@pytest.fixture()
def engine(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'source.db'}")
    with engine.begin() as conn:
        conn.execute(text("CREATE TABLE people (name TEXT, surname TEXT, age INTEGER)"))
        conn.execute(
            text("INSERT INTO people VALUES (:n, :s, :a)"),
            [
                {"n": "Matt", "s": "Salmon", "a": 41},
                {"n": "Jo\"hn", "s": "Doe, Jr", "a": 61},
                {"n": "Jane", "s": "new\nline", "a": None},
            ],
        )
    yield engine
    engine.dispose()


@pytest.fixture()
def runner(engine, settings):
    return ReportJobRunner.from_settings(engine, settings)


def _job(**overrides) -> ReportJob:
    values = dict(
        job_id=42,
        connection_name="warehouse",
        command="SELECT name AS Name, surname AS Surname, age AS Age FROM people ORDER BY rowid",
        output_file_name="people.csv",
    )
    values.update(overrides)
    return ReportJob(**values)


class TestRun:
    def test_writes_report(self, runner, root_folder):
        result = runner.run(_job())

        assert result.row_count == 3
        assert result.output_path == root_folder / "warehouse" / "output" / "people.csv"
        assert result.output_path.read_text(encoding="utf-8").splitlines() == [
            "Name,Surname,Age",
            "Matt,Salmon,41",
            '"Jo""hn","Doe, Jr",61',
            "Jane,newline,",
        ]

    def test_without_header_and_custom_delimiter(self, runner):
        result = runner.run(_job(include_header=False, delimiter="|"))

        lines = result.output_path.read_text(encoding="utf-8").splitlines()
        assert lines[0] == "Matt|Salmon|41"
        assert lines[1] == '"Jo""hn"|Doe, Jr|61'

    def test_lock_released_after_success(self, runner, locations):
        runner.run(_job())

        assert ConcurrencyCoordinator(locations).get_running_reports("warehouse") == []

    def test_lock_held_during_export(self, runner, locations):
        coordinator = ConcurrencyCoordinator(locations)
        seen = {}
        original = runner._export

        def spy(job, path):
            seen["running"] = coordinator.get_running_reports(job.connection_name)
            return original(job, path)

        with patch.object(runner, "_export", side_effect=spy):
            runner.run(_job())

        assert seen["running"] == [42]

    def test_already_running_refused(self, runner, locations):
        ConcurrencyCoordinator(locations).lock_report_job("warehouse", 42)

        with pytest.raises(JobAlreadyRunningError) as exc_info:
            runner.run(_job())

        assert exc_info.value.context.job_id == 42
        # the other holder's marker is left alone
        assert ConcurrencyCoordinator(locations).get_running_reports("warehouse") == [42]

    def test_other_job_id_runs(self, runner, locations):
        ConcurrencyCoordinator(locations).lock_report_job("warehouse", 1)

        result = runner.run(_job())

        assert result.row_count == 3
        assert ConcurrencyCoordinator(locations).get_running_reports("warehouse") == [1]

    def test_query_failure_raises_source_error_and_unlocks(self, runner, locations):
        with pytest.raises(SourceError):
            runner.run(_job(command="SELECT * FROM missing_table"))

        assert ConcurrencyCoordinator(locations).get_running_reports("warehouse") == []

    def test_output_file_name_must_be_bare(self, runner):
        with pytest.raises(ValidationError):
            runner.run(_job(output_file_name="../escape.csv"))


class TestExclusiveSettings:
    def test_from_settings_uses_exclusive_locks(self, engine, settings, locations):
        runner = ReportJobRunner.from_settings(
            engine, settings.model_copy(update={"exclusive_locks": True})
        )
        coordinator = ConcurrencyCoordinator(locations)

        # a marker appearing between the running check and the lock
        with patch.object(ConcurrencyCoordinator, "get_running_reports", return_value=[]):
            coordinator.lock_report_job("warehouse", 42)
            with pytest.raises(AlreadyLockedError):
                runner.run(_job())


class TestLogging:
    def test_failure_logged_with_error_details(self, runner, locations):
        ConcurrencyCoordinator(locations).lock_report_job("warehouse", 42)

        with capture_logs() as logs, pytest.raises(JobAlreadyRunningError):
            runner.run(_job())

        failed = [log for log in logs if log["event"] == "report_failed"]
        assert failed[0]["error_type"] == "JobAlreadyRunningError"
        assert failed[0]["category"] == "ORCHESTRATION"
        assert failed[0]["retryable"] is True
        assert failed[0]["context"] == {"connection_name": "warehouse", "job_id": 42}

    def test_runs_with_logging_configured(self, runner, locations, capsys):
        configure_logging(level="INFO", json_format=True)

        result = runner.run(_job())

        assert result.row_count == 3
        assert ConcurrencyCoordinator(locations).get_running_reports("warehouse") == []
        assert "report_completed" in capsys.readouterr().err
