"""
Report job runner: lock, query, write, unlock.

::

    ReportJobRunner.run(job)
      1. job id already has a marker?  → JobAlreadyRunningError
      2. coordinator.report_job_lock(connection, job id)
      3. engine.connect().execute(text(job.command))  → SqlAlchemyRowCursor
      4. DelimitedReportWriter → <output folder>/<output_file_name>
      5. marker removed (always)

The runner is synchronous; one call handles one job.  Different job ids may
run in parallel from separate processes.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from pathlib import Path

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from report_runner.core.errors import (
    JobAlreadyRunningError,
    ReportRunnerError,
    SourceError,
    ValidationError,
    WriterError,
)
from report_runner.core.logging import LogContext, get_logger
from report_runner.core.settings import ReportRunnerSettings
from report_runner.reporting.concurrency import ConcurrencyCoordinator
from report_runner.reporting.cursors import SqlAlchemyRowCursor
from report_runner.reporting.formatters import TextFormatter
from report_runner.reporting.locations import FolderReportLocationProvider
from report_runner.reporting.writers import DelimitedReportWriter

logger = get_logger(__name__)


@dataclass(frozen=True)
class ReportJob:
    """One report to export."""

    job_id: int
    connection_name: str
    command: str
    output_file_name: str
    delimiter: str = ","
    include_header: bool = True


@dataclass(frozen=True)
class ReportResult:
    job_id: int
    connection_name: str
    output_path: Path
    row_count: int
    elapsed_ms: float


class ReportJobRunner:
    """Runs report jobs against a SQLAlchemy engine under a job lock."""

    def __init__(
        self,
        engine: Engine,
        coordinator: ConcurrencyCoordinator,
        locations: FolderReportLocationProvider,
        *,
        formatter: TextFormatter | None = None,
        settings: ReportRunnerSettings | None = None,
    ):
        self._engine = engine
        self._coordinator = coordinator
        self._locations = locations
        self._settings = settings or ReportRunnerSettings()
        self._formatter = formatter or TextFormatter(self._settings.globalization_culture)

    @classmethod
    def from_settings(cls, engine: Engine, settings: ReportRunnerSettings) -> ReportJobRunner:
        locations = FolderReportLocationProvider.from_settings(settings)
        coordinator = ConcurrencyCoordinator(locations, exclusive=settings.exclusive_locks)
        return cls(engine, coordinator, locations, settings=settings)

    def output_path(self, job: ReportJob) -> Path:
        name = Path(job.output_file_name)
        if name.name != job.output_file_name or name.name in ("", ".", ".."):
            raise ValidationError(f"Output file name must be a bare file name: {job.output_file_name!r}")
        return self._locations.get_output_folder(job.connection_name) / name

    def run(self, job: ReportJob) -> ReportResult:
        """Export ``job`` and return where it was written.

        Raises:
            JobAlreadyRunningError: A marker for the job id already exists
            SourceError: The query failed
            LockError / WriterError: File system failures
        """
        output_path = self.output_path(job)

        with LogContext(connection_name=job.connection_name, job_id=job.job_id):
            try:
                row_count, elapsed_ms = self._run_locked(job, output_path)
            except ReportRunnerError as exc:
                logger.error("report_failed", **exc.to_dict())
                raise
            logger.info("report_completed", row_count=row_count, elapsed_ms=round(elapsed_ms, 2))

        return ReportResult(
            job_id=job.job_id,
            connection_name=job.connection_name,
            output_path=output_path,
            row_count=row_count,
            elapsed_ms=elapsed_ms,
        )

    def _run_locked(self, job: ReportJob, output_path: Path) -> tuple[int, float]:
        if job.job_id in self._coordinator.get_running_reports(job.connection_name):
            raise JobAlreadyRunningError(
                f"Report job {job.job_id} is already running"
            ).with_context(connection_name=job.connection_name, job_id=job.job_id)

        started = time.perf_counter()
        with self._coordinator.report_job_lock(job.connection_name, job.job_id):
            logger.info("report_started", output_path=str(output_path))
            try:
                output_path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise WriterError(
                    f"Cannot create output folder: {exc}", cause=exc
                ).with_context(path=str(output_path.parent)) from exc
            row_count = self._export(job, output_path)

        return row_count, (time.perf_counter() - started) * 1000

    def _export(self, job: ReportJob, output_path: Path) -> int:
        try:
            with self._engine.connect() as conn:
                result = conn.execution_options(stream_results=True).execute(text(job.command))
                cursor = SqlAlchemyRowCursor(result)
                columns = cursor.columns()

                with DelimitedReportWriter.from_settings(
                    output_path, self._settings, formatter=self._formatter
                ) as writer:
                    if job.include_header:
                        writer.write_header([c.name for c in columns], job.delimiter)
                    return writer.write_rows(cursor, columns, job.delimiter)
        except SQLAlchemyError as exc:
            raise SourceError(f"Report query failed: {exc}", cause=exc).with_context(
                connection_name=job.connection_name, job_id=job.job_id
            ) from exc


__all__ = ["ReportJob", "ReportResult", "ReportJobRunner"]
