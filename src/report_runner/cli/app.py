"""
Root Typer application for the report-runner CLI.

Commands:
    running   List job ids holding a lock marker for a connection
    lock      Create the lock marker for a job
    unlock    Remove the lock marker for a job
    export    Run a query and write it to a delimited report file
"""

from __future__ import annotations

import typer
from typer import Typer

from report_runner.cli.utils import console, fail, make_coordinator
from report_runner.core.errors import ConfigError, ReportRunnerError
from report_runner.core.logging import configure_logging
from report_runner.core.settings import get_settings

app = Typer(
    name="report-runner",
    help="report-runner: export query results to delimited files, one run per job.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from importlib.metadata import PackageNotFoundError
        from importlib.metadata import version as pkg_version

        from report_runner import __version__

        try:
            v = pkg_version("report-runner")
        except PackageNotFoundError:
            v = __version__
        typer.echo(f"report-runner {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging."),
) -> None:
    """report-runner CLI: inspect job locks and export reports."""
    settings = get_settings()
    configure_logging(
        level="DEBUG" if verbose else settings.log_level,
        json_format=settings.log_json,
    )


# ── Lock commands ────────────────────────────────────────────────────────


@app.command("running")
def running(
    connection: str = typer.Argument(..., help="Connection name"),
) -> None:
    """List the job ids currently running for CONNECTION."""
    try:
        job_ids = sorted(make_coordinator().get_running_reports(connection))
    except ReportRunnerError as e:
        raise fail(e) from e

    if not job_ids:
        console.print(f"No running reports for [bold]{connection}[/bold]")
        return
    for job_id in job_ids:
        console.print(str(job_id))


@app.command("lock")
def lock(
    connection: str = typer.Argument(..., help="Connection name"),
    job_id: int = typer.Argument(..., help="Report job id"),
    exclusive: bool | None = typer.Option(  # noqa: UP007
        None,
        "--exclusive/--replace",
        help="Fail if already locked (default from settings).",
    ),
) -> None:
    """Create the lock marker for JOB_ID."""
    try:
        marker = make_coordinator(exclusive=exclusive).lock_report_job(connection, job_id)
    except ReportRunnerError as e:
        raise fail(e) from e
    console.print(f"[green]Locked[/green] {connection}/{job_id} → {marker}")


@app.command("unlock")
def unlock(
    connection: str = typer.Argument(..., help="Connection name"),
    job_id: int = typer.Argument(..., help="Report job id"),
) -> None:
    """Remove the lock marker for JOB_ID (no error if absent)."""
    try:
        make_coordinator().unlock_report_job(connection, job_id)
    except ReportRunnerError as e:
        raise fail(e) from e
    console.print(f"[green]Unlocked[/green] {connection}/{job_id}")


# ── Export ───────────────────────────────────────────────────────────────


@app.command("export")
def export(
    connection: str = typer.Argument(..., help="Connection name"),
    job_id: int = typer.Argument(..., help="Report job id"),
    query: str = typer.Option(..., "--query", "-q", help="SQL to run"),
    output: str = typer.Option(..., "--output", "-o", help="Output file name"),
    url: str | None = typer.Option(None, "--url", help="SQLAlchemy database URL"),  # noqa: UP007
    delimiter: str | None = typer.Option(None, "--delimiter", "-d", help="Field delimiter"),  # noqa: UP007
    no_header: bool = typer.Option(False, "--no-header", help="Omit the header line"),
) -> None:
    """Run QUERY for JOB_ID and write the result under the connection's output folder."""
    from sqlalchemy import create_engine
    from sqlalchemy.exc import SQLAlchemyError

    from report_runner.reporting.runner import ReportJob, ReportJobRunner

    settings = get_settings()
    database_url = url or settings.database_url

    try:
        if not database_url:
            raise ConfigError("No database URL: pass --url or set REPORT_RUNNER_DATABASE_URL")

        job = ReportJob(
            job_id=job_id,
            connection_name=connection,
            command=query,
            output_file_name=output,
            delimiter=delimiter or settings.default_delimiter,
            include_header=not no_header,
        )
        try:
            engine = create_engine(database_url)
        except (SQLAlchemyError, ImportError) as exc:
            # an uninstalled DBAPI driver surfaces as ModuleNotFoundError
            raise ConfigError(f"Invalid database URL: {exc}", cause=exc) from exc
        try:
            result = ReportJobRunner.from_settings(engine, settings).run(job)
        finally:
            engine.dispose()
    except ReportRunnerError as e:
        raise fail(e) from e

    console.print(
        f"[green]Exported[/green] {result.row_count} rows → {result.output_path}"
    )


if __name__ == "__main__":
    app()
