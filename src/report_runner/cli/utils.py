"""
CLI utility helpers: consoles and collaborator construction.
"""

from __future__ import annotations

import typer
from rich.console import Console

from report_runner.core.errors import ReportRunnerError
from report_runner.core.settings import ReportRunnerSettings, get_settings
from report_runner.reporting.concurrency import ConcurrencyCoordinator
from report_runner.reporting.locations import FolderReportLocationProvider

console = Console()
err_console = Console(stderr=True)


def make_coordinator(
    settings: ReportRunnerSettings | None = None, *, exclusive: bool | None = None
) -> ConcurrencyCoordinator:
    settings = settings or get_settings()
    if exclusive is None:
        exclusive = settings.exclusive_locks
    locations = FolderReportLocationProvider.from_settings(settings)
    return ConcurrencyCoordinator(locations, exclusive=exclusive)


def fail(error: ReportRunnerError) -> typer.Exit:
    """Print ``error`` to stderr and return the exit to raise."""
    err_console.print(f"[red]{error.category.value}:[/red] {error.message}")
    return typer.Exit(1)
