"""report-runner command line interface."""

from report_runner.cli.app import app

__all__ = ["app"]
