"""Report export: job locking, cell formatting and delimited file writing."""

from report_runner.reporting.concurrency import ConcurrencyCoordinator
from report_runner.reporting.cursors import (
    DbApiRowCursor,
    SequenceRowCursor,
    SqlAlchemyRowCursor,
    columns_from_description,
)
from report_runner.reporting.formatters import TextFormatter
from report_runner.reporting.locations import FolderReportLocationProvider
from report_runner.reporting.models import DB_NULL, ColumnMetaData, ValueKind, value_kind_for
from report_runner.reporting.runner import ReportJob, ReportJobRunner, ReportResult
from report_runner.reporting.writers import CsvReportWriter, DelimitedReportWriter, escape_field

__all__ = [
    "ConcurrencyCoordinator",
    "DbApiRowCursor",
    "SequenceRowCursor",
    "SqlAlchemyRowCursor",
    "columns_from_description",
    "TextFormatter",
    "FolderReportLocationProvider",
    "DB_NULL",
    "ColumnMetaData",
    "ValueKind",
    "value_kind_for",
    "ReportJob",
    "ReportJobRunner",
    "ReportResult",
    "CsvReportWriter",
    "DelimitedReportWriter",
    "escape_field",
]
