"""
Streaming delimited-text report writers.

A writer owns one output file from construction until ``close()``.  Lines
are written as they are produced, so memory use does not grow with the size
of the report.

Escaping rules (data lines):
    A field containing the delimiter, a double quote, a carriage return or a
    line feed is wrapped in double quotes and every embedded double quote is
    doubled.  Any other field is written unchanged.  Delimiters may be longer
    than one character.

Header lines:
    Column names are joined with the delimiter as-is.  Pass
    ``escape_header=True`` to apply the data escaping rules to the header too.

Usage:
    with CsvReportWriter("/data/out/report.csv") as writer:
        writer.write_header([c.name for c in columns])
        writer.write_rows(cursor, columns)
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path
from types import TracebackType
from typing import Any

from report_runner.core.errors import ValidationError, WriterError
from report_runner.core.logging import get_logger
from report_runner.core.protocols import RowCursor
from report_runner.core.settings import ReportRunnerSettings
from report_runner.reporting.formatters import TextFormatter
from report_runner.reporting.models import ColumnMetaData

logger = get_logger(__name__)

QUOTE = '"'
_NEEDS_QUOTING = (QUOTE, "\r", "\n")


def escape_field(text: str, delimiter: str) -> str:
    """Quote ``text`` if it contains the delimiter, a quote or a line break."""
    if delimiter in text or any(ch in text for ch in _NEEDS_QUOTING):
        return QUOTE + text.replace(QUOTE, QUOTE * 2) + QUOTE
    return text


class DelimitedReportWriter:
    """Writes a header line and one line per row to a delimited text file."""

    default_delimiter: str | None = None

    def __init__(
        self,
        path: str | Path,
        *,
        formatter: Any | None = None,
        encoding: str = "utf-8",
        line_terminator: str = "\n",
        escape_header: bool = False,
    ):
        self._path = Path(path)
        self._formatter = formatter or TextFormatter()
        self._line_terminator = line_terminator
        self._escape_header = escape_header
        self._lines_written = 0
        self._closed = True

        try:
            # newline="" keeps the line terminator exactly as given
            self._stream = open(self._path, "w", encoding=encoding, newline="")
        except OSError as exc:
            raise WriterError(
                f"Cannot open report file {self._path}", cause=exc
            ).with_context(path=str(self._path)) from exc
        self._closed = False

    @classmethod
    def from_settings(
        cls, path: str | Path, settings: ReportRunnerSettings, **kwargs: Any
    ) -> DelimitedReportWriter:
        kwargs.setdefault("formatter", TextFormatter(settings.globalization_culture))
        kwargs.setdefault("encoding", settings.encoding)
        kwargs.setdefault("line_terminator", settings.line_terminator)
        return cls(path, **kwargs)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def lines_written(self) -> int:
        return self._lines_written

    def _resolve_delimiter(self, delimiter: str | None) -> str:
        delimiter = delimiter if delimiter is not None else self.default_delimiter
        if not delimiter:
            raise ValidationError("A non-empty delimiter is required")
        return delimiter

    def _write_line(self, line: str) -> None:
        if self._closed:
            raise WriterError(f"Report file {self._path} is closed").with_context(
                path=str(self._path)
            )
        try:
            self._stream.write(line + self._line_terminator)
        except OSError as exc:
            raise WriterError(
                f"Cannot write to report file {self._path}", cause=exc
            ).with_context(path=str(self._path)) from exc
        self._lines_written += 1

    def write_header(self, column_names: Iterable[str], delimiter: str | None = None) -> None:
        delimiter = self._resolve_delimiter(delimiter)
        names = [str(name) for name in column_names]
        if self._escape_header:
            names = [escape_field(name, delimiter) for name in names]
        self._write_line(delimiter.join(names))

    def render_line(
        self, cursor: RowCursor, columns: Sequence[ColumnMetaData], delimiter: str
    ) -> str:
        """Format and escape the cursor's current row, one field per column."""
        fields = []
        for ordinal, column in enumerate(columns):
            text = self._formatter.format_text(cursor.get_value(ordinal), column.value_kind)
            fields.append(escape_field(text, delimiter))
        return delimiter.join(fields)

    def write_line(
        self,
        cursor: RowCursor,
        columns: Sequence[ColumnMetaData],
        delimiter: str | None = None,
    ) -> None:
        """Write the cursor's current row."""
        delimiter = self._resolve_delimiter(delimiter)
        self._write_line(self.render_line(cursor, columns, delimiter))

    def write_rows(
        self,
        cursor: RowCursor,
        columns: Sequence[ColumnMetaData],
        delimiter: str | None = None,
    ) -> int:
        """Advance ``cursor`` to exhaustion, writing every row. Returns the row count."""
        delimiter = self._resolve_delimiter(delimiter)
        count = 0
        while cursor.read():
            self._write_line(self.render_line(cursor, columns, delimiter))
            count += 1
        return count

    def close(self) -> None:
        """Flush and close the file. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        try:
            self._stream.close()
        except OSError as exc:
            raise WriterError(
                f"Cannot close report file {self._path}", cause=exc
            ).with_context(path=str(self._path)) from exc
        logger.debug("report_file_closed", path=str(self._path), lines=self._lines_written)

    def __enter__(self) -> DelimitedReportWriter:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class CsvReportWriter(DelimitedReportWriter):
    """Comma-delimited writer; the delimiter argument may be omitted."""

    default_delimiter = ","


__all__ = ["DelimitedReportWriter", "CsvReportWriter", "escape_field"]
