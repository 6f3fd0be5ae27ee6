"""
Row cursor adapters.

The writer only needs the ``RowCursor`` capability (``field_count``,
``read()``, ``get_value(ordinal)``).  These adapters provide it over the data
access layers a report can come from:

- ``SequenceRowCursor``   - rows already in memory (lists, tuples)
- ``DbApiRowCursor``      - any PEP 249 cursor (sqlite3, pyodbc, psycopg)
- ``SqlAlchemyRowCursor`` - a SQLAlchemy ``CursorResult``

Each adapter can also describe its columns as ``ColumnMetaData``.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Iterable, Sequence
from decimal import Decimal
from typing import Any

from sqlalchemy.engine import CursorResult

from report_runner.core.errors import ValidationError
from report_runner.reporting.models import ColumnMetaData

# Python types reported as ``type_code`` by some DB-API drivers (pyodbc)
_PYTHON_TYPE_NAMES: dict[type, str] = {
    dt.datetime: "datetime",
    dt.date: "date",
    Decimal: "decimal",
    float: "float",
    int: "int",
    str: "varchar",
    bytes: "varbinary",
    bool: "bit",
}


def type_name_for(type_code: Any) -> str:
    """Best-effort declared type name for a DB-API ``type_code``."""
    if type_code is None:
        return ""
    if isinstance(type_code, str):
        return type_code
    if isinstance(type_code, type):
        return _PYTHON_TYPE_NAMES.get(type_code, type_code.__name__.lower())
    return ""


def columns_from_description(description: Sequence[Sequence[Any]] | None) -> list[ColumnMetaData]:
    """Build column metadata from a PEP 249 ``cursor.description``."""
    columns = []
    for item in description or ():
        name = item[0]
        type_code = item[1] if len(item) > 1 else None
        size = item[3] if len(item) > 3 and isinstance(item[3], int) else 0
        columns.append(ColumnMetaData(str(name), type_name_for(type_code), size))
    return columns


class _CurrentRowMixin:
    _row: Sequence[Any] | None = None

    def get_value(self, ordinal: int) -> Any:
        if self._row is None:
            raise ValidationError("No current row; call read() first")
        return self._row[ordinal]


class SequenceRowCursor(_CurrentRowMixin):
    """Cursor over rows held in memory."""

    def __init__(self, rows: Iterable[Sequence[Any]], field_count: int | None = None):
        self._rows = [tuple(row) for row in rows]
        if field_count is None:
            field_count = len(self._rows[0]) if self._rows else 0
        self._field_count = field_count
        self._position = -1
        self._row = None

    @property
    def field_count(self) -> int:
        return self._field_count

    def read(self) -> bool:
        self._position += 1
        if self._position < len(self._rows):
            self._row = self._rows[self._position]
            return True
        self._row = None
        return False


class DbApiRowCursor(_CurrentRowMixin):
    """Cursor over a PEP 249 cursor that has already executed a query."""

    def __init__(self, cursor: Any):
        self._cursor = cursor
        self._row = None

    @property
    def field_count(self) -> int:
        return len(self._cursor.description or ())

    def columns(self) -> list[ColumnMetaData]:
        return columns_from_description(self._cursor.description)

    def read(self) -> bool:
        self._row = self._cursor.fetchone()
        return self._row is not None


class SqlAlchemyRowCursor(_CurrentRowMixin):
    """Cursor over a SQLAlchemy ``CursorResult`` (e.g. ``conn.execute(text(sql))``)."""

    def __init__(self, result: CursorResult):
        self._result = result
        self._keys = list(result.keys())
        # the DBAPI cursor is released once the rows are exhausted
        self._description = getattr(result.cursor, "description", None)
        self._row = None

    @property
    def field_count(self) -> int:
        return len(self._keys)

    def columns(self) -> list[ColumnMetaData]:
        if self._description:
            return columns_from_description(self._description)
        return [ColumnMetaData(str(key)) for key in self._keys]

    def read(self) -> bool:
        self._row = self._result.fetchone()
        return self._row is not None


__all__ = [
    "SequenceRowCursor",
    "DbApiRowCursor",
    "SqlAlchemyRowCursor",
    "columns_from_description",
    "type_name_for",
]
