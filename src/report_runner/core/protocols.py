"""
Canonical protocol definitions for report-runner.

The writer and the coordinator depend on shapes, not implementations:

    protocols.py
    ├── RowCursor               - sequential read-only access to query rows
    └── ReportLocationProvider  - connection name → folder resolution

Any object with the right attributes satisfies a protocol; no registration
or inheritance is needed.  Concrete adapters live in
``report_runner.reporting.cursors`` and ``report_runner.reporting.locations``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class RowCursor(Protocol):
    """
    Forward-only cursor over the rows of a query result.

    ::

        field_count          → number of columns in every row
        read()               → advance to the next row, False when exhausted
        get_value(ordinal)   → cell of the current row (None / DB_NULL for null)

    Examples:
        >>> while cursor.read():
        ...     values = [cursor.get_value(i) for i in range(cursor.field_count)]
    """

    @property
    def field_count(self) -> int:
        """Number of columns per row."""
        ...

    def read(self) -> bool:
        """Advance to the next row. Returns False once the rows are exhausted."""
        ...

    def get_value(self, ordinal: int) -> Any:
        """Return the current row's value at ``ordinal``."""
        ...


@runtime_checkable
class ReportLocationProvider(Protocol):
    """Resolves the folder holding a connection's lock markers.

    Must be deterministic per connection name.  The folder need not exist;
    the coordinator creates it on demand.
    """

    def get_processing_folder(self, connection_name: str) -> Path:
        ...


__all__ = ["RowCursor", "ReportLocationProvider"]
