"""Column metadata and value kinds for report output."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum


class ValueKind(str, Enum):
    """Semantic type used to pick a display format for a cell."""

    DATETIME = "datetime"
    DECIMAL = "decimal"
    SINGLE = "single"
    DOUBLE = "double"
    TEXT = "text"


# Declared SQL type name -> value kind. Anything not listed renders as text.
TYPE_NAME_MAP: dict[str, ValueKind] = {
    "datetime": ValueKind.DATETIME,
    "datetime2": ValueKind.DATETIME,
    "smalldatetime": ValueKind.DATETIME,
    "date": ValueKind.DATETIME,
    "datetimeoffset": ValueKind.DATETIME,
    "timestamp": ValueKind.DATETIME,
    "decimal": ValueKind.DECIMAL,
    "numeric": ValueKind.DECIMAL,
    "money": ValueKind.DECIMAL,
    "smallmoney": ValueKind.DECIMAL,
    "real": ValueKind.SINGLE,
    "float": ValueKind.DOUBLE,
    "double": ValueKind.DOUBLE,
    "double precision": ValueKind.DOUBLE,
}

_SIZE_SUFFIX = re.compile(r"\s*\(.*\)\s*$")


def value_kind_for(type_name: str | None) -> ValueKind:
    """Map a declared type name such as ``"DECIMAL(18, 2)"`` to a value kind."""
    if not type_name:
        return ValueKind.TEXT
    key = _SIZE_SUFFIX.sub("", type_name).strip().lower()
    return TYPE_NAME_MAP.get(key, ValueKind.TEXT)


class _DbNull:
    """Database null marker, distinct from an absent (``None``) value."""

    _instance: _DbNull | None = None

    def __new__(cls) -> _DbNull:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "DB_NULL"

    def __str__(self) -> str:
        return ""

    def __bool__(self) -> bool:
        return False


DB_NULL = _DbNull()


def is_null(value: object) -> bool:
    """True for ``None`` and the database null marker."""
    return value is None or value is DB_NULL


@dataclass(frozen=True, slots=True)
class ColumnMetaData:
    """Name, declared type and declared size of one output column."""

    name: str
    type_name: str = ""
    size: int = 0

    @property
    def value_kind(self) -> ValueKind:
        return value_kind_for(self.type_name)


__all__ = [
    "ValueKind",
    "TYPE_NAME_MAP",
    "value_kind_for",
    "DB_NULL",
    "is_null",
    "ColumnMetaData",
]
