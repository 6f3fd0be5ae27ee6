"""
Value formatting for report cells.

``TextFormatter.format_text`` turns one cell value plus its semantic kind
into display text.  It never raises for formatting reasons:

::

    value is None / DB_NULL ─────────────────────────────► ""
    kind in (DATETIME, DECIMAL, SINGLE, DOUBLE)
        └─ render_typed(value, kind) ─► Ok(text) ────────► text
                                      └► Err(exc) ─ log ─┐
    any other kind ──────────────────────────────────────┴► str(value) minus CR/LF

Typed values are rendered with the configured culture through Babel:

- DATETIME: culture short date with a four-digit year + " " + culture medium
  time, with CLDR narrow spaces replaced by plain ones
- DECIMAL: culture decimal symbol, no grouping, scale kept ("1.50" stays "1.50")
- SINGLE: rounded to 7 significant digits, trailing zeros dropped
- DOUBLE: shortest round-trip digits, trailing zeros dropped

Examples:
    >>> formatter = TextFormatter("de_DE")
    >>> formatter.format_text(Decimal("1234.5"), ValueKind.DECIMAL)
    '1234,5'
    >>> formatter.format_text("new\\nline", ValueKind.TEXT)
    'newline'
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any

from babel import Locale, UnknownLocaleError
from babel.dates import format_date, format_time
from babel.numbers import format_decimal

from report_runner.core.errors import ConfigError
from report_runner.core.logging import get_logger
from report_runner.core.result import Result, try_result
from report_runner.reporting.models import ValueKind, is_null

logger = get_logger(__name__)

_YEAR_FIELD = re.compile(r"y+")
# CLDR times use narrow/no-break spaces before the day period
_PLAIN_SPACES = str.maketrans({"\u202f": " ", "\u00a0": " "})

TYPED_KINDS = frozenset(
    {ValueKind.DATETIME, ValueKind.DECIMAL, ValueKind.SINGLE, ValueKind.DOUBLE}
)


def strip_line_breaks(text: str) -> str:
    """Remove every carriage return and line feed."""
    return text.replace("\n", "").replace("\r", "")


def to_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time())
    if isinstance(value, str):
        return datetime.fromisoformat(value.strip())
    raise TypeError(f"Cannot convert {type(value).__name__} to datetime")


def to_decimal(value: Any) -> Decimal:
    if isinstance(value, bool):
        raise TypeError("Cannot convert bool to decimal")
    if isinstance(value, float):
        result = Decimal(repr(value))
    elif isinstance(value, Decimal):
        result = value
    else:
        result = Decimal(str(value).strip())
    if not result.is_finite():
        raise ValueError(f"Cannot format non-finite number {value!r}")
    return result


def to_float(value: Any) -> float:
    if isinstance(value, bool):
        raise TypeError("Cannot convert bool to float")
    result = float(value)
    if not math.isfinite(result):
        raise ValueError(f"Cannot format non-finite number {value!r}")
    return result


def _log_typed_failure(value: Any, kind: ValueKind, exc: Exception) -> None:
    logger.error(
        "typed_format_failed",
        value_kind=kind.value,
        value_type=type(value).__name__,
        error=str(exc),
        exc_info=exc,
    )


class TextFormatter:
    """Culture-aware, best-effort cell formatter."""

    def __init__(self, culture: str = "en_US"):
        try:
            self._locale = Locale.parse(culture.replace("-", "_"))
        except (UnknownLocaleError, ValueError, TypeError) as exc:
            raise ConfigError(f"Unknown globalization culture: {culture!r}", cause=exc) from exc

    @property
    def locale(self) -> Locale:
        return self._locale

    def _format_number(self, number: Decimal) -> str:
        # one fraction digit per digit of scale, so 1.50 stays 1.50
        scale = -number.as_tuple().exponent
        pattern = "0." + "0" * scale if scale > 0 else "0"
        return format_decimal(number, format=pattern, locale=self._locale)

    def _date_pattern(self) -> str:
        return _YEAR_FIELD.sub("yyyy", self._locale.date_formats["short"].pattern)

    def _render(self, value: Any, kind: ValueKind) -> str:
        if kind is ValueKind.DATETIME:
            moment = to_datetime(value)
            text = "{} {}".format(
                format_date(moment, self._date_pattern(), locale=self._locale),
                format_time(moment, "medium", locale=self._locale),
            )
            return text.translate(_PLAIN_SPACES)
        if kind is ValueKind.DECIMAL:
            return self._format_number(to_decimal(value))
        if kind is ValueKind.SINGLE:
            return self._format_number(Decimal(format(to_float(value), ".7g")).normalize())
        if kind is ValueKind.DOUBLE:
            return self._format_number(Decimal(repr(to_float(value))).normalize())
        raise ValueError(f"{kind.value} has no typed rendering")

    def render_typed(self, value: Any, kind: ValueKind) -> Result[str]:
        """Attempt the culture-specific rendering of ``value`` as ``kind``."""
        return try_result(lambda: self._render(value, kind))

    def render_generic(self, value: Any) -> str:
        return strip_line_breaks(str(value))

    def format_text(self, value: Any, kind: ValueKind | None = None) -> str:
        """Render ``value`` for output; never raises for formatting reasons."""
        if is_null(value):
            return ""

        kind = kind or ValueKind.TEXT
        if kind in TYPED_KINDS:
            text = (
                self.render_typed(value, kind)
                .inspect_err(lambda exc: _log_typed_failure(value, kind, exc))
                .unwrap_or(None)
            )
            if text is not None:
                return text

        return self.render_generic(value)


__all__ = [
    "TextFormatter",
    "TYPED_KINDS",
    "strip_line_breaks",
    "to_datetime",
    "to_decimal",
    "to_float",
]
