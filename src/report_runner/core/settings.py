"""Environment-driven settings for report-runner.

All fields can be set through ``REPORT_RUNNER_*`` environment variables or a
``.env`` file in the working directory.  Unknown variables are ignored.

Examples:
    >>> import os
    >>> os.environ["REPORT_RUNNER_GLOBALIZATION_CULTURE"] = "de-DE"
    >>> get_settings(_force_reload=True).globalization_culture
    'de_DE'
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ReportRunnerSettings(BaseSettings):
    """Settings shared by the coordinator, writer, runner and CLI.

    Fields
    ──────
    root_folder             : Parent of every per-connection folder
    processing_folder_name  : Sub-folder holding lock markers
    output_folder_name      : Sub-folder receiving report files
    globalization_culture   : Locale for date/number display (``en_US``)
    default_delimiter       : Delimiter used when none is given
    encoding                : Output file encoding
    line_terminator         : Appended to every written line
    exclusive_locks         : Atomic create-if-absent locking
    database_url            : SQLAlchemy URL used by ``export``
    log_level / log_json    : structlog configuration
    """

    model_config = SettingsConfigDict(
        env_prefix="REPORT_RUNNER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Folders ──────────────────────────────────────────────────
    root_folder: Path = Field(
        default_factory=lambda: Path.home() / ".report-runner",
        description="Parent directory of all per-connection folders",
    )
    processing_folder_name: str = "processing"
    output_folder_name: str = "output"

    # ── Formatting ───────────────────────────────────────────────
    globalization_culture: str = "en_US"
    default_delimiter: str = ","
    encoding: str = "utf-8"
    line_terminator: str = "\n"

    # ── Locking ──────────────────────────────────────────────────
    exclusive_locks: bool = False

    # ── Source ───────────────────────────────────────────────────
    database_url: str | None = None

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    log_json: bool | None = None

    @field_validator("globalization_culture")
    @classmethod
    def _normalize_culture(cls, value: str) -> str:
        # .NET style "en-US" is accepted as well as "en_US"
        return value.strip().replace("-", "_")

    @field_validator("default_delimiter")
    @classmethod
    def _delimiter_not_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("default_delimiter must not be empty")
        return value

    @field_validator("line_terminator")
    @classmethod
    def _line_terminator_newline(cls, value: str) -> str:
        if value not in ("\n", "\r\n"):
            raise ValueError("line_terminator must be '\\n' or '\\r\\n'")
        return value


_settings_cache: ReportRunnerSettings | None = None


def get_settings(*, _force_reload: bool = False) -> ReportRunnerSettings:
    """Load, validate and cache a :class:`ReportRunnerSettings` instance.

    _force_reload:
        Bypass cache and reload from the environment.
    """
    global _settings_cache
    if _settings_cache is None or _force_reload:
        _settings_cache = ReportRunnerSettings()
    return _settings_cache


def clear_settings_cache() -> None:
    """Forget the cached settings (used by tests)."""
    global _settings_cache
    _settings_cache = None


__all__ = ["ReportRunnerSettings", "get_settings", "clear_settings_cache"]
