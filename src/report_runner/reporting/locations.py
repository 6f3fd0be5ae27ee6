"""Per-connection folder layout.

::

    <root_folder>/
      └── <connection_name>/
            ├── processing/     lock markers, one zero-byte file per running job
            └── output/         report files written by the job runner
"""

from __future__ import annotations

from pathlib import Path

from report_runner.core.errors import ValidationError
from report_runner.core.settings import ReportRunnerSettings

_RESERVED_NAMES = {"", ".", ".."}


def validate_connection_name(connection_name: str) -> str:
    """Return ``connection_name`` if it is usable as a single path segment."""
    if not isinstance(connection_name, str) or connection_name.strip() in _RESERVED_NAMES:
        raise ValidationError(f"Invalid connection name: {connection_name!r}")
    if "/" in connection_name or "\\" in connection_name or "\x00" in connection_name:
        raise ValidationError(
            f"Connection name must not contain path separators: {connection_name!r}"
        )
    return connection_name


class FolderReportLocationProvider:
    """Resolves connection folders beneath a single root folder.

    Folders are only computed here, never created.
    """

    def __init__(
        self,
        root_folder: str | Path,
        *,
        processing_folder_name: str = "processing",
        output_folder_name: str = "output",
    ):
        self._root = Path(root_folder)
        self._processing_folder_name = processing_folder_name
        self._output_folder_name = output_folder_name

    @classmethod
    def from_settings(cls, settings: ReportRunnerSettings) -> FolderReportLocationProvider:
        return cls(
            settings.root_folder,
            processing_folder_name=settings.processing_folder_name,
            output_folder_name=settings.output_folder_name,
        )

    @property
    def root_folder(self) -> Path:
        return self._root

    def get_connection_folder(self, connection_name: str) -> Path:
        return self._root / validate_connection_name(connection_name)

    def get_processing_folder(self, connection_name: str) -> Path:
        return self.get_connection_folder(connection_name) / self._processing_folder_name

    def get_output_folder(self, connection_name: str) -> Path:
        return self.get_connection_folder(connection_name) / self._output_folder_name


__all__ = ["FolderReportLocationProvider", "validate_connection_name"]
