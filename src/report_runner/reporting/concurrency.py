"""Concurrency Coordinator: filesystem markers to prevent duplicate report runs.

WHY
───
Report jobs are triggered by an external scheduler, possibly from several
processes or hosts sharing the same folders.  A job id must not be exported
twice at the same time, so every running job leaves a zero-byte marker file
named after its id inside the connection's processing folder.  The mere
existence of the marker is the lock: it carries no owner, no payload and no
expiry.

ARCHITECTURE
────────────
::

    ConcurrencyCoordinator(locations, exclusive=False)
      ├── .get_running_reports(conn)       ─ ids of all markers present
      ├── .lock_report_job(conn, id)       ─ create (or replace) the marker
      ├── .unlock_report_job(conn, id)     ─ delete the marker, no-op if absent
      ├── .is_report_running(conn, id)     ─ check a single marker
      └── .report_job_lock(conn, id)       ─ lock / unlock around a block

    Marker path: <processing folder>/<job id>
      e.g. ~/.report-runner/warehouse/processing/42

No state is kept in memory; every call goes back to the filesystem.

LOCK MODES
──────────
- ``exclusive=False`` (default): create-or-replace.  Locking an id that is
  already locked silently rewrites the marker, so two callers locking the
  same id at the same moment both succeed.  Re-checking
  ``get_running_reports`` afterwards is advisory only.
- ``exclusive=True``: the marker is created with ``O_EXCL``.  The second
  caller gets ``AlreadyLockedError`` instead of a silent overwrite.

A crashed process leaves its marker behind until someone unlocks the job.

Example::

    coordinator = ConcurrencyCoordinator(locations)
    if 42 not in coordinator.get_running_reports("warehouse"):
        with coordinator.report_job_lock("warehouse", 42):
            run_report()
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from report_runner.core.errors import AlreadyLockedError, LockError, ValidationError
from report_runner.core.logging import get_logger
from report_runner.core.protocols import ReportLocationProvider

logger = get_logger(__name__)

_JOB_ID_PATTERN = re.compile(r"-?[0-9]+")


def _parse_job_id(name: str) -> int | None:
    # only canonical names ("7", not "007" or "-0") map back to the marker unlock removes
    if _JOB_ID_PATTERN.fullmatch(name) and str(int(name)) == name:
        return int(name)
    return None


def _check_job_id(job_id: int) -> int:
    if isinstance(job_id, bool) or not isinstance(job_id, int):
        raise ValidationError(f"Job id must be an integer, got {job_id!r}")
    return job_id


class ConcurrencyCoordinator:
    """Presence-based mutual exclusion for report jobs, one folder per connection."""

    def __init__(self, locations: ReportLocationProvider, *, exclusive: bool = False):
        """Initialize with a location provider.

        Args:
            locations: Resolves each connection's processing folder
            exclusive: Use atomic exclusive-create when locking
        """
        self._locations = locations
        self._exclusive = exclusive

    @property
    def exclusive(self) -> bool:
        return self._exclusive

    def _marker_path(self, connection_name: str, job_id: int) -> Path:
        folder = Path(self._locations.get_processing_folder(connection_name))
        return folder / str(_check_job_id(job_id))

    def get_running_reports(self, connection_name: str) -> list[int]:
        """List the job ids that currently hold a marker.

        Returns an empty list when the processing folder does not exist yet.
        Entries that are not named like a job id are skipped with a warning.

        Raises:
            LockError: The folder exists but cannot be read
        """
        folder = Path(self._locations.get_processing_folder(connection_name))

        try:
            entries = list(folder.iterdir())
        except FileNotFoundError:
            return []
        except OSError as exc:
            raise LockError(
                f"Cannot read processing folder {folder}", cause=exc
            ).with_context(connection_name=connection_name, path=str(folder)) from exc

        running = []
        for entry in entries:
            job_id = _parse_job_id(entry.name)
            if job_id is None or entry.is_dir():
                logger.warning(
                    "unexpected_processing_entry",
                    connection_name=connection_name,
                    entry=entry.name,
                )
                continue
            running.append(job_id)
        return running

    def is_report_running(self, connection_name: str, job_id: int) -> bool:
        return self._marker_path(connection_name, job_id).is_file()

    def lock_report_job(self, connection_name: str, job_id: int) -> Path:
        """Create the marker for ``job_id``, creating the processing folder if needed.

        Returns:
            Path of the marker file

        Raises:
            AlreadyLockedError: Exclusive mode and the marker already exists
            LockError: The folder or marker cannot be written
        """
        marker = self._marker_path(connection_name, job_id)
        mode = "xb" if self._exclusive else "wb"

        try:
            marker.parent.mkdir(parents=True, exist_ok=True)
            with open(marker, mode):
                pass
        except FileExistsError as exc:
            raise AlreadyLockedError(
                f"Report job {job_id} is already locked", cause=exc
            ).with_context(
                connection_name=connection_name, job_id=job_id, path=str(marker)
            ) from exc
        except OSError as exc:
            raise LockError(
                f"Cannot create lock marker {marker}", cause=exc
            ).with_context(
                connection_name=connection_name, job_id=job_id, path=str(marker)
            ) from exc

        logger.info("report_job_locked", connection_name=connection_name, job_id=job_id)
        return marker

    def unlock_report_job(self, connection_name: str, job_id: int) -> None:
        """Delete the marker for ``job_id``. Missing markers are ignored.

        Raises:
            LockError: The marker exists but cannot be removed
        """
        marker = self._marker_path(connection_name, job_id)

        try:
            marker.unlink(missing_ok=True)
        except OSError as exc:
            raise LockError(
                f"Cannot remove lock marker {marker}", cause=exc
            ).with_context(
                connection_name=connection_name, job_id=job_id, path=str(marker)
            ) from exc

        logger.info("report_job_unlocked", connection_name=connection_name, job_id=job_id)

    @contextmanager
    def report_job_lock(self, connection_name: str, job_id: int) -> Iterator[Path]:
        """Hold the lock for ``job_id`` while the block runs."""
        marker = self.lock_report_job(connection_name, job_id)
        try:
            yield marker
        finally:
            self.unlock_report_job(connection_name, job_id)


__all__ = ["ConcurrencyCoordinator"]
