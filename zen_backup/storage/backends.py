"""Capability interfaces for the archive container and the database engine.

The engine only needs a handful of operations from each; the default
implementations here run in-process (``tarfile``, ``sqlite3``) and
``zen_backup.storage.commands`` provides drop-in versions that shell out
to the ``tar`` and ``sqlite3`` executables.
"""

from __future__ import annotations

import logging
import sqlite3
import tarfile
from contextlib import closing
from pathlib import Path
from typing import Protocol

from zen_backup.core.errors import (
    ArchiveFormatError,
    ArchiveWriteError,
    FatalCopyError,
    HotBackupUnavailable,
)

logger = logging.getLogger(__name__)

DEFAULT_LOCK_TIMEOUT = 2.0


class DatabaseBackend(Protocol):
    def hot_backup(self, source: Path, destination: Path) -> None:
        """Copy a possibly-open database; raise HotBackupUnavailable on failure."""

    def checkpoint(self, path: Path) -> None:
        """Fold the write-ahead log of *path* into its main file."""

    def integrity_check(self, path: Path) -> bool:
        """Return True when *path* passes the engine's integrity check."""


class ArchiveBackend(Protocol):
    def create(self, archive_path: Path, staging_dir: Path) -> None: ...

    def list_entries(self, archive_path: Path) -> list[str]: ...

    def extract(self, archive_path: Path, target_dir: Path) -> None: ...


class SqliteBackend:
    """DatabaseBackend on top of the stdlib ``sqlite3`` module."""

    def __init__(self, lock_timeout: float = DEFAULT_LOCK_TIMEOUT) -> None:
        self.lock_timeout = lock_timeout

    def _connect_source(self, path: Path) -> sqlite3.Connection:
        # Read-write so the last connection out can fold and remove the log
        return sqlite3.connect(str(path), timeout=self.lock_timeout, isolation_level=None)

    def hot_backup(self, source: Path, destination: Path) -> None:
        if not source.is_file():
            raise FatalCopyError(f"cannot read database: {source}")
        destination.parent.mkdir(parents=True, exist_ok=True)
        try:
            with (
                closing(self._connect_source(source)) as src,
                closing(sqlite3.connect(str(destination))) as dst,
            ):
                # sqlite3.Connection.backup retries forever on a busy source, so
                # take the read lock up front where the timeout applies
                src.execute("BEGIN")
                src.execute("SELECT count(*) FROM sqlite_master").fetchone()
                src.backup(dst)
        except sqlite3.Error as exc:
            raise HotBackupUnavailable(f"online backup failed for {source}: {exc}") from exc

    def checkpoint(self, path: Path) -> None:
        try:
            with closing(sqlite3.connect(str(path), timeout=self.lock_timeout)) as conn:
                conn.execute("PRAGMA wal_checkpoint(FULL)").fetchall()
        except sqlite3.DatabaseError:
            # The integrity check that follows reports the real problem
            logger.warning("Checkpoint failed for %s", path, exc_info=True)

    def integrity_check(self, path: Path) -> bool:
        if not path.is_file():
            return False
        try:
            with closing(sqlite3.connect(str(path), timeout=self.lock_timeout)) as conn:
                rows = conn.execute("PRAGMA integrity_check").fetchall()
        except sqlite3.DatabaseError as exc:
            logger.debug("Integrity check raised for %s: %s", path, exc)
            return False
        return bool(rows) and str(rows[0][0]).strip().lower() == "ok"


class TarfileBackend:
    """ArchiveBackend writing gzip-compressed tarballs with ``tarfile``."""

    def create(self, archive_path: Path, staging_dir: Path) -> None:
        archive_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            with tarfile.open(archive_path, "w:gz") as archive:
                archive.add(str(staging_dir), arcname=".")
        except (OSError, tarfile.TarError) as exc:
            raise ArchiveWriteError(f"archive creation failed: {exc}") from exc

    def list_entries(self, archive_path: Path) -> list[str]:
        try:
            with tarfile.open(archive_path, "r:gz") as archive:
                return archive.getnames()
        except (OSError, EOFError, tarfile.TarError) as exc:
            raise ArchiveFormatError(
                f"invalid or corrupted archive: {archive_path.name}"
            ) from exc

    def extract(self, archive_path: Path, target_dir: Path) -> None:
        try:
            with tarfile.open(archive_path, "r:gz") as archive:
                archive.extractall(target_dir, filter="data")
        except (OSError, EOFError, tarfile.TarError) as exc:
            raise ArchiveFormatError(
                f"invalid or corrupted archive: {archive_path.name}"
            ) from exc
