"""Backends that delegate to the ``tar`` and ``sqlite3`` executables."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from zen_backup.core.errors import (
    ArchiveFormatError,
    ArchiveWriteError,
    FatalCopyError,
    HotBackupUnavailable,
)

logger = logging.getLogger(__name__)


def sqlite_quote(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def _run(args: list[str]) -> subprocess.CompletedProcess[str]:
    logger.debug("Running %s", args)
    return subprocess.run(args, capture_output=True, text=True, check=False)


class SqliteCommandBackend:
    """DatabaseBackend driving the ``sqlite3`` command-line shell."""

    def __init__(self, executable: str = "sqlite3") -> None:
        self.executable = executable

    def _invoke(self, db_path: Path, command: str) -> subprocess.CompletedProcess[str]:
        try:
            return _run([self.executable, str(db_path), command])
        except OSError as exc:
            raise FatalCopyError(f"cannot run {self.executable}: {exc}") from exc

    def hot_backup(self, source: Path, destination: Path) -> None:
        destination.parent.mkdir(parents=True, exist_ok=True)
        result = self._invoke(source, f".backup {sqlite_quote(str(destination))}")
        if result.returncode != 0:
            raise HotBackupUnavailable(
                f"online backup failed for {source}: {result.stderr.strip()}"
            )

    def checkpoint(self, path: Path) -> None:
        result = self._invoke(path, "PRAGMA wal_checkpoint(FULL);")
        if result.returncode != 0:
            logger.warning("Checkpoint failed for %s: %s", path, result.stderr.strip())

    def integrity_check(self, path: Path) -> bool:
        result = self._invoke(path, "PRAGMA integrity_check;")
        if result.returncode != 0:
            return False
        lines = result.stdout.strip().lower().splitlines()
        return bool(lines) and lines[0].strip() == "ok"


class TarCommandBackend:
    """ArchiveBackend driving the system ``tar`` with gzip compression."""

    def __init__(self, executable: str = "tar") -> None:
        self.executable = executable

    def create(self, archive_path: Path, staging_dir: Path) -> None:
        archive_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            result = _run([self.executable, "-czf", str(archive_path), "-C", str(staging_dir), "."])
        except OSError as exc:
            raise ArchiveWriteError(f"archive creation failed: {exc}") from exc
        if result.returncode != 0:
            raise ArchiveWriteError(f"archive creation failed: {result.stderr.strip()}")

    def list_entries(self, archive_path: Path) -> list[str]:
        try:
            result = _run([self.executable, "-tzf", str(archive_path)])
        except OSError as exc:
            raise ArchiveFormatError(f"invalid or corrupted archive: {archive_path.name}") from exc
        if result.returncode != 0:
            raise ArchiveFormatError(f"invalid or corrupted archive: {archive_path.name}")
        return [line for line in result.stdout.splitlines() if line.strip()]

    def extract(self, archive_path: Path, target_dir: Path) -> None:
        try:
            result = _run([self.executable, "-xzf", str(archive_path), "-C", str(target_dir)])
        except OSError as exc:
            raise ArchiveFormatError(f"invalid or corrupted archive: {archive_path.name}") from exc
        if result.returncode != 0:
            raise ArchiveFormatError(f"invalid or corrupted archive: {archive_path.name}")
