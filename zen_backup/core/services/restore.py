"""Restore service — replace the live profile with an archive's contents.

Resolve → Validate → Extract → RotateLive → Install → VerifyInstalled.
Nothing touches the live profile before RotateLive, and RotateLive always
leaves a ``<profile>.pre-restore-<date>[-<n>]`` directory behind as the
recovery point. A failed verification is reported but not rolled back.
"""

from __future__ import annotations

import logging
import os
import re
import shutil
import tempfile
from datetime import date, datetime
from pathlib import Path

from zen_backup.core.config import AppConfig
from zen_backup.core.constants import PRE_RESTORE_MARKER, RESTORE_STAGING_PREFIX
from zen_backup.core.errors import (
    ArchiveFormatError,
    ArchiveNotFound,
    BrowserRunningError,
    FatalCopyError,
    UnsafeArchiveEntry,
    ZenBackupError,
)
from zen_backup.core.models import ArchiveKind, OperationResult
from zen_backup.core.utils import iso_date, is_sqlite_file
from zen_backup.runtime.liveness import LivenessProbe, StaticLiveness
from zen_backup.storage.audit_log import AuditLog
from zen_backup.storage.backends import (
    ArchiveBackend,
    DatabaseBackend,
    SqliteBackend,
    TarfileBackend,
)

logger = logging.getLogger(__name__)

_DRIVE_LETTER = re.compile(r"^[A-Za-z]:(/|$)")


def resolve_archive_path(identifier: str, backup_root: Path, cwd: Path | None = None) -> Path:
    """First existing candidate among the path itself, the root, ``daily/``, ``weekly/``."""
    raw = Path(identifier)
    cwd = cwd or Path.cwd()
    candidates = [
        raw if raw.is_absolute() else cwd / raw,
        backup_root / identifier,
        *(backup_root / kind.value / identifier for kind in ArchiveKind),
    ]
    for candidate in candidates:
        if candidate.is_file():
            return candidate
    raise ArchiveNotFound(f"archive not found: {identifier}")


def sanitize_entry(entry: str) -> str:
    value = entry.strip().replace("\\", "/")
    while value.startswith("./"):
        value = value[2:]
    while value.startswith("/"):
        value = value[1:]
    return value


def check_entry(raw: str) -> None:
    """Raise UnsafeArchiveEntry when *raw* could land outside the target."""
    normalized = raw.strip().replace("\\", "/")
    while normalized.startswith("./"):
        normalized = normalized[2:]
    candidate = sanitize_entry(raw)
    if not candidate:
        return
    if normalized.startswith("/") or _DRIVE_LETTER.match(candidate):
        raise UnsafeArchiveEntry(f"invalid archive entry: {raw}")
    if ".." in candidate.split("/"):
        raise UnsafeArchiveEntry(f"invalid archive entry: {raw}")


def pre_restore_path(profile: Path, day: str) -> Path:
    """``<profile>.pre-restore-<day>``, then ``-2``, ``-3``… until unused."""
    base = f"{profile}{PRE_RESTORE_MARKER}{day}"
    candidate = Path(base)
    index = 2
    while candidate.exists():
        candidate = Path(f"{base}-{index}")
        index += 1
    return candidate


def rotate_profile(profile: Path, day: str) -> Path:
    target = pre_restore_path(profile, day)
    if profile.exists():
        os.rename(profile, target)
        logger.info("Moved %s aside to %s", profile, target)
    else:
        target.mkdir(parents=True)
        logger.info("No live profile at %s; created empty %s", profile, target)
    return target


def copy_tree_contents(source: Path, target: Path) -> int:
    """Copy regular files below *source* into *target*; returns the file count."""
    copied = 0
    for directory, dirnames, filenames in os.walk(source):
        relative = Path(directory).relative_to(source)
        (target / relative).mkdir(parents=True, exist_ok=True)
        dirnames.sort()
        for name in sorted(filenames):
            src = Path(directory) / name
            if not src.is_file() or src.is_symlink():
                continue
            shutil.copy2(src, target / relative / name)
            copied += 1
    return copied


class RestoreService:
    def __init__(
        self,
        config: AppConfig,
        archive_backend: ArchiveBackend | None = None,
        database_backend: DatabaseBackend | None = None,
        liveness: LivenessProbe | None = None,
        audit: AuditLog | None = None,
        cwd: Path | None = None,
    ):
        self.config = config
        self.archive_backend = archive_backend or TarfileBackend()
        self.database_backend = database_backend or SqliteBackend()
        self.liveness = liveness or StaticLiveness(False)
        self.audit = audit or AuditLog(config.local_path)
        self.cwd = cwd

    def restore(
        self,
        identifier: str,
        today: date | datetime | str | None = None,
    ) -> OperationResult:
        try:
            self._ensure_browser_closed()
            archive_path = resolve_archive_path(identifier, self.config.local_path, self.cwd)
            self.validate(archive_path)
        except ZenBackupError as exc:
            return OperationResult(success=False, errors=[str(exc)])

        profile = self.config.profile_path
        backup_dir: Path | None = None
        staging = Path(tempfile.mkdtemp(prefix=RESTORE_STAGING_PREFIX))
        try:
            self.archive_backend.extract(archive_path, staging)
            backup_dir = rotate_profile(profile, iso_date(today))
            profile.mkdir(parents=True, exist_ok=True)
            copied = copy_tree_contents(staging, profile)
        except ArchiveFormatError as exc:
            return OperationResult(success=False, errors=[str(exc)])
        except OSError as exc:
            message = f"failed to restore archive contents: {exc}"
            self.audit.error(message)
            return OperationResult(
                success=False,
                errors=[message],
                archive_path=archive_path,
                pre_restore_path=backup_dir,
            )
        finally:
            shutil.rmtree(staging, ignore_errors=True)

        failed = self.verify_installed(profile)
        if failed:
            message = f"invalid or corrupted archive: {archive_path.name}"
            self.audit.error(f"restore of {archive_path.name} failed verification")
            return OperationResult(
                success=False,
                errors=[message, *(f"integrity check failed: {path}" for path in failed)],
                archive_path=archive_path,
                pre_restore_path=backup_dir,
            )

        self.audit.restore(f"restored profile from {archive_path.name}")
        logger.info("Restored %d file(s) from %s", copied, archive_path)
        return OperationResult(
            success=True,
            summary=f"Restored from archive: {archive_path}\nPre-restore backup: {backup_dir}",
            archive_path=archive_path,
            pre_restore_path=backup_dir,
        )

    def _ensure_browser_closed(self) -> None:
        if self.liveness.is_running():
            raise BrowserRunningError("Zen browser must be closed before restoring")

    def validate(self, archive_path: Path) -> list[str]:
        """List *archive_path* and reject it if any entry is unsafe."""
        entries = self.archive_backend.list_entries(archive_path)
        for raw in entries:
            check_entry(raw)
        return entries

    def verify_installed(self, profile: Path) -> list[Path]:
        """Database files under *profile* that fail the integrity check."""
        failed: list[Path] = []
        for directory, _dirnames, filenames in os.walk(profile):
            for name in sorted(filenames):
                if not is_sqlite_file(name):
                    continue
                path = Path(directory) / name
                try:
                    ok = self.database_backend.integrity_check(path)
                except FatalCopyError:
                    logger.error("Could not check %s", path, exc_info=True)
                    ok = False
                if not ok:
                    failed.append(path)
        return failed
