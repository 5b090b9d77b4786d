"""Stage the capturable part of a profile and write it as one archive."""

from __future__ import annotations

import logging
import os
import posixpath
import shutil
import tempfile
from pathlib import Path

from zen_backup.core.constants import (
    BUILD_STAGING_PREFIX,
    DISK_FULL_WARNING,
    SHM_SUFFIX,
    WAL_SUFFIX,
)
from zen_backup.core.errors import ArchiveWriteError, FatalCopyError
from zen_backup.core.models import BuildReport, CopyStatus, FaultPlan, SqliteCopyOutcome
from zen_backup.core.rules.inclusion import should_include
from zen_backup.core.utils import is_sqlite_file
from zen_backup.storage.backends import ArchiveBackend, TarfileBackend
from zen_backup.storage.safe_copy import SqliteSafeCopy, sidecar

logger = logging.getLogger(__name__)


class _Staging:
    """Accumulates warnings and database outcomes during one walk."""

    def __init__(self, profile_root: Path, staging_root: Path) -> None:
        self.profile_root = profile_root
        self.staging_root = staging_root
        self.warnings: list[str] = []
        self.databases: list[SqliteCopyOutcome] = []


class SnapshotBuilder:
    def __init__(
        self,
        archive_backend: ArchiveBackend | None = None,
        safe_copy: SqliteSafeCopy | None = None,
        faults: FaultPlan | None = None,
    ) -> None:
        self.faults = faults or FaultPlan()
        self.archive_backend = archive_backend or TarfileBackend()
        self.safe_copy = safe_copy or SqliteSafeCopy(faults=self.faults)

    def build(self, profile_root: Path, archive_path: Path) -> BuildReport:
        """Write the included subset of *profile_root* to *archive_path*.

        A failed build never leaves a partial archive behind.
        """
        if self.faults.disk_full:
            logger.error("Simulated disk full while creating %s", archive_path)
            return BuildReport(success=False, warnings=[DISK_FULL_WARNING], error=DISK_FULL_WARNING)

        staging_root = Path(tempfile.mkdtemp(prefix=BUILD_STAGING_PREFIX))
        state = _Staging(profile_root, staging_root)
        try:
            self._stage_directory(state, "")
            self.archive_backend.create(archive_path, staging_root)
        except (FatalCopyError, ArchiveWriteError, OSError) as exc:
            logger.error("Snapshot of %s failed: %s", profile_root, exc)
            archive_path.unlink(missing_ok=True)
            return BuildReport(
                success=False,
                warnings=state.warnings,
                error=str(exc),
                databases=state.databases,
            )
        finally:
            shutil.rmtree(staging_root, ignore_errors=True)

        logger.info(
            "Wrote %s (%d database(s), %d warning(s))",
            archive_path,
            len(state.databases),
            len(state.warnings),
        )
        return BuildReport(success=True, warnings=state.warnings, databases=state.databases)

    def _stage_directory(self, state: _Staging, relative_dir: str) -> None:
        source_dir = state.profile_root / relative_dir if relative_dir else state.profile_root
        with os.scandir(source_dir) as scan:
            entries = sorted(scan, key=lambda item: item.name)

        for entry in entries:
            relative = posixpath.join(relative_dir, entry.name) if relative_dir else entry.name
            is_dir = entry.is_dir(follow_symlinks=False)
            if not should_include(relative, entry.name, is_dir):
                logger.debug("Excluded %s", relative)
                continue

            target = state.staging_root / relative
            if is_dir:
                target.mkdir(parents=True, exist_ok=True)
                self._stage_directory(state, relative)
                continue

            if not entry.is_file(follow_symlinks=False):
                continue

            target.parent.mkdir(parents=True, exist_ok=True)
            if is_sqlite_file(entry.name):
                self._stage_database(state, Path(entry.path), target, relative)
            else:
                shutil.copy2(entry.path, target)

    def _stage_database(self, state: _Staging, source: Path, target: Path, relative: str) -> None:
        outcome = self.safe_copy.copy(source, target)
        state.databases.append(outcome)

        if outcome.status == CopyStatus.FATAL:
            raise FatalCopyError(f"failed to copy {relative}: {outcome.detail}")

        for side in (sidecar(target, WAL_SUFFIX), sidecar(target, SHM_SUFFIX)):
            side.unlink(missing_ok=True)

        if outcome.status == CopyStatus.CORRUPT:
            target.unlink(missing_ok=True)
            state.warnings.append(f"corrupt sqlite skipped: {relative}")
        elif outcome.status == CopyStatus.FALLBACK_USED:
            state.warnings.append(f"fallback sqlite copy used for {relative}")
