"""Consistent copies of SQLite databases that may be open for writing.

The online backup API is tried first. When it is unavailable (an
exclusive lock it cannot get past, a forced fallback) the main file and
its ``-wal``/``-shm`` siblings are byte-copied and the copy is
checkpointed so the main file stands alone. Either way the result must
pass an integrity check.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from zen_backup.core.constants import SHM_SUFFIX, WAL_SUFFIX
from zen_backup.core.errors import FatalCopyError, HotBackupUnavailable
from zen_backup.core.models import CopyStatus, FaultPlan, SqliteCopyOutcome
from zen_backup.storage.backends import DatabaseBackend, SqliteBackend

logger = logging.getLogger(__name__)


def sidecar(path: Path, suffix: str) -> Path:
    return path.with_name(path.name + suffix)


class SqliteSafeCopy:
    def __init__(
        self,
        backend: DatabaseBackend | None = None,
        faults: FaultPlan | None = None,
    ) -> None:
        self.backend = backend or SqliteBackend()
        self.faults = faults or FaultPlan()

    def copy(self, source: Path, destination: Path) -> SqliteCopyOutcome:
        """Copy *source* to *destination* and classify the result.

        Never raises for I/O problems; those come back as ``FATAL``.
        """
        if self.faults.is_marked_corrupt(source):
            logger.info("Skipping %s: flagged as corrupt", source)
            return self._outcome(CopyStatus.CORRUPT, source, destination, "flagged as corrupt")

        try:
            if self._try_hot_backup(source, destination):
                status = CopyStatus.CLEAN
            else:
                self._fallback_copy(source, destination)
                status = CopyStatus.FALLBACK_USED

            if not self.backend.integrity_check(destination):
                return self._outcome(
                    CopyStatus.CORRUPT, source, destination, "integrity check failed"
                )
        except FatalCopyError as exc:
            return self._outcome(CopyStatus.FATAL, source, destination, str(exc))
        except OSError as exc:
            return self._outcome(CopyStatus.FATAL, source, destination, f"{exc}")

        return self._outcome(status, source, destination)

    def _try_hot_backup(self, source: Path, destination: Path) -> bool:
        if self.faults.forces_fallback(source):
            logger.info("Online backup skipped for %s: fallback forced", source)
            return False
        try:
            self.backend.hot_backup(source, destination)
        except HotBackupUnavailable as exc:
            logger.warning("%s; using checkpoint copy", exc)
            return False
        return True

    def _fallback_copy(self, source: Path, destination: Path) -> None:
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, destination)

        copied_sidecars: list[Path] = []
        for suffix in (WAL_SUFFIX, SHM_SUFFIX):
            side_source = sidecar(source, suffix)
            side_target = sidecar(destination, suffix)
            if not side_source.exists():
                side_target.unlink(missing_ok=True)
                continue
            try:
                shutil.copyfile(side_source, side_target)
            except OSError:
                # The log may vanish when the owner checkpoints mid-copy
                logger.warning("Could not copy %s", side_source, exc_info=True)
                continue
            copied_sidecars.append(side_target)

        self.backend.checkpoint(destination)
        for side_target in (sidecar(destination, WAL_SUFFIX), sidecar(destination, SHM_SUFFIX)):
            side_target.unlink(missing_ok=True)
        logger.debug("Fallback copy of %s used %d side file(s)", source, len(copied_sidecars))

    @staticmethod
    def _outcome(
        status: CopyStatus, source: Path, destination: Path, detail: str = ""
    ) -> SqliteCopyOutcome:
        return SqliteCopyOutcome(
            status=status, source=source, destination=destination, detail=detail
        )
