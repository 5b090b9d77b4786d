"""Audit log — append-only ``backup.log`` at the backup root.

One line per durable operation: ``[<timestamp>] <LEVEL>: <message>``.
Never updates or deletes.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from zen_backup.core.constants import AUDIT_LOG_NAME
from zen_backup.core.models import AuditLevel
from zen_backup.core.utils import utc_timestamp

logger = logging.getLogger(__name__)


class AuditLog:
    def __init__(self, backup_root: Path):
        self.backup_root = Path(backup_root)
        self.path = self.backup_root / AUDIT_LOG_NAME

    def append(self, level: AuditLevel | str, message: str, now: datetime | None = None) -> bool:
        """Append an entry; returns False instead of raising when the write fails."""
        line = f"[{utc_timestamp(now)}] {AuditLevel(level).value}: {message}\n"
        try:
            self.backup_root.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as handle:
                handle.write(line)
        except OSError:
            logger.warning("Could not append to %s", self.path, exc_info=True)
            return False
        return True

    def success(self, message: str) -> bool:
        return self.append(AuditLevel.SUCCESS, message)

    def warning(self, message: str) -> bool:
        return self.append(AuditLevel.WARNING, message)

    def error(self, message: str) -> bool:
        return self.append(AuditLevel.ERROR, message)

    def restore(self, message: str) -> bool:
        return self.append(AuditLevel.RESTORE, message)

    def read_lines(self) -> list[str]:
        if not self.path.exists():
            return []
        return self.path.read_text(encoding="utf-8").splitlines()
