"""Snapshot service — one daily or weekly backup of the profile.

Order: profile check → liveness warning → allocate name → build archive
→ prune local root → mirror to cloud root and prune it → audit entry.
"""

from __future__ import annotations

import logging
import shutil
from datetime import date, datetime
from pathlib import Path

from zen_backup.core.config import AppConfig
from zen_backup.core.constants import BROWSER_RUNNING_WARNING
from zen_backup.core.errors import ProfileNotFound
from zen_backup.core.models import ArchiveKind, OperationResult
from zen_backup.core.rules.naming import next_archive_path
from zen_backup.core.services.retention import prune_archives
from zen_backup.core.utils import iso_date
from zen_backup.runtime.liveness import LivenessProbe, StaticLiveness
from zen_backup.runtime.notifications import Notifier
from zen_backup.storage.audit_log import AuditLog
from zen_backup.storage.builder import SnapshotBuilder

logger = logging.getLogger(__name__)


class SnapshotService:
    def __init__(
        self,
        config: AppConfig,
        builder: SnapshotBuilder | None = None,
        liveness: LivenessProbe | None = None,
        notifier: Notifier | None = None,
        audit: AuditLog | None = None,
    ):
        self.config = config
        self.builder = builder or SnapshotBuilder()
        self.liveness = liveness or StaticLiveness(False)
        self.notifier = notifier or Notifier(config.local_path, config.notifications_enabled)
        self.audit = audit or AuditLog(config.local_path)

    def build_snapshot(
        self,
        kind: ArchiveKind | str,
        today: date | datetime | str | None = None,
    ) -> OperationResult:
        try:
            kind = ArchiveKind(kind)
        except ValueError:
            return OperationResult(success=False, errors=["backup kind must be daily or weekly"])

        profile = self.config.profile_path
        try:
            self._require_profile(profile)
        except ProfileNotFound as exc:
            self.notifier.notify("Zen Backup Error", str(exc))
            return OperationResult(success=False, errors=[str(exc)])

        day = iso_date(today)
        local_root = self.config.local_path
        kind_dir = local_root / kind.value
        try:
            kind_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            return OperationResult(
                success=False, errors=[f"failed to create backup directory: {exc}"]
            )

        warnings: list[str] = []
        if self.liveness.is_running():
            self.audit.warning(BROWSER_RUNNING_WARNING)
            self.notifier.notify("Zen Backup", BROWSER_RUNNING_WARNING)
            warnings.append(BROWSER_RUNNING_WARNING)

        archive_path = next_archive_path(kind_dir, kind, day)
        logger.info("Creating %s backup of %s at %s", kind, profile, archive_path)
        report = self.builder.build(profile, archive_path)
        if not report.success:
            archive_path.unlink(missing_ok=True)
            self.audit.error("archive creation failed")
            errors = ["archive creation failed"]
            if report.error:
                errors.append(report.error)
            return OperationResult(
                success=False, warnings=[*warnings, *report.warnings], errors=errors
            )

        for warning in report.warnings:
            self.audit.warning(warning)
        warnings.extend(report.warnings)

        retention_days = self.config.retention_days(kind)
        deleted = prune_archives(local_root, kind, retention_days, day)
        for path in deleted:
            self.audit.success(f"pruned old {kind} backup {path}")

        errors: list[str] = []
        if self.config.cloud_path is not None:
            cloud_error = self._mirror(archive_path, self.config.cloud_path, kind, retention_days, day)
            if cloud_error:
                errors.append(cloud_error)

        self.audit.success(f"created {kind} backup {archive_path}")
        return OperationResult(
            success=not errors,
            summary=f"Created {kind} backup: {archive_path}",
            warnings=warnings,
            errors=errors,
            archive_path=archive_path,
            deleted=deleted,
        )

    @staticmethod
    def _require_profile(profile: Path) -> None:
        if not profile.is_dir():
            raise ProfileNotFound(f"profile path not found: {profile}")

    def _mirror(
        self,
        archive_path: Path,
        cloud_root: Path,
        kind: ArchiveKind,
        retention_days: int,
        day: str,
    ) -> str | None:
        """Copy the archive to the cloud root; returns an error message on failure."""
        try:
            cloud_dir = cloud_root / kind.value
            cloud_dir.mkdir(parents=True, exist_ok=True)
            shutil.copy2(archive_path, cloud_dir / archive_path.name)
            prune_archives(cloud_root, kind, retention_days, day)
        except OSError as exc:
            message = f"cloud sync failed: {exc}"
            logger.error(message)
            self.audit.error(message)
            self.notifier.notify("Zen Backup Warning", message)
            return message
        return None
