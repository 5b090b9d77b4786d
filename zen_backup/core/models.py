"""Core domain models for Zen profile backups."""

from __future__ import annotations

import enum
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from zen_backup.core.constants import (
    ENV_CORRUPT_SQLITE,
    ENV_DISK_FULL,
    ENV_FORCE_SQLITE_FALLBACK,
)

# ── Enums ──────────────────────────────────────────────────────────────


class ArchiveKind(enum.StrEnum):
    DAILY = "daily"
    WEEKLY = "weekly"


class CopyStatus(enum.StrEnum):
    CLEAN = "clean"
    FALLBACK_USED = "fallback_used"
    CORRUPT = "corrupt"
    FATAL = "fatal"


class AuditLevel(enum.StrEnum):
    SUCCESS = "SUCCESS"
    WARNING = "WARNING"
    ERROR = "ERROR"
    RESTORE = "RESTORE"


# ── Domain Models ──────────────────────────────────────────────────────


class SqliteCopyOutcome(BaseModel):
    """Classification of a single database copy.

    ``CORRUPT`` is a per-file condition the caller skips; ``FATAL`` aborts
    the whole snapshot.
    """

    model_config = {"frozen": True}

    status: CopyStatus
    source: Path
    destination: Path
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.status in (CopyStatus.CLEAN, CopyStatus.FALLBACK_USED)

    @property
    def is_fatal(self) -> bool:
        return self.status == CopyStatus.FATAL


class FaultPlan(BaseModel):
    """Injected failure scenarios for the copy and build paths.

    Entries in ``corrupt`` and ``force_fallback`` match a database by full
    path or by file name.
    """

    model_config = {"frozen": True}

    corrupt: frozenset[str] = frozenset()
    force_fallback: frozenset[str] = frozenset()
    disk_full: bool = False

    @staticmethod
    def _matches(entries: frozenset[str], path: Path) -> bool:
        return str(path) in entries or path.name in entries

    def is_marked_corrupt(self, path: Path) -> bool:
        return self._matches(self.corrupt, path)

    def forces_fallback(self, path: Path) -> bool:
        return self._matches(self.force_fallback, path)

    @classmethod
    def from_env(cls, env: Mapping[str, str]) -> FaultPlan:
        """Build a plan from the legacy ``ZEN_BACKUP_TEST_*`` variables."""

        def _entries(key: str) -> frozenset[str]:
            value = env.get(key, "").strip()
            return frozenset({value}) if value else frozenset()

        return cls(
            corrupt=_entries(ENV_CORRUPT_SQLITE),
            force_fallback=_entries(ENV_FORCE_SQLITE_FALLBACK),
            disk_full=env.get(ENV_DISK_FULL) == "1",
        )


class RetentionPolicy(BaseModel):
    model_config = {"frozen": True}

    kind: ArchiveKind
    max_age_days: int = Field(ge=0)


class ArchiveEntry(BaseModel):
    """An archive file found under a backup root."""

    model_config = {"frozen": True}

    kind: ArchiveKind
    name: str
    path: Path
    size_bytes: int = 0
    date: str | None = None


class BuildReport(BaseModel):
    """Outcome of staging a profile and writing one archive."""

    model_config = {"frozen": True}

    success: bool
    warnings: list[str] = Field(default_factory=list)
    error: str = ""
    databases: list[SqliteCopyOutcome] = Field(default_factory=list)


class OperationResult(BaseModel):
    """What a backup, prune or restore hands back to the CLI layer."""

    model_config = {"frozen": True}

    success: bool
    summary: str = ""
    warnings: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    archive_path: Path | None = None
    pre_restore_path: Path | None = None
    deleted: list[Path] = Field(default_factory=list)

    @field_validator("warnings", "errors")
    @classmethod
    def drop_blank_messages(cls, v: list[str]) -> list[str]:
        return [item for item in v if item and item.strip()]

    @property
    def exit_code(self) -> int:
        return 0 if self.success else 1
