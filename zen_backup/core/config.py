"""Configuration — ``settings.toml`` loaded into a validated AppConfig."""

from __future__ import annotations

import logging
import os
import sys
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, StrictBool, StrictInt, ValidationError, field_validator

from zen_backup.core.constants import (
    DEFAULT_DAILY_RETENTION_DAYS,
    DEFAULT_WEEKLY_RETENTION_DAYS,
    ENV_CONFIG_PATH,
)
from zen_backup.core.errors import ConfigNotFound, ConfigParseError, ConfigSchemaError
from zen_backup.core.models import ArchiveKind
from zen_backup.core.utils import expand_path, resolve_home_dir

logger = logging.getLogger(__name__)

APP_DIR_NAME = "zen-profile-backup"
CONFIG_FILE_NAME = "settings.toml"

DEFAULT_PROFILE_PATH = "~/.zen"
DEFAULT_LOCAL_PATH = "~/zen-backups"


# ── Sections as written in the file ───────────────────────────────────


class _Section(BaseModel):
    model_config = {"extra": "ignore"}


class ProfileSection(_Section):
    path: str = DEFAULT_PROFILE_PATH

    @field_validator("path")
    @classmethod
    def path_must_not_be_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must be a non-empty string")
        return v


class BackupSection(_Section):
    local_path: str = DEFAULT_LOCAL_PATH
    cloud_path: str | None = None

    @field_validator("local_path")
    @classmethod
    def local_path_must_not_be_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must be a non-empty string")
        return v


class RetentionSection(_Section):
    daily_days: StrictInt = Field(default=DEFAULT_DAILY_RETENTION_DAYS, ge=0)
    weekly_days: StrictInt = Field(default=DEFAULT_WEEKLY_RETENTION_DAYS, ge=0)


class ScheduleSection(_Section):
    daily_time: str = "12:30"
    weekly_day: str = "Sunday"
    weekly_time: str = "02:00"


class NotificationsSection(_Section):
    enabled: StrictBool = True


# ── Resolved configuration ────────────────────────────────────────────


class AppConfig(BaseModel):
    """Validated settings with every path expanded and absolute."""

    model_config = {"frozen": True}

    profile_path: Path
    local_path: Path
    cloud_path: Path | None = None
    daily_days: int = DEFAULT_DAILY_RETENTION_DAYS
    weekly_days: int = DEFAULT_WEEKLY_RETENTION_DAYS
    schedule: ScheduleSection = Field(default_factory=ScheduleSection)
    notifications_enabled: bool = True
    config_path: Path | None = None

    def retention_days(self, kind: ArchiveKind | str) -> int:
        if ArchiveKind(kind) == ArchiveKind.DAILY:
            return self.daily_days
        return self.weekly_days


def resolve_config_path(
    env: Mapping[str, str] | None = None,
    cwd: Path | None = None,
    platform: str | None = None,
) -> Path:
    """``$ZEN_BACKUP_CONFIG`` when set, otherwise the per-platform default."""
    env = os.environ if env is None else env
    cwd = cwd or Path.cwd()
    platform = platform or sys.platform

    override = env.get(ENV_CONFIG_PATH, "").strip()
    if override:
        return (cwd / override).resolve()

    if platform.startswith("win"):
        app_data = env.get("APPDATA") or os.path.join(resolve_home_dir(env), "AppData", "Roaming")
        return Path(app_data) / APP_DIR_NAME / CONFIG_FILE_NAME

    return Path(resolve_home_dir(env)) / ".config" / APP_DIR_NAME / CONFIG_FILE_NAME


def _section(raw: dict[str, Any], key: str) -> dict[str, Any]:
    value = raw.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigSchemaError(f"{key} section must be a table")
    return value


def _describe(exc: ValidationError, section: str) -> str:
    first = exc.errors()[0]
    field = ".".join(str(part) for part in first.get("loc", ()))
    return f"{section}.{field}: {first.get('msg', 'invalid value')}"


def parse_config(
    text: str,
    config_path: Path,
    env: Mapping[str, str] | None = None,
) -> AppConfig:
    try:
        raw = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigParseError("config parse error: invalid TOML") from exc

    sections: dict[str, BaseModel] = {}
    models: dict[str, type[_Section]] = {
        "profile": ProfileSection,
        "backup": BackupSection,
        "retention": RetentionSection,
        "schedule": ScheduleSection,
        "notifications": NotificationsSection,
    }
    for key, model in models.items():
        try:
            sections[key] = model.model_validate(_section(raw, key))
        except ValidationError as exc:
            raise ConfigSchemaError(_describe(exc, key)) from exc

    profile: ProfileSection = sections["profile"]  # type: ignore[assignment]
    backup: BackupSection = sections["backup"]  # type: ignore[assignment]
    retention: RetentionSection = sections["retention"]  # type: ignore[assignment]
    notifications: NotificationsSection = sections["notifications"]  # type: ignore[assignment]

    base_dir = config_path.parent
    cloud = backup.cloud_path
    return AppConfig(
        profile_path=expand_path(profile.path, env, base_dir),
        local_path=expand_path(backup.local_path, env, base_dir),
        cloud_path=expand_path(cloud, env, base_dir) if cloud and cloud.strip() else None,
        daily_days=retention.daily_days,
        weekly_days=retention.weekly_days,
        schedule=sections["schedule"],
        notifications_enabled=notifications.enabled,
        config_path=config_path,
    )


def load_config(
    config_path: Path | None = None,
    env: Mapping[str, str] | None = None,
    required: bool = True,
) -> AppConfig | None:
    """Load configuration; returns None for a missing optional file."""
    path = config_path or resolve_config_path(env)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        if required:
            raise ConfigNotFound(f"config file not found: {path}") from None
        return None
    logger.debug("Loaded configuration from %s", path)
    return parse_config(text, path, env)
