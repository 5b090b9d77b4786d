"""Error hierarchy for backup, restore and configuration failures."""

from __future__ import annotations


class ZenBackupError(RuntimeError):
    """Base exception; carries a stable code and the process exit status."""

    code = "ERR_ZEN_BACKUP"
    exit_code = 1

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        if code is not None:
            self.code = code


class ConfigError(ZenBackupError):
    code = "ERR_CONFIG"


class ConfigNotFound(ConfigError):
    code = "ERR_CONFIG_NOT_FOUND"


class ConfigParseError(ConfigError):
    code = "ERR_CONFIG_PARSE"


class ConfigSchemaError(ConfigError):
    code = "ERR_CONFIG_SCHEMA"


class ProfileNotFound(ZenBackupError):
    code = "ERR_PROFILE_NOT_FOUND"


class BrowserRunningError(ZenBackupError):
    code = "ERR_BROWSER_RUNNING"


class ArchiveError(ZenBackupError):
    code = "ERR_ARCHIVE"


class ArchiveNotFound(ArchiveError):
    code = "ERR_ARCHIVE_NOT_FOUND"


class ArchiveFormatError(ArchiveError):
    """The container could not be listed or extracted."""

    code = "ERR_ARCHIVE_INVALID"


class UnsafeArchiveEntry(ArchiveError):
    """An entry would escape the extraction directory."""

    code = "ERR_ARCHIVE_INVALID"


class ArchiveWriteError(ArchiveError):
    code = "ERR_ARCHIVE_WRITE"


class HotBackupUnavailable(ZenBackupError):
    """The database engine could not take an online backup."""

    code = "ERR_HOT_BACKUP"


class FatalCopyError(ZenBackupError):
    """I/O failure that must abort the whole snapshot."""

    code = "ERR_FATAL_COPY"


__all__ = [
    "ArchiveError",
    "ArchiveFormatError",
    "ArchiveNotFound",
    "ArchiveWriteError",
    "BrowserRunningError",
    "ConfigError",
    "ConfigNotFound",
    "ConfigParseError",
    "ConfigSchemaError",
    "FatalCopyError",
    "HotBackupUnavailable",
    "ProfileNotFound",
    "UnsafeArchiveEntry",
    "ZenBackupError",
]
