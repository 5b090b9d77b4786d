"""Inclusion rules — which profile paths are captured in a snapshot.

Rules are checked in priority order:
  1. credential/session/lock files by exact name
  2. SQLite write-ahead-log and shared-memory side files
  3. cache, telemetry and crash-report directory prefixes
  4. ``storage/default`` itself is kept, its ``http*`` origins are not
"""

from __future__ import annotations

import posixpath

from zen_backup.core.constants import (
    DEFAULT_STORAGE_DIR,
    DEFAULT_STORAGE_HTTP_PREFIX,
    EXCLUDED_DIR_PREFIXES,
    EXCLUDED_FILE_NAMES,
    EXCLUDED_FILE_SUFFIXES,
)


def normalize_relative(relative_path: str) -> str:
    """Forward slashes, no leading ``./``, no trailing slash."""
    value = relative_path.replace("\\", "/")
    while value.startswith("./"):
        value = value[2:]
    return value.rstrip("/")


def should_include(relative_path: str, file_name: str | None = None, is_directory: bool = False) -> bool:
    """Return True when the entry at *relative_path* belongs in a snapshot.

    *relative_path* is relative to the profile root; *file_name* defaults
    to its last segment.
    """
    normalized = normalize_relative(relative_path)
    name = file_name if file_name is not None else posixpath.basename(normalized)

    if name in EXCLUDED_FILE_NAMES:
        return False

    if name.endswith(EXCLUDED_FILE_SUFFIXES):
        return False

    for prefix in EXCLUDED_DIR_PREFIXES:
        if normalized == prefix.rstrip("/") or normalized.startswith(prefix):
            return False

    if normalized == DEFAULT_STORAGE_DIR and is_directory:
        return True

    if normalized.startswith(DEFAULT_STORAGE_HTTP_PREFIX):
        return False

    return True
