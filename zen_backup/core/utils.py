"""Shared utility helpers for the core layer."""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from datetime import UTC, date, datetime
from pathlib import Path

from zen_backup.core.constants import SQLITE_SUFFIXES

_BRACED_VAR = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")
_BARE_VAR = re.compile(r"\$([A-Za-z_][A-Za-z0-9_]*)")
_PERCENT_VAR = re.compile(r"%([A-Za-z_][A-Za-z0-9_]*)%")

_SIZE_UNITS = ("KB", "MB", "GB", "TB")


def utc_now() -> datetime:
    return datetime.now(UTC)


def utc_timestamp(now: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp with second precision, e.g. ``2026-01-16T12:00:00Z``."""
    value = now or utc_now()
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


def iso_date(value: date | datetime | str | None = None) -> str:
    """Return the ``YYYY-MM-DD`` form of *value* (today in UTC when None).

    Strings are truncated to their first ten characters, so full
    timestamps are accepted too.
    """
    if value is None:
        return utc_now().date().isoformat()
    if isinstance(value, str):
        return date.fromisoformat(value[:10]).isoformat()
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(UTC)
        return value.date().isoformat()
    return value.isoformat()


def resolve_home_dir(env: Mapping[str, str]) -> str:
    return env.get("HOME") or env.get("USERPROFILE") or "."


def expand_path(value: str, env: Mapping[str, str] | None = None, base_dir: Path | None = None) -> Path:
    """Expand ``~``, ``${VAR}``, ``$VAR`` and ``%VAR%`` in *value*.

    Unknown variables expand to the empty string. Relative results are
    resolved against *base_dir* when given.
    """
    env = os.environ if env is None else env
    text = value
    if text == "~":
        text = resolve_home_dir(env)
    elif text.startswith("~/"):
        text = os.path.join(resolve_home_dir(env), text[2:])

    def _lookup(match: re.Match[str]) -> str:
        return env.get(match.group(1), "")

    text = _BRACED_VAR.sub(_lookup, text)
    text = _BARE_VAR.sub(_lookup, text)
    text = _PERCENT_VAR.sub(_lookup, text)

    path = Path(text)
    if base_dir is not None and not path.is_absolute():
        return (base_dir / path).resolve()
    return path


def format_size(size_bytes: int) -> str:
    """Human readable size: bytes below 1 KiB, then one decimal place."""
    if size_bytes < 1024:
        return f"{size_bytes} B"
    value = size_bytes / 1024
    unit = 0
    while value >= 1024 and unit < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    return f"{value:.1f} {_SIZE_UNITS[unit]}"


def is_sqlite_file(name: str) -> bool:
    return name.endswith(SQLITE_SUFFIXES)
