"""Inventory — archives present under a backup root."""

from __future__ import annotations

import os
from datetime import date, datetime
from pathlib import Path

from zen_backup.core.constants import ARCHIVE_EXTENSION, STALE_DAILY_AFTER_DAYS
from zen_backup.core.models import ArchiveEntry, ArchiveKind
from zen_backup.core.rules.naming import FIRST_COLLISION_SUFFIX, archive_date, parse_archive_name
from zen_backup.core.utils import iso_date

STALE_DAILY_MESSAGE = "Warning: latest daily backup is stale."
RECENT_DAILY_MESSAGE = "Health: recent daily backup exists."
NO_BACKUPS_MESSAGE = "No backups yet. Run a backup."


def list_archives(root: Path) -> list[ArchiveEntry]:
    """Every ``*.tar.gz`` under ``daily/`` and ``weekly/``, oldest first."""
    entries: list[ArchiveEntry] = []
    for kind in ArchiveKind:
        directory = Path(root) / kind.value
        if not directory.is_dir():
            continue
        for path in directory.iterdir():
            if not path.is_file() or not path.name.endswith(ARCHIVE_EXTENSION):
                continue
            entries.append(
                ArchiveEntry(
                    kind=kind,
                    name=path.name,
                    path=path,
                    size_bytes=path.stat().st_size,
                    date=archive_date(path.name),
                )
            )
    return sort_chronologically(entries)


def _chronological_key(entry: ArchiveEntry) -> tuple[str, str, int, str]:
    # The bare name is the first archive of its day, so it ranks as suffix 1
    parsed = parse_archive_name(entry.name)
    if parsed is None:
        return (entry.kind.value, "", 0, entry.name)
    suffix = parsed.suffix if parsed.suffix is not None else FIRST_COLLISION_SUFFIX - 1
    return (entry.kind.value, parsed.date, suffix, entry.name)


def sort_chronologically(entries: list[ArchiveEntry]) -> list[ArchiveEntry]:
    return sorted(entries, key=_chronological_key)


def newest_archive(entries: list[ArchiveEntry], kind: ArchiveKind | str) -> ArchiveEntry | None:
    kind = ArchiveKind(kind)
    matching = sort_chronologically([entry for entry in entries if entry.kind == kind])
    return matching[-1] if matching else None


def directory_size(path: Path) -> int:
    """Total bytes of regular files below *path*; 0 when it cannot be read."""
    total = 0
    try:
        with os.scandir(path) as scan:
            for entry in scan:
                if entry.is_file(follow_symlinks=False):
                    total += entry.stat(follow_symlinks=False).st_size
                elif entry.is_dir(follow_symlinks=False):
                    total += directory_size(Path(entry.path))
    except OSError:
        return 0
    return total


def daily_health(
    latest_daily: ArchiveEntry | None,
    today: date | datetime | str | None = None,
) -> str:
    """Health line for ``status`` based on the age of the newest daily archive."""
    if latest_daily is None or latest_daily.date is None:
        return NO_BACKUPS_MESSAGE
    try:
        archive_day = date.fromisoformat(latest_daily.date)
    except ValueError:
        return NO_BACKUPS_MESSAGE
    age = (date.fromisoformat(iso_date(today)) - archive_day).days
    if age > STALE_DAILY_AFTER_DAYS:
        return STALE_DAILY_MESSAGE
    return RECENT_DAILY_MESSAGE
