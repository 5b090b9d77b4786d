"""Archive naming — ``zen-backup-<kind>-<YYYY-MM-DD>[-<n>].tar.gz``.

The file name is the only persisted format contract; retention and
inventory both recover kind and date from it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path

from zen_backup.core.constants import ARCHIVE_EXTENSION, ARCHIVE_PREFIX
from zen_backup.core.models import ArchiveKind
from zen_backup.core.utils import iso_date

ARCHIVE_NAME_RE = re.compile(
    rf"^{re.escape(ARCHIVE_PREFIX)}-(daily|weekly)-(\d{{4}}-\d{{2}}-\d{{2}})(?:-(\d+))?"
    rf"{re.escape(ARCHIVE_EXTENSION)}$"
)

# First suffix tried once the bare name is taken
FIRST_COLLISION_SUFFIX = 2


@dataclass(frozen=True)
class ArchiveName:
    kind: ArchiveKind
    date: str
    suffix: int | None = None


def build_archive_name(
    kind: ArchiveKind | str,
    day: date | datetime | str | None = None,
    suffix: int | None = None,
) -> str:
    kind = ArchiveKind(kind)
    stem = f"{ARCHIVE_PREFIX}-{kind.value}-{iso_date(day)}"
    if suffix is not None:
        stem = f"{stem}-{suffix}"
    return f"{stem}{ARCHIVE_EXTENSION}"


def parse_archive_name(name: str) -> ArchiveName | None:
    match = ARCHIVE_NAME_RE.match(name)
    if match is None:
        return None
    kind, day, suffix = match.groups()
    return ArchiveName(
        kind=ArchiveKind(kind),
        date=day,
        suffix=int(suffix) if suffix else None,
    )


def archive_date(name: str) -> str | None:
    parsed = parse_archive_name(name)
    return parsed.date if parsed else None


def next_archive_path(
    target_dir: Path,
    kind: ArchiveKind | str,
    day: date | datetime | str | None = None,
) -> Path:
    """First free path for *kind* on *day* inside *target_dir*.

    The bare name wins when free; otherwise suffixes 2, 3, … are tried in
    order and the first one not present on disk is returned.
    """
    candidate = target_dir / build_archive_name(kind, day)
    if not candidate.exists():
        return candidate

    suffix = FIRST_COLLISION_SUFFIX
    while True:
        candidate = target_dir / build_archive_name(kind, day, suffix)
        if not candidate.exists():
            return candidate
        suffix += 1
