"""Retention — delete archives of one kind that have aged out of a root."""

from __future__ import annotations

import logging
from datetime import date, datetime
from pathlib import Path

from zen_backup.core.models import ArchiveKind, RetentionPolicy
from zen_backup.core.rules.naming import parse_archive_name
from zen_backup.core.rules.retention import age_in_days
from zen_backup.core.utils import iso_date

logger = logging.getLogger(__name__)


def prune_archives(
    root: Path,
    kind: ArchiveKind | str,
    max_age_days: int,
    today: date | datetime | str | None = None,
) -> list[Path]:
    """Delete ``<root>/<kind>/`` archives older than *max_age_days*.

    Only files whose name parses as an archive of *kind* are candidates;
    anything else is left alone regardless of age. A missing directory is
    a no-op. Returns the deleted paths.
    """
    kind = ArchiveKind(kind)
    reference = iso_date(today)
    directory = Path(root) / kind.value
    if not directory.is_dir():
        return []

    deleted: list[Path] = []
    for path in sorted(directory.iterdir()):
        if not path.is_file():
            continue
        parsed = parse_archive_name(path.name)
        if parsed is None or parsed.kind != kind:
            continue
        age = age_in_days(parsed.date, reference)
        if age <= max_age_days:
            continue
        try:
            path.unlink()
        except FileNotFoundError:
            continue
        logger.info("Pruned %s (%d days old, limit %d)", path, age, max_age_days)
        deleted.append(path)
    return deleted


def apply_policy(
    root: Path,
    policy: RetentionPolicy,
    today: date | datetime | str | None = None,
) -> list[Path]:
    return prune_archives(root, policy.kind, policy.max_age_days, today)
