"""Tests for archive inventory."""

from zen_backup.core.models import ArchiveKind
from zen_backup.core.services.inventory import (
    NO_BACKUPS_MESSAGE,
    RECENT_DAILY_MESSAGE,
    STALE_DAILY_MESSAGE,
    daily_health,
    directory_size,
    list_archives,
    newest_archive,
)

from conftest import TODAY


def _touch(path, size=3):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"x" * size)
    return path


def test_lists_both_kinds_oldest_first(tmp_path):
    _touch(tmp_path / "weekly" / "zen-backup-weekly-2026-01-11.tar.gz")
    _touch(tmp_path / "daily" / "zen-backup-daily-2026-01-16.tar.gz", size=10)
    _touch(tmp_path / "daily" / "zen-backup-daily-2026-01-15.tar.gz")
    _touch(tmp_path / "daily" / "readme.txt")

    entries = list_archives(tmp_path)

    assert [entry.name for entry in entries] == [
        "zen-backup-daily-2026-01-15.tar.gz",
        "zen-backup-daily-2026-01-16.tar.gz",
        "zen-backup-weekly-2026-01-11.tar.gz",
    ]
    assert entries[1].size_bytes == 10
    assert entries[1].date == "2026-01-16"
    assert entries[2].kind == ArchiveKind.WEEKLY


def test_empty_root(tmp_path):
    assert list_archives(tmp_path) == []


def test_newest_archive(tmp_path):
    _touch(tmp_path / "daily" / "zen-backup-daily-2026-01-14.tar.gz")
    _touch(tmp_path / "daily" / "zen-backup-daily-2026-01-15.tar.gz")
    entries = list_archives(tmp_path)

    newest = newest_archive(entries, "daily")
    assert newest is not None
    assert newest.name == "zen-backup-daily-2026-01-15.tar.gz"
    assert newest_archive(entries, ArchiveKind.WEEKLY) is None


def test_same_day_suffixes_rank_after_bare_name(tmp_path):
    daily = tmp_path / "daily"
    for name in (
        "zen-backup-daily-2026-01-16-10.tar.gz",
        "zen-backup-daily-2026-01-16.tar.gz",
        "zen-backup-daily-2026-01-16-2.tar.gz",
        "zen-backup-daily-2026-01-15-3.tar.gz",
    ):
        _touch(daily / name)

    entries = list_archives(tmp_path)

    assert [entry.name for entry in entries] == [
        "zen-backup-daily-2026-01-15-3.tar.gz",
        "zen-backup-daily-2026-01-16.tar.gz",
        "zen-backup-daily-2026-01-16-2.tar.gz",
        "zen-backup-daily-2026-01-16-10.tar.gz",
    ]
    assert newest_archive(entries, "daily").name == "zen-backup-daily-2026-01-16-10.tar.gz"


def test_directory_size(tmp_path):
    _touch(tmp_path / "daily" / "a.tar.gz", size=100)
    _touch(tmp_path / "daily" / "nested" / "b.bin", size=20)
    assert directory_size(tmp_path / "daily") == 120
    assert directory_size(tmp_path / "missing") == 0


class TestDailyHealth:
    def _latest(self, tmp_path, day):
        _touch(tmp_path / "daily" / f"zen-backup-daily-{day}.tar.gz")
        return newest_archive(list_archives(tmp_path), "daily")

    def test_recent(self, tmp_path):
        assert daily_health(self._latest(tmp_path, "2026-01-13"), TODAY) == RECENT_DAILY_MESSAGE

    def test_stale_after_three_days(self, tmp_path):
        assert daily_health(self._latest(tmp_path, "2026-01-12"), TODAY) == STALE_DAILY_MESSAGE

    def test_no_backups(self):
        assert daily_health(None, TODAY) == NO_BACKUPS_MESSAGE
