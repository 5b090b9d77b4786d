"""Tests for shared helpers."""

from datetime import UTC, date, datetime
from pathlib import Path

from zen_backup.core.utils import expand_path, format_size, is_sqlite_file, iso_date, utc_timestamp


def test_utc_timestamp_format():
    assert utc_timestamp(datetime(2026, 1, 16, 8, 5, 9, tzinfo=UTC)) == "2026-01-16T08:05:09Z"


def test_naive_timestamp_treated_as_utc():
    assert utc_timestamp(datetime(2026, 1, 16, 8, 0, 0)) == "2026-01-16T08:00:00Z"


def test_iso_date_variants():
    assert iso_date("2026-01-16") == "2026-01-16"
    assert iso_date("2026-01-16T23:59:59Z") == "2026-01-16"
    assert iso_date(date(2026, 1, 16)) == "2026-01-16"
    assert len(iso_date()) == 10


def test_expand_path_variables():
    env = {"HOME": "/home/t", "DATA": "/data"}
    assert expand_path("~", env) == Path("/home/t")
    assert expand_path("~/x", env) == Path("/home/t/x")
    assert expand_path("${DATA}/a", env) == Path("/data/a")
    assert expand_path("$DATA/b", env) == Path("/data/b")
    assert expand_path("%DATA%/c", env) == Path("/data/c")


def test_unknown_variable_is_empty():
    assert expand_path("/root/${NOPE}x", {}) == Path("/root/x")


def test_format_size():
    assert format_size(512) == "512 B"
    assert format_size(2048) == "2.0 KB"
    assert format_size(5 * 1024 * 1024) == "5.0 MB"


def test_is_sqlite_file():
    assert is_sqlite_file("places.sqlite")
    assert is_sqlite_file("storage.db")
    assert not is_sqlite_file("places.sqlite-wal")
    assert not is_sqlite_file("prefs.js")
