"""Shared test fixtures."""

import io
import sqlite3
import tarfile
import tempfile
from contextlib import closing
from pathlib import Path

import pytest

from zen_backup.core.config import AppConfig
from zen_backup.runtime.notifications import Notifier

TODAY = "2026-01-16"

PROFILE_TEXT_FILES = {
    "prefs.js": 'user_pref("browser.startup.page", 3);\n',
    "sessionstore.jsonlz4": "session-bytes",
    "extensions/addon@example.xpi": "xpi-bytes",
    "storage/default/moz-extension+++abc/idb/data.txt": "extension storage",
    "stray.sqlite-wal": "left over log",
    "cookies.sqlite": "secret cookies",
    "logins.json": "{}",
    "key4.db": "keys",
    "cert9.db": "certs",
    ".parentlock": "",
    "cache2/entries/ABCDEF": "cached",
    "crashes/report.extra": "crash",
    "datareporting/state.json": "{}",
    "minidumps/dump.dmp": "dump",
    "saved-telemetry-pings/ping": "ping",
    "storage/temporary/tmp.txt": "temp",
    "storage/default/chrome/idb/x.txt": "chrome",
    "storage/default/https+++example.com/ls/data.txt": "site data",
}

INCLUDED_FILES = {
    "prefs.js",
    "sessionstore.jsonlz4",
    "extensions/addon@example.xpi",
    "storage/default/moz-extension+++abc/idb/data.txt",
    "places.sqlite",
    "favicons.sqlite",
}


def make_db(path: Path, rows: list[str], wal: bool = True) -> Path:
    """Create a database with a single ``items`` table holding *rows*."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with closing(sqlite3.connect(str(path))) as conn:
        if wal:
            conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("CREATE TABLE items (id INTEGER PRIMARY KEY, label TEXT NOT NULL)")
        conn.executemany("INSERT INTO items (label) VALUES (?)", [(row,) for row in rows])
        conn.commit()
    return path


def read_rows(path: Path) -> list[str]:
    with closing(sqlite3.connect(str(path))) as conn:
        return [row[0] for row in conn.execute("SELECT label FROM items ORDER BY id")]


def tree_files(root: Path) -> dict[str, bytes]:
    """Relative path → content for every regular file below *root*."""
    return {
        path.relative_to(root).as_posix(): path.read_bytes()
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }


def archive_members(archive: Path) -> set[str]:
    with tarfile.open(archive, "r:gz") as handle:
        names = {name[2:] if name.startswith("./") else name for name in handle.getnames()}
    names.discard(".")
    return names


def write_tarball(archive: Path, members: dict[str, bytes]) -> Path:
    """Write a gzip tarball with exactly the given member names."""
    archive.parent.mkdir(parents=True, exist_ok=True)
    with tarfile.open(archive, "w:gz") as handle:
        for name, data in members.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            handle.addfile(info, io.BytesIO(data))
    return archive


@pytest.fixture
def profile(tmp_path):
    """A realistic profile tree with two databases and excluded clutter."""
    root = tmp_path / "profile"
    for relative, content in PROFILE_TEXT_FILES.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    make_db(root / "places.sqlite", ["https://example.com", "https://python.org"])
    make_db(root / "favicons.sqlite", ["icon-a"], wal=False)
    return root


@pytest.fixture
def backup_root(tmp_path):
    return tmp_path / "backups"


@pytest.fixture
def config(profile, backup_root):
    return AppConfig(
        profile_path=profile,
        local_path=backup_root,
        notifications_enabled=False,
    )


@pytest.fixture
def notifier(backup_root):
    return Notifier(backup_root, enabled=True, platform="linux")


@pytest.fixture
def scratch_tmp(tmp_path, monkeypatch):
    """Route tempfile.mkdtemp into a directory the test can inspect."""
    scratch = tmp_path / "scratch"
    scratch.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(scratch))
    return scratch


@pytest.fixture
def write_config(tmp_path):
    def _write(body: str, name: str = "settings.toml") -> Path:
        path = tmp_path / "config" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(body, encoding="utf-8")
        return path

    return _write
