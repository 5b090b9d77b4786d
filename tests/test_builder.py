"""Tests for staging a profile and writing the archive."""

import tarfile

from zen_backup.core.constants import DISK_FULL_WARNING
from zen_backup.core.errors import ArchiveWriteError
from zen_backup.core.models import CopyStatus, FaultPlan, SqliteCopyOutcome
from zen_backup.storage.builder import SnapshotBuilder

from conftest import INCLUDED_FILES, archive_members, make_db, read_rows


class FailingArchiveBackend:
    def create(self, archive_path, staging_dir):
        archive_path.write_bytes(b"partial")
        raise ArchiveWriteError("archive creation failed: no space left")

    def list_entries(self, archive_path):
        return []

    def extract(self, archive_path, target_dir):
        return None


def _file_members(archive):
    with tarfile.open(archive, "r:gz") as handle:
        return {
            member.name.removeprefix("./") for member in handle.getmembers() if member.isfile()
        }


class TestSnapshotBuilder:
    def test_archive_contains_only_included_files(self, profile, tmp_path, scratch_tmp):
        archive = tmp_path / "out.tar.gz"

        report = SnapshotBuilder().build(profile, archive)

        assert report.success
        assert report.warnings == []
        assert _file_members(archive) == INCLUDED_FILES
        assert {outcome.status for outcome in report.databases} == {CopyStatus.CLEAN}
        assert list(scratch_tmp.iterdir()) == []

    def test_excluded_directories_absent(self, profile, tmp_path, scratch_tmp):
        archive = tmp_path / "out.tar.gz"
        SnapshotBuilder().build(profile, archive)
        members = archive_members(archive)

        assert "storage/default" in members
        for excluded in ("cache2", "crashes", "storage/temporary", "storage/default/chrome"):
            assert excluded not in members
        assert not any(name.endswith("-wal") for name in members)

    def test_database_content_is_preserved(self, profile, tmp_path, scratch_tmp):
        archive = tmp_path / "out.tar.gz"
        SnapshotBuilder().build(profile, archive)

        target = tmp_path / "unpacked"
        with tarfile.open(archive, "r:gz") as handle:
            handle.extractall(target, filter="data")
        assert read_rows(target / "places.sqlite") == ["https://example.com", "https://python.org"]

    def test_corrupt_database_skipped_with_warning(self, profile, tmp_path, scratch_tmp):
        archive = tmp_path / "out.tar.gz"
        builder = SnapshotBuilder(faults=FaultPlan(corrupt=frozenset({"favicons.sqlite"})))

        report = builder.build(profile, archive)

        assert report.success
        assert report.warnings == ["corrupt sqlite skipped: favicons.sqlite"]
        assert "favicons.sqlite" not in _file_members(archive)
        assert "places.sqlite" in _file_members(archive)

    def test_fallback_reported_as_warning(self, profile, tmp_path, scratch_tmp):
        archive = tmp_path / "out.tar.gz"
        builder = SnapshotBuilder(faults=FaultPlan(force_fallback=frozenset({"places.sqlite"})))

        report = builder.build(profile, archive)

        assert report.success
        assert report.warnings == ["fallback sqlite copy used for places.sqlite"]
        assert not any(name.endswith(("-wal", "-shm")) for name in _file_members(archive))

    def test_nested_database(self, profile, tmp_path, scratch_tmp):
        make_db(profile / "storage" / "default" / "moz-extension+++abc" / "idb" / "x.sqlite", ["a"])
        archive = tmp_path / "out.tar.gz"

        report = SnapshotBuilder().build(profile, archive)

        assert report.success
        assert "storage/default/moz-extension+++abc/idb/x.sqlite" in _file_members(archive)

    def test_disk_full_leaves_no_archive(self, profile, tmp_path, scratch_tmp):
        archive = tmp_path / "out.tar.gz"

        report = SnapshotBuilder(faults=FaultPlan(disk_full=True)).build(profile, archive)

        assert not report.success
        assert report.error == DISK_FULL_WARNING
        assert DISK_FULL_WARNING in report.warnings
        assert not archive.exists()

    def test_write_failure_removes_partial_archive(self, profile, tmp_path, scratch_tmp):
        archive = tmp_path / "out.tar.gz"

        report = SnapshotBuilder(archive_backend=FailingArchiveBackend()).build(profile, archive)

        assert not report.success
        assert "no space left" in report.error
        assert not archive.exists()
        assert list(scratch_tmp.iterdir()) == []

    def test_unreadable_database_aborts(self, profile, tmp_path, scratch_tmp):
        class ExplodingCopy:
            def copy(self, source, destination):
                return SqliteCopyOutcome(
                    status=CopyStatus.FATAL,
                    source=source,
                    destination=destination,
                    detail="read error",
                )

        archive = tmp_path / "out.tar.gz"
        report = SnapshotBuilder(safe_copy=ExplodingCopy()).build(profile, archive)

        assert not report.success
        assert "read error" in report.error
        assert not archive.exists()
