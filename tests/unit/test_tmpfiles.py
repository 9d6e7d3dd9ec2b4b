"""
Unit tests for the temporary data file allocator.

Tests cover:
- File naming and location
- Outstanding-file cap
- Removal and counter bookkeeping
- Thread safety of the counter
"""

import os
from pathlib import Path
from threading import Thread

import pytest

from gnuplot_pipe.services import tmpfiles
from gnuplot_pipe.services.tmpfiles import TmpFileAllocator, get_tmpfile_allocator
from gnuplot_pipe.utils.exceptions import TmpFileError


class TestCreate:
    """Test temp file creation."""

    def test_create_names_and_registers(self, allocator) -> None:
        """Test a new file is prefixed, writable and recorded on the owner."""
        owned: list[str] = []
        name, fh = allocator.create(owned)
        with fh:
            fh.write("1 2\n")

        path = Path(name)
        assert path.parent == Path(allocator.tmp_dir)
        assert path.name.startswith("gnuploti")
        assert len(path.name) >= len("gnuploti") + 6
        assert path.read_text() == "1 2\n"
        assert owned == [name]
        assert allocator.count == 1

    def test_create_unique_names(self, allocator) -> None:
        """Test consecutive files never collide."""
        owned: list[str] = []
        for _ in range(10):
            _, fh = allocator.create(owned)
            fh.close()
        assert len(set(owned)) == 10

    def test_create_in_working_directory(self, tmp_path, monkeypatch) -> None:
        """Test an empty tmp_dir means the current directory."""
        monkeypatch.chdir(tmp_path)
        allocator = TmpFileAllocator(max_files=27, tmp_dir="")
        owned: list[str] = []

        name, fh = allocator.create(owned)
        fh.close()

        assert Path(name).parent == tmp_path

    def test_create_in_missing_directory(self, tmp_path) -> None:
        """Test an unusable directory raises TmpFileError."""
        allocator = TmpFileAllocator(max_files=64, tmp_dir=str(tmp_path / "missing"))

        with pytest.raises(TmpFileError, match="Cannot create temporary file"):
            allocator.create([])

        assert allocator.count == 0

    def test_create_open_failure_leaves_no_file(self, allocator, monkeypatch) -> None:
        """Test a file that cannot be reopened is deleted and not counted."""

        def failing_open(*args, **kwargs):
            raise PermissionError("denied")

        monkeypatch.setattr(tmpfiles, "open", failing_open, raising=False)
        owned: list[str] = []

        with pytest.raises(TmpFileError, match="Cannot create temporary file"):
            allocator.create(owned)

        assert owned == []
        assert allocator.count == 0
        assert os.listdir(allocator.tmp_dir) == []

    def test_quota(self, allocator) -> None:
        """Test only max_files - 1 files may be outstanding."""
        owned: list[str] = []
        for _ in range(63):
            _, fh = allocator.create(owned)
            fh.close()

        with pytest.raises(TmpFileError, match=r"Maximum number of temporary files reached \(64\)"):
            allocator.create(owned)

        assert allocator.count == 63
        assert len(owned) == 63

        allocator.remove(owned)
        assert allocator.count == 0

    def test_quota_shared_between_owners(self, tmp_path) -> None:
        """Test the cap counts files of every owner."""
        allocator = TmpFileAllocator(max_files=3, tmp_dir=str(tmp_path))
        first: list[str] = []
        second: list[str] = []

        allocator.create(first)[1].close()
        allocator.create(second)[1].close()

        with pytest.raises(TmpFileError):
            allocator.create(first)

        allocator.remove(second)
        allocator.create(first)[1].close()
        assert allocator.count == 2


class TestRemove:
    """Test temp file removal."""

    def test_remove_deletes_files(self, allocator) -> None:
        """Test remove unlinks files and clears the owner."""
        owned: list[str] = []
        for _ in range(3):
            allocator.create(owned)[1].close()
        paths = list(owned)

        allocator.remove(owned)

        assert owned == []
        assert allocator.count == 0
        assert not any(os.path.exists(path) for path in paths)

    def test_remove_twice_is_noop(self, allocator) -> None:
        """Test a second remove has nothing left to do."""
        owned: list[str] = []
        allocator.create(owned)[1].close()
        allocator.remove(owned)
        allocator.remove(owned)
        assert allocator.count == 0

    def test_remove_failure(self, allocator) -> None:
        """Test a missing file raises and keeps the rest on record."""
        owned: list[str] = []
        allocator.create(owned)[1].close()
        allocator.create(owned)[1].close()
        first, second = owned
        os.remove(second)

        with pytest.raises(TmpFileError, match="Cannot remove temporary file"):
            allocator.remove(owned)

        assert not os.path.exists(first)
        assert owned == [second]
        assert allocator.count == 1

    def test_reset(self, allocator) -> None:
        """Test reset forgets the outstanding count."""
        allocator.create([])[1].close()
        allocator.reset()
        assert allocator.count == 0


class TestConcurrency:
    """Test the shared counter under threads."""

    def test_concurrent_create(self, allocator) -> None:
        """Test concurrent allocations are all counted."""
        owners: list[list[str]] = [[] for _ in range(8)]

        def worker(owned: list[str]) -> None:
            for _ in range(5):
                allocator.create(owned)[1].close()

        threads = [Thread(target=worker, args=(owned,)) for owned in owners]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert allocator.count == 40
        assert sum(len(owned) for owned in owners) == 40


class TestGlobalAllocator:
    """Test the process-wide allocator."""

    def test_get_tmpfile_allocator_uses_settings(self, tmp_path, monkeypatch) -> None:
        """Test the singleton is built from settings."""
        monkeypatch.setattr(tmpfiles, "_allocator", None)
        monkeypatch.setenv("GNUPLOT_MAX_TMP_FILES", "5")
        monkeypatch.setenv("GNUPLOT_TMP_DIR", str(tmp_path))

        allocator = get_tmpfile_allocator()

        assert allocator.max_files == 5
        assert allocator.tmp_dir == str(tmp_path)
        assert get_tmpfile_allocator() is allocator
