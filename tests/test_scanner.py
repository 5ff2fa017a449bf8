"""
Tests for FileScannerImpl — input expansion and filtering.
"""
import os
import time
from pathlib import Path

from hashpool.core import FileScannerImpl


def names(paths):
    return [Path(p).name for p in paths]


class TestFileScanner:

    def test_non_recursive_skips_subdirectories_and_hidden(self, test_files, temp_dir):
        files = FileScannerImpl(paths=[str(temp_dir)]).scan()

        assert names(files) == sorted([
            "dup1_a.txt", "dup1_b.txt", "dup2_a.bin", "dup2_b.bin",
            "empty.txt", "unique1.txt", "unique2.txt",
        ])

    def test_recursive_includes_subdirectories(self, test_files, temp_dir):
        files = FileScannerImpl(paths=[str(temp_dir)], recursive=True).scan()

        assert str(test_files["sub_dup"]) in files
        assert str(test_files["hidden"]) not in files

    def test_hidden_files_included_on_request(self, test_files, temp_dir):
        files = FileScannerImpl(paths=[str(temp_dir)], hidden=True).scan()

        assert str(test_files["hidden"]) in files

    def test_hidden_directories_pruned(self, temp_dir):
        hidden_dir = temp_dir / ".git"
        hidden_dir.mkdir()
        (hidden_dir / "config").write_bytes(b"x")

        assert FileScannerImpl(paths=[str(temp_dir)], recursive=True).scan() == []
        assert len(FileScannerImpl(paths=[str(temp_dir)], recursive=True, hidden=True).scan()) == 1

    def test_size_filters(self, test_files, temp_dir):
        files = FileScannerImpl(paths=[str(temp_dir)], min_size=1500, max_size=2048).scan()

        assert names(files) == ["dup2_a.bin", "dup2_b.bin", "unique1.txt"]

    def test_include_and_exclude(self, test_files, temp_dir):
        files = FileScannerImpl(paths=[str(temp_dir)], include=["*.txt"], exclude=["dup*"]).scan()

        assert names(files) == ["empty.txt", "unique1.txt", "unique2.txt"]

    def test_exclude_wins_over_include(self, test_files, temp_dir):
        files = FileScannerImpl(paths=[str(temp_dir)], include=["*.bin"], exclude=["*.bin"]).scan()

        assert files == []

    def test_modified_filters(self, temp_dir):
        old = temp_dir / "old.txt"
        new = temp_dir / "new.txt"
        old.write_bytes(b"old")
        new.write_bytes(b"new")
        now = time.time()
        os.utime(old, (now - 86400 * 10, now - 86400 * 10))

        after = FileScannerImpl(paths=[str(temp_dir)], modified_after=now - 86400).scan()
        before = FileScannerImpl(paths=[str(temp_dir)], modified_before=now - 86400).scan()

        assert names(after) == ["new.txt"]
        assert names(before) == ["old.txt"]

    def test_explicit_files_keep_input_order(self, test_files):
        paths = [str(test_files["unique2"]), str(test_files["dup1_a"])]

        assert FileScannerImpl(paths=paths).scan() == paths

    def test_missing_explicit_path_passed_through(self, temp_dir):
        """Missing paths are reported later by the hasher, not silently dropped."""
        missing = str(temp_dir / "missing.txt")

        assert FileScannerImpl(paths=[missing]).scan() == [missing]

    def test_explicit_file_still_filtered(self, test_files):
        assert FileScannerImpl(paths=[str(test_files["empty"])], min_size=1).scan() == []

    def test_duplicates_removed(self, test_files, temp_dir):
        path = str(test_files["dup1_a"])
        files = FileScannerImpl(paths=[path, path]).scan()

        assert files == [path]

    def test_cancelled_scan_returns_nothing(self, test_files, temp_dir):
        assert FileScannerImpl(paths=[str(temp_dir)]).scan(stopped_flag=lambda: True) == []

    def test_progress_reported(self, test_files, temp_dir):
        calls = []
        FileScannerImpl(paths=[str(temp_dir)]).scan(progress_callback=lambda *args: calls.append(args))

        assert calls[-1][0] == "scanning"
        assert calls[-1][2] is None

    def test_defaults_to_current_directory(self):
        assert FileScannerImpl().paths == ["."]
