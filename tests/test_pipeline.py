"""
Tests for BatchHasherImpl — the bounded-concurrency hashing pipeline.
Uses fake hashers to observe concurrency, failures and cancellation deterministically.
"""
import hashlib
import threading
import time

import pytest

from hashpool.core import BatchHasherImpl, HasherImpl, Entry, ErrorKind, restore_order
from hashpool.core.errors import FileHashError


class RecordingHasher:
    """Fake hasher that tracks how many calls run at the same time."""

    algorithm = "sha256"

    def __init__(self, delay: float = 0.01, fail_on=()):
        self.delay = delay
        self.fail_on = set(fail_on)
        self.active = 0
        self.max_active = 0
        self.calls = []
        self._lock = threading.Lock()

    def compute_file(self, path: str) -> Entry:
        with self._lock:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
            self.calls.append(path)
        try:
            time.sleep(self.delay)
            if path in self.fail_on:
                return Entry(original=path, algorithm=self.algorithm,
                             error=FileHashError(ErrorKind.READ_FAILURE, path, f"Failed to read {path}"))
            return Entry(original=path, digest=hashlib.sha256(path.encode()).hexdigest(),
                         size=len(path), algorithm=self.algorithm)
        finally:
            with self._lock:
                self.active -= 1


class TestBatchHasher:

    def test_one_entry_per_path(self):
        """Every input path produces exactly one Entry."""
        paths = [f"/f{i}" for i in range(50)]
        entries = list(BatchHasherImpl(RecordingHasher(delay=0)).compute_batch(paths, 4))

        assert len(entries) == 50
        assert sorted(e.original for e in entries) == sorted(paths)

    def test_duplicate_paths_each_produce_entry(self):
        paths = ["/same", "/same", "/other"]
        entries = list(BatchHasherImpl(RecordingHasher(delay=0)).compute_batch(paths, 2))

        assert [e.original for e in entries].count("/same") == 2

    def test_concurrency_is_bounded(self):
        """No more than `workers` digestions ever run at once."""
        hasher = RecordingHasher(delay=0.02)
        paths = [f"/f{i}" for i in range(40)]

        entries = list(BatchHasherImpl(hasher).compute_batch(paths, 3))

        assert len(entries) == 40
        assert hasher.max_active <= 3

    def test_single_worker_runs_sequentially(self):
        hasher = RecordingHasher(delay=0.005)
        list(BatchHasherImpl(hasher).compute_batch([f"/f{i}" for i in range(10)], 1))

        assert hasher.max_active == 1
        assert hasher.calls == [f"/f{i}" for i in range(10)]

    def test_failures_do_not_abort_batch(self):
        """A failing path yields an error Entry and siblings still complete."""
        paths = ["/a", "/bad", "/c"]
        entries = list(BatchHasherImpl(RecordingHasher(delay=0, fail_on={"/bad"})).compute_batch(paths, 2))

        by_path = {e.original: e for e in entries}
        assert len(entries) == 3
        assert by_path["/bad"].error.kind == ErrorKind.READ_FAILURE
        assert by_path["/a"].ok and by_path["/c"].ok

    def test_empty_input(self):
        assert list(BatchHasherImpl(RecordingHasher()).compute_batch([], 4)) == []

    def test_zero_workers_rejected(self):
        with pytest.raises(ValueError):
            list(BatchHasherImpl(RecordingHasher()).compute_batch(["/a"], 0))

    def test_cancellation_stops_dispatch(self):
        """After the stop flag fires nothing new is dispatched; in-flight work still completes."""
        hasher = RecordingHasher(delay=0.01)
        paths = [f"/f{i}" for i in range(100)]
        stop = threading.Event()

        entries = []
        for entry in BatchHasherImpl(hasher).compute_batch(paths, 2, stopped_flag=stop.is_set):
            entries.append(entry)
            if len(entries) == 5:
                stop.set()

        assert 5 <= len(entries) < 100
        # Every dispatched path produced an entry
        assert sorted(e.original for e in entries) == sorted(hasher.calls)

    def test_cancelled_before_start(self):
        hasher = RecordingHasher()
        entries = list(BatchHasherImpl(hasher).compute_batch(["/a", "/b"], 2, stopped_flag=lambda: True))

        assert entries == []
        assert hasher.calls == []

    def test_consumer_can_stop_early(self):
        """Closing the generator shuts the pool down without hanging."""
        hasher = RecordingHasher(delay=0.005)
        gen = BatchHasherImpl(hasher).compute_batch([f"/f{i}" for i in range(100)], 4)
        next(gen)
        gen.close()

        assert len(hasher.calls) < 100

    def test_real_files(self, test_files):
        paths = [str(p) for p in test_files.values()]
        entries = list(BatchHasherImpl(HasherImpl()).compute_batch(paths, 4))

        for entry in entries:
            with open(entry.original, "rb") as f:
                assert entry.digest == hashlib.sha256(f.read()).hexdigest()


class TestRestoreOrder:

    def test_sorts_into_input_order(self):
        paths = ["/a", "/b", "/c"]
        entries = [Entry(original=p, digest="ab") for p in ("/c", "/a", "/b")]

        assert [e.original for e in restore_order(entries, paths)] == paths

    def test_unknown_paths_go_last(self):
        entries = [Entry(original="/x", digest="ab"), Entry(original="/a", digest="ab")]

        assert [e.original for e in restore_order(entries, ["/a"])] == ["/a", "/x"]

    def test_parallel_results_restored(self):
        paths = [f"/f{i}" for i in range(30)]
        entries = BatchHasherImpl(RecordingHasher(delay=0.001)).compute_batch(paths, 8)

        assert [e.original for e in restore_order(entries, paths)] == paths
