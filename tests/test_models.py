"""
Tests for data models and HashParams validation.
"""
import pytest

from hashpool.core import (
    Algorithm, Entry, MatchGroup, HashResult, HashParams, ErrorKind)
from hashpool.core.errors import FileHashError

DIGEST = "ab" * 32


def error(path="/missing"):
    return FileHashError(ErrorKind.FILE_NOT_FOUND, path, f"File not found: {path}")


class TestEntry:

    def test_digest_xor_error(self):
        """An Entry carries a digest or an error, never both and never neither."""
        with pytest.raises(ValueError):
            Entry(original="/a")
        with pytest.raises(ValueError):
            Entry(original="/a", digest=DIGEST, error=error())

    def test_negative_size_rejected(self):
        with pytest.raises(ValueError):
            Entry(original="/a", digest=DIGEST, size=-1)

    def test_flags(self):
        ok = Entry(original="/a", digest=DIGEST)
        ref = Entry(original=DIGEST, digest=DIGEST, is_reference=True)
        bad = Entry(original="/b", error=error("/b"))

        assert ok.ok and ok.is_file
        assert ref.ok and not ref.is_file
        assert not bad.ok

    def test_frozen(self):
        entry = Entry(original="/a", digest=DIGEST)
        with pytest.raises(AttributeError):
            entry.digest = "cd" * 32


class TestMatchGroup:

    def test_count_filled_automatically(self):
        entries = (Entry(original="/a", digest=DIGEST), Entry(original="/b", digest=DIGEST))
        group = MatchGroup(digest=DIGEST, entries=entries)

        assert group.count == 2

    def test_needs_two_entries(self):
        with pytest.raises(ValueError):
            MatchGroup(digest=DIGEST, entries=(Entry(original="/a", digest=DIGEST),))

    def test_count_must_match(self):
        entries = (Entry(original="/a", digest=DIGEST), Entry(original="/b", digest=DIGEST))
        with pytest.raises(ValueError):
            MatchGroup(digest=DIGEST, entries=entries, count=3)

    def test_files_and_references(self):
        entries = (Entry(original="/a", digest=DIGEST), Entry(original=DIGEST, digest=DIGEST, is_reference=True))
        group = MatchGroup(digest=DIGEST, entries=entries)

        assert [e.original for e in group.files] == ["/a"]
        assert [e.original for e in group.references] == [DIGEST]


class TestHashResult:

    def test_counters(self):
        result = HashResult()
        result.add_entry(Entry(original="/a", digest=DIGEST, size=10))
        result.add_entry(Entry(original="/b", digest=DIGEST, size=5))
        result.add_entry(Entry(original="/c", error=error("/c")))

        assert result.files_processed == 2
        assert result.bytes_processed == 15
        assert result.errors == [error("/c")]
        assert len(result.entries) == 3

    def test_finalized_result_is_read_only(self):
        result = HashResult()
        result.finalize()
        with pytest.raises(RuntimeError):
            result.add_entry(Entry(original="/a", digest=DIGEST))


class TestAlgorithm:

    def test_digest_lengths(self):
        assert Algorithm.SHA256.digest_length == 64
        assert Algorithm.MD5.digest_length == 32
        assert Algorithm.SHA1.digest_length == 40
        assert Algorithm.SHA512.digest_length == 128
        assert Algorithm.BLAKE2B.digest_length == 128
        assert Algorithm.XXH64.digest_length == 16
        assert Algorithm.XXH128.digest_length == 32


class TestHashParams:
    """HashParams validates itself on creation."""

    def test_defaults(self):
        params = HashParams()

        assert params.algorithm == "sha256"
        assert params.jobs == 0
        assert params.max_size_bytes == -1
        assert params.group_results is True

    def test_algorithm_normalized(self):
        assert HashParams(algorithm=" MD5 ").algorithm == "md5"
        assert HashParams(algorithm=Algorithm.XXH64).algorithm == "xxh64"

    def test_negative_jobs(self):
        with pytest.raises(ValueError, match="jobs"):
            HashParams(jobs=-1)

    def test_size_bounds(self):
        with pytest.raises(ValueError):
            HashParams(min_size_bytes=-5)
        with pytest.raises(ValueError):
            HashParams(min_size_bytes=100, max_size_bytes=10)
        assert HashParams(min_size_bytes=100, max_size_bytes=-1).max_size_bytes == -1

    def test_date_bounds(self):
        with pytest.raises(ValueError):
            HashParams(modified_after=200.0, modified_before=100.0)

    def test_only_changed_needs_manifest(self):
        with pytest.raises(ValueError, match="manifest"):
            HashParams(only_changed=True)

    def test_blank_references_dropped(self):
        params = HashParams(reference_digests=[f"  {DIGEST} ", "", "   "])
        assert params.reference_digests == [DIGEST]

    def test_from_human_readable(self):
        params = HashParams.from_human_readable(["/data"], min_size_str="1KB", max_size_str="2MB", algorithm="sha1")

        assert params.paths == ["/data"]
        assert params.min_size_bytes == 1024
        assert params.max_size_bytes == 2 * 1024 * 1024
        assert params.algorithm == "sha1"

    def test_from_human_readable_unlimited_max(self):
        assert HashParams.from_human_readable(["."], max_size_str="").max_size_bytes == -1

    def test_from_human_readable_invalid_size(self):
        with pytest.raises(ValueError):
            HashParams.from_human_readable(["."], min_size_str="lots")
