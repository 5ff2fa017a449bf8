"""
Integration tests for HashCommand — the orchestration layer between the CLI and core.
Verifies wiring of scanner → pipeline → grouper with progress, cancellation and manifests.
"""
import hashlib

import pytest

from hashpool import HashCommand, HashParams
from hashpool.core import ErrorKind, UnsupportedAlgorithmError
from hashpool.services import Manifest, ManifestService

from conftest import CONTENT_A, CONTENT_B


def digest(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


class TestHashCommand:
    """Test command orchestration logic."""

    def test_execute_groups_identical_files(self, test_files, temp_dir):
        params = HashParams(paths=[str(temp_dir)], recursive=True, jobs=2)

        result = HashCommand().execute(params)

        assert result.finalized
        assert [g.digest for g in result.matches] == [digest(CONTENT_A), digest(CONTENT_B)]
        group_a = {e.original for e in result.matches[0].entries}
        assert group_a == {str(test_files["dup1_a"]), str(test_files["dup1_b"]), str(test_files["sub_dup"])}
        assert {e.original for e in result.unmatched} == {
            str(test_files["empty"]), str(test_files["unique1"]), str(test_files["unique2"])}
        assert result.errors == []
        assert result.files_processed == 8

    def test_entries_in_input_order(self, test_files):
        paths = [str(test_files[k]) for k in ("unique2", "dup1_a", "unique1", "dup2_b")]

        result = HashCommand().execute(HashParams(paths=paths, jobs=4))

        assert [e.original for e in result.entries] == paths

    def test_pool_matching_with_references(self, test_files):
        ref_hit = digest(b"C" * 1500)
        ref_miss = "0" * 64
        params = HashParams(paths=[str(test_files["unique1"]), str(test_files["unique2"])],
                            reference_digests=[ref_hit, ref_miss])

        result = HashCommand().execute(params)

        assert len(result.matches) == 1
        assert result.matches[0].files[0].original == str(test_files["unique1"])
        assert result.matches[0].references[0].digest == ref_hit
        assert [e.original for e in result.unmatched] == [str(test_files["unique2"])]
        assert [r.digest for r in result.ref_orphans] == [ref_miss]
        assert result.pool_matches == []

    def test_legacy_pool_verification_when_ungrouped(self, test_files):
        """Without grouping, file/reference matches are still reported as pool matches."""
        ref = digest(b"C" * 1500)
        params = HashParams(paths=[str(test_files["unique1"])], reference_digests=[ref], group_results=False)

        result = HashCommand().execute(params)

        assert result.matches == []
        assert len(result.pool_matches) == 1
        assert result.pool_matches[0].file_path == str(test_files["unique1"])

    def test_missing_file_reported_not_raised(self, test_files, temp_dir):
        missing = str(temp_dir / "missing.txt")
        params = HashParams(paths=[str(test_files["dup1_a"]), missing])

        result = HashCommand().execute(params)

        assert len(result.entries) == 2
        assert [e.kind for e in result.errors] == [ErrorKind.FILE_NOT_FOUND]
        assert result.errors[0].path == missing

    def test_invalid_algorithm_fails_before_hashing(self, test_files):
        command = HashCommand()
        with pytest.raises(UnsupportedAlgorithmError):
            command.execute(HashParams(paths=[str(test_files["dup1_a"])], algorithm="crc32"))
        assert command.get_files() == []

    def test_references_only(self):
        result = HashCommand().execute(HashParams(reference_digests=["a" * 64]))

        assert result.entries == []
        assert [r.digest for r in result.ref_orphans] == ["a" * 64]

    def test_empty_directory(self, temp_dir):
        result = HashCommand().execute(HashParams(paths=[str(temp_dir)]))

        assert result.entries == []
        assert result.matches == []

    def test_execute_invokes_progress_callback(self, test_files, temp_dir):
        calls = []
        HashCommand().execute(HashParams(paths=[str(temp_dir)]),
                              progress_callback=lambda *args: calls.append(args))

        hashing = [c for c in calls if c[0] == "Hashing"]
        assert hashing[-1] == ("Hashing", 7, 7)

    def test_stopped_flag_cancels(self, test_files, temp_dir):
        result = HashCommand().execute(HashParams(paths=[str(temp_dir)]), stopped_flag=lambda: True)

        assert result.entries == []

    def test_only_changed_uses_manifest(self, test_files, temp_dir):
        manifest_path = str(temp_dir / "out" / "manifest.json")
        first = HashCommand().execute(HashParams(paths=[str(temp_dir)]))
        ManifestService.save(Manifest.from_entries("sha256", first.entries), manifest_path)

        test_files["unique1"].write_bytes(b"changed content")

        command = HashCommand()
        result = command.execute(HashParams(paths=[str(temp_dir)], manifest_path=manifest_path, only_changed=True))

        assert command.get_files() == [str(test_files["unique1"])]
        assert [e.original for e in result.entries] == [str(test_files["unique1"])]

    def test_only_changed_with_broken_manifest_hashes_everything(self, test_files, temp_dir):
        broken = temp_dir / "broken.json"
        broken.write_text("{not json")

        result = HashCommand().execute(
            HashParams(paths=[str(test_files["dup1_a"])], manifest_path=str(broken), only_changed=True))

        assert len(result.entries) == 1
