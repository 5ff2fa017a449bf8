"""
Shared fixtures for hashpool tests.
Creates isolated temporary directories with controlled test files.
"""
import hashlib
import pytest
import tempfile
from pathlib import Path
from typing import Dict
import sys

# Add src/ to sys.path so 'hashpool' is importable without installation
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))


def sha256_of(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


CONTENT_A = b"A" * 1024
CONTENT_B = b"B" * 2048


@pytest.fixture
def temp_dir():
    """Creates isolated temporary directory, auto-cleanup after test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_files(temp_dir) -> Dict[str, Path]:
    """
    Creates controlled test files for matching scenarios:
    - 2 identical files (pair A)
    - 2 identical files (pair B)
    - 2 unique files
    - 1 empty file
    - 1 hidden file
    - 1 file in a subdirectory, identical to pair A
    """
    files = {}

    files["dup1_a"] = temp_dir / "dup1_a.txt"
    files["dup1_b"] = temp_dir / "dup1_b.txt"
    files["dup1_a"].write_bytes(CONTENT_A)
    files["dup1_b"].write_bytes(CONTENT_A)

    files["dup2_a"] = temp_dir / "dup2_a.bin"
    files["dup2_b"] = temp_dir / "dup2_b.bin"
    files["dup2_a"].write_bytes(CONTENT_B)
    files["dup2_b"].write_bytes(CONTENT_B)

    files["unique1"] = temp_dir / "unique1.txt"
    files["unique1"].write_bytes(b"C" * 1500)
    files["unique2"] = temp_dir / "unique2.txt"
    files["unique2"].write_bytes(b"D" * 2500)

    files["empty"] = temp_dir / "empty.txt"
    files["empty"].write_bytes(b"")

    files["hidden"] = temp_dir / ".hidden.txt"
    files["hidden"].write_bytes(CONTENT_A)

    subdir = temp_dir / "subdir"
    subdir.mkdir()
    files["sub_dup"] = subdir / "dup_in_subdir.txt"
    files["sub_dup"].write_bytes(CONTENT_A)

    return files
