"""
hashpool — batch file hashing with match detection.

Core features:
- Parallel hashing with a bounded worker pool (sha256, md5, sha1, sha512, blake2b, xxh64, xxh128)
- Groups identical files and matches files against a pool of reference hashes
- JSON manifests for incremental re-hashing of changed files only
- CLI with machine-readable output formats and meaningful exit codes
"""

# Get version
try:
    from importlib.metadata import version as _version
    __version__ = _version("hashpool")
except Exception:
    import tomllib
    from pathlib import Path

    with open(Path(__file__).resolve().parents[2] / "pyproject.toml", "rb") as f:
        __version__ = tomllib.load(f)["project"]["version"]

# Public API: only what users should import directly
from hashpool.commands import HashCommand
from hashpool.core import HashParams, HashResult, Algorithm, Entry, MatchGroup, PoolMatch
from hashpool.utils.convert_utils import ConvertUtils
from hashpool.services import ManifestService, StatusService, ExitCode

__all__ = [
    "HashCommand",
    "HashParams",
    "HashResult",
    "Algorithm",
    "Entry",
    "MatchGroup",
    "PoolMatch",
    "ConvertUtils",
    "ManifestService",
    "StatusService",
    "ExitCode",
    "__version__",
]
