"""
Core hashing engine — scanner, hasher, batch pipeline, worker sizing and grouper.

This package contains the performance-critical foundation of hashpool:
- FileScannerImpl: directory traversal with size/date/name filters
- HasherImpl: streaming digests via hashlib and xxhash
- BatchHasherImpl: bounded-concurrency hashing with per-file error isolation
- decide_worker_count: worker sizing policy
- DigestGrouperImpl: plain grouping and pool matching against reference digests
- Models: Entry, MatchGroup, PoolMatch, HashResult and HashParams

All components are pure Python with no UI dependencies — suitable for CLI and library usage.
"""

from .errors import (
    ErrorKind, HashpoolError, FileHashError, UnsupportedAlgorithmError, ManifestError)
from .models import (
    Algorithm, OutputFormat, MatchPolicy, Entry, MatchGroup, PoolMatch, HashResult, HashParams)
from .hasher import HasherImpl, detect_hash_algorithm, is_valid_hash, resolve_algorithm
from .pipeline import BatchHasherImpl, restore_order
from .grouper import DigestGrouperImpl
from .scanner import FileScannerImpl
from .workers import decide_worker_count, available_parallelism

__all__ = [
    "ErrorKind",
    "HashpoolError",
    "FileHashError",
    "UnsupportedAlgorithmError",
    "ManifestError",
    "Algorithm",
    "OutputFormat",
    "MatchPolicy",
    "Entry",
    "MatchGroup",
    "PoolMatch",
    "HashResult",
    "HashParams",
    "HasherImpl",
    "detect_hash_algorithm",
    "is_valid_hash",
    "resolve_algorithm",
    "BatchHasherImpl",
    "restore_order",
    "DigestGrouperImpl",
    "FileScannerImpl",
    "decide_worker_count",
    "available_parallelism",
]
