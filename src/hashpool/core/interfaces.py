"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

interfaces.py

Defines core interfaces (Protocols) used throughout the hashing system.
These protocols enforce structural typing using Python's `typing.Protocol` to ensure
consistency across modules while maintaining flexibility and modularity.

Key Components:
---------------
- DigestFunction: Streaming digest object (hashlib-compatible: update / hexdigest).
- Hasher: Interface for computing the digest of one file, stream or byte string.
- BatchHasher: Interface for digesting many files with bounded concurrency.
- FileScanner: Interface for expanding input paths into a list of regular files.
- DigestGrouper: Interface for plain grouping and pool matching of digested entries.
"""

from typing import Protocol, List, Tuple, Optional, Callable, Iterator, BinaryIO
from hashpool.core.models import Entry, MatchGroup, PoolMatch


# ===== Interfaces =====

class DigestFunction(Protocol):
    """
    Minimal streaming digest interface.

    Satisfied by every hashlib object as well as xxhash objects, so new algorithms
    can be plugged in without touching the pipeline.
    """
    def update(self, data: bytes) -> None: ...
    def hexdigest(self) -> str: ...


class Hasher(Protocol):
    """Interface for hashing a single input."""
    algorithm: str

    def compute_file(self, path: str) -> Entry:
        """
        Digest a file. Never raises for per-path I/O problems:
        failures are returned as an Entry carrying the error.
        """
        ...

    def compute_bytes(self, data: bytes) -> str: ...
    def compute_reader(self, stream: BinaryIO) -> str: ...


class BatchHasher(Protocol):
    """
    Interface for digesting a list of files concurrently.
    """
    def compute_batch(
        self,
        paths: List[str],
        workers: int,
        stopped_flag: Optional[Callable[[], bool]] = None
    ) -> Iterator[Entry]:
        """
        Yield exactly one Entry per dispatched path, in completion order.

        Args:
            paths: Files to digest.
            workers: Maximum number of digestions running at any instant.
            stopped_flag: Function that returns True if no further work should be dispatched.
        """
        ...


class FileScanner(Protocol):
    """
    Interface for scanning file systems and collecting file paths.
    """
    def scan(
        self,
        stopped_flag: Optional[Callable[[], bool]] = None,
        progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> List[str]:
        """
        Expand the configured input paths into regular files.

        Args:
            stopped_flag: Function that returns True if operation should be canceled.
            progress_callback: Optional callback for reporting progress (stage, current, total).

        Returns:
            Ordered list of unique file paths matching filters.
        """
        ...


class DigestGrouper(Protocol):
    """
    Interface for classifying digested entries.
    """
    def group_results(self, entries: List[Entry]) -> Tuple[List[MatchGroup], List[Entry]]:
        """Split successful entries into match groups and unmatched entries."""
        ...

    def group_pool_results(
        self,
        entries: List[Entry],
        reference_digests: List[str],
        algorithm: str
    ) -> Tuple[List[MatchGroup], List[Entry], List[Entry]]:
        """Classify entries against reference digests: (matches, file orphans, reference orphans)."""
        ...

    def verify_pool(self, entries: List[Entry], reference_digests: List[str]) -> List[PoolMatch]:
        """Record every file whose digest equals a reference digest."""
        ...
