"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/models.py
Data models for file hashing, grouping and pool matching.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple
from enum import Enum

from hashpool.core.errors import FileHashError


# =============================
# Enums
# =============================

class Algorithm(str, Enum):
    """
    Supported digest algorithms.
    """
    SHA256 = "sha256"
    MD5 = "md5"
    SHA1 = "sha1"
    SHA512 = "sha512"
    BLAKE2B = "blake2b"
    XXH64 = "xxh64"
    XXH128 = "xxh128"

    @property
    def digest_length(self) -> int:
        """Length of the hex digest produced by this algorithm."""
        mapping = {
            Algorithm.SHA256: 64,
            Algorithm.MD5: 32,
            Algorithm.SHA1: 40,
            Algorithm.SHA512: 128,
            Algorithm.BLAKE2B: 128,
            Algorithm.XXH64: 16,
            Algorithm.XXH128: 32,
        }
        return mapping[self]

    @property
    def display_name(self) -> str:
        """Human-readable name for help text."""
        mapping = {
            Algorithm.SHA256: "SHA-256",
            Algorithm.MD5: "MD5",
            Algorithm.SHA1: "SHA-1",
            Algorithm.SHA512: "SHA-512",
            Algorithm.BLAKE2B: "BLAKE2b-512",
            Algorithm.XXH64: "xxHash64",
            Algorithm.XXH128: "xxHash3-128",
        }
        return mapping.get(self, self.value)

    def __repr__(self) -> str:
        return self.value


class OutputFormat(str, Enum):
    DEFAULT = "default"
    VERBOSE = "verbose"
    JSON = "json"
    JSONL = "jsonl"
    PLAIN = "plain"
    CSV = "csv"


class MatchPolicy(str, Enum):
    """
    Controls what counts as success when determining the exit status.
    """
    DEFAULT = "default"
    ANY = "any"
    ALL = "all"


# ======================
#  Core Data Models
# ======================

@dataclass(frozen=True)
class Entry:
    """
    Outcome of hashing one file, or a reference digest supplied by the caller.
    Exactly one of `digest` / `error` is set.
    """
    original: str
    digest: str = ""
    size: int = 0  # in bytes
    algorithm: str = ""
    error: Optional[FileHashError] = None
    is_reference: bool = False
    mod_time: float = 0.0

    def __post_init__(self):
        if bool(self.digest) == (self.error is not None):
            raise ValueError(f"Entry for '{self.original}' must carry either a digest or an error")
        if self.size < 0:
            raise ValueError("Entry size cannot be negative")

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def is_file(self) -> bool:
        return not self.is_reference

    def __repr__(self):
        if self.error is not None:
            return f"<Entry path={self.original}, error={self.error.kind.value}>"
        kind = "reference" if self.is_reference else "path"
        return f"<Entry {kind}={self.original}, digest={self.digest[:12]}>"


@dataclass(frozen=True)
class MatchGroup:
    """
    Two or more entries sharing the same digest.
    File entries always come before reference entries.
    """
    digest: str
    entries: Tuple[Entry, ...]
    count: int = 0

    def __post_init__(self):
        if not self.count:
            object.__setattr__(self, "count", len(self.entries))
        if self.count != len(self.entries):
            raise ValueError("MatchGroup count must equal the number of entries")
        if self.count < 2:
            raise ValueError("MatchGroup requires at least two entries")

    @property
    def files(self) -> List[Entry]:
        return [e for e in self.entries if e.is_file]

    @property
    def references(self) -> List[Entry]:
        return [e for e in self.entries if e.is_reference]

    def __repr__(self):
        return f"<MatchGroup digest={self.digest[:12]}, count={self.count}>"


@dataclass(frozen=True)
class PoolMatch:
    """A file whose digest equals one of the supplied reference digests."""
    file_path: str
    computed_digest: str
    provided_digest: str
    algorithm: str


@dataclass
class HashResult:
    """
    Aggregate of one hashing run.
    Filled entry by entry while the pipeline runs, then finalized once by grouping.
    """
    entries: List[Entry] = field(default_factory=list)
    matches: List[MatchGroup] = field(default_factory=list)
    unmatched: List[Entry] = field(default_factory=list)
    pool_matches: List[PoolMatch] = field(default_factory=list)
    ref_orphans: List[Entry] = field(default_factory=list)
    unknowns: List[str] = field(default_factory=list)
    errors: List[FileHashError] = field(default_factory=list)
    files_processed: int = 0
    bytes_processed: int = 0
    duration: float = 0.0  # seconds
    finalized: bool = False

    def add_entry(self, entry: Entry) -> None:
        """Records one pipeline outcome and updates the counters."""
        if self.finalized:
            raise RuntimeError("Cannot add entries to a finalized result")
        self.entries.append(entry)
        if entry.error is not None:
            self.errors.append(entry.error)
        else:
            self.files_processed += 1
            self.bytes_processed += entry.size

    def finalize(self) -> None:
        self.finalized = True

    def __repr__(self):
        return (f"<HashResult entries={len(self.entries)}, matches={len(self.matches)}, "
                f"errors={len(self.errors)}>")


"""
DTO for hashing parameters with built-in validation.
Interface-agnostic — used by the CLI and by library callers.
"""
from hashpool.utils.convert_utils import ConvertUtils

@dataclass
class HashParams:
    """Parameters for a hashing run with validation."""
    paths: List[str] = field(default_factory=list)
    reference_digests: List[str] = field(default_factory=list)
    algorithm: str = Algorithm.SHA256.value
    jobs: int = 0  # 0 = auto
    recursive: bool = False
    hidden: bool = False
    include: List[str] = field(default_factory=list)
    exclude: List[str] = field(default_factory=list)
    min_size_bytes: int = 0
    max_size_bytes: int = -1  # -1 = unlimited
    modified_after: Optional[float] = None
    modified_before: Optional[float] = None
    group_results: bool = True
    manifest_path: Optional[str] = None
    only_changed: bool = False
    output_manifest: Optional[str] = None
    unknowns: List[str] = field(default_factory=list)

    def __post_init__(self):
        """Validate parameters immediately after creation."""
        if isinstance(self.algorithm, Algorithm):
            self.algorithm = self.algorithm.value
        self.algorithm = self.algorithm.strip().lower()

        if self.jobs < 0:
            raise ValueError("Number of jobs cannot be negative")

        if self.min_size_bytes < 0:
            raise ValueError("Minimum size cannot be negative")

        if self.max_size_bytes != -1 and self.max_size_bytes < self.min_size_bytes:
            raise ValueError("Maximum size cannot be less than minimum size")

        if (self.modified_after is not None and self.modified_before is not None
                and self.modified_before < self.modified_after):
            raise ValueError("--modified-before cannot be earlier than --modified-after")

        if self.only_changed and not self.manifest_path:
            raise ValueError("Incremental mode requires a manifest path")

        self.reference_digests = [h.strip() for h in self.reference_digests if h.strip()]

    @staticmethod
    def from_human_readable(
            paths: List[str],
            min_size_str: str = "0",
            max_size_str: str = "",
            algorithm: str = Algorithm.SHA256.value,
            reference_digests: Optional[List[str]] = None,
            jobs: int = 0,
            recursive: bool = False,
    ) -> 'HashParams':
        """
        Factory method to create params from human-readable inputs.
        An empty maximum size means no upper limit.
        """
        min_size = ConvertUtils.human_to_bytes(min_size_str) if min_size_str else 0
        max_size = ConvertUtils.human_to_bytes(max_size_str) if max_size_str else -1

        return HashParams(
            paths=list(paths),
            reference_digests=reference_digests or [],
            algorithm=algorithm,
            jobs=jobs,
            recursive=recursive,
            min_size_bytes=min_size,
            max_size_bytes=max_size,
        )
