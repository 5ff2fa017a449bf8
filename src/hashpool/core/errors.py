"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/errors.py
Error taxonomy for hashing operations.

Per-file failures (missing file, permission denied, not a regular file, read failure)
are captured into the Entry that produced them and never interrupt sibling work.
An unsupported algorithm is the only fatal error: it is raised before any file is read.
"""

from enum import Enum
from typing import Dict, List, Iterable


class ErrorKind(str, Enum):
    FILE_NOT_FOUND = "file-not-found"
    PERMISSION_DENIED = "permission-denied"
    NOT_REGULAR_FILE = "not-regular-file"
    READ_FAILURE = "read-failure"
    UNSUPPORTED_ALGORITHM = "unsupported-algorithm"


class HashpoolError(Exception):
    """Base class for all errors raised by hashpool."""


class FileHashError(HashpoolError):
    """
    A failure isolated to a single path.
    Carried inside the failed Entry and collected into HashResult.errors.
    """

    def __init__(self, kind: ErrorKind, path: str, message: str):
        super().__init__(message)
        self.kind = kind
        self.path = path
        self.message = message

    def __eq__(self, other):
        if not isinstance(other, FileHashError):
            return NotImplemented
        return (self.kind, self.path, self.message) == (other.kind, other.path, other.message)

    def __hash__(self):
        return hash((self.kind, self.path, self.message))

    def __repr__(self):
        return f"<FileHashError kind={self.kind.value}, path={self.path}>"


class UnsupportedAlgorithmError(HashpoolError, ValueError):
    """Raised when the algorithm selector cannot be resolved to a digest function."""

    kind = ErrorKind.UNSUPPORTED_ALGORITHM

    def __init__(self, algorithm: str):
        super().__init__(f"Unsupported algorithm: {algorithm}")
        self.algorithm = algorithm


class ManifestError(HashpoolError):
    """Raised when a manifest file cannot be read or decoded."""


def classify_os_error(exc: OSError, path: str) -> FileHashError:
    """Maps an OSError raised while hashing `path` onto the error taxonomy."""
    reason = exc.strerror or str(exc)
    if isinstance(exc, FileNotFoundError):
        return FileHashError(ErrorKind.FILE_NOT_FOUND, path, f"File not found: {path}")
    if isinstance(exc, PermissionError):
        return FileHashError(ErrorKind.PERMISSION_DENIED, path, f"Permission denied: {path}")
    if isinstance(exc, IsADirectoryError):
        return FileHashError(ErrorKind.NOT_REGULAR_FILE, path, f"Not a regular file: {path}")
    return FileHashError(ErrorKind.READ_FAILURE, path, f"Failed to read {path}: {reason}")


def not_regular_file(path: str) -> FileHashError:
    return FileHashError(ErrorKind.NOT_REGULAR_FILE, path, f"Not a regular file: {path}")


def group_errors(errors: Iterable[FileHashError]) -> Dict[ErrorKind, List[FileHashError]]:
    """Groups errors by kind, preserving the order in which they were reported."""
    groups: Dict[ErrorKind, List[FileHashError]] = {}
    for error in errors:
        groups.setdefault(error.kind, []).append(error)
    return groups
