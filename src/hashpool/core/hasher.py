"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

hasher.py
Implements file hashing using pluggable digest functions.

Files are streamed through the digest function in fixed-size chunks, so memory use
stays constant regardless of file size. hashlib provides the cryptographic algorithms,
xxhash the fast non-cryptographic ones.
"""

import hashlib
import logging
import os
import stat
import string
from typing import BinaryIO, Callable, Dict, List, Union

import xxhash

from hashpool.core.errors import UnsupportedAlgorithmError, classify_os_error, not_regular_file
from hashpool.core.interfaces import DigestFunction, Hasher
from hashpool.core.models import Algorithm, Entry

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024

_HEX_DIGITS = frozenset(string.hexdigits)


# Use the same way to plug in any other hashing algorithm
_DIGEST_FACTORIES: Dict[Algorithm, Callable[[], DigestFunction]] = {
    Algorithm.SHA256: hashlib.sha256,
    Algorithm.MD5: hashlib.md5,
    Algorithm.SHA1: hashlib.sha1,
    Algorithm.SHA512: hashlib.sha512,
    Algorithm.BLAKE2B: lambda: hashlib.blake2b(digest_size=64),
    Algorithm.XXH64: xxhash.xxh64,
    Algorithm.XXH128: xxhash.xxh3_128,
}


def resolve_algorithm(algorithm: Union[str, Algorithm]) -> Algorithm:
    """
    Resolves an algorithm selector to a supported Algorithm.

    Raises:
        UnsupportedAlgorithmError: If the selector is unknown
    """
    if isinstance(algorithm, Algorithm):
        return algorithm
    try:
        return Algorithm(str(algorithm).strip().lower())
    except ValueError:
        raise UnsupportedAlgorithmError(str(algorithm)) from None


def new_digest(algorithm: Union[str, Algorithm]) -> DigestFunction:
    """Returns a fresh digest object for the given algorithm."""
    return _DIGEST_FACTORIES[resolve_algorithm(algorithm)]()


def supported_algorithms() -> List[str]:
    return [a.value for a in _DIGEST_FACTORIES]


class HasherImpl(Hasher):
    """
    Computes digests of files, streams and byte strings with a single algorithm.
    The algorithm is validated on construction, before any file is touched.
    """

    def __init__(self, algorithm: Union[str, Algorithm] = Algorithm.SHA256):
        self._algorithm = resolve_algorithm(algorithm)
        self.algorithm = self._algorithm.value

    def compute_file(self, path: str) -> Entry:
        """
        Streams the file through the digest function.
        Returns an Entry carrying either the digest or the failure, never both.
        """
        try:
            st = os.stat(path)
            # Refuse directories, FIFOs and devices before opening: reading them may block forever
            if not stat.S_ISREG(st.st_mode):
                logger.debug(f"Skipping non-regular file: {path}")
                return Entry(original=path, algorithm=self.algorithm, error=not_regular_file(path))

            digest = _DIGEST_FACTORIES[self._algorithm]()
            size = 0
            with open(path, 'rb') as f:
                for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
                    digest.update(chunk)
                    size += len(chunk)
        except OSError as e:
            logger.debug(f"Failed to hash {path}: {e}")
            return Entry(original=path, algorithm=self.algorithm, error=classify_os_error(e, path))

        return Entry(
            original=path,
            digest=digest.hexdigest().lower(),
            size=size,
            algorithm=self.algorithm,
            mod_time=st.st_mtime,
        )

    def compute_reader(self, stream: BinaryIO) -> str:
        """Computes the digest of everything readable from a binary stream."""
        digest = _DIGEST_FACTORIES[self._algorithm]()
        for chunk in iter(lambda: stream.read(CHUNK_SIZE), b""):
            digest.update(chunk)
        return digest.hexdigest().lower()

    def compute_bytes(self, data: bytes) -> str:
        digest = _DIGEST_FACTORIES[self._algorithm]()
        digest.update(data)
        return digest.hexdigest().lower()


def is_hex_string(value: str) -> bool:
    return bool(value) and all(c in _HEX_DIGITS for c in value)


def detect_hash_algorithm(hash_str: str) -> List[Algorithm]:
    """
    Returns the algorithms that could have produced a hash string, judged by its length.
    Non-hex strings and unknown lengths yield an empty list.
    """
    if not is_hex_string(hash_str):
        return []
    return [a for a in _DIGEST_FACTORIES if a.digest_length == len(hash_str)]


def is_valid_hash(hash_str: str, algorithm: Union[str, Algorithm]) -> bool:
    """True if the string is a well-formed hex digest for the given algorithm."""
    try:
        expected = resolve_algorithm(algorithm).digest_length
    except UnsupportedAlgorithmError:
        return False
    return len(hash_str) == expected and is_hex_string(hash_str)
