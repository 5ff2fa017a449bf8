"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/scanner.py
Expands input paths into the flat, ordered list of files to hash.
Features:
- Walks directories with os.walk (sorted, so results are reproducible)
- Optional recursion and hidden-file handling
- Applies size, modification time and name glob filters
- Keeps explicitly given non-directory paths so hashing can report problems per file
"""

import fnmatch
import logging
import os
import stat
import time
from typing import List, Optional, Callable

from hashpool.core.interfaces import FileScanner

logger = logging.getLogger(__name__)


class FileScannerImpl(FileScanner):
    """
    Scans input paths and filters files by size, modification time and name.

    Attributes:
        paths: Files and directories to scan (defaults to the current directory)
        recursive: Descend into subdirectories
        hidden: Include entries whose name starts with a dot
        include: Base-name globs, at least one must match (if any are given)
        exclude: Base-name globs, any match rejects the file
        min_size: Minimum file size in bytes
        max_size: Maximum file size in bytes, -1 for no limit
        modified_after / modified_before: Unix timestamps bounding the file mtime
    """

    def __init__(
        self,
        paths: Optional[List[str]] = None,
        recursive: bool = False,
        hidden: bool = False,
        include: Optional[List[str]] = None,
        exclude: Optional[List[str]] = None,
        min_size: int = 0,
        max_size: int = -1,
        modified_after: Optional[float] = None,
        modified_before: Optional[float] = None
    ):
        self.paths = list(paths) if paths else ["."]
        self.recursive = recursive
        self.hidden = hidden
        self.include = list(include) if include else []
        self.exclude = list(exclude) if exclude else []
        self.min_size = min_size
        self.max_size = max_size
        self.modified_after = modified_after
        self.modified_before = modified_before

    def scan(self,
            stopped_flag: Optional[Callable[[], bool]] = None,
            progress_callback: Optional[Callable[[str, int, object], None]] = None) -> List[str]:
        """
        Returns the unique files found under the input paths, in input order.
        Returns an empty list if cancelled.
        """
        logger.debug(f"Scanning {len(self.paths)} input path(s), recursive={self.recursive}")
        logger.debug(f"Filters: min_size={self.min_size}, max_size={self.max_size}, "
                     f"include={self.include}, exclude={self.exclude}")

        found_files: List[str] = []
        seen = set()
        processed_files = 0
        progress_interval = 5000
        start_time = time.time()

        def accept(path: str) -> None:
            if path not in seen:
                seen.add(path)
                found_files.append(path)

        for root in self.paths:
            if stopped_flag and stopped_flag():
                logger.debug("Scan interrupted by user")
                return []

            if not os.path.isdir(root):
                # Missing paths, regular files and special files given explicitly are
                # passed through; hashing reports what is wrong with them.
                if self._explicit_file_passes(root):
                    accept(root)
                processed_files += 1
                continue

            for dirpath, dirs, files in os.walk(root):
                if stopped_flag and stopped_flag():
                    logger.debug("Scan interrupted by user")
                    return []

                if self.recursive:
                    dirs[:] = sorted(d for d in dirs if self.hidden or not d.startswith("."))
                else:
                    dirs[:] = []

                for filename in sorted(files):
                    if not self.hidden and filename.startswith("."):
                        continue
                    path = os.path.join(dirpath, filename)
                    if self._process_file(path):
                        accept(path)
                    processed_files += 1

                    if progress_callback and processed_files % progress_interval == 0:
                        progress_callback('scanning', processed_files, None)

        if progress_callback:
            progress_callback('scanning', processed_files, None)

        logger.debug(f"Scan completed in {time.time() - start_time:.2f}s, "
                     f"{len(found_files)} matching files")
        return found_files

    def _explicit_file_passes(self, path: str) -> bool:
        try:
            st = os.stat(path)
        except OSError:
            return True
        if not stat.S_ISREG(st.st_mode):
            return True
        return self._passes_filters(path, st)

    def _process_file(self, path: str) -> bool:
        """
        Decide whether a file found while walking should be hashed.
        Only regular files (or symlinks to them) are kept.
        """
        try:
            st = os.stat(path)
        except OSError as e:
            logger.debug(f"Could not stat {path}: {e}")
            return False

        if not stat.S_ISREG(st.st_mode):
            logger.debug(f"Skipping non-regular file: {path}")
            return False

        return self._passes_filters(path, st)

    def _passes_filters(self, path: str, st: os.stat_result) -> bool:
        """A file must pass every active filter."""
        size = st.st_size
        if self.min_size > 0 and size < self.min_size:
            logger.debug(f"Skipping {path} (size {size} bytes below minimum)")
            return False
        if self.max_size != -1 and size > self.max_size:
            logger.debug(f"Skipping {path} (size {size} bytes above maximum)")
            return False

        if self.modified_after is not None and st.st_mtime < self.modified_after:
            return False
        if self.modified_before is not None and st.st_mtime > self.modified_before:
            return False

        return self._name_passes(os.path.basename(path))

    def _name_passes(self, name: str) -> bool:
        # Exclude patterns take precedence
        if any(fnmatch.fnmatch(name, pattern) for pattern in self.exclude):
            return False
        if self.include:
            return any(fnmatch.fnmatch(name, pattern) for pattern in self.include)
        return True
