"""
Unified command orchestrator for hashing.
This is the SINGLE source of truth for the hashing workflow — used by the CLI and by library callers.
"""
import logging
import time
from typing import List, Optional, Callable

from hashpool.core.errors import ManifestError
from hashpool.core.grouper import DigestGrouperImpl
from hashpool.core.hasher import HasherImpl
from hashpool.core.interfaces import DigestGrouper, Hasher
from hashpool.core.models import HashParams, HashResult
from hashpool.core.pipeline import BatchHasherImpl, restore_order
from hashpool.core.scanner import FileScannerImpl
from hashpool.core.workers import decide_worker_count, available_parallelism
from hashpool.services.manifest_service import ManifestService

logger = logging.getLogger(__name__)


class HashCommand:
    """
    Orchestrates the entire hashing workflow:
    1. Resolve the algorithm (fails fast, before any file is read)
    2. Discover files and optionally keep only those changed since a manifest
    3. Hash them with a bounded worker pool, collecting per-file failures
    4. Restore input order and classify (plain grouping or pool matching)

    Usage:
        params = HashParams(paths=["photos"], recursive=True)
        command = HashCommand()
        result = command.execute(
            params,
            progress_callback=cli_progress_printer,
            stopped_flag=signal_handler_check
        )
    """

    def __init__(self, grouper: Optional[DigestGrouper] = None):
        self._grouper = grouper or DigestGrouperImpl()
        self._files: List[str] = []

    def execute(
            self,
            params: HashParams,
            progress_callback: Optional[Callable[[str, int, Optional[int]], None]] = None,
            stopped_flag: Optional[Callable[[], bool]] = None
    ) -> HashResult:
        """
        Execute hashing with given parameters.

        Args:
            params: Validated hashing parameters
            progress_callback: (stage: str, current: int, total: Optional[int]) -> None
            stopped_flag: () -> bool (returns True if operation should stop)

        Returns:
            Finalized HashResult

        Raises:
            UnsupportedAlgorithmError: If the algorithm is unknown (no partial result)
        """
        hasher = HasherImpl(params.algorithm)
        self._files = self.prepare_files(params, stopped_flag, progress_callback)
        return self.hash_files(self._files, params, hasher, progress_callback, stopped_flag)

    @staticmethod
    def prepare_files(
            params: HashParams,
            stopped_flag: Optional[Callable[[], bool]] = None,
            progress_callback: Optional[Callable[[str, int, Optional[int]], None]] = None
    ) -> List[str]:
        """Expands input paths into the list of files to hash."""
        if not params.paths and params.reference_digests:
            # Only reference digests were given: nothing to discover
            return []

        scanner = FileScannerImpl(
            paths=params.paths,
            recursive=params.recursive,
            hidden=params.hidden,
            include=params.include,
            exclude=params.exclude,
            min_size=params.min_size_bytes,
            max_size=params.max_size_bytes,
            modified_after=params.modified_after,
            modified_before=params.modified_before,
        )
        files = scanner.scan(stopped_flag=stopped_flag, progress_callback=progress_callback)

        if params.only_changed:
            try:
                manifest = ManifestService.load(params.manifest_path)
            except ManifestError as e:
                logger.warning(f"Incremental mode disabled: {e}")
            else:
                changed = manifest.changed_files(files)
                logger.info(f"Incremental: {len(changed)} of {len(files)} files changed")
                files = changed

        return files

    def hash_files(
            self,
            files: List[str],
            params: HashParams,
            hasher: Hasher,
            progress_callback: Optional[Callable[[str, int, Optional[int]], None]] = None,
            stopped_flag: Optional[Callable[[], bool]] = None
    ) -> HashResult:
        """Runs the pipeline over `files` and classifies the outcome."""
        result = HashResult(unknowns=list(params.unknowns))
        workers = decide_worker_count(params.jobs, available_parallelism())
        total = len(files)

        start_time = time.perf_counter()
        for entry in BatchHasherImpl(hasher).compute_batch(files, workers, stopped_flag=stopped_flag):
            result.add_entry(entry)
            if entry.error is not None:
                logger.warning(str(entry.error))
            if progress_callback:
                progress_callback("Hashing", len(result.entries), total)
        result.duration = time.perf_counter() - start_time

        result.entries = restore_order(result.entries, files)
        result.errors = [e.error for e in result.entries if e.error is not None]
        self._classify(result, params, hasher.algorithm)
        result.finalize()

        logger.debug(
            f"Hashed {result.files_processed} files ({result.bytes_processed} bytes) "
            f"in {result.duration:.3f}s, {len(result.errors)} errors"
        )
        return result

    def _classify(self, result: HashResult, params: HashParams, algorithm: str) -> None:
        refs = params.reference_digests

        if params.group_results:
            if refs:
                result.matches, result.unmatched, result.ref_orphans = \
                    self._grouper.group_pool_results(result.entries, refs, algorithm)
            else:
                result.matches, result.unmatched = self._grouper.group_results(result.entries)
        else:
            result.unmatched = [e for e in result.entries if e.error is None]

        # Legacy pool verification, only when pool matching found no groups
        if refs and not result.matches:
            result.pool_matches = self._grouper.verify_pool(result.entries, refs)

    def get_files(self) -> List[str]:
        """Get the files selected for hashing by the last execution."""
        return self._files.copy()
