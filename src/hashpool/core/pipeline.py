"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/pipeline.py
Bounded-concurrency batch hashing.

PIPELINE CONTRACT
-----------------
  • Every dispatched path produces exactly one Entry (digest or error)
  • At most `workers` digestions run at any instant: a thread pool of that size is fed
    through a window of at most `workers` in-flight futures
  • Entries are yielded in completion order; callers restore input order with
    restore_order() before grouping or display
  • A per-path failure never aborts the batch and is never retried
  • stopped_flag is checked before each dispatch: once it fires nothing new is started,
    in-flight work finishes and is still yielded, undispatched paths never appear
"""

import logging
from concurrent.futures import ThreadPoolExecutor, Future, wait, FIRST_COMPLETED
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Set

from hashpool.core.hasher import HasherImpl
from hashpool.core.interfaces import BatchHasher, Hasher
from hashpool.core.models import Entry

logger = logging.getLogger(__name__)


class BatchHasherImpl(BatchHasher):
    """
    Digests many files concurrently with an injected Hasher.
    """

    def __init__(self, hasher: Optional[Hasher] = None):
        self.hasher = hasher or HasherImpl()

    def compute_batch(
            self,
            paths: List[str],
            workers: int,
            stopped_flag: Optional[Callable[[], bool]] = None
    ) -> Iterator[Entry]:
        """
        Yields one Entry per dispatched path as soon as it completes.
        The returned generator is finite and cannot be restarted.
        """
        if workers < 1:
            raise ValueError("Worker count must be at least 1")

        logger.debug(f"Hashing {len(paths)} files with {workers} workers ({self.hasher.algorithm})")
        pending = iter(paths)
        in_flight: Set[Future] = set()
        exhausted = False
        stopped = False
        executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="hashpool")

        try:
            while True:
                # Top up the window
                while not (exhausted or stopped) and len(in_flight) < workers:
                    if stopped_flag and stopped_flag():
                        logger.debug("Hashing cancelled, no further files will be dispatched")
                        stopped = True
                        break
                    try:
                        path = next(pending)
                    except StopIteration:
                        exhausted = True
                        break
                    in_flight.add(executor.submit(self.hasher.compute_file, path))

                if not in_flight:
                    break

                done, in_flight = wait(in_flight, return_when=FIRST_COMPLETED)
                for future in done:
                    yield future.result()
        finally:
            # Consumer stopped early: drop queued work, let running digests finish
            for future in in_flight:
                future.cancel()
            executor.shutdown(wait=True)


def restore_order(entries: Iterable[Entry], paths: List[str]) -> List[Entry]:
    """
    Sorts entries into the caller's original path order.
    Entries whose path is not in `paths` go last, keeping their relative order.
    """
    order: Dict[str, int] = {}
    for index, path in enumerate(paths):
        order.setdefault(path, index)
    unknown = len(paths)
    return sorted(entries, key=lambda e: order.get(e.original, unknown))
