"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/workers.py
Worker sizing policy for the batch hashing pipeline.

An explicit request always wins. In auto mode some cores are left free so the host
stays responsive, and the total is capped to bound context switching on large machines.
"""

import os

MAX_AUTO_WORKERS = 32
SMALL_HOST_CORES = 4


def decide_worker_count(requested: int, available_parallelism: int) -> int:
    """
    Maps (explicit request, host parallelism) to a worker count.

    Args:
        requested: Worker count asked for by the caller, 0 for auto
        available_parallelism: Number of CPUs usable by this process

    Returns:
        `requested` unchanged when positive, otherwise available minus reserved
        cores (1 on hosts with 4 or fewer CPUs, 2 above that), clamped to [1, 32].
    """
    if requested > 0:
        return requested

    available = max(available_parallelism, 1)
    reserved = 1 if available <= SMALL_HOST_CORES else 2
    return min(max(available - reserved, 1), MAX_AUTO_WORKERS)


def available_parallelism() -> int:
    """Number of CPUs this process may run on (affinity-aware where supported)."""
    if hasattr(os, "sched_getaffinity"):
        try:
            return max(len(os.sched_getaffinity(0)), 1)
        except OSError:
            pass
    return os.cpu_count() or 1
