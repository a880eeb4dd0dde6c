"""Parallelization utilities for pgmap.

References are independent of one another, so the mapping pipeline can
scan them concurrently with a local thread or process pool:

Example:
    >>> from pgmap.parallel import ParallelExecutor, ExecutorBackend
    >>> executor = ParallelExecutor(n_workers=4, backend=ExecutorBackend.PROCESSES)
    >>> results, stats = executor.map_items(scan_reference, references)
"""

from pgmap.parallel.executor import (
    ExecutionStats,
    ExecutorBackend,
    ParallelExecutor,
    TaskResult,
    get_optimal_workers,
)

__all__ = [
    "ExecutionStats",
    "ExecutorBackend",
    "ParallelExecutor",
    "TaskResult",
    "get_optimal_workers",
]
