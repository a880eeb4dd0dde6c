"""Local parallel execution.

This module runs one function over a list of items using Python's
``concurrent.futures`` thread or process pools, or serially.

Features:
    - Multiple execution backends (serial, threads, processes)
    - Results returned in input order regardless of completion order
    - Progress callbacks (used with rich progress bars by the CLI)
    - Cooperative cancellation between tasks

Example:
    >>> from pgmap.parallel.executor import ParallelExecutor
    >>> executor = ParallelExecutor(n_workers=8, backend="threads")
    >>> results, stats = executor.map_items(scan, references)
"""

from __future__ import annotations

import logging
import os
import threading
import time
from concurrent.futures import (
    Future,
    ProcessPoolExecutor,
    ThreadPoolExecutor,
    as_completed,
)
from enum import Enum
from typing import Any, Callable, Sequence, TypeVar

import attrs

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


# =============================================================================
# Enums
# =============================================================================


class ExecutorBackend(Enum):
    """Available execution backends."""

    SERIAL = "serial"
    THREADS = "threads"
    PROCESSES = "processes"


# =============================================================================
# Data Structures
# =============================================================================


@attrs.define(slots=True)
class TaskResult:
    """Result from one task."""

    task_id: str
    index: int
    success: bool
    result: Any | None = None
    error: str | None = None
    exception: BaseException | None = attrs.field(default=None, repr=False)
    duration_seconds: float = 0.0


@attrs.define(slots=True)
class ExecutionStats:
    """Statistics from parallel execution."""

    total_tasks: int
    successful: int
    failed: int
    cancelled: int
    total_duration: float
    mean_task_duration: float
    max_task_duration: float


# =============================================================================
# Task Wrapper
# =============================================================================


def _run_task(func: Callable[[T], R], task_id: str, index: int, item: T) -> TaskResult:
    """Run one task with timing; module level so process pools can pickle it."""
    start_time = time.time()
    try:
        result = func(item)
    except Exception as e:
        return TaskResult(
            task_id=task_id,
            index=index,
            success=False,
            error=f"{type(e).__name__}: {e}",
            exception=e,
            duration_seconds=time.time() - start_time,
        )
    return TaskResult(
        task_id=task_id,
        index=index,
        success=True,
        result=result,
        duration_seconds=time.time() - start_time,
    )


# =============================================================================
# Parallel Executor
# =============================================================================


class ParallelExecutor:
    """Execute a function over items in parallel.

    With the processes backend, ``func`` and the items must be picklable
    (module-level functions or ``functools.partial`` objects over them).

    Example:
        >>> executor = ParallelExecutor(n_workers=4, backend="processes")
        >>> results, stats = executor.map_items(process_func, items)
        >>> print(f"Processed {stats.successful}/{stats.total_tasks} items")
    """

    def __init__(
        self,
        n_workers: int = 1,
        backend: ExecutorBackend | str = ExecutorBackend.THREADS,
        progress_callback: Callable[[int, int, str], None] | None = None,
        cancel_event: threading.Event | None = None,
    ) -> None:
        """Initialize executor.

        Args:
            n_workers: Number of parallel workers (1 = serial).
            backend: Execution backend.
            progress_callback: Called with (completed, total, task_id).
            cancel_event: When set, tasks not yet started are skipped.
        """
        self.n_workers = max(1, n_workers)
        self.backend = (
            ExecutorBackend(backend) if isinstance(backend, str) else backend
        )
        self.progress_callback = progress_callback
        self.cancel_event = cancel_event or threading.Event()

        # Auto-select serial if n_workers=1
        if self.n_workers == 1:
            self.backend = ExecutorBackend.SERIAL

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def cancel(self) -> None:
        """Skip every task that has not started yet."""
        self.cancel_event.set()

    def map_items(
        self,
        func: Callable[[T], R],
        items: Sequence[T],
        task_ids: Sequence[str] | None = None,
        continue_on_error: bool = False,
    ) -> tuple[list[TaskResult], ExecutionStats]:
        """Apply a function to each item.

        Args:
            func: Function applied to every item.
            items: Items to process.
            task_ids: Optional names for progress and errors; defaults to
                ``item_000000``-style IDs.
            continue_on_error: If False, the first failure is raised.

        Returns:
            Tuple of (results in input order, execution stats). Cancelled
            tasks have no result entry.

        Raises:
            Exception: The failing task's exception when
                ``continue_on_error`` is False.
        """
        if task_ids is None:
            task_ids = [f"item_{i:06d}" for i in range(len(items))]
        elif len(task_ids) != len(items):
            raise ValueError("task_ids must match items in length")

        if not items:
            return [], ExecutionStats(
                total_tasks=0,
                successful=0,
                failed=0,
                cancelled=0,
                total_duration=0.0,
                mean_task_duration=0.0,
                max_task_duration=0.0,
            )

        logger.info(
            f"Processing {len(items)} items with {self.n_workers} workers "
            f"(backend={self.backend.value})"
        )

        start_time = time.time()

        if self.backend == ExecutorBackend.SERIAL:
            results = self._execute_serial(func, items, task_ids, continue_on_error)
        else:
            pool_class = (
                ThreadPoolExecutor
                if self.backend == ExecutorBackend.THREADS
                else ProcessPoolExecutor
            )
            results = self._execute_pool(
                pool_class, func, items, task_ids, continue_on_error
            )

        results.sort(key=lambda r: r.index)

        total_duration = time.time() - start_time
        successful = sum(1 for r in results if r.success)
        failed = len(results) - successful
        durations = [r.duration_seconds for r in results]

        stats = ExecutionStats(
            total_tasks=len(items),
            successful=successful,
            failed=failed,
            cancelled=len(items) - len(results),
            total_duration=total_duration,
            mean_task_duration=sum(durations) / len(durations) if durations else 0.0,
            max_task_duration=max(durations) if durations else 0.0,
        )

        logger.info(
            f"Completed: {successful}/{len(items)} items, "
            f"duration={total_duration:.1f}s"
        )
        if stats.cancelled:
            logger.warning(f"Cancelled {stats.cancelled} items before they started")

        return results, stats

    def _raise_failure(self, task_result: TaskResult) -> None:
        logger.error(f"Task {task_result.task_id} failed: {task_result.error}")
        raise task_result.exception

    def _execute_serial(
        self,
        func: Callable,
        items: Sequence,
        task_ids: Sequence[str],
        continue_on_error: bool,
    ) -> list[TaskResult]:
        """Serial execution with progress tracking."""
        results = []
        total = len(items)

        for i, item in enumerate(items):
            if self.cancelled:
                break

            task_result = _run_task(func, task_ids[i], i, item)
            results.append(task_result)

            if not task_result.success and not continue_on_error:
                self._raise_failure(task_result)

            if self.progress_callback:
                self.progress_callback(i + 1, total, task_result.task_id)

        return results

    def _execute_pool(
        self,
        pool_class: type[ThreadPoolExecutor] | type[ProcessPoolExecutor],
        func: Callable,
        items: Sequence,
        task_ids: Sequence[str],
        continue_on_error: bool,
    ) -> list[TaskResult]:
        """Pool execution; results arrive in completion order."""
        results = []
        total = len(items)
        completed = 0

        with pool_class(max_workers=self.n_workers) as executor:
            futures: list[Future] = [
                executor.submit(_run_task, func, task_ids[i], i, item)
                for i, item in enumerate(items)
            ]

            for future in as_completed(futures):
                if self.cancelled:
                    for pending in futures:
                        pending.cancel()
                if future.cancelled():
                    continue

                completed += 1
                task_result = future.result()
                results.append(task_result)

                if self.progress_callback:
                    self.progress_callback(completed, total, task_result.task_id)

                if not task_result.success and not continue_on_error:
                    executor.shutdown(wait=False, cancel_futures=True)
                    self._raise_failure(task_result)

        return results


# =============================================================================
# Utility Functions
# =============================================================================


def get_optimal_workers(max_workers: int | None = None) -> int:
    """Determine the number of workers from the CPU count.

    Args:
        max_workers: Upper bound (defaults to CPU count).

    Returns:
        Worker count, at least 1.
    """
    cpu_count = os.cpu_count() or 1

    if max_workers is None or max_workers <= 0:
        max_workers = cpu_count

    return max(1, min(max_workers, cpu_count))
