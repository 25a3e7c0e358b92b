"""
Run independent jobs on a pool of worker threads and wait for all of them.
"""

import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, Callable, List, Optional

from utils.logger import get_logger

logger = get_logger(__name__)

_shared_executor: Optional[ThreadPoolExecutor] = None
_shared_lock = threading.Lock()

SHARED_THREAD_PREFIX = "optiback-shared"


def default_parallelism() -> int:
    return os.cpu_count() or 1


def shared_executor() -> ThreadPoolExecutor:
    """The process wide worker pool, created on first use with one thread per CPU"""
    global _shared_executor
    with _shared_lock:
        if _shared_executor is None:
            _shared_executor = ThreadPoolExecutor(
                max_workers=default_parallelism(),
                thread_name_prefix=SHARED_THREAD_PREFIX
            )
        return _shared_executor


def in_shared_executor() -> bool:
    """True if called from a worker thread of the shared pool"""
    return threading.current_thread().name.startswith(SHARED_THREAD_PREFIX)


class ParallelJobs:
    """
    Fan out independent jobs to a worker pool and block until all of them are done.

    Jobs must not share mutable state, except through collections that are safe to update
    concurrently. No ordering is guaranteed between jobs.

    Example:
        jobs = ParallelJobs()
        for tf in timeframes:
            jobs.add(lambda tf=tf: run(tf))
        jobs.join_all_blocking()

    Args:
        max_workers: Size of a private pool for these jobs. By default the jobs run on the shared
            process wide pool, which has one worker per CPU.

    Jobs created from a job that itself runs on the shared pool (for example an Optimizer.train inside
    ParallelJobs().add) get a private pool of one worker per CPU. Waiting for them on the shared pool
    could block every shared worker and never finish.
    """

    def __init__(self, max_workers: Optional[int] = None):
        if max_workers is not None and max_workers < 1:
            raise ValueError(f"max_workers should be at least 1, found {max_workers}")
        self._own_executor = None
        if max_workers is None and in_shared_executor():
            logger.debug("Nested jobs on the shared pool, using a private pool")
            max_workers = default_parallelism()
        if max_workers is not None:
            self._own_executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="optiback-job")
        self._futures: List[Future] = []
        self._lock = threading.Lock()

    @property
    def executor(self) -> ThreadPoolExecutor:
        return self._own_executor or shared_executor()

    def add(self, job: Callable[[], Any]) -> Future:
        """Schedule `job` for execution and return its future"""
        future = self.executor.submit(job)
        with self._lock:
            self._futures.append(future)
        return future

    def __len__(self) -> int:
        with self._lock:
            return len(self._futures)

    def join_all_blocking(self) -> List[Any]:
        """
        Wait until every scheduled job has finished, successfully or not.

        Returns:
            The return values of the jobs, in the order they were added.

        Raises:
            The exception of the first failed job (in the order the jobs were added). It is only
            raised after all other jobs have completed.
        """
        with self._lock:
            futures = list(self._futures)

        try:
            wait(futures)
        finally:
            if self._own_executor is not None:
                self._own_executor.shutdown(wait=True)

        failures = [f.exception() for f in futures if f.exception() is not None]
        if failures:
            for failure in failures:
                logger.error(f"Job failed: {failure!r}")
            logger.error(f"{len(failures)} of {len(futures)} jobs failed")
            raise failures[0]

        return [f.result() for f in futures]
