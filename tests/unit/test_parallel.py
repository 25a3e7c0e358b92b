"""
Tests for ParallelJobs

Checked invariants:
1. join_all_blocking returns only when every job has finished
2. The first failure is raised, but only after all other jobs completed
3. Results come back in the order the jobs were added
"""

import threading
import time

import pytest

from optiback.common.parallel import ParallelJobs, default_parallelism, in_shared_executor, shared_executor


class TestParallelJobs:
    """Fan-out and fan-in of independent jobs."""

    def test_results_in_submission_order(self):
        jobs = ParallelJobs(max_workers=4)
        for i in range(10):
            jobs.add(lambda i=i: (time.sleep(0.001 * (10 - i)), i)[1])
        assert jobs.join_all_blocking() == list(range(10))

    def test_waits_for_all_jobs(self):
        finished = []
        lock = threading.Lock()

        def job(i):
            time.sleep(0.01)
            with lock:
                finished.append(i)

        jobs = ParallelJobs()
        for i in range(8):
            jobs.add(lambda i=i: job(i))
        assert len(jobs) == 8
        jobs.join_all_blocking()
        assert sorted(finished) == list(range(8))

    def test_failure_raised_after_all_jobs(self):
        finished = []
        lock = threading.Lock()

        def job(i):
            if i == 2:
                raise ValueError("job 2 failed")
            time.sleep(0.02)
            with lock:
                finished.append(i)

        jobs = ParallelJobs(max_workers=2)
        for i in range(6):
            jobs.add(lambda i=i: job(i))

        with pytest.raises(ValueError, match="job 2 failed"):
            jobs.join_all_blocking()
        assert sorted(finished) == [0, 1, 3, 4, 5]

    def test_first_failure_in_submission_order(self):
        def fail(message):
            raise RuntimeError(message)

        jobs = ParallelJobs(max_workers=2)
        jobs.add(lambda: time.sleep(0.02) or fail("first"))
        jobs.add(lambda: fail("second"))
        with pytest.raises(RuntimeError, match="first"):
            jobs.join_all_blocking()

    def test_invalid_workers(self):
        with pytest.raises(ValueError):
            ParallelJobs(max_workers=0)

    def test_shared_executor(self):
        assert shared_executor() is shared_executor()
        assert default_parallelism() >= 1
        assert not in_shared_executor()

    def test_nested_jobs_on_shared_pool(self):
        def inner():
            jobs = ParallelJobs()
            assert jobs.executor is not shared_executor()
            for i in range(2):
                jobs.add(lambda i=i: i)
            return sum(jobs.join_all_blocking())

        outer = ParallelJobs()
        for _ in range(default_parallelism() + 1):
            outer.add(inner)
        assert outer.join_all_blocking() == [1] * (default_parallelism() + 1)
