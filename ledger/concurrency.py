"""
txgate - Concurrency Utilities for the UTXO Pool

Readers (validations, snapshots) share the pool; writers (applying an accepted
transaction) get exclusive access. Writers never interleave with a reader, so
a read observes either the state before or after a whole mutation.
"""

import time
from contextlib import contextmanager
from threading import Condition, Lock
from typing import Any, Dict


class ConcurrencyError(Exception):
    """General concurrency operation exception."""
    pass


class LockMetrics:
    """Lock performance metrics."""

    def __init__(self):
        self.acquisition_count = 0
        self.contention_count = 0
        self.total_wait_time = 0.0
        self.max_wait_time = 0.0

    def record_acquisition(self, wait_time: float, contended: bool) -> None:
        """Record lock acquisition metrics."""
        self.acquisition_count += 1
        self.total_wait_time += wait_time
        self.max_wait_time = max(self.max_wait_time, wait_time)
        if contended:
            self.contention_count += 1

    def get_contention_ratio(self) -> float:
        """Get lock contention ratio."""
        if self.acquisition_count == 0:
            return 0.0
        return self.contention_count / self.acquisition_count

    def get_average_wait_time(self) -> float:
        """Get average wait time."""
        if self.acquisition_count == 0:
            return 0.0
        return self.total_wait_time / self.acquisition_count


class ReadWriteLock:
    """Read-write lock with writer exclusion and basic metrics."""

    def __init__(self, name: str = "unnamed", timeout: float = 30.0):
        self.name = name
        self.timeout = timeout
        self._lock = Lock()
        self._readers = 0
        self._writer_active = False
        self._writers_waiting = 0
        self._condition = Condition(self._lock)
        self._metrics = LockMetrics()

    @contextmanager
    def read_lock(self):
        """Acquire read lock with context manager."""
        if not self.acquire_read():
            raise ConcurrencyError(f"Timed out acquiring read lock on {self.name}")
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_lock(self):
        """Acquire write lock with context manager."""
        if not self.acquire_write():
            raise ConcurrencyError(f"Timed out acquiring write lock on {self.name}")
        try:
            yield
        finally:
            self.release_write()

    def acquire_read(self) -> bool:
        """Acquire read lock. Waiting writers go first."""
        start_time = time.monotonic()
        deadline = start_time + self.timeout
        contended = False

        with self._condition:
            while self._writer_active or self._writers_waiting:
                contended = True
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return False
                self._condition.wait(timeout=remaining)

            self._readers += 1
            self._metrics.record_acquisition(time.monotonic() - start_time, contended)
            return True

    def release_read(self) -> None:
        """Release read lock."""
        with self._condition:
            if self._readers <= 0:
                raise ConcurrencyError("Read lock released without being held")

            self._readers -= 1
            if self._readers == 0:
                self._condition.notify_all()

    def acquire_write(self) -> bool:
        """Acquire write lock."""
        start_time = time.monotonic()
        deadline = start_time + self.timeout
        contended = False

        with self._condition:
            self._writers_waiting += 1
            try:
                while self._readers > 0 or self._writer_active:
                    contended = True
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        return False
                    self._condition.wait(timeout=remaining)
            finally:
                self._writers_waiting -= 1
                if not self._writer_active and self._writers_waiting == 0:
                    self._condition.notify_all()

            self._writer_active = True
            self._metrics.record_acquisition(time.monotonic() - start_time, contended)
            return True

    def release_write(self) -> None:
        """Release write lock."""
        with self._condition:
            if not self._writer_active:
                raise ConcurrencyError("Write lock released without being held")

            self._writer_active = False
            self._condition.notify_all()

    def get_metrics(self) -> Dict[str, Any]:
        """Get lock performance metrics."""
        with self._condition:
            return {
                'name': self.name,
                'readers': self._readers,
                'writer_active': self._writer_active,
                'writers_waiting': self._writers_waiting,
                'acquisition_count': self._metrics.acquisition_count,
                'contention_count': self._metrics.contention_count,
                'contention_ratio': self._metrics.get_contention_ratio(),
                'average_wait_time': self._metrics.get_average_wait_time(),
                'max_wait_time': self._metrics.max_wait_time,
            }
