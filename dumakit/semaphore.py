"""A re-entrant, thread-owned lock guarding the allocator's internals.

A thread that already holds the semaphore may acquire it again (as when a
reallocation calls allocation and release internally); it is given up only
when every acquisition has been released.
"""

from __future__ import annotations

import threading
from typing import Any, TypeVar

__all__ = ["RecursiveSemaphore", "SemaphoreError"]

T = TypeVar("T")


class SemaphoreError(RuntimeError):
    """Raised when the semaphore is used in an inconsistent way."""


class RecursiveSemaphore:
    """Recursive lock that is created lazily on first use."""

    def __init__(self) -> None:
        self._init_guard = threading.Lock()
        self._lock: threading.Lock | None = None
        self._owner: int | None = None
        self._depth = 0

    def init(self) -> None:
        """Create the underlying lock; further calls do nothing."""
        with self._init_guard:
            if self._lock is None:
                self._lock = threading.Lock()

    def acquire(self) -> None:
        """Take the semaphore, or deepen the hold if this thread has it."""
        if self._lock is None:
            self.init()
        me = threading.get_ident()
        if self._owner == me:
            self._depth += 1
            return
        self._lock.acquire()
        self._owner = me
        self._depth = 1

    def release(self, retval: T = None) -> T:
        """Pop one level of the hold and return ``retval`` unchanged."""
        if self._lock is None:
            raise SemaphoreError("Semaphore isn't initialised")
        if self._owner is None or self._depth <= 0:
            raise SemaphoreError("Semaphore isn't locked")
        if self._owner != threading.get_ident():
            raise SemaphoreError("Semaphore isn't owned by this thread")
        self._depth -= 1
        if self._depth == 0:
            self._owner = None
            self._lock.release()
        return retval

    def __enter__(self) -> "RecursiveSemaphore":
        self.acquire()
        return self

    def __exit__(self, *args: Any) -> bool:
        self.release(None)
        return False