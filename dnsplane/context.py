"""Caller-supplied deadline and cancellation token."""

import threading
import time

from dnsplane.errors import OperationCancelled


class Context:
    """Deadline plus cancellation signal propagated through provider calls.

    A context created with ``with_timeout`` shares the cancellation signal of
    its parent and keeps the shorter of the two deadlines.
    """

    def __init__(self, timeout: float | None = None):
        self._deadline = time.monotonic() + timeout if timeout is not None else None
        self._cancelled = threading.Event()

    @classmethod
    def background(cls) -> "Context":
        """A context that never expires and is never cancelled by anyone else."""
        return cls()

    def with_timeout(self, seconds: float) -> "Context":
        child = Context.__new__(Context)
        child._cancelled = self._cancelled
        deadline = time.monotonic() + seconds
        if self._deadline is not None:
            deadline = min(deadline, self._deadline)
        child._deadline = deadline
        return child

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    def done(self) -> bool:
        return self.cancelled or self.expired

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or None when there is none."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def request_timeout(self, cap: float) -> float:
        """Timeout for one HTTP request: the shorter of ``cap`` and the deadline."""
        remaining = self.remaining()
        if remaining is None:
            return cap
        return min(cap, remaining)

    def check(self) -> None:
        """Raise OperationCancelled if the context is done."""
        if self.cancelled:
            raise OperationCancelled("operation cancelled")
        if self.expired:
            raise OperationCancelled("deadline exceeded")

    def sleep(self, seconds: float) -> bool:
        """Sleep up to ``seconds``; return False if cancelled or the deadline hit first."""
        remaining = self.remaining()
        if remaining is not None and remaining < seconds:
            self._cancelled.wait(remaining)
            return False
        return not self._cancelled.wait(seconds)
