"""
Attestation Call Context

Carries cancellation and an optional deadline from the caller down to the
points where an attestation waits: between inspection attempts and inside
the daemon client's request timeout.
"""

import threading
import time
from typing import Callable, Optional

from .errors import CancellationError


class AttestContext:
    """
    Cancellation token with an optional deadline.

    Thread-safe: one thread may cancel while another is waiting.

    Usage:
        ctx = AttestContext.with_timeout(5.0)
        selectors = attestor.attest(pid, ctx)

        # from another thread
        ctx.cancel()
    """

    def __init__(
        self,
        deadline: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._deadline = deadline
        self._clock = clock
        self._cancelled = threading.Event()
        self._reason = ""

    @classmethod
    def background(cls) -> 'AttestContext':
        """A context that is never cancelled and has no deadline."""
        return cls()

    @classmethod
    def with_timeout(
        cls,
        timeout: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> 'AttestContext':
        """A context whose deadline is ``timeout`` seconds from now."""
        return cls(deadline=clock() + timeout, clock=clock)

    @property
    def deadline(self) -> Optional[float]:
        return self._deadline

    def cancel(self, reason: str = "context canceled") -> None:
        """Cancel the context, waking any waiter."""
        self._reason = reason
        self._cancelled.set()

    def remaining(self) -> Optional[float]:
        """Seconds until the deadline, or None without a deadline."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - self._clock())

    def is_cancelled(self) -> bool:
        return self._cancelled.is_set()

    def is_expired(self) -> bool:
        return self._deadline is not None and self._clock() >= self._deadline

    def done(self) -> bool:
        return self.is_cancelled() or self.is_expired()

    def check(self) -> None:
        """Raise CancellationError if the context is cancelled or expired."""
        if self.is_cancelled():
            raise CancellationError(self._reason or "context canceled")
        if self.is_expired():
            raise CancellationError("context deadline exceeded")

    def wait(self, delay: float) -> None:
        """
        Sleep for ``delay`` seconds unless the context ends first.

        The sleep is cut short by cancellation or the deadline, in which
        case CancellationError is raised.
        """
        self.check()
        remaining = self.remaining()
        if remaining is not None and remaining < delay:
            self._cancelled.wait(remaining)
            self.check()
            raise CancellationError("context deadline exceeded")
        if delay > 0:
            self._cancelled.wait(delay)
        self.check()


__all__ = ['AttestContext']
