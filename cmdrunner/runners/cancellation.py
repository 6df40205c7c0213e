# ═══════════════════════════════════════════════════════════════
# cmdrunner - Cancellation
# Caller-triggered or time-bounded cancellation signal
# ═══════════════════════════════════════════════════════════════

import asyncio
import threading
import time
from typing import Callable, List, Optional


class CancellationToken:
    """
    Signal telling an in-flight invocation to kill its child process.

    A token fires either when ``cancel()`` is called (from any thread) or when
    its deadline passes. Once fired it stays fired. Pass it to
    ``Runner.run(..., token=token)`` or ``Runner.run_context(token, ...)``.

    Usage:
        token = CancellationToken.with_timeout(5)
        await runner.run_context(token, "sleep", "10")  # raises SignalError
    """

    REASON_CANCELLED = "cancelled"
    REASON_DEADLINE = "deadline exceeded"

    def __init__(self, timeout: Optional[float] = None):
        """
        Initialize the token.

        Args:
            timeout: Seconds from now after which the token fires by itself
        """
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._reason: Optional[str] = None
        self._callbacks: List[Callable[[], None]] = []
        self._deadline: Optional[float] = None
        if timeout is not None:
            self._deadline = time.monotonic() + max(0.0, timeout)

    @classmethod
    def with_timeout(cls, seconds: float) -> 'CancellationToken':
        """Create a token that fires after ``seconds``."""
        return cls(timeout=seconds)

    # ═══════════════════════════════════════════════════════════
    # State
    # ═══════════════════════════════════════════════════════════

    @property
    def deadline(self) -> Optional[float]:
        """Deadline on the ``time.monotonic()`` clock, if any."""
        return self._deadline

    @property
    def reason(self) -> Optional[str]:
        """Why the token fired, or None while it has not."""
        self._check_deadline()
        return self._reason

    @property
    def cancelled(self) -> bool:
        """True once the token has fired."""
        self._check_deadline()
        return self._event.is_set()

    def remaining(self) -> Optional[float]:
        """Seconds left until the deadline, or None without one."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def cancel(self) -> None:
        """Fire the token. Safe to call more than once and from any thread."""
        self._fire(self.REASON_CANCELLED)

    # ═══════════════════════════════════════════════════════════
    # Waiting
    # ═══════════════════════════════════════════════════════════

    async def wait(self) -> None:
        """Suspend until the token fires."""
        if self.cancelled:
            return

        loop = asyncio.get_running_loop()
        fired = loop.create_future()

        def _resolve() -> None:
            if not fired.done():
                fired.set_result(None)

        def _wake() -> None:
            if not loop.is_closed():
                loop.call_soon_threadsafe(_resolve)

        self._callbacks.append(_wake)
        try:
            # cancel() may have run between the check above and registering
            if self.cancelled:
                return
            done, _ = await asyncio.wait({fired}, timeout=self.remaining())
            if not done:
                self._fire(self.REASON_DEADLINE)
        finally:
            self._callbacks.remove(_wake)
            fired.cancel()

    # ═══════════════════════════════════════════════════════════
    # Internals
    # ═══════════════════════════════════════════════════════════

    def _check_deadline(self) -> None:
        if (
            self._deadline is not None
            and not self._event.is_set()
            and time.monotonic() >= self._deadline
        ):
            self._fire(self.REASON_DEADLINE)

    def _fire(self, reason: str) -> None:
        with self._lock:
            if self._event.is_set():
                return
            self._reason = reason
            self._event.set()
            callbacks = list(self._callbacks)
        for callback in callbacks:
            callback()

    def __repr__(self) -> str:
        return f"<CancellationToken(cancelled={self.cancelled}, reason={self._reason})>"
