"""Cancellation and deadline signal passed to every client operation.

A :class:`Context` is created by the caller and handed to
:meth:`~twitchclip.client.sync_client.TwitchClient.refresh_auth_token`,
:meth:`~twitchclip.client.sync_client.TwitchClient.create_clip` and
:meth:`~twitchclip.client.sync_client.TwitchClient.get_clip` (and their
async counterparts).  It carries an optional deadline on the
:func:`time.monotonic` clock and a cancellation flag that can be set from any
thread.

Example::

    ctx = Context.with_timeout(5.0)
    clip_id = client.create_clip("44445592", ctx)

    # elsewhere, e.g. a signal handler or another thread
    ctx.cancel()
"""

from __future__ import annotations

import threading
import time
from typing import Callable, Optional

from twitchclip.exceptions import DeadlineExceededError, RequestCancelledError


class Context:
    """Deadline plus cancellation flag for a single call (or a group of calls).

    Args:
        deadline: Absolute deadline on the :func:`time.monotonic` clock, or
            ``None`` for no deadline.
    """

    def __init__(self, deadline: Optional[float] = None) -> None:
        self._deadline = deadline
        self._cancelled = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: list[Callable[[], None]] = []

    @classmethod
    def background(cls) -> Context:
        """Return a context that never expires and is only cancelled explicitly."""
        return cls()

    @classmethod
    def with_timeout(cls, seconds: float) -> Context:
        """Return a context whose deadline is *seconds* from now."""
        return cls(deadline=time.monotonic() + seconds)

    @classmethod
    def with_deadline(cls, deadline: float) -> Context:
        """Return a context expiring at the monotonic timestamp *deadline*."""
        return cls(deadline=deadline)

    @property
    def deadline(self) -> Optional[float]:
        return self._deadline

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def expired(self) -> bool:
        """Whether the deadline has passed."""
        return self._deadline is not None and time.monotonic() >= self._deadline

    def remaining(self) -> Optional[float]:
        """Seconds left until the deadline (never negative), or ``None``."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def cancel(self) -> None:
        """Cancel the context and fire registered callbacks.

        Safe to call from any thread and more than once; callbacks run only
        on the first call.
        """
        with self._lock:
            if self._cancelled.is_set():
                return
            self._cancelled.set()
            callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()

    def on_cancel(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register *callback* to run once when the context is cancelled.

        If the context is already cancelled the callback runs immediately.

        Returns:
            A function that unregisters the callback.
        """
        with self._lock:
            if not self._cancelled.is_set():
                self._callbacks.append(callback)
                return lambda: self._remove_callback(callback)
        callback()
        return lambda: None

    def check(self) -> None:
        """Raise if the context is cancelled or past its deadline.

        Raises:
            RequestCancelledError: The context was cancelled.
            DeadlineExceededError: The deadline has passed.
        """
        if self.cancelled:
            raise RequestCancelledError("request cancelled")
        if self.expired:
            raise DeadlineExceededError("deadline exceeded")

    def _remove_callback(self, callback: Callable[[], None]) -> None:
        with self._lock:
            try:
                self._callbacks.remove(callback)
            except ValueError:
                pass  # already fired
