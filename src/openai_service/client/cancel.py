"""
Cancellation control for run polling.

A CancelToken is checked by the poll loop before every poll and awaited
during the sleep between polls, so a cancellation takes effect without
waiting out the full interval. Cancelling is local only: the remote run is
left untouched unless the caller also cancels it through the API.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from openai_service.telemetry import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

logger = get_logger(__name__)


class CancelReason(str, Enum):
    """Reasons for cancellation."""

    USER_REQUEST = "user_request"
    TIMEOUT = "timeout"
    SHUTDOWN = "shutdown"


@dataclass
class CancelState:
    """State of a cancellation token."""

    cancelled: bool = False
    reason: CancelReason | None = None
    timestamp: float | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


class CancelToken:
    """Cooperative cancellation token.

    Example:
        >>> token = CancelToken()
        >>> task = asyncio.create_task(service.assistant(..., cancel_token=token))
        >>> token.cancel()  # poll loop raises RunCancelledError
    """

    def __init__(self, timeout: float | None = None) -> None:
        """Initialize cancellation token.

        Args:
            timeout: Optional deadline in seconds, measured from creation,
                after which the token cancels itself with reason TIMEOUT
        """
        self._state = CancelState()
        self._event = asyncio.Event()
        self._callbacks: list[Callable[[CancelReason], Any]] = []
        self._deadline = time.monotonic() + timeout if timeout else None

    def cancel(
        self,
        reason: CancelReason = CancelReason.USER_REQUEST,
        **metadata: Any,
    ) -> bool:
        """Request cancellation.

        Returns:
            True if cancellation was newly requested, False if already cancelled
        """
        if self._state.cancelled:
            return False

        self._state.cancelled = True
        self._state.reason = reason
        self._state.timestamp = time.time()
        self._state.metadata.update(metadata)
        self._event.set()

        for callback in self._callbacks:
            self._invoke(callback, reason)
        return True

    def _invoke(self, callback: Callable[[CancelReason], Any], reason: CancelReason) -> None:
        try:
            callback(reason)
        except Exception:
            logger.exception("Cancel callback failed", reason=reason.value)

    def _check_deadline(self) -> None:
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self.cancel(CancelReason.TIMEOUT)

    @property
    def is_cancelled(self) -> bool:
        """Check if cancellation was requested or the deadline passed."""
        self._check_deadline()
        return self._state.cancelled

    @property
    def reason(self) -> CancelReason | None:
        return self._state.reason

    @property
    def state(self) -> CancelState:
        return self._state

    async def wait_with_timeout(self, timeout: float) -> bool:
        """Wait up to ``timeout`` seconds for cancellation.

        Returns:
            True if cancelled, False if the timeout elapsed first
        """
        if self.is_cancelled:
            return True
        if self._deadline is not None:
            timeout = min(timeout, max(0.0, self._deadline - time.monotonic()))
        try:
            await asyncio.wait_for(self._event.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            return self.is_cancelled
        return True

    def on_cancel(self, callback: Callable[[CancelReason], Any]) -> CancelToken:
        """Register a callback invoked on cancellation.

        The callback runs immediately if the token is already cancelled.
        """
        self._callbacks.append(callback)
        if self._state.cancelled and self._state.reason:
            self._invoke(callback, self._state.reason)
        return self


class CancelHandle:
    """Public handle for cancelling an operation that holds the token."""

    def __init__(self, token: CancelToken) -> None:
        self._token = token

    def cancel(
        self,
        reason: CancelReason = CancelReason.USER_REQUEST,
        **metadata: Any,
    ) -> bool:
        return self._token.cancel(reason, **metadata)

    @property
    def is_cancelled(self) -> bool:
        return self._token.is_cancelled


def create_cancel_pair(
    timeout: float | None = None,
) -> tuple[CancelHandle, CancelToken]:
    """Create a cancel handle and token pair."""
    token = CancelToken(timeout=timeout)
    return CancelHandle(token), token
