"""Tests for cancel module."""

import asyncio

import pytest

from openai_service.client import (
    CancelHandle,
    CancelReason,
    CancelToken,
    create_cancel_pair,
)


class TestCancelToken:
    """Tests for CancelToken."""

    def test_initial_state(self) -> None:
        token = CancelToken()
        assert token.is_cancelled is False
        assert token.reason is None

    def test_cancel(self) -> None:
        token = CancelToken()
        assert token.cancel(CancelReason.SHUTDOWN) is True
        assert token.is_cancelled is True
        assert token.reason == CancelReason.SHUTDOWN

    def test_cancel_twice(self) -> None:
        token = CancelToken()
        assert token.cancel() is True
        assert token.cancel() is False

    def test_cancel_with_metadata(self) -> None:
        token = CancelToken()
        token.cancel(CancelReason.USER_REQUEST, source="ui")
        assert token.state.metadata["source"] == "ui"

    def test_deadline(self) -> None:
        token = CancelToken(timeout=0.000001)
        # monotonic clock has moved past the deadline by the time we check
        while not token.is_cancelled:
            pass
        assert token.reason == CancelReason.TIMEOUT

    @pytest.mark.asyncio
    async def test_wait_with_timeout(self) -> None:
        token = CancelToken()
        assert await token.wait_with_timeout(0.01) is False

        token.cancel()
        assert await token.wait_with_timeout(0.1) is True

    @pytest.mark.asyncio
    async def test_wait_wakes_on_cancel(self) -> None:
        token = CancelToken()

        async def cancel_later():
            await asyncio.sleep(0.01)
            token.cancel()

        task = asyncio.create_task(cancel_later())
        assert await token.wait_with_timeout(5.0) is True
        await task

    def test_on_cancel_callback(self) -> None:
        token = CancelToken()
        reasons = []
        token.on_cancel(reasons.append)
        token.cancel(CancelReason.TIMEOUT)
        assert reasons == [CancelReason.TIMEOUT]

    def test_on_cancel_after_cancelled(self) -> None:
        token = CancelToken()
        token.cancel()
        reasons = []
        token.on_cancel(reasons.append)
        assert reasons == [CancelReason.USER_REQUEST]

    def test_failing_callback_does_not_stop_others(self) -> None:
        token = CancelToken()
        reasons = []

        def broken(reason):
            raise RuntimeError("boom")

        token.on_cancel(broken)
        token.on_cancel(reasons.append)
        token.cancel()
        assert reasons == [CancelReason.USER_REQUEST]


class TestCancelPair:
    """Tests for create_cancel_pair."""

    def test_pair(self) -> None:
        handle, token = create_cancel_pair()
        assert isinstance(handle, CancelHandle)
        handle.cancel()
        assert token.is_cancelled
        assert handle.is_cancelled
