"""
Integration tests for the retrying HTTP executor.
"""

from unittest.mock import MagicMock

import httpx
import pytest

from openai_service.errors import TransportError
from openai_service.transport import http as http_module
from openai_service.transport.http import HttpExecutor

from tests.integration.conftest import COMPLETIONS_URL, THREADS_URL, mock_openai_chat_response


@pytest.fixture
def mock_logger(monkeypatch):
    logger = MagicMock()
    monkeypatch.setattr(http_module, "logger", logger)
    return logger


class TestRetry:
    """Tests for bounded retry."""

    @pytest.mark.asyncio
    async def test_fail_twice_then_succeed(self, httpx_mock, mock_logger, fake_sleep, sleeps) -> None:
        """Two failures then success returns the success body and logs each failure."""
        httpx_mock.add_response(url=COMPLETIONS_URL, method="POST", status_code=500, json={"error": "a"})
        httpx_mock.add_response(url=COMPLETIONS_URL, method="POST", status_code=502, json={"error": "b"})
        httpx_mock.add_response(url=COMPLETIONS_URL, method="POST", json=mock_openai_chat_response("ok"))

        async with HttpExecutor(backoff=0.0, sleep=fake_sleep) as executor:
            result = await executor.execute("sk-test", COMPLETIONS_URL, {"model": "gpt-4o-mini"}, retries=3)

        assert result.success is True
        assert result.attempts == 3
        assert result.value["choices"][0]["message"]["content"] == "ok"
        assert mock_logger.error.call_count + mock_logger.warning.call_count == 2
        assert len(httpx_mock.get_requests()) == 3
        # Non-2xx responses are retried without waiting
        assert sleeps == []

    @pytest.mark.asyncio
    async def test_exhausted_attempts(self, httpx_mock, mock_logger, fake_sleep) -> None:
        """Every attempt failing yields a TransportError with the last status."""
        for _ in range(3):
            httpx_mock.add_response(url=COMPLETIONS_URL, method="POST", status_code=503, text="unavailable")

        async with HttpExecutor(sleep=fake_sleep) as executor:
            result = await executor.execute("sk-test", COMPLETIONS_URL, {}, retries=3)

        assert result.success is False
        assert isinstance(result.error, TransportError)
        assert result.error.status_code == 503
        assert result.error.attempts == 3
        assert result.error.body == "unavailable"
        assert mock_logger.error.call_count == 3

    @pytest.mark.asyncio
    async def test_send_raises_on_failure(self, httpx_mock, mock_logger, fake_sleep) -> None:
        httpx_mock.add_response(url=COMPLETIONS_URL, method="POST", status_code=401, json={"error": "bad key"})

        async with HttpExecutor(sleep=fake_sleep) as executor:
            with pytest.raises(TransportError) as exc_info:
                await executor.send("sk-bad", COMPLETIONS_URL, {}, retries=1)

        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_zero_retries_means_one_attempt(self, httpx_mock, mock_logger, fake_sleep) -> None:
        httpx_mock.add_response(url=COMPLETIONS_URL, method="POST", status_code=500)

        async with HttpExecutor(sleep=fake_sleep) as executor:
            result = await executor.execute("sk-test", COMPLETIONS_URL, {}, retries=0)

        assert result.success is False
        assert result.attempts == 1
        assert len(httpx_mock.get_requests()) == 1

    @pytest.mark.asyncio
    async def test_transport_fault_waits_backoff(self, httpx_mock, mock_logger, fake_sleep, sleeps) -> None:
        """A transport fault is logged as a warning and retried after the backoff."""
        httpx_mock.add_exception(httpx.ConnectError("connection refused"), url=COMPLETIONS_URL)
        httpx_mock.add_response(url=COMPLETIONS_URL, method="POST", json={"ok": True})

        async with HttpExecutor(backoff=0.5, sleep=fake_sleep) as executor:
            result = await executor.execute("sk-test", COMPLETIONS_URL, {}, retries=2)

        assert result.success is True
        assert result.value == {"ok": True}
        assert sleeps == [0.5]
        assert mock_logger.warning.call_count == 1

    @pytest.mark.asyncio
    async def test_no_backoff_after_last_attempt(self, httpx_mock, mock_logger, fake_sleep, sleeps) -> None:
        httpx_mock.add_exception(httpx.ReadTimeout("timed out"), url=COMPLETIONS_URL)
        httpx_mock.add_exception(httpx.ReadTimeout("timed out"), url=COMPLETIONS_URL)

        async with HttpExecutor(backoff=1.0, sleep=fake_sleep) as executor:
            result = await executor.execute("sk-test", COMPLETIONS_URL, {}, retries=2)

        assert result.success is False
        assert result.error.status_code is None
        assert isinstance(result.error.__cause__, httpx.ReadTimeout)
        assert sleeps == [1.0]


class TestRequestShape:
    """Tests for headers and bodies."""

    @pytest.mark.asyncio
    async def test_bearer_and_beta_headers(self, httpx_mock) -> None:
        httpx_mock.add_response(url=THREADS_URL, method="POST", json={"id": "thread_1"})

        async with HttpExecutor() as executor:
            await executor.send("sk-test", THREADS_URL, {}, beta="assistants=v2")

        request = httpx_mock.get_requests()[0]
        assert request.headers["Authorization"] == "Bearer sk-test"
        assert request.headers["OpenAI-Beta"] == "assistants=v2"
        assert request.headers["Content-Type"] == "application/json"

    @pytest.mark.asyncio
    async def test_get_sends_no_body(self, httpx_mock) -> None:
        url = f"{THREADS_URL}/thread_1/runs/run_1"
        httpx_mock.add_response(url=url, method="GET", json={"id": "run_1", "status": "queued"})

        async with HttpExecutor() as executor:
            body = await executor.get("sk-test", url)

        assert body["status"] == "queued"
        request = httpx_mock.get_requests()[0]
        assert request.method == "GET"
        assert request.content == b""
        assert "OpenAI-Beta" not in request.headers

    @pytest.mark.asyncio
    async def test_empty_success_body(self, httpx_mock) -> None:
        httpx_mock.add_response(url=COMPLETIONS_URL, method="POST", status_code=204)

        async with HttpExecutor() as executor:
            body = await executor.send("sk-test", COMPLETIONS_URL, {})

        assert body == {}
