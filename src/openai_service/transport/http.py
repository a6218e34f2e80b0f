"""
HTTP request executor with bounded retry.

Every OpenAI call, passthrough or thread step, goes through HttpExecutor:
- Bearer-authenticated JSON requests with a hard per-call timeout
- Up to ``retries`` attempts (at least one)
- Non-2xx responses are logged and retried immediately
- Transport faults are logged and retried after a fixed backoff
"""

from __future__ import annotations

import asyncio
from importlib.metadata import PackageNotFoundError, version
from typing import TYPE_CHECKING, Any

import httpx

from openai_service.errors import TransportError
from openai_service.telemetry import get_logger
from openai_service.transport.auth import bearer_headers
from openai_service.transport.result import ApiResult

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = get_logger(__name__)

_DEFAULT_TIMEOUT = 60.0
_DEFAULT_CONNECT_TIMEOUT = 10.0
_DEFAULT_BACKOFF = 1.0

_UA_VERSION: str | None = None


def _get_ua_version() -> str:
    """Get package version for User-Agent (cached)."""
    global _UA_VERSION
    if _UA_VERSION is None:
        try:
            _UA_VERSION = version("openai-service")
        except PackageNotFoundError:
            _UA_VERSION = "0.0.0"
    return _UA_VERSION


class HttpExecutor:
    """Sends requests with retry and fixed backoff.

    Example:
        >>> async with HttpExecutor(backoff=1.0) as executor:
        ...     body = await executor.send(api_key, url, {"model": "gpt-4o-mini", ...}, retries=3)
    """

    def __init__(
        self,
        *,
        timeout: float = _DEFAULT_TIMEOUT,
        backoff: float = _DEFAULT_BACKOFF,
        client: httpx.AsyncClient | None = None,
        sleep: Callable[[float], Awaitable[Any]] | None = None,
    ) -> None:
        """Initialize the executor.

        Args:
            timeout: Default per-request timeout in seconds
            backoff: Seconds to wait after a transport fault
            client: Optional pre-built httpx client (not closed by the executor)
            sleep: Sleep coroutine, replaceable in tests
        """
        self._timeout = timeout
        self._backoff = backoff
        self._client = client
        self._owns_client = client is None
        self._sleep = sleep or asyncio.sleep

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout, connect=_DEFAULT_CONNECT_TIMEOUT),
                headers={"User-Agent": f"openai-service-python/{_get_ua_version()}"},
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if the executor created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def execute(
        self,
        api_key: str,
        url: str,
        payload: dict[str, Any] | None = None,
        *,
        method: str = "POST",
        retries: int = 1,
        timeout: float | None = None,
        params: dict[str, Any] | None = None,
        beta: str | None = None,
    ) -> ApiResult:
        """Send a request, retrying on failure, and report the outcome.

        Args:
            api_key: Bearer token
            url: Full endpoint URL
            payload: JSON body (ignored for GET)
            method: HTTP method
            retries: Maximum attempts; values below 1 mean a single attempt
            timeout: Per-attempt timeout in seconds
            params: Query parameters
            beta: Optional ``OpenAI-Beta`` header value

        Returns:
            ApiResult with the first 2xx body, or a TransportError
        """
        client = self._get_client()
        attempts = max(1, retries)
        headers = bearer_headers(api_key, beta)
        body = None if method.upper() == "GET" else (payload if payload is not None else {})

        last_status: int | None = None
        last_body: Any = None
        last_exc: Exception | None = None

        for attempt in range(1, attempts + 1):
            try:
                response = await client.request(
                    method,
                    url,
                    json=body,
                    params=params,
                    headers=headers,
                    timeout=timeout if timeout is not None else self._timeout,
                )
            except httpx.TransportError as e:
                last_exc = e
                logger.warning(
                    "OpenAI HTTP exception",
                    method=method,
                    url=url,
                    attempt=attempt,
                    error=str(e) or type(e).__name__,
                )
                if attempt < attempts:
                    await self._sleep(self._backoff)
                continue

            if response.is_success:
                try:
                    value = response.json() if response.content else {}
                except ValueError:
                    last_status, last_body = response.status_code, response.text
                    logger.error(
                        "OpenAI API returned invalid JSON",
                        method=method,
                        url=url,
                        attempt=attempt,
                        status=response.status_code,
                    )
                    continue
                logger.debug("OpenAI request succeeded", method=method, url=url, attempt=attempt)
                return ApiResult(success=True, value=value, attempts=attempt)

            last_status, last_body = response.status_code, response.text
            last_exc = None
            logger.error(
                "OpenAI API error",
                method=method,
                url=url,
                attempt=attempt,
                status=response.status_code,
                body=response.text,
            )

        if last_exc is not None:
            message = f"OpenAI request failed after {attempts} attempt(s): {last_exc}"
        else:
            message = f"OpenAI request failed after {attempts} attempt(s) with HTTP {last_status}"
        error = TransportError(
            message,
            url=url,
            status_code=last_status,
            attempts=attempts,
            body=last_body,
            cause=last_exc,
        )
        return ApiResult(success=False, error=error, attempts=attempts)

    async def send(
        self,
        api_key: str,
        url: str,
        payload: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> Any:
        """Send a request and return the decoded body.

        Raises:
            TransportError: If every attempt failed
        """
        result = await self.execute(api_key, url, payload, **kwargs)
        return result.unwrap()

    async def get(self, api_key: str, url: str, **kwargs: Any) -> Any:
        """Send a GET request and return the decoded body."""
        return await self.send(api_key, url, method="GET", **kwargs)

    async def __aenter__(self) -> HttpExecutor:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
