"""
Assistant thread orchestration.

Drives a single assistant run from thread creation to completion:

    create thread -> append messages -> start run -> poll
        -> (requires_action -> dispatch tools -> submit outputs -> poll)*
        -> completed | failed | cancelled | expired | timed out
    -> fetch messages

The remote API is the source of truth for run state. Remote-reported
failures are never retried here; transport errors are retried only inside
the HTTP executor, per request.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from openai_service.config import DEFAULT_ASSISTANTS_BETA, PollConfig
from openai_service.errors import (
    ConfigurationError,
    PollTimeoutError,
    RunCancelledError,
    RunCreationError,
    RunFailedError,
    ThreadCreationError,
    ValidationError,
)
from openai_service.telemetry import get_logger, log_context
from openai_service.tools import ToolDispatcher, ToolRegistry
from openai_service.types.message import Message, coerce_messages
from openai_service.types.run import Run, RunStatus, Thread
from openai_service.types.tool import ToolChoice, ToolDefinition, ToolOutput, tools_to_wire

if TYPE_CHECKING:
    from collections.abc import Sequence

    from openai_service.client.cancel import CancelToken
    from openai_service.transport import EndpointResolver, HttpExecutor

logger = get_logger(__name__)

StatusCallback = Callable[[Run], Awaitable[None] | None]


@dataclass
class AssistantResult:
    """Outcome of a completed assistant run.

    Attributes:
        thread_id: Thread the run executed on (persist it to resume later)
        run: Final run snapshot
        messages: Thread messages in ascending order
    """

    thread_id: str
    run: Run
    messages: list[dict[str, Any]] = field(default_factory=list)


def _require_id(data: Any) -> str | None:
    if isinstance(data, dict):
        value = data.get("id")
        if isinstance(value, str) and value:
            return value
    return None


class ThreadRunner:
    """Runs the threads workflow for one API key.

    A runner holds no state shared between runs except ``last_run``, the
    most recent snapshot seen by this instance. Use one runner per
    concurrent run if that snapshot matters.

    Example:
        >>> runner = ThreadRunner(executor, resolver, api_key="sk-...")
        >>> thread = await runner.create_thread()
        >>> await runner.append_messages(thread.id, [Message.user("Hi")])
        >>> run = await runner.start_run(thread.id, "asst_123", model="gpt-4o")
        >>> await runner.poll_until_complete(thread.id, run.id, dispatcher)
        >>> messages = await runner.fetch_messages(thread.id)
    """

    def __init__(
        self,
        executor: HttpExecutor,
        resolver: EndpointResolver,
        api_key: str,
        *,
        retries: int = 3,
        timeout: float | None = None,
        poll: PollConfig | None = None,
        beta: str | None = DEFAULT_ASSISTANTS_BETA,
        sleep: Callable[[float], Awaitable[Any]] | None = None,
        on_status: StatusCallback | None = None,
    ) -> None:
        """Initialize the runner.

        Args:
            executor: HTTP executor shared with the rest of the service
            resolver: Endpoint resolver providing the threads base URL
            api_key: Assistants API key
            retries: Attempts per HTTP request
            timeout: Per-request timeout in seconds
            poll: Poll cadence and ceiling
            beta: ``OpenAI-Beta`` header value for thread calls
            sleep: Sleep coroutine between polls, replaceable in tests
            on_status: Callback invoked with every polled run snapshot

        Raises:
            ConfigurationError: If the API key is empty
        """
        if not api_key:
            raise ConfigurationError(
                'Missing OpenAI API key for request type "assistant"',
                setting="assistants_api_key",
            )
        self._executor = executor
        self._resolver = resolver
        self._api_key = api_key
        self._retries = retries
        self._timeout = timeout
        self._poll = poll or PollConfig()
        self._beta = beta
        self._sleep = sleep or asyncio.sleep
        self._on_status = on_status
        self.last_run: Run | None = None

    @property
    def poll_config(self) -> PollConfig:
        return self._poll

    async def _post(self, url: str, payload: dict[str, Any]) -> Any:
        return await self._executor.send(
            self._api_key,
            url,
            payload,
            retries=self._retries,
            timeout=self._timeout,
            beta=self._beta,
        )

    async def _get(self, url: str, params: dict[str, Any] | None = None) -> Any:
        return await self._executor.get(
            self._api_key,
            url,
            params=params,
            retries=self._retries,
            timeout=self._timeout,
            beta=self._beta,
        )

    async def create_thread(self, metadata: dict[str, str] | None = None) -> Thread:
        """Create an empty thread.

        Raises:
            ThreadCreationError: If the response carries no thread id
        """
        payload: dict[str, Any] = {"metadata": metadata} if metadata else {}
        data = await self._post(self._resolver.threads_url(), payload)
        thread_id = _require_id(data)
        if thread_id is None:
            raise ThreadCreationError(body=data)
        logger.info("Created assistant thread", thread_id=thread_id)
        return Thread(id=thread_id, raw=data)

    async def append_messages(
        self,
        thread_id: str,
        messages: Sequence[Message | dict[str, Any]],
    ) -> list[Any]:
        """Append messages to a thread, one request per message, in order.

        All messages are validated before the first request. If a request
        fails partway, earlier messages stay on the thread.

        Returns:
            Created message records

        Raises:
            ValidationError: If any message is invalid
            TransportError: If a request fails after retries
        """
        validated = coerce_messages(messages)
        url = self._resolver.threads_url(thread_id, "messages")
        created = []
        for message in validated:
            created.append(await self._post(url, message.to_thread()))
        logger.debug("Appended thread messages", thread_id=thread_id, count=len(created))
        return created

    async def start_run(
        self,
        thread_id: str,
        assistant_id: str,
        *,
        model: str | None = None,
        tools: list[ToolDefinition | dict[str, Any]] | None = None,
        tool_choice: ToolChoice | str = ToolChoice.AUTO,
        instructions: str | None = None,
        temperature: float | None = None,
        top_p: float | None = None,
    ) -> Run:
        """Start a run of an assistant on a thread.

        Raises:
            RunCreationError: If the response carries no run id
        """
        payload: dict[str, Any] = {
            "assistant_id": assistant_id,
            "tool_choice": ToolChoice(tool_choice).value,
        }
        if model:
            payload["model"] = model
        if tools is not None:
            payload["tools"] = tools_to_wire(tools)
        if instructions is not None:
            payload["instructions"] = instructions
        if temperature is not None:
            payload["temperature"] = temperature
        if top_p is not None:
            payload["top_p"] = top_p

        data = await self._post(self._resolver.threads_url(thread_id, "runs"), payload)
        if _require_id(data) is None:
            raise RunCreationError(thread_id=thread_id, body=data)

        run = Run.from_api(data, thread_id=thread_id)
        self.last_run = run
        logger.info(
            "Started assistant run",
            thread_id=thread_id,
            run_id=run.id,
            assistant_id=assistant_id,
            status=run.status.value,
        )
        return run

    async def get_run(self, thread_id: str, run_id: str) -> Run:
        """Fetch the current run snapshot."""
        data = await self._get(self._resolver.threads_url(thread_id, "runs", run_id))
        return Run.from_api(data if isinstance(data, dict) else {}, thread_id=thread_id)

    async def submit_tool_outputs(
        self,
        thread_id: str,
        run_id: str,
        outputs: list[ToolOutput],
    ) -> Run:
        """Submit a batch of tool outputs to a run waiting on them."""
        url = self._resolver.threads_url(thread_id, "runs", run_id, "submit_tool_outputs")
        data = await self._post(url, {"tool_outputs": [o.to_wire() for o in outputs]})
        logger.info("Submitted tool outputs", run_id=run_id, count=len(outputs))
        return Run.from_api(data if isinstance(data, dict) else {}, thread_id=thread_id)

    async def cancel_run(self, thread_id: str, run_id: str) -> Run:
        """Ask the API to cancel a run."""
        url = self._resolver.threads_url(thread_id, "runs", run_id, "cancel")
        data = await self._post(url, {})
        logger.info("Requested remote run cancellation", run_id=run_id)
        return Run.from_api(data if isinstance(data, dict) else {}, thread_id=thread_id)

    async def _wait_before_poll(
        self,
        attempt: int,
        cancel_token: CancelToken | None,
        thread_id: str,
        run_id: str,
    ) -> None:
        delay = self._poll.delay(attempt)
        if cancel_token is None:
            await self._sleep(delay)
            return
        if cancel_token.is_cancelled or await cancel_token.wait_with_timeout(delay):
            reason = cancel_token.reason.value if cancel_token.reason else None
            logger.warning("Run polling cancelled", run_id=run_id, reason=reason)
            raise RunCancelledError(reason, thread_id=thread_id, run_id=run_id)

    async def _notify(self, run: Run) -> None:
        if self._on_status is None:
            return
        result = self._on_status(run)
        if inspect.isawaitable(result):
            await result

    async def _handle_required_action(
        self,
        thread_id: str,
        run_id: str,
        run: Run,
        dispatcher: ToolDispatcher,
        submitted: set[str],
    ) -> None:
        pending = run.pending_tool_calls()
        fresh = [call for call in pending if call.id not in submitted]
        if not fresh:
            return

        outputs = await dispatcher.dispatch_all(fresh)
        submitted.update(call.id for call in fresh)
        if len(outputs) < len(fresh):
            logger.warning(
                "Submitting partial tool outputs",
                run_id=run_id,
                requested=len(fresh),
                answered=len(outputs),
            )
        await self.submit_tool_outputs(thread_id, run_id, outputs)

    async def poll_until_complete(
        self,
        thread_id: str,
        run_id: str,
        dispatcher: ToolDispatcher | None = None,
        *,
        cancel_token: CancelToken | None = None,
    ) -> Run:
        """Poll a run until it completes, answering tool calls on the way.

        Each poll sleeps for the configured interval first. ``requires_action``
        dispatches the pending tool calls not yet answered in this run and
        submits their outputs in one batch, then polling continues.

        Returns:
            The completed run

        Raises:
            RunFailedError: On failed, cancelled, expired or incomplete
            PollTimeoutError: When max_attempts polls see no terminal status
            RunCancelledError: When the cancel token is set
            UnhandledToolCallError / ToolExecutionError: From tool dispatch
            TransportError: When a poll request fails after retries
        """
        dispatcher = dispatcher or ToolDispatcher(ToolRegistry())
        submitted: set[str] = set()
        last_status: RunStatus | None = None

        with log_context(thread_id=thread_id, run_id=run_id):
            for attempt in range(self._poll.max_attempts):
                await self._wait_before_poll(attempt, cancel_token, thread_id, run_id)

                run = await self.get_run(thread_id, run_id)
                self.last_run = run
                if run.status is not last_status:
                    logger.debug("Run status changed", status=run.status.value, attempt=attempt + 1)
                last_status = run.status
                await self._notify(run)

                if run.status is RunStatus.COMPLETED:
                    logger.info("Assistant run completed", polls=attempt + 1)
                    return run
                if run.status.is_failure:
                    logger.error("Assistant run failed", status=run.status.value, last_error=run.last_error)
                    raise RunFailedError(
                        run.status.value, run.raw, thread_id=thread_id, run_id=run_id
                    )
                if run.status is RunStatus.REQUIRES_ACTION:
                    await self._handle_required_action(thread_id, run_id, run, dispatcher, submitted)

        raise PollTimeoutError(
            self._poll.max_attempts,
            last_status.value if last_status else None,
            thread_id=thread_id,
            run_id=run_id,
        )

    async def fetch_messages(
        self,
        thread_id: str,
        *,
        limit: int = 100,
        order: str = "asc",
    ) -> list[dict[str, Any]]:
        """Fetch the thread's messages as raw records."""
        data = await self._get(
            self._resolver.threads_url(thread_id, "messages"),
            params={"limit": limit, "order": order},
        )
        if not isinstance(data, dict):
            return []
        return list(data.get("data") or [])

    async def run(
        self,
        assistant_id: str,
        messages: Sequence[Message | dict[str, Any]],
        *,
        dispatcher: ToolDispatcher | None = None,
        tools: list[ToolDefinition | dict[str, Any]] | None = None,
        model: str | None = None,
        tool_choice: ToolChoice | str = ToolChoice.AUTO,
        instructions: str | None = None,
        temperature: float | None = None,
        top_p: float | None = None,
        thread_id: str | None = None,
        metadata: dict[str, str] | None = None,
        cancel_token: CancelToken | None = None,
        message_limit: int = 100,
    ) -> AssistantResult:
        """Run the full thread flow and return the thread's messages.

        Passing ``thread_id`` appends to an existing thread instead of
        creating one.

        Raises:
            ValidationError: If assistant_id or messages are invalid,
                before any request is sent
        """
        if not isinstance(assistant_id, str) or not assistant_id.strip():
            raise ValidationError(
                "Missing or invalid 'assistant_id' parameter",
                field="assistant_id",
                expected="non-empty string",
            )
        validated = coerce_messages(messages)

        with log_context(assistant_id=assistant_id, model=model):
            if thread_id is None:
                thread_id = (await self.create_thread(metadata)).id
            await self.append_messages(thread_id, validated)
            run = await self.start_run(
                thread_id,
                assistant_id,
                model=model,
                tools=tools,
                tool_choice=tool_choice,
                instructions=instructions,
                temperature=temperature,
                top_p=top_p,
            )
            final = await self.poll_until_complete(
                thread_id, run.id, dispatcher, cancel_token=cancel_token
            )
            thread_messages = await self.fetch_messages(thread_id, limit=message_limit)

        return AssistantResult(thread_id=thread_id, run=final, messages=thread_messages)
