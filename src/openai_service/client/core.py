"""
OpenAIService facade.

Entry point for chat completions, embeddings, moderations, image
generation and assistant thread runs.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from openai_service.client.builder import AssistantRequestBuilder
from openai_service.config import RequestConfig, ServiceConfig
from openai_service.errors import UnknownRequestTypeError, ValidationError
from openai_service.threads import AssistantResult, ThreadRunner
from openai_service.tools import ToolDispatcher, ToolRegistry, UnhandledToolPolicy
from openai_service.transport import ApiResult, EndpointResolver, HttpExecutor, RequestType
from openai_service.types.message import coerce_messages

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Mapping, Sequence

    from openai_service.client.cancel import CancelToken
    from openai_service.config import PollConfig
    from openai_service.threads import StatusCallback
    from openai_service.tools import ToolHandler
    from openai_service.types.message import Message
    from openai_service.types.tool import ToolDefinition

DEFAULT_EMBEDDING_MODEL = "text-embedding-3-small"


def _require_input(value: Any, field: str) -> None:
    if value is None or (isinstance(value, (str, list)) and not value):
        raise ValidationError(
            f"Missing or invalid '{field}' parameter",
            field=field,
            expected="non-empty string or list",
        )


class OpenAIService:
    """Client for the OpenAI HTTP API.

    Configuration is resolved once at construction; every call builds a
    fresh RequestConfig from those defaults and its own overrides.

    Example:
        >>> async with OpenAIService(ServiceConfig.from_env()) as service:
        ...     reply = await service.completion([Message.user("Hello!")])
        ...     messages = await service.assistant(
        ...         "asst_123",
        ...         [{"role": "user", "content": "What's the weather in Paris?"}],
        ...         tool_handlers={"get_weather": lambda args: {"temp_c": 21}},
        ...     )
    """

    def __init__(
        self,
        config: ServiceConfig | None = None,
        *,
        executor: HttpExecutor | None = None,
        sleep: Callable[[float], Awaitable[Any]] | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            config: Service configuration (default: from environment)
            executor: HTTP executor to share (default: one owned by the service)
            sleep: Sleep coroutine used between polls and after transport faults
        """
        self._config = config if config is not None else ServiceConfig.from_env()
        self._resolver = EndpointResolver(self._config.endpoints)
        self._owns_executor = executor is None
        self._executor = executor or HttpExecutor(
            timeout=self._config.timeout,
            backoff=self._config.transport_backoff,
            sleep=sleep,
        )
        self._sleep = sleep

    @property
    def config(self) -> ServiceConfig:
        return self._config

    @property
    def resolver(self) -> EndpointResolver:
        return self._resolver

    async def close(self) -> None:
        """Close the HTTP executor if the service created it."""
        if self._owns_executor:
            await self._executor.close()

    async def __aenter__(self) -> OpenAIService:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def _execute(
        self,
        request_type: RequestType,
        config: RequestConfig,
        payload: dict[str, Any],
    ) -> ApiResult:
        return await self._executor.execute(
            config.api_key,
            self._resolver.resolve(request_type),
            payload,
            retries=config.retries,
            timeout=config.timeout,
        )

    async def request(
        self,
        request_type: RequestType | str,
        payload: dict[str, Any],
        *,
        api_key: str | None = None,
        retries: int | None = None,
        timeout: float | None = None,
    ) -> ApiResult:
        """Send a raw payload to a passthrough endpoint.

        Failures are reported in the returned ApiResult rather than raised.

        Raises:
            UnknownRequestTypeError: For unknown or thread request types
            ConfigurationError: If no API key resolves
        """
        rtype = RequestType.parse(request_type)
        if rtype.is_thread:
            raise UnknownRequestTypeError(rtype.value).with_hint(
                "use assistant() or threads() for thread requests"
            )
        config = RequestConfig.resolve(
            self._config, rtype, api_key=api_key, retries=retries, timeout=timeout
        )
        return await self._execute(rtype, config, payload)

    async def completion(
        self,
        messages: Sequence[Message | Mapping[str, Any]],
        *,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        top_p: float | None = None,
        api_key: str | None = None,
        retries: int | None = None,
        timeout: float | None = None,
        **extra: Any,
    ) -> dict[str, Any]:
        """Create a chat completion.

        Extra keyword arguments are added to the request body as is.

        Raises:
            ValidationError: If messages are empty or malformed
            ConfigurationError: If no completions API key resolves
            TransportError: If every attempt failed
        """
        validated = coerce_messages(messages)
        config = RequestConfig.resolve(
            self._config,
            RequestType.COMPLETION,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            top_p=top_p,
            api_key=api_key,
            retries=retries,
            timeout=timeout,
        )
        payload = {
            "model": config.model,
            "messages": [m.to_chat() for m in validated],
            "temperature": config.temperature,
            "max_tokens": config.max_tokens,
            "top_p": config.top_p,
            **extra,
        }
        result = await self._execute(RequestType.COMPLETION, config, payload)
        return result.unwrap()

    async def embedding(
        self,
        input: str | list[str],
        *,
        model: str = DEFAULT_EMBEDDING_MODEL,
        api_key: str | None = None,
        retries: int | None = None,
        timeout: float | None = None,
        **extra: Any,
    ) -> dict[str, Any]:
        """Create embeddings for one or more inputs."""
        _require_input(input, "input")
        config = RequestConfig.resolve(
            self._config,
            RequestType.EMBEDDING,
            model=model,
            api_key=api_key,
            retries=retries,
            timeout=timeout,
        )
        payload = {"model": config.model, "input": input, **extra}
        return (await self._execute(RequestType.EMBEDDING, config, payload)).unwrap()

    async def moderation(
        self,
        input: str | list[Any],
        *,
        model: str | None = None,
        api_key: str | None = None,
        retries: int | None = None,
        timeout: float | None = None,
        **extra: Any,
    ) -> dict[str, Any]:
        """Classify input with the moderation endpoint."""
        _require_input(input, "input")
        config = RequestConfig.resolve(
            self._config,
            RequestType.MODERATION,
            model=model,
            api_key=api_key,
            retries=retries,
            timeout=timeout,
        )
        payload: dict[str, Any] = {"input": input, **extra}
        if config.model:
            payload["model"] = config.model
        return (await self._execute(RequestType.MODERATION, config, payload)).unwrap()

    async def images(
        self,
        prompt: str,
        *,
        model: str | None = None,
        n: int | None = None,
        size: str | None = None,
        api_key: str | None = None,
        retries: int | None = None,
        timeout: float | None = None,
        **extra: Any,
    ) -> dict[str, Any]:
        """Generate images from a prompt."""
        _require_input(prompt, "prompt")
        config = RequestConfig.resolve(
            self._config,
            RequestType.IMAGES,
            model=model,
            api_key=api_key,
            retries=retries,
            timeout=timeout,
        )
        payload: dict[str, Any] = {"prompt": prompt, **extra}
        if config.model:
            payload["model"] = config.model
        if n is not None:
            payload["n"] = n
        if size is not None:
            payload["size"] = size
        return (await self._execute(RequestType.IMAGES, config, payload)).unwrap()

    def threads(
        self,
        *,
        api_key: str | None = None,
        retries: int | None = None,
        timeout: float | None = None,
        poll: PollConfig | None = None,
        on_status: StatusCallback | None = None,
    ) -> ThreadRunner:
        """Get a ThreadRunner for manual control of the thread flow.

        Raises:
            ConfigurationError: If no assistants API key resolves
        """
        config = RequestConfig.resolve(
            self._config,
            RequestType.THREADS,
            api_key=api_key,
            retries=retries,
            timeout=timeout,
        )
        return ThreadRunner(
            self._executor,
            self._resolver,
            config.api_key,
            retries=config.retries,
            timeout=config.timeout,
            poll=poll or self._config.poll,
            beta=self._config.assistants_beta,
            sleep=self._sleep,
            on_status=on_status,
        )

    async def assistant_run(
        self,
        assistant_id: str,
        messages: Sequence[Message | Mapping[str, Any]],
        *,
        tools: list[ToolDefinition | dict[str, Any]] | None = None,
        tool_handlers: ToolRegistry | Mapping[str, ToolHandler] | None = None,
        model: str | None = None,
        strict_tools: bool = False,
        instructions: str | None = None,
        temperature: float | None = None,
        top_p: float | None = None,
        thread_id: str | None = None,
        metadata: dict[str, str] | None = None,
        cancel_token: CancelToken | None = None,
        on_status: StatusCallback | None = None,
        poll: PollConfig | None = None,
        api_key: str | None = None,
        retries: int | None = None,
        timeout: float | None = None,
    ) -> AssistantResult:
        """Run an assistant on a thread and return the full result.

        When ``tools`` is not given and ``tool_handlers`` is a ToolRegistry
        with definitions, those definitions are sent with the run.

        Raises:
            ValidationError: If assistant_id or messages are invalid
            ConfigurationError: If no assistants API key resolves
            RunFailedError / PollTimeoutError / RunCancelledError: From polling
        """
        if not isinstance(assistant_id, str) or not assistant_id.strip():
            raise ValidationError(
                "Missing or invalid 'assistant_id' parameter",
                field="assistant_id",
                expected="non-empty string",
            )
        validated = coerce_messages(messages)

        config = RequestConfig.resolve(
            self._config,
            RequestType.ASSISTANT,
            model=model,
            api_key=api_key,
            retries=retries,
            timeout=timeout,
        )

        if isinstance(tool_handlers, ToolRegistry):
            registry = tool_handlers
        else:
            registry = ToolRegistry.from_handlers(tool_handlers)
        if tools is None and registry.definitions():
            tools = list(registry.definitions())

        dispatcher = ToolDispatcher(
            registry,
            UnhandledToolPolicy.RAISE if strict_tools else UnhandledToolPolicy.SKIP,
        )
        runner = self.threads(
            api_key=config.api_key,
            retries=config.retries,
            timeout=config.timeout,
            poll=poll,
            on_status=on_status,
        )
        return await runner.run(
            assistant_id,
            validated,
            dispatcher=dispatcher,
            tools=tools,
            model=config.model,
            instructions=instructions,
            temperature=temperature,
            top_p=top_p,
            thread_id=thread_id,
            metadata=metadata,
            cancel_token=cancel_token,
        )

    async def assistant(
        self,
        assistant_id: str,
        messages: Sequence[Message | Mapping[str, Any]],
        **options: Any,
    ) -> list[dict[str, Any]]:
        """Run an assistant on a new thread and return the thread's messages.

        Accepts the same options as ``assistant_run``.
        """
        result = await self.assistant_run(assistant_id, messages, **options)
        return result.messages

    def assistant_request(self) -> AssistantRequestBuilder:
        """Start building an assistant run.

        Example:
            >>> messages = await (
            ...     service.assistant_request()
            ...     .assistant("asst_123")
            ...     .message("user", "Hi")
            ...     .tool(weather_tool, get_weather)
            ...     .execute()
            ... )
        """
        return AssistantRequestBuilder(self)
