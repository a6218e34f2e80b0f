"""
Builder for assistant run requests.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from openai_service.tools import ToolRegistry

if TYPE_CHECKING:
    from openai_service.client.cancel import CancelToken
    from openai_service.client.core import OpenAIService
    from openai_service.config import PollConfig
    from openai_service.threads import AssistantResult, StatusCallback
    from openai_service.tools import ToolHandler
    from openai_service.types.message import Message, MessageContent, MessageRole
    from openai_service.types.tool import ToolDefinition


class AssistantRequestBuilder:
    """Fluent builder for assistant runs.

    Example:
        >>> messages = await (
        ...     service.assistant_request()
        ...     .assistant("asst_123")
        ...     .message("user", "What's the weather in Paris?")
        ...     .tool(weather_tool, get_weather)
        ...     .strict_tools()
        ...     .execute()
        ... )
    """

    def __init__(self, service: OpenAIService) -> None:
        self._service = service
        self._assistant_id: str | None = None
        self._messages: list[Message | dict[str, Any]] = []
        self._registry = ToolRegistry()
        self._tools: list[ToolDefinition | dict[str, Any]] = []
        self._options: dict[str, Any] = {}

    def assistant(self, assistant_id: str) -> AssistantRequestBuilder:
        self._assistant_id = assistant_id
        return self

    def messages(self, messages: list[Message | dict[str, Any]]) -> AssistantRequestBuilder:
        """Replace the message list."""
        self._messages = list(messages)
        return self

    def message(self, role: MessageRole | str, content: MessageContent) -> AssistantRequestBuilder:
        """Append one message."""
        self._messages.append({"role": role, "content": content})
        return self

    def tool(
        self,
        definition: ToolDefinition | dict[str, Any],
        handler: ToolHandler | None = None,
    ) -> AssistantRequestBuilder:
        """Add a tool definition and, optionally, its local handler."""
        self._tools.append(definition)
        if handler is not None:
            name = definition.name if hasattr(definition, "name") else (
                (definition.get("function") or {}).get("name")
            )
            if name:
                self._registry.register(name, handler)
        return self

    def handler(self, name: str, handler: ToolHandler) -> AssistantRequestBuilder:
        """Register a handler without sending a definition."""
        self._registry.register(name, handler)
        return self

    def model(self, model: str) -> AssistantRequestBuilder:
        self._options["model"] = model
        return self

    def instructions(self, text: str) -> AssistantRequestBuilder:
        self._options["instructions"] = text
        return self

    def thread(self, thread_id: str) -> AssistantRequestBuilder:
        """Continue an existing thread instead of creating one."""
        self._options["thread_id"] = thread_id
        return self

    def strict_tools(self, enable: bool = True) -> AssistantRequestBuilder:
        """Fail on tool calls without a registered handler."""
        self._options["strict_tools"] = enable
        return self

    def poll(self, poll: PollConfig) -> AssistantRequestBuilder:
        self._options["poll"] = poll
        return self

    def on_status(self, callback: StatusCallback) -> AssistantRequestBuilder:
        self._options["on_status"] = callback
        return self

    def cancel_token(self, token: CancelToken) -> AssistantRequestBuilder:
        self._options["cancel_token"] = token
        return self

    async def execute_with_result(self) -> AssistantResult:
        """Run the assistant and return the full result."""
        return await self._service.assistant_run(
            self._assistant_id or "",
            self._messages,
            tools=self._tools or None,
            tool_handlers=self._registry,
            **self._options,
        )

    async def execute(self) -> list[dict[str, Any]]:
        """Run the assistant and return the thread's messages."""
        return (await self.execute_with_result()).messages
