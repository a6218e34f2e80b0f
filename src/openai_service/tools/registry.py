"""
Tool handler registry.

Maps tool names to local callables and, optionally, the definitions sent to
the API when a run starts.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from typing import TYPE_CHECKING, Any

from openai_service.errors import ValidationError
from openai_service.types.tool import ToolDefinition

if TYPE_CHECKING:
    from collections.abc import Iterator

ToolHandler = Callable[[dict[str, Any]], Any | Awaitable[Any]]


class ToolRegistry:
    """Registry of tool handlers keyed by function name.

    Example:
        >>> registry = ToolRegistry()
        >>> @registry.tool(description="Get weather for a city",
        ...                parameters={"type": "object",
        ...                            "properties": {"city": {"type": "string"}}})
        ... def get_weather(args):
        ...     return {"city": args["city"], "temp_c": 21}
        >>> registry.definitions()[0].name
        'get_weather'
    """

    def __init__(self) -> None:
        self._handlers: dict[str, ToolHandler] = {}
        self._definitions: dict[str, ToolDefinition] = {}

    @classmethod
    def from_handlers(cls, handlers: Mapping[str, ToolHandler] | None) -> ToolRegistry:
        """Build a registry from a plain name-to-callable mapping."""
        registry = cls()
        for name, handler in (handlers or {}).items():
            registry.register(name, handler)
        return registry

    def register(
        self,
        name: str,
        handler: ToolHandler,
        definition: ToolDefinition | None = None,
    ) -> ToolRegistry:
        """Register a handler.

        Raises:
            ValidationError: If the handler is not callable
        """
        if not callable(handler):
            raise ValidationError(
                f"Handler for tool '{name}' is not callable",
                field=f"tool_handlers.{name}",
                actual=type(handler).__name__,
            )
        self._handlers[name] = handler
        if definition is not None:
            self._definitions[name] = definition
        return self

    def tool(
        self,
        name: str | None = None,
        description: str | None = None,
        parameters: dict[str, Any] | None = None,
    ) -> Callable[[ToolHandler], ToolHandler]:
        """Decorator registering a function as a tool with a definition."""

        def decorator(func: ToolHandler) -> ToolHandler:
            tool_name = name or func.__name__
            definition = ToolDefinition.from_function(
                name=tool_name,
                description=description or (func.__doc__ or "").strip() or None,
                parameters=parameters,
            )
            self.register(tool_name, func, definition)
            return func

        return decorator

    def get(self, name: str) -> ToolHandler | None:
        return self._handlers.get(name)

    def definitions(self) -> list[ToolDefinition]:
        """Definitions of registered tools, in registration order."""
        return list(self._definitions.values())

    def __contains__(self, name: object) -> bool:
        return name in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)

    def __iter__(self) -> Iterator[str]:
        return iter(self._handlers)
