"""
Tool call dispatch.

Invokes registered handlers for tool calls surfaced by a run and wraps
their results as serialized outputs.
"""

from __future__ import annotations

import inspect
import json
from enum import Enum
from typing import TYPE_CHECKING, Any

from openai_service.errors import ToolExecutionError, UnhandledToolCallError
from openai_service.telemetry import get_logger
from openai_service.types.tool import ToolCall, ToolOutput

if TYPE_CHECKING:
    from collections.abc import Iterable

    from openai_service.tools.registry import ToolRegistry

logger = get_logger(__name__)


class UnhandledToolPolicy(str, Enum):
    """What to do with a tool call that has no registered handler."""

    SKIP = "skip"
    RAISE = "raise"


def serialize_output(value: Any) -> str:
    """Convert a handler result to the string submitted to the API."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value, default=str)


class ToolDispatcher:
    """Dispatches tool calls to handlers in a registry.

    Handlers receive the decoded arguments as a single positional value and
    may be plain functions or coroutines.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        policy: UnhandledToolPolicy = UnhandledToolPolicy.SKIP,
    ) -> None:
        self._registry = registry
        self._policy = UnhandledToolPolicy(policy)

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    @property
    def policy(self) -> UnhandledToolPolicy:
        return self._policy

    async def dispatch(self, call: ToolCall) -> ToolOutput | None:
        """Invoke the handler for a tool call.

        Returns:
            The serialized output, or None when the call is skipped

        Raises:
            UnhandledToolCallError: If no handler exists and policy is RAISE
            ToolExecutionError: If the handler raised
        """
        handler = self._registry.get(call.name)
        if handler is None:
            if self._policy is UnhandledToolPolicy.RAISE:
                raise UnhandledToolCallError(call.name, call.id)
            logger.warning("Skipping tool call without handler", tool=call.name, tool_call_id=call.id)
            return None

        logger.debug("Dispatching tool call", tool=call.name, tool_call_id=call.id)
        try:
            result = handler(call.arguments)
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            raise ToolExecutionError(call.name, call.id, e) from e

        return ToolOutput(tool_call_id=call.id, output=serialize_output(result))

    async def dispatch_all(self, calls: Iterable[ToolCall]) -> list[ToolOutput]:
        """Dispatch calls in order, dropping skipped ones."""
        outputs: list[ToolOutput] = []
        for call in calls:
            output = await self.dispatch(call)
            if output is not None:
                outputs.append(output)
        return outputs
