"""Tests for tool registry and dispatch."""

import pytest

from openai_service.errors import ToolExecutionError, UnhandledToolCallError, ValidationError
from openai_service.tools import (
    ToolDispatcher,
    ToolRegistry,
    UnhandledToolPolicy,
    serialize_output,
)
from openai_service.types import ToolCall


def make_call(name: str, call_id: str = "call_1", arguments=None) -> ToolCall:
    return ToolCall(id=call_id, name=name, arguments=arguments or {})


class TestToolRegistry:
    """Tests for ToolRegistry."""

    def test_from_handlers(self) -> None:
        registry = ToolRegistry.from_handlers({"a": lambda args: 1, "b": lambda args: 2})
        assert len(registry) == 2
        assert "a" in registry
        assert list(registry) == ["a", "b"]
        assert registry.definitions() == []

    def test_from_none(self) -> None:
        assert len(ToolRegistry.from_handlers(None)) == 0

    def test_not_callable(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            ToolRegistry().register("a", "not a function")
        assert exc_info.value.field == "tool_handlers.a"

    def test_decorator(self) -> None:
        registry = ToolRegistry()

        @registry.tool(parameters={"type": "object", "properties": {"city": {"type": "string"}}})
        def get_weather(args):
            """Get weather for a city."""
            return "sunny"

        assert registry.get("get_weather") is get_weather
        definition = registry.definitions()[0]
        assert definition.name == "get_weather"
        assert definition.function.description == "Get weather for a city."


class TestSerializeOutput:
    """Tests for output serialization."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (None, ""),
            ("plain", "plain"),
            ({"temp_c": 21}, '{"temp_c": 21}'),
            ([1, 2], "[1, 2]"),
            (3.5, "3.5"),
        ],
    )
    def test_values(self, value, expected) -> None:
        assert serialize_output(value) == expected


class TestToolDispatcher:
    """Tests for ToolDispatcher."""

    @pytest.mark.asyncio
    async def test_dispatch_sync_handler(self) -> None:
        seen = []
        registry = ToolRegistry.from_handlers({"get_weather": lambda args: seen.append(args) or {"temp_c": 21}})
        dispatcher = ToolDispatcher(registry)

        output = await dispatcher.dispatch(make_call("get_weather", arguments={"city": "Paris"}))

        assert seen == [{"city": "Paris"}]
        assert output.tool_call_id == "call_1"
        assert output.output == '{"temp_c": 21}'

    @pytest.mark.asyncio
    async def test_dispatch_async_handler(self) -> None:
        async def lookup(args):
            return "found"

        dispatcher = ToolDispatcher(ToolRegistry.from_handlers({"lookup": lookup}))
        output = await dispatcher.dispatch(make_call("lookup"))
        assert output.output == "found"

    @pytest.mark.asyncio
    async def test_skip_unhandled(self) -> None:
        dispatcher = ToolDispatcher(ToolRegistry())
        assert await dispatcher.dispatch(make_call("missing")) is None

    @pytest.mark.asyncio
    async def test_raise_unhandled(self) -> None:
        dispatcher = ToolDispatcher(ToolRegistry(), UnhandledToolPolicy.RAISE)
        with pytest.raises(UnhandledToolCallError) as exc_info:
            await dispatcher.dispatch(make_call("missing", call_id="call_9"))
        assert exc_info.value.call_id == "call_9"

    @pytest.mark.asyncio
    async def test_handler_error_wrapped(self) -> None:
        def broken(args):
            raise ValueError("bad city")

        dispatcher = ToolDispatcher(ToolRegistry.from_handlers({"broken": broken}))
        with pytest.raises(ToolExecutionError) as exc_info:
            await dispatcher.dispatch(make_call("broken"))
        assert isinstance(exc_info.value.__cause__, ValueError)

    @pytest.mark.asyncio
    async def test_dispatch_all_drops_skipped(self) -> None:
        dispatcher = ToolDispatcher(ToolRegistry.from_handlers({"a": lambda args: "A"}))
        outputs = await dispatcher.dispatch_all(
            [make_call("a", "call_1"), make_call("b", "call_2"), make_call("a", "call_3")]
        )
        assert [(o.tool_call_id, o.output) for o in outputs] == [("call_1", "A"), ("call_3", "A")]
