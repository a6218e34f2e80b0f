"""Tests for message, tool and run types."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from openai_service.errors import ValidationError
from openai_service.types import (
    ImageUrlPart,
    Message,
    MessageRole,
    Run,
    RunStatus,
    TextPart,
    ToolCall,
    ToolDefinition,
    ToolOutput,
    coerce_messages,
    normalize_content,
    tools_to_wire,
)


class TestNormalizeContent:
    """Tests for content normalization."""

    def test_string(self) -> None:
        assert normalize_content("Hello") == [{"type": "text", "text": "Hello"}]

    def test_parts(self) -> None:
        parts = [TextPart(text="Look"), ImageUrlPart(url="https://example.com/a.png")]
        assert normalize_content(parts) == [
            {"type": "text", "text": "Look"},
            {"type": "image_url", "image_url": {"url": "https://example.com/a.png", "detail": "auto"}},
        ]

    def test_dicts_pass_through(self) -> None:
        parts = [{"type": "image_file", "image_file": {"file_id": "file_1"}}]
        assert normalize_content(parts) == parts

    @pytest.mark.parametrize(
        "content",
        ["Hello", [TextPart(text="a"), {"type": "text", "text": "b"}]],
    )
    def test_idempotent(self, content) -> None:
        once = normalize_content(content)
        assert normalize_content(once) == once


class TestMessage:
    """Tests for Message."""

    def test_factories(self) -> None:
        assert Message.system("s").role == "system"
        assert Message.user("u").role == "user"
        assert Message.assistant("a").role == "assistant"

    def test_empty_content_rejected(self) -> None:
        with pytest.raises(PydanticValidationError):
            Message.user("   ")

    def test_to_chat_keeps_string(self) -> None:
        assert Message.user("Hi").to_chat() == {"role": "user", "content": "Hi"}

    def test_to_thread_normalizes(self) -> None:
        assert Message.user("Hi").to_thread() == {
            "role": "user",
            "content": [{"type": "text", "text": "Hi"}],
        }

    def test_get_text_content(self) -> None:
        msg = Message.with_content(
            MessageRole.USER,
            [TextPart(text="one"), ImageUrlPart(url="https://x"), {"type": "text", "text": "two"}],
        )
        assert msg.get_text_content() == "one\ntwo"

    def test_coerce_mapping(self) -> None:
        msg = Message.coerce({"role": "user", "content": "Hi"})
        assert isinstance(msg, Message)
        assert msg.content == "Hi"

    def test_coerce_invalid_role(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            Message.coerce({"role": "wizard", "content": "Hi"}, 2)
        assert exc_info.value.field == "messages[2].role"

    def test_coerce_keeps_dict_parts_unchanged(self) -> None:
        parts = [
            {"type": "text", "text": "hi", "annotations": []},
            {"type": "image_url", "image_url": {"url": "https://x", "detail": "low"}},
        ]
        msg = Message.coerce({"role": "user", "content": parts})

        assert msg.to_thread()["content"] == parts
        assert msg.to_chat()["content"] == parts

    @pytest.mark.parametrize(
        "parts",
        [
            [{"type": "text", "text": ""}],
            [{"type": "text", "text": "  "}],
            [{"type": "text"}],
            [TextPart(text="")],
            ["just a string"],
        ],
    )
    def test_coerce_rejects_bad_parts(self, parts) -> None:
        with pytest.raises(ValidationError) as exc_info:
            Message.coerce({"role": "user", "content": parts}, 0)
        assert exc_info.value.field == "messages[0].content"

    def test_coerce_non_mapping(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            Message.coerce(42, 0)
        assert exc_info.value.field == "messages[0]"


class TestCoerceMessages:
    """Tests for message list validation."""

    @pytest.mark.parametrize("value", [None, [], "hello", b"hello", {"role": "user", "content": "x"}])
    def test_rejects(self, value) -> None:
        with pytest.raises(ValidationError):
            coerce_messages(value)

    def test_mixed(self) -> None:
        messages = coerce_messages([Message.user("a"), {"role": "assistant", "content": "b"}])
        assert [m.role for m in messages] == ["user", "assistant"]


class TestTools:
    """Tests for tool types."""

    def test_definition_wire(self) -> None:
        tool = ToolDefinition.from_function(
            name="get_weather",
            description="Get weather",
            parameters={"type": "object", "properties": {"city": {"type": "string"}}},
        )
        assert tool.name == "get_weather"
        assert tool.to_wire() == {
            "type": "function",
            "function": {
                "name": "get_weather",
                "description": "Get weather",
                "parameters": {"type": "object", "properties": {"city": {"type": "string"}}},
            },
        }

    def test_tools_to_wire_passes_dicts(self) -> None:
        assert tools_to_wire([{"type": "code_interpreter"}]) == [{"type": "code_interpreter"}]
        assert tools_to_wire(None) == []

    def test_tool_call_from_openai_format(self) -> None:
        call = ToolCall.from_openai_format(
            {"id": "call_1", "type": "function", "function": {"name": "f", "arguments": '{"a": 1}'}}
        )
        assert call.name == "f"
        assert call.arguments == {"a": 1}
        assert call.arguments_raw == '{"a": 1}'

    def test_tool_call_bad_arguments(self) -> None:
        call = ToolCall.from_openai_format({"id": "call_1", "function": {"name": "f", "arguments": "{oops"}})
        assert call.arguments == {}
        assert call.arguments_raw == "{oops"

    def test_tool_output_wire(self) -> None:
        assert ToolOutput(tool_call_id="call_1", output="ok").to_wire() == {
            "tool_call_id": "call_1",
            "output": "ok",
        }


class TestRun:
    """Tests for run snapshots."""

    def test_status_parse(self) -> None:
        assert RunStatus.parse("requires_action") is RunStatus.REQUIRES_ACTION
        assert RunStatus.parse("something_new") is RunStatus.UNKNOWN
        assert RunStatus.parse(None) is RunStatus.UNKNOWN

    @pytest.mark.parametrize("status", ["failed", "cancelled", "expired", "incomplete"])
    def test_failure_statuses(self, status) -> None:
        assert RunStatus(status).is_failure
        assert RunStatus(status).is_terminal

    @pytest.mark.parametrize("status", ["queued", "in_progress", "requires_action", "cancelling"])
    def test_non_terminal_statuses(self, status) -> None:
        assert not RunStatus(status).is_terminal

    def test_pending_tool_calls(self) -> None:
        run = Run.from_api(
            {
                "id": "run_1",
                "status": "requires_action",
                "required_action": {
                    "type": "submit_tool_outputs",
                    "submit_tool_outputs": {
                        "tool_calls": [
                            {"id": "call_1", "type": "function", "function": {"name": "a", "arguments": "{}"}},
                            {"id": "call_2", "type": "function", "function": {"name": "b", "arguments": "{}"}},
                        ]
                    },
                },
            },
            thread_id="thread_1",
        )
        assert run.thread_id == "thread_1"
        assert [c.id for c in run.pending_tool_calls()] == ["call_1", "call_2"]

    def test_no_pending_calls_outside_requires_action(self) -> None:
        run = Run.from_api({"id": "run_1", "status": "in_progress"})
        assert run.pending_tool_calls() == []
