"""
Tool types for function calling in assistant runs.

Covers tool definitions sent when a run starts, tool calls surfaced while a
run is in ``requires_action``, and the outputs submitted back.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ToolChoice(str, Enum):
    """Tool choice policy for runs."""

    AUTO = "auto"
    NONE = "none"
    REQUIRED = "required"


class FunctionDefinition(BaseModel):
    """Function definition within a tool.

    Defines the schema for a callable function including:
    - name: Function identifier
    - description: What the function does
    - parameters: JSON Schema for function parameters
    """

    model_config = ConfigDict(extra="allow")

    name: str = Field(description="Function name")
    description: str | None = Field(default=None, description="Function description")
    parameters: dict[str, Any] = Field(
        default_factory=lambda: {"type": "object", "properties": {}},
        description="JSON Schema for parameters",
    )
    strict: bool | None = Field(
        default=None,
        description="Whether to enforce strict schema validation",
    )


class ToolDefinition(BaseModel):
    """Tool definition for function calling.

    Example:
        >>> tool = ToolDefinition.from_function(
        ...     name="get_weather",
        ...     description="Get weather for a city",
        ...     parameters={
        ...         "type": "object",
        ...         "properties": {"city": {"type": "string"}},
        ...         "required": ["city"]
        ...     }
        ... )
    """

    model_config = ConfigDict(extra="allow")

    type: str = Field(default="function", description="Tool type")
    function: FunctionDefinition | None = Field(default=None, description="Function definition")

    @classmethod
    def from_function(
        cls,
        name: str,
        description: str | None = None,
        parameters: dict[str, Any] | None = None,
        strict: bool | None = None,
    ) -> ToolDefinition:
        """Create a tool definition from function details."""
        func_def = FunctionDefinition(
            name=name,
            description=description,
            parameters=parameters or {"type": "object", "properties": {}},
            strict=strict,
        )
        return cls(function=func_def)

    @property
    def name(self) -> str | None:
        """Get the function name (None for built-in tools)."""
        return self.function.name if self.function else None

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


def tools_to_wire(tools: list[ToolDefinition | dict[str, Any]] | None) -> list[dict[str, Any]]:
    """Serialize tool definitions, passing raw dictionaries through."""
    return [t.to_wire() if isinstance(t, ToolDefinition) else t for t in tools or []]


class ToolCall(BaseModel):
    """A tool call requested by a run.

    Attributes:
        id: Unique identifier for this tool call
        type: Tool type (typically "function")
        name: Name of the function to call
        arguments: Decoded arguments for the function
        arguments_raw: Arguments string as sent by the API
    """

    model_config = ConfigDict(extra="allow")

    id: str = Field(description="Unique tool call identifier")
    type: str = Field(default="function", description="Tool type")
    name: str = Field(description="Name of the function to call")
    arguments: Any = Field(default_factory=dict, description="Decoded function arguments")
    arguments_raw: str | None = Field(default=None, description="Raw arguments string")

    @classmethod
    def from_openai_format(cls, data: dict[str, Any]) -> ToolCall:
        """Create from an OpenAI ``required_action`` tool call entry.

        Malformed JSON arguments decode to an empty dict; the raw string
        is kept for diagnostics.
        """
        function = data.get("function") or {}
        raw = function.get("arguments")

        if isinstance(raw, str):
            try:
                parsed = json.loads(raw) if raw else {}
            except json.JSONDecodeError:
                parsed = {}
            return cls(
                id=data["id"],
                type=data.get("type", "function"),
                name=function.get("name", ""),
                arguments=parsed,
                arguments_raw=raw,
            )
        return cls(
            id=data["id"],
            type=data.get("type", "function"),
            name=function.get("name", ""),
            arguments=raw if raw is not None else {},
        )


class ToolOutput(BaseModel):
    """Serialized result of a tool call, submitted back to the run."""

    tool_call_id: str
    output: str

    def to_wire(self) -> dict[str, Any]:
        return {"tool_call_id": self.tool_call_id, "output": self.output}
