"""
Tools layer - local handlers for tool calls raised during assistant runs.
"""

from openai_service.tools.dispatch import (
    ToolDispatcher,
    UnhandledToolPolicy,
    serialize_output,
)
from openai_service.tools.registry import ToolHandler, ToolRegistry

__all__ = [
    "ToolDispatcher",
    "ToolHandler",
    "ToolRegistry",
    "UnhandledToolPolicy",
    "serialize_output",
]
