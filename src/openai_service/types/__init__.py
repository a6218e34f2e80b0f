"""
Types layer - data structures shared by the completion and thread flows.

- Message and content parts for conversation handling
- ToolDefinition, ToolCall and ToolOutput for function calling
- Thread, Run and RunStatus for the assistant thread workflow
"""

from openai_service.types.message import (
    ContentPart,
    ImageDetail,
    ImageUrlPart,
    Message,
    MessageContent,
    MessageRole,
    TextPart,
    coerce_messages,
    normalize_content,
)
from openai_service.types.run import Run, RunStatus, Thread
from openai_service.types.tool import (
    FunctionDefinition,
    ToolCall,
    ToolChoice,
    ToolDefinition,
    ToolOutput,
    tools_to_wire,
)

__all__ = [
    "ContentPart",
    "FunctionDefinition",
    "ImageDetail",
    "ImageUrlPart",
    "Message",
    "MessageContent",
    "MessageRole",
    "Run",
    "RunStatus",
    "TextPart",
    "Thread",
    "ToolCall",
    "ToolChoice",
    "ToolDefinition",
    "ToolOutput",
    "coerce_messages",
    "normalize_content",
    "tools_to_wire",
]
