"""openai-service: async client for the OpenAI HTTP API.

Passthrough calls for completions, embeddings, moderations and images,
plus an assistant thread runner that polls runs to completion and answers
tool calls with local handlers.
"""
from __future__ import annotations

from openai_service.client import (
    AssistantRequestBuilder,
    CancelToken,
    OpenAIService,
    create_cancel_pair,
)
from openai_service.config import PollConfig, RequestConfig, ServiceConfig, load_config
from openai_service.errors import (
    ConfigurationError,
    OpenAIServiceError,
    PollTimeoutError,
    RunCancelledError,
    RunFailedError,
    TransportError,
    ValidationError,
)
from openai_service.threads import AssistantResult, ThreadRunner
from openai_service.tools import ToolDispatcher, ToolRegistry, UnhandledToolPolicy
from openai_service.transport import ApiResult, RequestType
from openai_service.types import Message, MessageRole, ToolCall, ToolDefinition

__version__ = "0.1.0"

__all__ = [
    # Client
    "AssistantRequestBuilder",
    "CancelToken",
    "OpenAIService",
    "create_cancel_pair",
    # Config
    "PollConfig",
    "RequestConfig",
    "ServiceConfig",
    "load_config",
    # Errors
    "ConfigurationError",
    "OpenAIServiceError",
    "PollTimeoutError",
    "RunCancelledError",
    "RunFailedError",
    "TransportError",
    "ValidationError",
    # Threads
    "AssistantResult",
    "ThreadRunner",
    # Tools
    "ToolDispatcher",
    "ToolRegistry",
    "UnhandledToolPolicy",
    # Transport
    "ApiResult",
    "RequestType",
    # Types
    "Message",
    "MessageRole",
    "ToolCall",
    "ToolDefinition",
    # Version
    "__version__",
]
