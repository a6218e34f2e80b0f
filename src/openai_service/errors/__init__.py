"""
Error hierarchy for openai-service.

Every failure surfaced by the library is a subclass of OpenAIServiceError.
"""

from openai_service.errors.base import (
    ConfigurationError,
    ErrorContext,
    OpenAIServiceError,
    PollTimeoutError,
    RunCancelledError,
    RunCreationError,
    RunFailedError,
    ThreadCreationError,
    ToolExecutionError,
    TransportError,
    UnhandledToolCallError,
    UnknownRequestTypeError,
    ValidationError,
)

__all__ = [
    "ConfigurationError",
    "ErrorContext",
    "OpenAIServiceError",
    "PollTimeoutError",
    "RunCancelledError",
    "RunCreationError",
    "RunFailedError",
    "ThreadCreationError",
    "ToolExecutionError",
    "TransportError",
    "UnhandledToolCallError",
    "UnknownRequestTypeError",
    "ValidationError",
]
