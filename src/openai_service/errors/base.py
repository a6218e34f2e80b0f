"""
Base error classes for openai-service.

Provides a layered error hierarchy:
- OpenAIServiceError: Base class for all library errors
- ConfigurationError: Missing API keys or malformed configuration
- ValidationError: Missing or malformed caller input
- UnknownRequestTypeError: Request type outside the supported set
- TransportError: HTTP failures surfaced after retries are exhausted
- ThreadCreationError / RunCreationError: Thread flow setup failures
- RunFailedError: Remote-reported terminal run failure
- PollTimeoutError: Poll attempt ceiling exceeded
- RunCancelledError: Local cancellation of a poll loop
- UnhandledToolCallError / ToolExecutionError: Tool dispatch failures
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ErrorContext:
    """Structured error context for diagnostics.

    Provides actionable information for debugging and error handling.
    """

    field_path: str | None = None
    """Path to the problematic field (e.g., 'messages[0].content')"""

    details: dict[str, Any] = field(default_factory=dict)
    """Additional details about the error"""

    source: str | None = None
    """Error source (e.g., 'config', 'transport', 'threads')"""

    hint: str | None = None
    """Actionable hint for resolving the error"""

    def __str__(self) -> str:
        parts = []
        if self.source:
            parts.append(f"[{self.source}]")
        if self.field_path:
            parts.append(f"at '{self.field_path}'")
        if self.hint:
            parts.append(f"(hint: {self.hint})")
        return " ".join(parts)


class OpenAIServiceError(Exception):
    """Base class for all openai-service errors.

    Attributes:
        message: Human-readable error message
        context: Structured error context
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
    ) -> None:
        self.message = message
        self.context = context or ErrorContext()
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        ctx_str = str(self.context)
        if ctx_str:
            return f"{self.message} {ctx_str}"
        return self.message

    def with_hint(self, hint: str) -> OpenAIServiceError:
        """Add a hint to this error."""
        self.context.hint = hint
        self.args = (self._format_message(),)
        return self


class ConfigurationError(OpenAIServiceError):
    """Missing API key or invalid configuration value."""

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        setting: str | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="config")
        if setting:
            ctx.field_path = setting
        super().__init__(message, ctx)
        self.setting = setting


class ValidationError(OpenAIServiceError):
    """Validation error for caller input.

    Raised before any network call when:
    - messages are empty or malformed
    - assistant id is missing
    - message content is empty
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        field: str | None = None,
        expected: Any = None,
        actual: Any = None,
    ) -> None:
        ctx = context or ErrorContext(source="validation")
        if field:
            ctx.field_path = field
        if expected is not None:
            ctx.details["expected"] = expected
        if actual is not None:
            ctx.details["actual"] = actual
        super().__init__(message, ctx)
        self.field = field
        self.expected = expected
        self.actual = actual


class UnknownRequestTypeError(OpenAIServiceError):
    """Request type has no configured endpoint."""

    def __init__(self, request_type: Any) -> None:
        ctx = ErrorContext(source="endpoints")
        ctx.details["request_type"] = str(request_type)
        super().__init__(f'Unknown OpenAI request type "{request_type}"', ctx)
        self.request_type = request_type


class TransportError(OpenAIServiceError):
    """HTTP request failed on every attempt.

    Carries the last observed status code and body, if any response
    was received at all.
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        url: str | None = None,
        status_code: int | None = None,
        attempts: int = 0,
        body: Any = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="transport")
        if url:
            ctx.details["url"] = url
        if status_code:
            ctx.details["status_code"] = status_code
        ctx.details["attempts"] = attempts
        super().__init__(message, ctx)
        self.url = url
        self.status_code = status_code
        self.attempts = attempts
        self.body = body
        self.__cause__ = cause


class ThreadCreationError(OpenAIServiceError):
    """Thread creation response did not contain an id."""

    def __init__(self, message: str = "Failed to create assistant thread", *, body: Any = None) -> None:
        super().__init__(message, ErrorContext(source="threads"))
        self.body = body


class RunCreationError(OpenAIServiceError):
    """Run creation response did not contain an id."""

    def __init__(
        self,
        message: str = "Failed to start assistant run",
        *,
        thread_id: str | None = None,
        body: Any = None,
    ) -> None:
        ctx = ErrorContext(source="threads")
        if thread_id:
            ctx.details["thread_id"] = thread_id
        super().__init__(message, ctx)
        self.thread_id = thread_id
        self.body = body


class RunFailedError(OpenAIServiceError):
    """Run reached a remote-reported failure status.

    Attributes:
        status: Terminal status reported by the API
        body: Last run payload received
    """

    def __init__(
        self,
        status: str,
        body: dict[str, Any] | None = None,
        *,
        thread_id: str | None = None,
        run_id: str | None = None,
    ) -> None:
        ctx = ErrorContext(source="threads")
        ctx.details["status"] = status
        if thread_id:
            ctx.details["thread_id"] = thread_id
        if run_id:
            ctx.details["run_id"] = run_id

        message = f"Assistant run ended with status '{status}'"
        last_error = (body or {}).get("last_error") or {}
        if isinstance(last_error, dict) and last_error.get("message"):
            message = f"{message}: {last_error['message']}"

        super().__init__(message, ctx)
        self.status = status
        self.body = body or {}
        self.thread_id = thread_id
        self.run_id = run_id


class PollTimeoutError(OpenAIServiceError):
    """Run did not reach a terminal status within the poll ceiling."""

    def __init__(
        self,
        attempts: int,
        last_status: str | None = None,
        *,
        thread_id: str | None = None,
        run_id: str | None = None,
    ) -> None:
        ctx = ErrorContext(source="threads")
        ctx.details["attempts"] = attempts
        if last_status:
            ctx.details["last_status"] = last_status
        if run_id:
            ctx.details["run_id"] = run_id
        super().__init__(
            f"Assistant run did not complete after {attempts} polls", ctx
        )
        self.attempts = attempts
        self.last_status = last_status
        self.thread_id = thread_id
        self.run_id = run_id


class RunCancelledError(OpenAIServiceError):
    """Poll loop stopped because the local cancel token was set."""

    def __init__(
        self,
        reason: str | None = None,
        *,
        thread_id: str | None = None,
        run_id: str | None = None,
    ) -> None:
        ctx = ErrorContext(source="threads")
        if reason:
            ctx.details["reason"] = reason
        if run_id:
            ctx.details["run_id"] = run_id
        super().__init__("Assistant run polling was cancelled", ctx)
        self.reason = reason
        self.thread_id = thread_id
        self.run_id = run_id


class UnhandledToolCallError(OpenAIServiceError):
    """Run requested a tool with no registered handler (strict mode)."""

    def __init__(self, name: str, call_id: str | None = None) -> None:
        ctx = ErrorContext(source="tools")
        ctx.details["tool"] = name
        if call_id:
            ctx.details["tool_call_id"] = call_id
        super().__init__(f"No handler registered for tool '{name}'", ctx)
        self.name = name
        self.call_id = call_id


class ToolExecutionError(OpenAIServiceError):
    """A tool handler raised while producing its output."""

    def __init__(self, name: str, call_id: str, cause: Exception) -> None:
        ctx = ErrorContext(source="tools")
        ctx.details["tool"] = name
        ctx.details["tool_call_id"] = call_id
        super().__init__(f"Tool handler '{name}' failed: {cause}", ctx)
        self.name = name
        self.call_id = call_id
        self.__cause__ = cause
