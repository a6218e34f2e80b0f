"""
Thread and run records returned by the threads API.

The remote API is the source of truth; these are snapshots of a single
response and are never cached beyond the poll cycle that produced them.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from openai_service.types.tool import ToolCall


class RunStatus(str, Enum):
    """Run lifecycle status."""

    QUEUED = "queued"
    IN_PROGRESS = "in_progress"
    REQUIRES_ACTION = "requires_action"
    CANCELLING = "cancelling"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
    EXPIRED = "expired"
    INCOMPLETE = "incomplete"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> RunStatus:
        """Map an API status string, treating anything unrecognized as UNKNOWN."""
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN

    @property
    def is_failure(self) -> bool:
        """Remote-reported terminal failure."""
        return self in _FAILURE_STATUSES

    @property
    def is_terminal(self) -> bool:
        return self is RunStatus.COMPLETED or self.is_failure


_FAILURE_STATUSES = frozenset(
    {RunStatus.FAILED, RunStatus.CANCELLED, RunStatus.EXPIRED, RunStatus.INCOMPLETE}
)


class Thread(BaseModel):
    """Remote conversation container."""

    id: str
    raw: dict[str, Any] = Field(default_factory=dict, repr=False)


class Run(BaseModel):
    """Snapshot of an assistant run.

    Attributes:
        id: Run id
        thread_id: Owning thread id
        status: Status reported by the most recent response
        required_action: Pending action payload while in requires_action
        last_error: Error payload reported by the API, if any
        raw: Full response body
    """

    id: str
    thread_id: str
    status: RunStatus = RunStatus.UNKNOWN
    required_action: dict[str, Any] | None = None
    last_error: dict[str, Any] | None = None
    raw: dict[str, Any] = Field(default_factory=dict, repr=False)

    @classmethod
    def from_api(cls, data: dict[str, Any], *, thread_id: str | None = None) -> Run:
        """Build a Run from an API response body."""
        return cls(
            id=data.get("id") or "",
            thread_id=data.get("thread_id") or thread_id or "",
            status=RunStatus.parse(data.get("status")),
            required_action=data.get("required_action"),
            last_error=data.get("last_error"),
            raw=data,
        )

    def pending_tool_calls(self) -> list[ToolCall]:
        """Tool calls awaiting outputs, in the order the API listed them."""
        if self.status is not RunStatus.REQUIRES_ACTION or not self.required_action:
            return []
        submit = self.required_action.get("submit_tool_outputs") or {}
        return [ToolCall.from_openai_format(c) for c in submit.get("tool_calls") or []]
