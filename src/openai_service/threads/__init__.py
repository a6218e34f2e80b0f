"""
Threads layer - the assistant run state machine.
"""

from openai_service.config import PollConfig
from openai_service.threads.runner import AssistantResult, StatusCallback, ThreadRunner

__all__ = [
    "AssistantResult",
    "PollConfig",
    "StatusCallback",
    "ThreadRunner",
]
