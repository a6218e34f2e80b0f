"""
Client layer - user-facing API.

This module provides:
- OpenAIService: facade for passthrough calls and assistant runs
- AssistantRequestBuilder: fluent API for assistant runs
- Cancellation: cooperative cancellation of run polling
"""

from openai_service.client.builder import AssistantRequestBuilder
from openai_service.client.cancel import (
    CancelHandle,
    CancelReason,
    CancelState,
    CancelToken,
    create_cancel_pair,
)
from openai_service.client.core import OpenAIService

__all__ = [
    "AssistantRequestBuilder",
    "CancelHandle",
    "CancelReason",
    "CancelState",
    "CancelToken",
    "OpenAIService",
    "create_cancel_pair",
]
