"""
Endpoint resolution for logical request types.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any

from openai_service.errors import UnknownRequestTypeError

if TYPE_CHECKING:
    from openai_service.config import EndpointConfig


class RequestType(str, Enum):
    """Closed set of request types the service can address."""

    COMPLETION = "completion"
    EMBEDDING = "embedding"
    MODERATION = "moderation"
    IMAGES = "images"
    ASSISTANT = "assistant"
    THREADS = "threads"

    @classmethod
    def parse(cls, value: Any) -> RequestType:
        """Parse a request type.

        Raises:
            UnknownRequestTypeError: For values outside the set
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise UnknownRequestTypeError(value) from None

    @property
    def is_thread(self) -> bool:
        """Whether the type addresses the threads resource tree."""
        return self in (RequestType.ASSISTANT, RequestType.THREADS)


class EndpointResolver:
    """Maps request types to configured base URLs.

    Example:
        >>> resolver = EndpointResolver(EndpointConfig())
        >>> resolver.resolve("embedding")
        'https://api.openai.com/v1/embeddings'
        >>> resolver.threads_url("thread_abc", "runs")
        'https://api.openai.com/v1/threads/thread_abc/runs'
    """

    def __init__(self, endpoints: EndpointConfig) -> None:
        self._urls: dict[RequestType, str] = {
            RequestType.COMPLETION: endpoints.completions,
            RequestType.EMBEDDING: endpoints.embeddings,
            RequestType.MODERATION: endpoints.moderations,
            RequestType.IMAGES: endpoints.images,
            RequestType.ASSISTANT: endpoints.threads,
            RequestType.THREADS: endpoints.threads,
        }

    def resolve(self, request_type: RequestType | str) -> str:
        """Return the base URL for a request type.

        Raises:
            UnknownRequestTypeError: For types outside the supported set
        """
        return self._urls[RequestType.parse(request_type)]

    def threads_url(self, *segments: str) -> str:
        """Build a URL inside the threads resource tree."""
        base = self._urls[RequestType.THREADS].rstrip("/")
        if not segments:
            return base
        return "/".join([base, *(s.strip("/") for s in segments)])
