"""
Result type for calls that report failure as a value instead of raising.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from openai_service.errors import OpenAIServiceError


@dataclass
class ApiResult:
    """Outcome of an HTTP call after retries.

    Attributes:
        success: Whether a 2xx response was received
        value: Decoded JSON body (if success)
        error: Typed error describing the failure (if not success)
        attempts: Number of attempts made
    """

    success: bool
    value: Any = None
    error: OpenAIServiceError | None = None
    attempts: int = 0

    def unwrap(self) -> Any:
        """Return the value, or raise the error.

        Raises:
            OpenAIServiceError: The recorded failure
        """
        if self.success:
            return self.value
        assert self.error is not None
        raise self.error

    def unwrap_or(self, default: Any) -> Any:
        return self.value if self.success else default
