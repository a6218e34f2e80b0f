"""
Message format for chat completions and assistant threads.

Provides Pythonic APIs for building messages with support for:
- Text messages
- Multimodal content (image URLs)
- Normalization into the structured wire format used by thread messages
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from openai_service.errors import ValidationError


class MessageRole(str, Enum):
    """Message role enumeration."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class ImageDetail(str, Enum):
    """Resolution hint for image inputs."""

    LOW = "low"
    HIGH = "high"
    AUTO = "auto"


class TextPart(BaseModel):
    """Plain text content part."""

    type: Literal["text"] = "text"
    text: str

    def to_wire(self) -> dict[str, Any]:
        return {"type": "text", "text": self.text}


class ImageUrlPart(BaseModel):
    """Image referenced by URL."""

    model_config = ConfigDict(use_enum_values=True)

    type: Literal["image_url"] = "image_url"
    url: str
    detail: ImageDetail = Field(default=ImageDetail.AUTO, validate_default=True)

    def to_wire(self) -> dict[str, Any]:
        return {
            "type": "image_url",
            "image_url": {"url": self.url, "detail": self.detail},
        }


ContentPart = TextPart | ImageUrlPart

# Type alias for message content
MessageContent = str | list[TextPart | ImageUrlPart | dict[str, Any]]


def normalize_content(content: MessageContent) -> list[Any]:
    """Normalize message content into the structured parts format.

    A plain string becomes a single text part. A sequence of parts is
    passed through, with ContentPart models dumped to their wire form.
    Normalizing an already-normalized value returns an equal value.

    Args:
        content: Message content

    Returns:
        List of content part dictionaries
    """
    if isinstance(content, str):
        return [{"type": "text", "text": content}]
    return [
        part.to_wire() if isinstance(part, (TextPart, ImageUrlPart)) else part
        for part in content
    ]


def _check_part(part: Any, index: int) -> None:
    """Reject parts that are not part models or mappings, and blank text parts."""
    if isinstance(part, TextPart):
        text = part.text
    elif isinstance(part, ImageUrlPart):
        return
    elif isinstance(part, Mapping):
        if part.get("type") != "text":
            return
        text = part.get("text")
    else:
        raise ValueError(f"content part {index} must be a mapping, got {type(part).__name__}")
    if not isinstance(text, str) or not text.strip():
        raise ValueError(f"text part {index} must not be empty")


class Message(BaseModel):
    """Message exchanged with the API.

    Examples:
        >>> msg = Message.user("Hello!")
        >>> msg = Message.system("You are a helpful assistant.")
        >>> msg = Message.with_content(
        ...     MessageRole.USER,
        ...     [TextPart(text="Describe this:"), ImageUrlPart(url="https://...")]
        ... )
    """

    model_config = ConfigDict(use_enum_values=True)

    role: MessageRole = Field(description="Message role")
    # Parts stay exactly as given; dict parts are never re-parsed into models
    content: str | list[Any] = Field(description="Message content (text or content parts)")

    @field_validator("content")
    @classmethod
    def _content_not_empty(cls, value: str | list[Any]) -> str | list[Any]:
        if isinstance(value, str):
            if not value.strip():
                raise ValueError("content must not be empty")
            return value
        if not value:
            raise ValueError("content must contain at least one part")
        for i, part in enumerate(value):
            _check_part(part, i)
        return value

    @classmethod
    def system(cls, text: str) -> Message:
        return cls(role=MessageRole.SYSTEM, content=text)

    @classmethod
    def user(cls, text: str) -> Message:
        return cls(role=MessageRole.USER, content=text)

    @classmethod
    def assistant(cls, text: str) -> Message:
        return cls(role=MessageRole.ASSISTANT, content=text)

    @classmethod
    def with_content(cls, role: MessageRole, content: list[Any]) -> Message:
        """Create a message with multiple content parts."""
        return cls(role=role, content=content)

    @classmethod
    def coerce(cls, value: Message | Mapping[str, Any], index: int | None = None) -> Message:
        """Build a Message from a Message or a ``{role, content}`` mapping.

        Raises:
            ValidationError: If the value is not a valid message
        """
        if isinstance(value, Message):
            return value

        field = f"messages[{index}]" if index is not None else "message"
        if not isinstance(value, Mapping):
            raise ValidationError(
                "Message must be a mapping with 'role' and 'content'",
                field=field,
                actual=type(value).__name__,
            )
        try:
            return cls.model_validate(dict(value))
        except PydanticValidationError as e:
            first = e.errors()[0] if e.errors() else {}
            loc = ".".join(str(p) for p in first.get("loc", ()))
            raise ValidationError(
                f"Invalid message: {first.get('msg', str(e))}",
                field=f"{field}.{loc}" if loc else field,
            ) from e

    def to_chat(self) -> dict[str, Any]:
        """Serialize for the chat completions endpoint."""
        if isinstance(self.content, str):
            return {"role": self.role, "content": self.content}
        return {"role": self.role, "content": normalize_content(self.content)}

    def to_thread(self) -> dict[str, Any]:
        """Serialize for the thread messages endpoint."""
        return {"role": self.role, "content": normalize_content(self.content)}

    def get_text_content(self) -> str:
        """Combined text from all text parts, or the string content directly."""
        if isinstance(self.content, str):
            return self.content
        texts = []
        for part in self.content:
            if isinstance(part, TextPart):
                texts.append(part.text)
            elif isinstance(part, dict) and part.get("type") == "text":
                texts.append(str(part.get("text", "")))
        return "\n".join(t for t in texts if t)


def coerce_messages(messages: Any) -> list[Message]:
    """Validate a non-empty sequence of messages.

    Raises:
        ValidationError: If messages are missing, empty or malformed
    """
    if isinstance(messages, (str, bytes, Mapping)) or not messages:
        raise ValidationError(
            "Missing or invalid 'messages' parameter",
            field="messages",
            expected="non-empty list of messages",
        )
    try:
        items = list(messages)
    except TypeError as e:
        raise ValidationError(
            "Missing or invalid 'messages' parameter", field="messages"
        ) from e
    return [Message.coerce(m, i) for i, m in enumerate(items)]
