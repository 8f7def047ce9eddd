from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, model_validator


class Role(str, Enum):
    """Speaker of a chat message."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class ProviderKind(str, Enum):
    """Client-facing provider identifiers."""

    OPENAI_FAST = "openai-fast"
    OPENAI_STRONG = "openai-strong"
    GEMINI = "gemini"


class ChatMessage(BaseModel):
    """A single chat message in the conversation.

    Attributes:
        role: The speaker identifier (user, assistant, or system).
        content: The message text.
    """

    role: Role
    content: str


class ChatRequest(BaseModel):
    """Request payload for the streaming chat endpoint.

    Attributes:
        messages: The full conversation, oldest first.
        provider: Optional provider identifier; the server default is used when omitted.
    """

    messages: list[ChatMessage] = Field(..., min_length=1)
    provider: str | None = None

    @model_validator(mode="before")
    @classmethod
    def accept_single_message(cls, data: Any) -> Any:
        """Wrap a bare ``message`` string into a one-message conversation."""
        if isinstance(data, dict) and "messages" not in data:
            message = data.get("message")
            if isinstance(message, str) and message.strip():
                data = {k: v for k, v in data.items() if k != "message"}
                data["messages"] = [{"role": Role.USER.value, "content": message}]
        return data


class ErrorResponse(BaseModel):
    """JSON body returned before any stream output begins."""

    error: str
    detail: str | None = None


class ProviderInfo(BaseModel):
    """Provider selector entry.

    Attributes:
        id: Client-facing identifier.
        label: Human readable name for the UI.
        model: Upstream model the identifier resolves to.
        streaming: Whether fragments arrive incrementally.
        configured: Whether the server holds a credential for it.
    """

    id: ProviderKind
    label: str
    model: str
    streaming: bool
    configured: bool
