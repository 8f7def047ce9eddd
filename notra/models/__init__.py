"""Pydantic models for API requests and responses.

Provides type safety, validation, and automatic OpenAPI documentation.

Models:
    - ChatMessage: Individual message in conversation
    - ChatRequest: Incoming chat request payload
    - ErrorResponse: Structured error body
    - ProviderInfo: Provider selector entry
"""

from notra.models.schemas import (
    ChatMessage,
    ChatRequest,
    ErrorResponse,
    ProviderInfo,
    ProviderKind,
    Role,
)

__all__ = [
    "ChatMessage",
    "ChatRequest",
    "ErrorResponse",
    "ProviderInfo",
    "ProviderKind",
    "Role",
]
