"""Chat state and bridge client used by the NiceGUI page.

Kept free of NiceGUI so the conversation logic can run under plain asyncio.
"""

import asyncio
import logging
import os
from collections.abc import AsyncIterator, Callable

import httpx

from notra.models.schemas import ChatMessage, ProviderKind, Role

logger = logging.getLogger(__name__)

API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000")

WELCOME_MESSAGE = (
    "Hi, I'm Notra, your intelligent learning & writing companion. "
    "What would you like to work on today?"
)
FALLBACK_MESSAGE = (
    "⚠️ Something went wrong. Please check your network or API key and try again."
)

# Checked in order, first match wins
EMOJI_KEYWORDS: list[tuple[str, tuple[str, ...]]] = [
    ("📝", ("summary", "summarize", "总结")),
    ("📋", ("plan", "outline", "大纲", "规划")),
    ("💡", ("idea", "brainstorm", "想法", "creative")),
    ("📚", ("example", "案例", "例子")),
    ("🪜", ("steps", "步骤", "how to")),
]

ReplySource = Callable[[list[dict[str, str]], str], AsyncIterator[str]]


def assistant_emoji(content: str, index: int) -> str:
    """Pick the avatar emoji for an assistant message."""
    if index == 0:
        return "👋"
    text = content.lower()
    for emoji, keywords in EMOJI_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return emoji
    return "💬"


class BridgeClient:
    """Streams replies from the bridge's /api/chat endpoint."""

    def __init__(
        self,
        base_url: str = API_BASE_URL,
        timeout: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def stream_reply(
        self, messages: list[dict[str, str]], provider: str
    ) -> AsyncIterator[str]:
        """Yield decoded reply text as it arrives.

        Raises:
            httpx.HTTPStatusError: If the bridge answers with an error status.
            httpx.RequestError: If the bridge cannot be reached.
        """
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            async with client.stream(
                "POST",
                f"{self._base_url}/api/chat",
                json={"messages": messages, "provider": provider},
            ) as response:
                response.raise_for_status()
                async for text in response.aiter_text():
                    if text:
                        yield text


class ChatSession:
    """Manages chat state for one page session.

    A new submission while a reply is still streaming cancels that reply
    and replaces it with the new turn.
    """

    def __init__(self, provider: ProviderKind = ProviderKind.OPENAI_FAST) -> None:
        self.provider: str = provider.value
        self.messages: list[ChatMessage] = []
        self._task: asyncio.Task | None = None
        self._placeholder: ChatMessage | None = None
        self.reset()

    @property
    def is_streaming(self) -> bool:
        return self._task is not None and not self._task.done()

    def reset(self) -> None:
        self.cancel()
        self.messages = [ChatMessage(role=Role.ASSISTANT, content=WELCOME_MESSAGE)]

    def cancel(self) -> None:
        """Stop the reply in flight, dropping its placeholder if nothing arrived yet."""
        if self.is_streaming:
            self._task.cancel()
            placeholder = self._placeholder
            if placeholder is not None and not placeholder.content:
                self.messages = [m for m in self.messages if m is not placeholder]
        self._task = None
        self._placeholder = None

    def submit(
        self,
        text: str,
        source: ReplySource,
        on_update: Callable[[], None] = lambda: None,
    ) -> asyncio.Task | None:
        """Append a user message and start streaming the reply.

        Args:
            text: Raw input; ignored when blank.
            source: Callable returning the reply fragments for a payload and provider.
            on_update: Called after every change to ``messages``.

        Returns:
            The task consuming the reply, or None if nothing was sent.
        """
        text = text.strip()
        if not text:
            return None

        self.cancel()
        self.messages.append(ChatMessage(role=Role.USER, content=text))
        on_update()

        payload = [m.model_dump(mode="json") for m in self.messages]
        placeholder = ChatMessage(role=Role.ASSISTANT, content="")
        self.messages.append(placeholder)
        self._placeholder = placeholder
        on_update()

        self._task = asyncio.create_task(
            self._consume(source(payload, self.provider), placeholder, on_update)
        )
        return self._task

    async def _consume(
        self,
        fragments: AsyncIterator[str],
        placeholder: ChatMessage,
        on_update: Callable[[], None],
    ) -> None:
        try:
            async for fragment in fragments:
                placeholder.content += fragment
                on_update()
        except Exception:
            logger.exception("Chat request failed")
            placeholder.content = FALLBACK_MESSAGE
            on_update()
