"""Upstream LLM providers behind a single streaming interface.

Each provider maps a client-facing ``ProviderKind`` to an upstream model,
checks its own credential, and exposes the reply as an async iterator of
text fragments:

- ``OpenAIChatProvider`` opens a streamed chat completion and yields every
  delta as it arrives.
- ``GeminiProvider`` makes one blocking generate-content call and yields the
  complete text as a single fragment.

SDK clients are created lazily on first use so that a missing credential
never reaches the network.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Sequence

from google import genai
from google.genai import types
from openai import AsyncOpenAI

from notra.bridge.config import BridgeConfig
from notra.bridge.errors import ServerMisconfigured, UnknownProvider
from notra.models.schemas import ChatMessage, ProviderKind, Role

logger = logging.getLogger(__name__)

# Identifiers sent by older UI builds
PROVIDER_ALIASES: dict[str, ProviderKind] = {
    "openai": ProviderKind.OPENAI_FAST,
}

PROVIDER_LABELS: dict[ProviderKind, str] = {
    ProviderKind.OPENAI_FAST: "GPT-4o mini",
    ProviderKind.OPENAI_STRONG: "GPT-4o",
    ProviderKind.GEMINI: "Gemini 3.0",
}


class Provider(ABC):
    """A provider bound to the process configuration.

    Attributes:
        kind: Client-facing identifier this provider serves.
        upstream_model: Model identifier sent upstream.
        supports_incremental_streaming: Whether fragments arrive over time.
        credential_env: Environment variable holding the API key.
    """

    supports_incremental_streaming: bool = False
    credential_env: str = ""

    def __init__(self, kind: ProviderKind, upstream_model: str, config: BridgeConfig) -> None:
        self.kind = kind
        self.upstream_model = upstream_model
        self._config = config

    @property
    def configured(self) -> bool:
        return self._config.credential_for(self.kind) is not None

    def validate(self) -> None:
        """Check that the upstream credential is present.

        Raises:
            ServerMisconfigured: If the API key is absent.
        """
        if not self.configured:
            raise ServerMisconfigured(self.credential_env)

    @abstractmethod
    def stream_completion(self, conversation: Sequence[ChatMessage]) -> AsyncIterator[str]:
        """Return the reply to ``conversation`` as text fragments in arrival order."""


class OpenAIChatProvider(Provider):
    """OpenAI-compatible chat completions in streaming mode."""

    supports_incremental_streaming = True
    credential_env = "OPENAI_API_KEY"

    def __init__(self, kind: ProviderKind, upstream_model: str, config: BridgeConfig) -> None:
        super().__init__(kind, upstream_model, config)
        self._client: AsyncOpenAI | None = None

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self._config.openai_api_key,
                base_url=self._config.openai_base_url,
                timeout=self._config.request_timeout,
            )
        return self._client

    def build_messages(self, conversation: Sequence[ChatMessage]) -> list[dict[str, str]]:
        """Convert the conversation to chat-completion messages, persona first."""
        messages = [{"role": m.role.value, "content": m.content} for m in conversation]
        persona = self._config.persona
        if persona:
            messages.insert(0, {"role": Role.SYSTEM.value, "content": persona})
        return messages

    async def stream_completion(self, conversation: Sequence[ChatMessage]) -> AsyncIterator[str]:
        logger.debug(f"Opening {self.kind.value} stream on {self.upstream_model}")
        stream = await self._get_client().chat.completions.create(
            model=self.upstream_model,
            messages=self.build_messages(conversation),
            temperature=self._config.temperature,
            stream=True,
        )
        try:
            async for chunk in stream:
                # Usage-only chunks carry no choices
                if not chunk.choices:
                    continue
                delta = chunk.choices[0].delta.content
                if delta:
                    yield delta
        finally:
            await stream.close()


def flatten_conversation(conversation: Sequence[ChatMessage]) -> str:
    """Render a conversation as ``Role: content`` lines joined by newlines."""
    return "\n".join(f"{m.role.value.capitalize()}: {m.content}" for m in conversation)


class GeminiProvider(Provider):
    """Gemini generate-content, one complete reply per request."""

    credential_env = "GEMINI_API_KEY"

    def __init__(self, kind: ProviderKind, upstream_model: str, config: BridgeConfig) -> None:
        super().__init__(kind, upstream_model, config)
        self._client: genai.Client | None = None

    def _get_client(self) -> genai.Client:
        if self._client is None:
            self._client = genai.Client(
                api_key=self._config.gemini_api_key,
                http_options=types.HttpOptions(
                    timeout=int(self._config.request_timeout * 1000),
                ),
            )
        return self._client

    def _generation_config(self) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            system_instruction=self._config.persona,
            thinking_config=types.ThinkingConfig(thinking_level=types.ThinkingLevel.HIGH),
        )

    async def stream_completion(self, conversation: Sequence[ChatMessage]) -> AsyncIterator[str]:
        logger.debug(f"Requesting {self.kind.value} reply from {self.upstream_model}")
        response = await self._get_client().aio.models.generate_content(
            model=self.upstream_model,
            contents=flatten_conversation(conversation),
            config=self._generation_config(),
        )
        text = response.text or ""
        if text:
            yield text


def build_providers(config: BridgeConfig) -> dict[ProviderKind, Provider]:
    """Create one provider per ``ProviderKind`` from the configuration."""
    return {
        ProviderKind.OPENAI_FAST: OpenAIChatProvider(
            ProviderKind.OPENAI_FAST, config.openai_fast_model, config
        ),
        ProviderKind.OPENAI_STRONG: OpenAIChatProvider(
            ProviderKind.OPENAI_STRONG, config.openai_strong_model, config
        ),
        ProviderKind.GEMINI: GeminiProvider(ProviderKind.GEMINI, config.gemini_model, config),
    }


def resolve_provider_kind(identifier: str | None, default: ProviderKind) -> ProviderKind:
    """Map a client-supplied identifier to a ``ProviderKind``.

    Args:
        identifier: Identifier from the request, or None to use the default.
        default: Provider used when no identifier is given.

    Returns:
        The resolved provider kind.

    Raises:
        UnknownProvider: If the identifier is neither a kind nor an alias.
    """
    if identifier is None or not identifier.strip():
        return default
    key = identifier.strip().lower()
    if key in PROVIDER_ALIASES:
        return PROVIDER_ALIASES[key]
    try:
        return ProviderKind(key)
    except ValueError:
        raise UnknownProvider(identifier) from None
