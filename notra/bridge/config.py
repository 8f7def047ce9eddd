"""Bridge configuration with environment variable loading.

Pydantic-based configuration for the streaming bridge. Built once at
process start and injected into the service; per-provider credential
checks happen when a provider is validated for a request.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

from notra.models.schemas import ProviderKind

# Load environment variables from .env file
load_dotenv()

DEFAULT_ASSISTANT_NAME = "Notra"


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() not in {"0", "false", "no", "off"}


def build_system_prompt(assistant_name: str) -> str:
    """Return the persona instruction sent ahead of every conversation."""
    return (
        f"You are {assistant_name}, a smart, professional and warm AI assistant "
        "for learning and writing.\n"
        "- Answer clearly and naturally, in the language the user writes in.\n"
        "- Organize longer answers into short sections with Markdown headings or lists.\n"
        "- Be logical and focused, and use examples where they help.\n"
        f"- Never mention which model or company powers you; refer to yourself "
        f"only as {assistant_name}."
    )


class BridgeConfig(BaseModel):
    """Configuration for the streaming bridge.

    Attributes:
        openai_api_key: Key for the OpenAI-compatible chat completion API.
        openai_base_url: API base URL (None for OpenAI default).
        gemini_api_key: Key for the Gemini generative content API.
        openai_fast_model: Upstream model behind ``openai-fast``.
        openai_strong_model: Upstream model behind ``openai-strong``.
        gemini_model: Upstream model behind ``gemini``.
        default_provider: Provider used when a request names none.
        assistant_name: Persona name used in the system prompt.
        system_prompt: Persona instruction (built from assistant_name if unset).
        use_system_prompt: Whether the persona instruction is sent at all.
        temperature: Sampling temperature for OpenAI-compatible calls.
        request_timeout: Upstream timeout in seconds.
    """

    model_config = ConfigDict(validate_default=True)

    openai_api_key: str | None = Field(
        default_factory=lambda: os.getenv("OPENAI_API_KEY"),
        description="API key for the OpenAI-compatible provider",
    )
    openai_base_url: str | None = Field(
        default_factory=lambda: os.getenv("OPENAI_BASE_URL") or None,
        description="API base URL (None for OpenAI default)",
    )
    gemini_api_key: str | None = Field(
        default_factory=lambda: os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY"),
        description="API key for the Gemini provider",
    )
    openai_fast_model: str = Field(
        default_factory=lambda: os.getenv("OPENAI_FAST_MODEL", "gpt-4o-mini"),
    )
    openai_strong_model: str = Field(
        default_factory=lambda: os.getenv("OPENAI_STRONG_MODEL", "gpt-4o"),
    )
    gemini_model: str = Field(
        default_factory=lambda: os.getenv("GEMINI_MODEL", "gemini-3-pro-preview"),
    )
    default_provider: ProviderKind = Field(
        default_factory=lambda: os.getenv("DEFAULT_PROVIDER", ProviderKind.OPENAI_FAST.value),
    )
    assistant_name: str = Field(
        default_factory=lambda: os.getenv("ASSISTANT_NAME", DEFAULT_ASSISTANT_NAME),
    )
    system_prompt: str | None = Field(
        default_factory=lambda: os.getenv("SYSTEM_PROMPT") or None,
    )
    use_system_prompt: bool = Field(
        default_factory=lambda: _env_flag("USE_SYSTEM_PROMPT", True),
    )
    temperature: float = Field(
        default_factory=lambda: float(os.getenv("TEMPERATURE", "0.9")),
        ge=0.0,
        le=2.0,
        description="Sampling temperature for response generation",
    )
    request_timeout: float = Field(
        default_factory=lambda: float(os.getenv("REQUEST_TIMEOUT", "60")),
        gt=0.0,
        description="Upstream request timeout in seconds",
    )

    @field_validator("openai_api_key", "gemini_api_key")
    @classmethod
    def normalize_api_key(cls, v: str | None) -> str | None:
        """Strip API keys and treat blank values as missing."""
        if v is None or not v.strip():
            return None
        return v.strip()

    @property
    def persona(self) -> str | None:
        """System instruction to send, or None when disabled."""
        if not self.use_system_prompt:
            return None
        return self.system_prompt or build_system_prompt(self.assistant_name)

    def credential_for(self, kind: ProviderKind) -> str | None:
        if kind is ProviderKind.GEMINI:
            return self.gemini_api_key
        return self.openai_api_key


def get_bridge_config() -> BridgeConfig:
    """Create bridge configuration from environment.

    Returns:
        Configured BridgeConfig instance.

    Raises:
        ValueError: If a numeric setting is out of range or the default provider is unknown.
    """
    return BridgeConfig()
