"""Pytest fixtures and shared test configuration.

Provides reusable fixtures for unit and integration tests.

Fixtures:
    - bridge_config: Configuration with both provider keys set
    - make_service: Builds a BridgeService over scripted providers
    - async_client: HTTPX client for API testing with the service injected
"""

from collections.abc import AsyncGenerator, AsyncIterator, Callable, Sequence

import pytest
from httpx import ASGITransport, AsyncClient

from notra.api.app import create_app
from notra.bridge.config import BridgeConfig
from notra.bridge.providers import Provider
from notra.bridge.service import BridgeService, get_bridge_service
from notra.models.schemas import ChatMessage, ProviderKind


class ScriptedProvider(Provider):
    """Provider replaying fixed fragments, optionally failing at a position.

    Attributes:
        calls: Conversations received, in order.
        closed: Whether the fragment iterator was closed.
    """

    credential_env = "OPENAI_API_KEY"

    def __init__(
        self,
        kind: ProviderKind,
        config: BridgeConfig,
        fragments: Sequence[str] = (),
        fail_at: int | None = None,
        incremental: bool = True,
    ) -> None:
        super().__init__(kind, f"scripted-{kind.value}", config)
        self.fragments = list(fragments)
        self.fail_at = fail_at
        self.supports_incremental_streaming = incremental
        if kind is ProviderKind.GEMINI:
            self.credential_env = "GEMINI_API_KEY"
        self.calls: list[list[ChatMessage]] = []
        self.closed = False

    async def stream_completion(self, conversation: Sequence[ChatMessage]) -> AsyncIterator[str]:
        self.calls.append(list(conversation))
        try:
            for index, fragment in enumerate(self.fragments):
                if index == self.fail_at:
                    raise RuntimeError("upstream connection reset")
                yield fragment
            if self.fail_at is not None and self.fail_at >= len(self.fragments):
                raise RuntimeError("upstream connection reset")
        finally:
            self.closed = True


@pytest.fixture
def bridge_config() -> BridgeConfig:
    """Return configuration with both credentials present."""
    return BridgeConfig(
        openai_api_key="sk-test-key",
        gemini_api_key="gm-test-key",
        openai_base_url=None,
        default_provider=ProviderKind.OPENAI_FAST,
        use_system_prompt=True,
        system_prompt=None,
    )


@pytest.fixture
def make_service(
    bridge_config: BridgeConfig,
) -> Callable[..., tuple[BridgeService, dict[ProviderKind, ScriptedProvider]]]:
    """Return a factory building a service over scripted providers.

    Keyword arguments map provider kinds (by enum name, lower-cased) to
    ``(fragments, fail_at)`` pairs; unnamed kinds replay nothing.
    """

    def factory(
        config: BridgeConfig | None = None,
        **scripts: tuple[Sequence[str], int | None],
    ) -> tuple[BridgeService, dict[ProviderKind, ScriptedProvider]]:
        config = config or bridge_config
        providers = {}
        for kind in ProviderKind:
            fragments, fail_at = scripts.get(kind.name.lower(), ((), None))
            providers[kind] = ScriptedProvider(
                kind,
                config,
                fragments,
                fail_at,
                incremental=kind is not ProviderKind.GEMINI,
            )
        return BridgeService(config=config, providers=providers), providers

    return factory


@pytest.fixture
def service_and_providers(make_service):
    """Service whose fast OpenAI provider replays a three-fragment reply."""
    return make_service(
        openai_fast=(["Hel", "lo, ", "world"], None),
        gemini=(["Bonjour"], None),
    )


@pytest.fixture
async def async_client(service_and_providers) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for API testing.

    Yields:
        AsyncClient bound to an app using the scripted service.
    """
    service, _ = service_and_providers
    app = create_app()
    app.dependency_overrides[get_bridge_service] = lambda: service
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
