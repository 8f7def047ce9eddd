"""Bridge service relaying provider fragments to the HTTP response.

The upstream call is started and its first fragment awaited before the
response begins, so every failure up to that point can still be reported
as a JSON error with a real status code. After that the relay is a plain
pass-through: fragments are yielded in arrival order without buffering,
and a later upstream failure is reported in-band with a marker before the
stream closes.

Closing the returned ReplyStream (client disconnect, cancellation) closes
the upstream iterator, which in turn closes the provider's HTTP stream. This
holds even when the relay was never iterated.
"""

import logging
from collections.abc import AsyncGenerator, AsyncIterator

from notra.bridge.config import BridgeConfig, get_bridge_config
from notra.bridge.errors import MidStreamFailure, UpstreamFailure
from notra.bridge.providers import (
    PROVIDER_LABELS,
    Provider,
    build_providers,
    resolve_provider_kind,
)
from notra.models.schemas import ChatRequest, ProviderInfo, ProviderKind

logger = logging.getLogger(__name__)


class ReplyStream:
    """Primed reply fragments that can be closed before iteration starts.

    Closing an async generator that was never entered skips its ``finally``,
    so the upstream iterator is closed here directly as well.
    """

    def __init__(self, relay: AsyncGenerator[str], upstream: AsyncIterator[str]) -> None:
        self._relay = relay
        self._upstream = upstream

    def __aiter__(self) -> "ReplyStream":
        return self

    async def __anext__(self) -> str:
        return await self._relay.__anext__()

    async def aclose(self) -> None:
        try:
            await self._relay.aclose()
        finally:
            await _close(self._upstream)


class BridgeService:
    """Resolves providers and relays their output.

    Wraps the provider table with:
    - Provider resolution with a configured default
    - Credential checks before any upstream call
    - Pre-stream error detection by priming the first fragment
    - A consistent in-band marker for mid-stream failures
    """

    def __init__(
        self,
        config: BridgeConfig | None = None,
        providers: dict[ProviderKind, Provider] | None = None,
    ) -> None:
        """Initialize the bridge service.

        Args:
            config: Optional bridge configuration.
                    Loads from environment if not provided.
            providers: Optional provider table, built from config if not provided.
        """
        self._config = config or get_bridge_config()
        self._providers = providers or build_providers(self._config)

    def resolve(self, identifier: str | None) -> Provider:
        """Return the provider for a client identifier.

        Raises:
            UnknownProvider: If the identifier does not resolve.
        """
        kind = resolve_provider_kind(identifier, self._config.default_provider)
        return self._providers[kind]

    def describe_providers(self) -> list[ProviderInfo]:
        return [
            ProviderInfo(
                id=kind,
                label=PROVIDER_LABELS[kind],
                model=provider.upstream_model,
                streaming=provider.supports_incremental_streaming,
                configured=provider.configured,
            )
            for kind, provider in self._providers.items()
        ]

    def missing_credentials(self) -> list[str]:
        """Environment variables whose absence disables a provider."""
        return sorted(
            {p.credential_env for p in self._providers.values() if not p.configured}
        )

    async def open_stream(self, request: ChatRequest) -> "ReplyStream":
        """Start the upstream call for a request.

        Args:
            request: Validated chat request.

        Returns:
            The reply fragments, already primed with the first one.

        Raises:
            UnknownProvider: If the provider selection does not resolve.
            ServerMisconfigured: If the provider's credential is absent.
            UpstreamFailure: If the provider fails before producing output.
        """
        provider = self.resolve(request.provider)
        provider.validate()

        fragments = provider.stream_completion(request.messages)
        try:
            first = await anext(fragments, None)
        except Exception as e:
            logger.error(f"{provider.kind.value} request failed before streaming: {e}")
            await _close(fragments)
            raise UpstreamFailure(
                f"Server error while calling {PROVIDER_LABELS[provider.kind]}",
                detail=str(e) or type(e).__name__,
            ) from e

        return ReplyStream(self._relay(provider, first, fragments), fragments)

    async def _relay(
        self,
        provider: Provider,
        first: str | None,
        fragments: AsyncIterator[str],
    ) -> AsyncGenerator[str]:
        sent = 0
        try:
            if first is None:
                return
            yield first
            sent += len(first)
            async for fragment in fragments:
                yield fragment
                sent += len(fragment)
        except Exception as e:
            failure = MidStreamFailure(provider.kind.value, sent)
            logger.error(f"{failure.detail}: {e}")
            yield failure.marker
        finally:
            await _close(fragments)


async def _close(fragments: AsyncIterator[str]) -> None:
    aclose = getattr(fragments, "aclose", None)
    if aclose is not None:
        await aclose()


# Module-level singleton instance
_bridge_service: BridgeService | None = None


def get_bridge_service() -> BridgeService:
    """Get or create the global bridge service.

    Returns:
        The BridgeService instance.
    """
    global _bridge_service
    if _bridge_service is None:
        _bridge_service = BridgeService()
    return _bridge_service
