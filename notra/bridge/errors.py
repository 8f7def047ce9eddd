"""Error kinds raised by the streaming bridge.

Every error except MidStreamFailure is rendered as a JSON ``ErrorResponse``
before any stream output begins.
"""

from fastapi import status

MID_STREAM_ERROR_MARKER = "\n\n[Error: the response was interrupted, please try again]"


class BridgeError(Exception):
    """Base class for bridge failures with an HTTP mapping."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, error: str, detail: str | None = None) -> None:
        super().__init__(error)
        self.error = error
        self.detail = detail


class BadRequest(BridgeError):
    """Malformed or missing conversation."""

    status_code = status.HTTP_400_BAD_REQUEST


class UnknownProvider(BridgeError):
    """Provider selection does not resolve to a known mapping."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, identifier: str) -> None:
        super().__init__(
            f"Unknown provider: {identifier}",
            detail=f"'{identifier}' is not one of the supported provider identifiers",
        )
        self.identifier = identifier


class ServerMisconfigured(BridgeError):
    """Required upstream credential is absent."""

    def __init__(self, env_var: str) -> None:
        super().__init__(f"Missing {env_var} on server")
        self.env_var = env_var


class UpstreamFailure(BridgeError):
    """Provider call failed before any output was produced."""


class MidStreamFailure(BridgeError):
    """Provider call failed after output was already sent.

    The status line cannot change any more, so the failure is reported
    in-band with ``marker`` and the stream is closed.
    """

    marker = MID_STREAM_ERROR_MARKER

    def __init__(self, provider: str, sent_chars: int) -> None:
        super().__init__(
            "Upstream stream interrupted",
            detail=f"{provider} failed after {sent_chars} characters were sent",
        )
