"""Chat endpoints relaying provider output as plain text."""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from starlette.types import Receive, Scope, Send

from notra.bridge.service import BridgeService, ReplyStream, get_bridge_service
from notra.models.schemas import ChatRequest, ErrorResponse, ProviderInfo

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["chat"])

STREAM_MEDIA_TYPE = "text/plain; charset=utf-8"
STREAM_HEADERS = {"Cache-Control": "no-cache, no-transform"}


class ReplyResponse(StreamingResponse):
    """Plain-text streaming response that always closes its reply stream.

    Starlette does not close the body iterator when the client goes away,
    and a disconnect can happen before the first fragment is sent.
    """

    body_iterator: ReplyStream

    def __init__(self, content: ReplyStream) -> None:
        super().__init__(content, media_type=STREAM_MEDIA_TYPE, headers=STREAM_HEADERS)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            await self.body_iterator.aclose()


@router.post(
    "/chat",
    response_class=StreamingResponse,
    responses={
        200: {"content": {STREAM_MEDIA_TYPE: {}}},
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def chat(
    request: ChatRequest,
    service: BridgeService = Depends(get_bridge_service),
) -> StreamingResponse:
    """Stream the assistant's reply to a conversation.

    The body is the raw concatenation of reply fragments in arrival order,
    with no framing between them.

    Raises:
        400: Malformed conversation or unknown provider.
        500: Missing credential or upstream failure before any output.
    """
    fragments = await service.open_stream(request)
    logger.info(f"Streaming reply for {len(request.messages)} messages")
    return ReplyResponse(fragments)


@router.get("/providers", response_model=list[ProviderInfo])
async def list_providers(
    service: BridgeService = Depends(get_bridge_service),
) -> list[ProviderInfo]:
    """List provider identifiers accepted by the chat endpoint."""
    return service.describe_providers()
