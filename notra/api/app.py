"""FastAPI application factory and configuration.

Main application entry point with lifespan management, middleware,
error rendering, and router registration.
"""

import logging
import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from notra.api.chat import router as chat_router
from notra.bridge.errors import BadRequest, BridgeError
from notra.bridge.service import get_bridge_service
from notra.models.schemas import ErrorResponse

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application startup and shutdown lifecycle.

    Builds the bridge service once on startup so that configuration
    errors surface immediately, and reports providers without credentials.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control to the application while it runs.
    """
    logger.info("Starting Notra chat API...")
    service = get_bridge_service()
    for env_var in service.missing_credentials():
        logger.warning(f"{env_var} is not set; its providers will answer with 500")
    yield
    logger.info("Shutting down Notra chat API...")


def _summarize_validation(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        location = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
    return "; ".join(parts)


def _invalid_fields(exc: RequestValidationError) -> list[str]:
    fields: list[str] = []
    for err in exc.errors():
        loc = [p for p in err.get("loc", ()) if p != "body"]
        if loc and isinstance(loc[0], str) and loc[0] not in fields:
            fields.append(loc[0])
    return fields


def as_bad_request(exc: RequestValidationError) -> BadRequest:
    """Describe what was wrong with a request body."""
    errors = exc.errors()
    if any(err.get("type") == "json_invalid" for err in errors):
        error = "Invalid request body: malformed JSON"
    else:
        fields = _invalid_fields(exc)
        if not fields or any(
            err.get("type") == "missing" and tuple(err.get("loc", ()))[-1:] == ("messages",)
            for err in errors
        ):
            error = "Invalid request body: messages is required"
        elif "messages" in fields:
            error = "Invalid request body: messages must be a non-empty list of role/content pairs"
        else:
            error = f"Invalid request body: invalid {', '.join(fields)}"
    return BadRequest(error, detail=_summarize_validation(exc))


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render malformed request bodies as 400 instead of FastAPI's 422."""
    return await handle_bridge_error(request, as_bad_request(exc))


async def handle_bridge_error(request: Request, exc: BridgeError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.url.path} failed: {exc.error}")
    body = ErrorResponse(error=exc.error, detail=exc.detail)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(exclude_none=True))


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    application = FastAPI(
        title="Notra Chat API",
        description=(
            "Streaming bridge between a browser chat UI and hosted LLM APIs. "
            "Forwards the full conversation to the selected provider and relays "
            "the reply as plain text in arrival order."
        ),
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=os.getenv("CORS_ALLOW_ORIGINS", "*").split(","),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["*"],
    )

    application.add_exception_handler(RequestValidationError, handle_validation_error)
    application.add_exception_handler(BridgeError, handle_bridge_error)

    application.include_router(chat_router)

    @application.get("/health")
    async def health_check() -> dict[str, str]:
        """Check service health status."""
        return {"status": "healthy", "service": "notra-chat"}

    return application


app = create_app()
