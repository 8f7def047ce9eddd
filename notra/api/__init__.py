"""FastAPI endpoints for the Notra chat bridge.

Endpoints:
    - GET /health: Service health status
    - POST /api/chat: Plain-text streaming chat completion
    - GET /api/providers: Provider selector entries
"""

from notra.api.app import app, create_app

__all__ = ["app", "create_app"]
