"""Notra - a small streaming chat client for hosted LLM APIs.

Combines FastAPI for HTTP streaming, the OpenAI and Google GenAI SDKs for
upstream calls, NiceGUI for visualization, and Pydantic for data validation.

Components:
    - api: HTTP endpoints and the plain-text streaming response
    - bridge: provider resolution, credentials, and fragment relay
    - ui: Web interface for chat interactions
    - models: Request/response schemas
"""

__version__ = "0.1.0"
