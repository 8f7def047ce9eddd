"""Streaming bridge between the chat endpoint and hosted LLM providers.

Responsibilities:
    - Provider resolution from client identifiers to upstream models
    - Credential checks against the process configuration
    - Upstream calls through the OpenAI and Google GenAI SDKs
    - Ordered, unbuffered relay of text fragments

Maintains clean separation from the HTTP layer.
"""

from notra.bridge.config import BridgeConfig, get_bridge_config
from notra.bridge.service import BridgeService, get_bridge_service

__all__ = ["BridgeConfig", "BridgeService", "get_bridge_config", "get_bridge_service"]
