"""Integration tests for components working together as a system.

Coverage:
    - POST /api/chat through the real FastAPI app and exception handlers
    - The UI session streaming through BridgeClient into the app

Upstream providers are scripted; everything between them and the client is real.
"""
