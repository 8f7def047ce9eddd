"""Unit tests for individual components in isolation.

Coverage:
    - bridge/config: Environment loading and validation
    - bridge/providers: Resolution, credentials, SDK request shapes
    - bridge/service: Priming, relay order, failure handling
    - ui/session: Conversation state and cancel-and-replace

Uses mocks for the OpenAI and Google GenAI SDKs. Leverages pytest-check for
multiple assertions per test.
"""
