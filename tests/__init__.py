"""Test package for Notra chat.

Structure:
    - unit/: Configuration, providers, relay service, and UI session tests
    - integration/: HTTP endpoint and UI round-trip tests

Upstream SDKs are replaced by scripted providers or patched clients, so no
API keys or network access are needed.
Leverages pytest with pytest-check for soft assertions.
"""
