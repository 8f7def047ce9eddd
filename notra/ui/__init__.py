"""NiceGUI interface - thin visualization layer for chat interactions.

Responsibilities:
    - Chat message display with progressive streaming updates
    - Provider selection
    - Session reset ("new chat")

Conversation state and the bridge client live in ``session`` and do not
depend on NiceGUI. Contains no provider logic; everything goes through the API.
"""
