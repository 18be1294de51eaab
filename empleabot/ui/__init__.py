"""NiceGUI interface - thin visualization layer for chat interactions.

Responsibilities:
    - Chat message display with streaming support
    - PDF attachment upload with a removable chip
    - Suggested prompts for an empty conversation

Talks to the API over HTTP through HttpThreadBackend. Session logic lives in
empleabot.session.
"""
