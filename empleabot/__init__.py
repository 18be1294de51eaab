"""EmpleaBot - career assistant chat over the OpenAI Assistants API.

Combines FastAPI for HTTP streaming, the OpenAI SDK for assistant threads and
runs, NiceGUI for visualization, and Pydantic for data validation.

Components:
    - api: HTTP endpoints and Server-Sent Event streams
    - assistant: Configuration, reconciliation and thread backend for the remote assistant
    - parsing: PDF text extraction for attachments
    - session: Transcript, run state machine and session orchestration
    - ui: Web interface for chat interactions
    - models: Stream events and request/response schemas
"""

__version__ = "0.1.0"
