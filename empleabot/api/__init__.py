"""FastAPI endpoints for the EmpleaBot chat.

HTTP and streaming routes with async request handling.
Run events are streamed as Server-Sent Events.

Endpoints:
    - GET /health: Service health and assistant status
    - POST /api/assistants/threads: Create a conversation thread
    - POST /api/assistants/threads/{id}/messages: Post a message, stream the run
    - POST /api/assistants/threads/{id}/actions: Submit tool outputs, stream the run
    - GET /api/files/{file_id}: Generated file content
    - POST /upload/pdf: Extract text from a PDF attachment
"""

from empleabot.api.app import create_app

__all__ = ["create_app"]
