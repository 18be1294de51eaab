"""Integration tests for components working together as a system.

Coverage:
    - API endpoints with real HTTP requests through ASGITransport
    - PDF upload with generated documents
    - Full chat sessions driven through the HTTP thread backend

The remote assistant is replaced by an in-memory backend; no API key needed.
"""
