"""Unit tests for individual components in isolation.

Coverage:
    - assistant/: Settings, descriptor, reconciliation and event translation
    - parsing/: PDF text extraction
    - session/: Transcript, run state machine and session controller

Uses in-memory fakes for the remote API. Leverages pytest-check for multiple
assertions per test.
"""
