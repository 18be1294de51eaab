"""Test package for EmpleaBot.

Structure:
    - unit/: Individual function and class tests
    - integration/: API and full session workflows over HTTP
    - fakes.py: In-memory thread backend and assistant gateway

PDFs are generated on the fly by the ``make_pdf`` fixture.
Leverages pytest with pytest-check for soft assertions.
"""
