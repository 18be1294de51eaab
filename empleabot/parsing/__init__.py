"""PDF parsing utilities for attachments.

Responsibilities:
    - Media type and header validation
    - Page-ordered text extraction with pypdf
    - Whitespace normalization within pages
"""

from empleabot.parsing.pdf_parser import ExtractedDocument, extract_pdf, initialize_pdf_runtime

__all__ = ["ExtractedDocument", "extract_pdf", "initialize_pdf_runtime"]
