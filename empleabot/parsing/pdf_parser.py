"""PDF text extraction using pypdf.

Turns an uploaded PDF into the plain text that is folded into the next
outgoing message.
"""

import functools
import io
import logging

from pydantic import BaseModel, Field
from pypdf import PdfReader
from pypdf.errors import PdfReadError

from empleabot.errors import ExtractionError

logger = logging.getLogger(__name__)

# Constants
MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB
PDF_MAGIC_BYTES = b"%PDF"
PDF_MEDIA_TYPE = "application/pdf"
_GENERIC_MEDIA_TYPES = {"", "application/octet-stream"}


class ExtractedDocument(BaseModel):
    """Text extracted from a PDF file.

    Attributes:
        name: Display name of the document (the uploaded filename).
        text: Page texts in page order, one line per page.
        pages: Total number of pages in the document.
    """

    name: str
    text: str
    pages: int = Field(ge=0)


@functools.cache
def initialize_pdf_runtime() -> None:
    """One-time parser setup; cached so repeated calls do nothing."""
    # pypdf logs recoverable structure problems as warnings for every page
    logging.getLogger("pypdf").setLevel(logging.ERROR)
    logger.debug("PDF runtime initialized")


def _validate_media_type(filename: str, media_type: str | None) -> None:
    declared = (media_type or "").split(";")[0].strip().lower()
    if declared == PDF_MEDIA_TYPE:
        return
    if declared in _GENERIC_MEDIA_TYPES and filename.lower().endswith(".pdf"):
        return
    raise ExtractionError("Please select a PDF file")


def _validate_pdf_bytes(file_content: bytes) -> None:
    """Validate PDF file content before parsing.

    Raises:
        ExtractionError: If validation fails.
    """
    if not file_content:
        raise ExtractionError("Empty file provided")

    if len(file_content) > MAX_FILE_SIZE:
        size_mb = len(file_content) / (1024 * 1024)
        raise ExtractionError(f"File size ({size_mb:.1f}MB) exceeds maximum allowed (10MB)")

    if not file_content.lstrip()[:10].startswith(PDF_MAGIC_BYTES):
        raise ExtractionError("Invalid PDF: file does not start with PDF header")


def extract_pdf(
    file_content: bytes,
    filename: str,
    media_type: str | None = PDF_MEDIA_TYPE,
) -> ExtractedDocument:
    """Extract the text of every page of a PDF.

    Words within a page are joined by single spaces and pages by a newline,
    in page order. The result is stripped.

    Args:
        file_content: Raw bytes of the PDF file.
        filename: Uploaded filename, used as the display name.
        media_type: Declared media type of the upload.

    Returns:
        ExtractedDocument with the text, name and page count.

    Raises:
        ExtractionError: If the file is not a PDF, too large, empty, or corrupt.
    """
    _validate_media_type(filename, media_type)
    _validate_pdf_bytes(file_content)
    initialize_pdf_runtime()

    logger.info(f"Starting PDF extraction for: {filename}")
    try:
        reader = PdfReader(io.BytesIO(file_content))
        page_texts = [" ".join((page.extract_text() or "").split()) for page in reader.pages]
    except PdfReadError as e:
        raise ExtractionError(f"Corrupt or invalid PDF: {e}") from e
    except Exception as e:
        raise ExtractionError(f"Failed to extract PDF content: {e}") from e

    text = "\n".join(page_texts).strip()
    if not text:
        logger.warning("PDF contains no extractable text (may be scanned/image-based)")

    logger.info(f"PDF extraction completed: {filename} ({len(page_texts)} pages)")
    return ExtractedDocument(name=filename, text=text, pages=len(page_texts))
