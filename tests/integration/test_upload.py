"""Integration tests for PDF upload endpoint.

Tests the real upload flow with generated PDFs through the FastAPI app.
Validates file validation, extraction, and error mapping.
"""

from collections.abc import Callable

import pytest_check as check
from httpx import AsyncClient

from empleabot.models.schemas import PDFUploadResponse
from empleabot.parsing.pdf_parser import MAX_FILE_SIZE


class TestPDFUpload:
    """Integration tests for POST /upload/pdf endpoint."""

    async def test_upload_pdf_success(
        self, async_client: AsyncClient, make_pdf: Callable[..., bytes]
    ) -> None:
        """Upload valid PDF returns success with filename, page count and text."""
        response = await async_client.post(
            "/upload/pdf",
            files={"file": ("cv.pdf", make_pdf("Data analyst", "Madrid"), "application/pdf")},
        )

        assert response.status_code == 200
        data = PDFUploadResponse.model_validate(response.json())
        check.is_true(data.success)
        check.equal(data.filename, "cv.pdf")
        check.equal(data.pages, 2)
        check.equal(data.text, "Data analyst\nMadrid")
        check.is_none(data.error)

    async def test_upload_preserves_original_filename(
        self, async_client: AsyncClient, make_pdf: Callable[..., bytes]
    ) -> None:
        custom_filename = "my-custom-document.pdf"

        response = await async_client.post(
            "/upload/pdf",
            files={"file": (custom_filename, make_pdf("Hola"), "application/pdf")},
        )

        assert response.json()["filename"] == custom_filename

    async def test_reject_non_pdf_file_txt(self, async_client: AsyncClient) -> None:
        """Text file upload returns 400 error."""
        response = await async_client.post(
            "/upload/pdf",
            files={"file": ("notes.txt", b"plain text", "text/plain")},
        )

        assert response.status_code == 400
        assert "PDF" in response.json()["detail"]

    async def test_reject_fake_pdf_extension(self, async_client: AsyncClient) -> None:
        """File with .pdf extension but no PDF header is rejected."""
        response = await async_client.post(
            "/upload/pdf",
            files={"file": ("fake.pdf", b"not a pdf", "application/pdf")},
        )

        assert response.status_code == 400
        assert "Invalid PDF" in response.json()["detail"]

    async def test_reject_oversized_file(self, async_client: AsyncClient) -> None:
        """File over 10MB returns 413."""
        oversized = b"%PDF-1.4" + b"\x00" * (MAX_FILE_SIZE + 1)

        response = await async_client.post(
            "/upload/pdf",
            files={"file": ("large.pdf", oversized, "application/pdf")},
        )

        assert response.status_code == 413
        assert "10MB" in response.json()["detail"]

    async def test_reject_empty_file(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            "/upload/pdf",
            files={"file": ("empty.pdf", b"", "application/pdf")},
        )

        assert response.status_code == 400
        assert "Empty file" in response.json()["detail"]

    async def test_reject_corrupt_pdf(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            "/upload/pdf",
            files={"file": ("broken.pdf", b"%PDF-1.4\n1 0 obj\n<<", "application/pdf")},
        )

        assert response.status_code == 400


class TestUploadEdgeCases:
    """Edge cases for the upload endpoint."""

    async def test_wrong_http_method_returns_405(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/upload/pdf")

        assert response.status_code == 405

    async def test_missing_file_returns_422(self, async_client: AsyncClient) -> None:
        response = await async_client.post("/upload/pdf")

        assert response.status_code == 422

    async def test_wrong_form_field_name_returns_422(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            "/upload/pdf",
            files={"wrong_field": ("test.pdf", b"%PDF-1.4\n", "application/pdf")},
        )

        assert response.status_code == 422

    async def test_cors_headers_present(self, async_client: AsyncClient) -> None:
        """Response includes CORS headers for cross-origin requests."""
        response = await async_client.post(
            "/upload/pdf",
            files={"file": ("test.pdf", b"not a pdf", "application/pdf")},
            headers={"Origin": "http://localhost:3000"},
        )

        assert "access-control-allow-origin" in response.headers
