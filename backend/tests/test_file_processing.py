"""
Tests for upload validation and text extraction.
"""

from io import BytesIO

import pytest
from docx import Document
from pypdf import PdfWriter

from cvbuilder.errors import APIError
from cvbuilder.services.file_processing import DOCX_MIME, PDF_MIME, process_file

MAX_BYTES = 10 * 1024 * 1024


def make_docx(*paragraphs: str) -> bytes:
    document = Document()
    for paragraph in paragraphs:
        document.add_paragraph(paragraph)
    buffer = BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def make_blank_pdf() -> bytes:
    writer = PdfWriter()
    writer.add_blank_page(width=595, height=842)
    buffer = BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


class TestProcessFile:
    def test_plain_text(self):
        result = process_file("cv.txt", "text/plain", "Jane Doe\nEngineer".encode(), MAX_BYTES)

        assert result["success"] is True
        assert result["extractedText"] == "Jane Doe\nEngineer"
        assert result["fileId"].startswith("file-")

    def test_content_type_parameters_ignored(self):
        result = process_file("cv.txt", "text/plain; charset=utf-8", b"Jane", MAX_BYTES)
        assert result["extractedText"] == "Jane"

    def test_docx_paragraphs(self):
        content = make_docx("Jane Doe", "", "Backend Engineer")

        result = process_file("cv.docx", DOCX_MIME, content, MAX_BYTES)

        assert result["extractedText"] == "Jane Doe\n\nBackend Engineer"

    def test_pdf_without_text(self):
        result = process_file("cv.pdf", PDF_MIME, make_blank_pdf(), MAX_BYTES)

        assert result["success"] is True
        assert result["extractedText"] == ""

    def test_unsupported_type(self):
        with pytest.raises(APIError) as exc_info:
            process_file("photo.png", "image/png", b"\x89PNG", MAX_BYTES)

        assert exc_info.value.status_code == 400
        assert "Only PDF, DOCX, and TXT" in exc_info.value.message

    def test_too_large(self):
        with pytest.raises(APIError) as exc_info:
            process_file("cv.txt", "text/plain", b"x" * 2048, 1024)

        assert exc_info.value.status_code == 413

    def test_corrupt_pdf(self):
        with pytest.raises(APIError) as exc_info:
            process_file("cv.pdf", PDF_MIME, b"definitely not a pdf", MAX_BYTES)

        assert exc_info.value.status_code == 400

    def test_corrupt_docx(self):
        with pytest.raises(APIError) as exc_info:
            process_file("cv.docx", DOCX_MIME, b"not a zip archive", MAX_BYTES)

        assert exc_info.value.status_code == 400


class TestUploadEndpoint:
    @pytest.mark.asyncio
    async def test_upload_docx(self, client):
        files = {"file": ("cv.docx", make_docx("Jane Doe", "Backend Engineer"), DOCX_MIME)}

        response = await client.post("/api/files/upload", files=files)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert "Backend Engineer" in body["extractedText"]

    @pytest.mark.asyncio
    async def test_upload_wrong_type(self, client):
        files = {"file": ("photo.png", b"\x89PNG", "image/png")}

        response = await client.post("/api/files/upload", files=files)

        assert response.status_code == 400
        assert response.json()["success"] is False

    @pytest.mark.asyncio
    async def test_upload_without_file(self, client):
        response = await client.post("/api/files/upload", data={"other": "value"})

        assert response.status_code == 400
        assert response.json()["message"] == "No file uploaded"
