"""
Tests for HTML rendering, PDF conversion and theme resolution.

WeasyPrint itself is not exercised: _write_pdf is patched wherever a
conversion runs.
"""

import time
from unittest.mock import patch

import pytest

from cvbuilder.errors import PDFGenerationError, PDFTimeoutError
from cvbuilder.models import Theme
from cvbuilder.services.pdf import (
    content_disposition,
    generate_pdf,
    get_translation,
    pdf_filename,
    render_cover_letter_html,
    render_cv_html,
)
from cvbuilder.services.themes import builtin_theme, resolve_theme, seed_default_themes


class TestTranslations:
    def test_english(self):
        assert get_translation("professional_experience") == "Professional Experience"

    def test_french(self):
        assert get_translation("education", "fr") == "Formation"

    def test_unknown_language_uses_english(self):
        assert get_translation("projects", "de") == "Projects"

    def test_unknown_key_echoes(self):
        assert get_translation("nonexistent") == "nonexistent"


class TestRenderCV:
    def test_contains_content(self, storage_cv):
        html = render_cv_html(storage_cv)

        assert "Jane Doe" in html
        assert "Backend Engineer" in html
        assert "Designed the public REST API" in html
        assert "Professional Experience" in html
        assert "jane.doe@example.com" in html

    def test_french_headings(self, storage_cv):
        html = render_cv_html(storage_cv, language="fr")

        assert 'lang="fr"' in html
        assert "Expérience Professionnelle" in html

    def test_empty_sections_omitted(self, storage_cv):
        html = render_cv_html(storage_cv)
        assert get_translation("projects") not in html

    def test_theme_applied(self, storage_cv):
        html = render_cv_html(storage_cv, theme=builtin_theme("modern"))

        assert "#3498db" in html
        assert "Roboto" in html

    def test_skill_list_is_categorized(self, storage_cv):
        storage_cv["skills"] = [{"name": "Python", "category": "Programming"}]
        assert "Python" in render_cv_html(storage_cv)

    def test_escapes_markup(self, storage_cv):
        storage_cv["summary"] = "<script>alert(1)</script>"
        html = render_cv_html(storage_cv)

        assert "<script>" not in html
        assert "&lt;script&gt;" in html


class TestRenderCoverLetter:
    def test_paragraphs(self):
        html = render_cover_letter_html("Dear hiring manager,\n\nI am applying.\nThank you.")

        assert "<p>Dear hiring manager,</p>" in html
        assert "I am applying.<br>Thank you." in html


class TestGeneratePDF:
    @pytest.mark.asyncio
    async def test_returns_bytes(self):
        with patch("cvbuilder.services.pdf.generator._write_pdf", return_value=b"%PDF-1.7 fake"):
            assert await generate_pdf("<html></html>") == b"%PDF-1.7 fake"

    @pytest.mark.asyncio
    async def test_timeout(self):
        def slow(html):
            time.sleep(0.5)
            return b"%PDF"

        with patch("cvbuilder.services.pdf.generator._write_pdf", side_effect=slow):
            with pytest.raises(PDFTimeoutError) as exc_info:
                await generate_pdf("<html></html>", timeout=0.05)

        assert exc_info.value.status_code == 408

    @pytest.mark.asyncio
    async def test_failure(self):
        with patch("cvbuilder.services.pdf.generator._write_pdf", side_effect=OSError("cairo not found")):
            with pytest.raises(PDFGenerationError) as exc_info:
                await generate_pdf("<html></html>")

        assert exc_info.value.status_code == 500
        assert "cairo not found" in exc_info.value.message


class TestPDFFilename:
    def test_name(self):
        assert pdf_filename("Jane Doe") == "Jane_Doe_CV.pdf"

    def test_missing_name(self):
        assert pdf_filename(None) == "CV.pdf"

    def test_strips_unsafe_characters(self):
        assert pdf_filename('Jane "JD" Doe') == "Jane_JD_Doe_CV.pdf"


class TestContentDisposition:
    def test_ascii_name_unchanged(self):
        assert content_disposition("Jane_Doe_CV.pdf") == 'attachment; filename="Jane_Doe_CV.pdf"'

    def test_accents_transliterated(self):
        assert content_disposition("José_CV.pdf", "inline") == (
            "inline; filename=\"Jose_CV.pdf\"; filename*=UTF-8''Jos%C3%A9_CV.pdf"
        )

    def test_header_is_latin1_encodable(self):
        value = content_disposition("Łukasz_Nowak_CV.pdf")

        value.encode("latin-1")
        assert 'filename="ukasz_Nowak_CV.pdf"' in value

    def test_nothing_ascii_left(self):
        assert content_disposition("履歴書.pdf").startswith('attachment; filename="download.pdf"; filename*=')

    def test_strips_quotes_and_control_characters(self):
        assert content_disposition('my "letter"\n.pdf') == 'attachment; filename="my letter.pdf"'


class TestThemes:
    def test_unknown_builtin_falls_back(self):
        assert builtin_theme("neon")["name"] == "professional"

    @pytest.mark.asyncio
    async def test_seed_is_idempotent(self, db_session):
        assert await seed_default_themes(db_session) == 3
        assert await seed_default_themes(db_session) == 0

    @pytest.mark.asyncio
    async def test_seed_replace(self, db_session):
        await seed_default_themes(db_session)
        assert await seed_default_themes(db_session, replace=True) == 3

    @pytest.mark.asyncio
    async def test_stored_theme_wins(self, db_session):
        db_session.add(
            Theme(name="modern", display_name="Modern", colors={"primary": "#000000"}, is_active=True)
        )
        await db_session.commit()

        theme = await resolve_theme(db_session, "modern")

        assert theme["colors"] == {"primary": "#000000"}

    @pytest.mark.asyncio
    async def test_inactive_theme_uses_builtin(self, db_session):
        db_session.add(Theme(name="modern", display_name="Modern", colors={}, is_active=False))
        await db_session.commit()

        theme = await resolve_theme(db_session, "modern")

        assert theme["colors"]["primary"] == "#3498db"
