"""
PDF Generator - HTML templates rendered to PDF

CVs and cover letters are rendered to HTML with Jinja2 and converted to
A4 PDFs by WeasyPrint. Conversion is CPU-bound and blocking, so it runs in
a worker thread bounded by ``pdf_timeout_seconds``.
"""

import asyncio
import logging
import re
import time
import unicodedata
from datetime import date
from typing import Any, Optional
from urllib.parse import quote

from jinja2 import Environment, PackageLoader, select_autoescape

from cvbuilder.config import get_settings
from cvbuilder.errors import PDFGenerationError, PDFTimeoutError
from cvbuilder.middleware.metrics import record_pdf_render
from cvbuilder.services.pdf.translations import get_translation
from cvbuilder.services.skills import categorize_skills_array
from cvbuilder.services.themes import builtin_theme

logger = logging.getLogger(__name__)

CONTACT_FIELDS = ("email", "phone", "location", "linkedin", "github", "portfolio")

_env = Environment(
    loader=PackageLoader("cvbuilder.services.pdf", "templates"),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)


def _skills_by_category(skills: Any) -> dict[str, list[str]]:
    if isinstance(skills, list):
        skills = categorize_skills_array(skills)
    if not isinstance(skills, dict):
        return {}

    grouped: dict[str, list[str]] = {}
    for category, entries in skills.items():
        if not isinstance(entries, list):
            continue
        names = [e.get("name") if isinstance(e, dict) else e for e in entries]
        names = [str(n) for n in names if n]
        if names:
            grouped[category] = names
    return grouped


def render_cv_html(cv: dict, theme: Optional[dict] = None, language: Optional[str] = None) -> str:
    """
    Render a storage-shape CV to a standalone HTML document.

    Args:
        cv: CV content (personalInfo, summary, skills, experience, ...)
        theme: Theme settings; defaults to the built-in professional theme
        language: Heading language; defaults to the CV's own language
    """
    language = language or cv.get("language") or "en"
    theme = theme or builtin_theme(cv.get("theme"))
    personal = cv.get("personalInfo") or {}
    contact = personal.get("contact") or {}

    template = _env.get_template("cv.html")
    return template.render(
        t=lambda key: get_translation(key, language),
        language=language,
        theme=theme,
        colors=theme.get("colors") or {},
        typography=theme.get("typography") or {},
        spacing=theme.get("spacing") or {},
        font_sizes=theme.get("font_sizes") or {},
        name=personal.get("name") or "",
        title=personal.get("title") or "",
        contact=[(field, contact[field]) for field in CONTACT_FIELDS if contact.get(field)],
        summary=cv.get("summary") or "",
        skills=_skills_by_category(cv.get("skills")),
        experience=cv.get("experience") or [],
        projects=cv.get("projects") or [],
        education=cv.get("education") or [],
        certifications=cv.get("certifications") or [],
        additional_experience=cv.get("additionalExperience") or [],
        languages=cv.get("languages") or [],
        interests=cv.get("interests") or [],
    )


def render_cover_letter_html(content: str) -> str:
    paragraphs = [p.strip() for p in re.split(r"\n\s*\n", content or "") if p.strip()]
    template = _env.get_template("cover_letter.html")
    return template.render(
        paragraphs=[p.splitlines() for p in paragraphs],
        generated_on=date.today().isoformat(),
    )


def _write_pdf(html: str) -> bytes:
    # WeasyPrint pulls in native Pango/Cairo bindings; load it on first render only
    from weasyprint import HTML

    return HTML(string=html).write_pdf()


async def generate_pdf(html: str, timeout: Optional[float] = None, document: str = "cv") -> bytes:
    """
    Convert an HTML document to PDF bytes.

    Raises:
        PDFTimeoutError: Rendering took longer than the timeout (408)
        PDFGenerationError: WeasyPrint failed (500)
    """
    timeout = timeout or get_settings().pdf_timeout_seconds
    start = time.perf_counter()
    try:
        pdf = await asyncio.wait_for(asyncio.to_thread(_write_pdf, html), timeout=timeout)
    except asyncio.TimeoutError as e:
        logger.error(f"PDF rendering exceeded {timeout}s")
        raise PDFTimeoutError() from e
    except Exception as e:
        logger.error(f"PDF rendering failed: {e}")
        raise PDFGenerationError(str(e)) from e

    duration = time.perf_counter() - start
    record_pdf_render(document, duration)
    logger.info(f"Generated {document} PDF ({len(pdf)} bytes) in {duration:.2f}s")
    return pdf


def pdf_filename(name: Optional[str], suffix: str = "CV") -> str:
    """``Jane Doe`` -> ``Jane_Doe_CV.pdf``"""
    base = re.sub(r"\s+", "_", (name or "").strip()) or "CV"
    base = re.sub(r'[\\/:*?"<>|]', "", base)
    return f"{base}_{suffix}.pdf" if base != suffix else f"{suffix}.pdf"


_UNSAFE_HEADER_CHARS = re.compile(r'[\x00-\x1f\x7f"\\]')


def content_disposition(filename: str, disposition: str = "attachment") -> str:
    """
    Content-Disposition value for a download named ``filename``.

    Response headers are latin-1 on the wire, so names outside ASCII get an
    ASCII ``filename`` fallback plus the UTF-8 name in ``filename*``
    (RFC 6266 / RFC 5987):

        Łukasz_Nowak_CV.pdf -> attachment; filename="ukasz_Nowak_CV.pdf";
                               filename*=UTF-8''%C5%81ukasz_Nowak_CV.pdf
    """
    filename = _UNSAFE_HEADER_CHARS.sub("", filename)
    fallback = unicodedata.normalize("NFKD", filename).encode("ascii", "ignore").decode("ascii")
    fallback = fallback.strip("_ ")
    if not fallback or fallback.startswith("."):
        fallback = f"download{fallback}"

    value = f'{disposition}; filename="{fallback}"'
    if fallback != filename:
        value += f"; filename*=UTF-8''{quote(filename, safe='')}"
    return value
