from cvbuilder.services.pdf.generator import (
    content_disposition,
    generate_pdf,
    pdf_filename,
    render_cover_letter_html,
    render_cv_html,
)
from cvbuilder.services.pdf.translations import get_translation

__all__ = [
    "content_disposition",
    "generate_pdf",
    "pdf_filename",
    "render_cover_letter_html",
    "render_cv_html",
    "get_translation",
]
