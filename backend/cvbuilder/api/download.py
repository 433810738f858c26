from fastapi import APIRouter, Response
from cvbuilder.schemas import CoverLetterDownload
from cvbuilder.services.pdf import content_disposition, generate_pdf, render_cover_letter_html

router = APIRouter()


@router.post("/cover-letter")
async def download_cover_letter(request: CoverLetterDownload):
    pdf = await generate_pdf(render_cover_letter_html(request.content), document="cover_letter")
    filename = request.file_name.strip() or "cover-letter"
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": content_disposition(f"{filename}.pdf")},
    )
