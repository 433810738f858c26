from typing import Optional
from fastapi import APIRouter, File, UploadFile
from cvbuilder.config import get_settings
from cvbuilder.errors import APIError
from cvbuilder.services.file_processing import process_file

router = APIRouter()


@router.post("/upload")
async def upload_file(file: Optional[UploadFile] = File(None)):
    if file is None:
        raise APIError("No file uploaded", 400)

    max_bytes = get_settings().max_upload_bytes
    # At most one byte past the limit is read
    content = await file.read(max_bytes + 1)
    return process_file(file.filename or "upload", file.content_type or "", content, max_bytes)
