from typing import Any, Optional
from pydantic import BaseModel, Field
from cvbuilder.schemas.common import CamelModel


class TextExtractionRequest(BaseModel):
    text: str = Field(min_length=10, max_length=50000)


class TailoringRequest(CamelModel):
    cv: dict[str, Any] = Field(min_length=1)
    job_offer: dict[str, Any] = Field(min_length=1)
    additional_requirements: Optional[str] = Field(default=None, max_length=1000)


class CoverLetterDownload(CamelModel):
    content: str = Field(min_length=1)
    file_name: str = "cover-letter"
