from cvbuilder.schemas.common import CamelModel, envelope
from cvbuilder.schemas.auth import RegisterRequest, LoginRequest
from cvbuilder.schemas.user import UserResponse, UserUpdate, PasswordChange, Preferences
from cvbuilder.schemas.cv import (
    CVContent,
    CVCreate,
    CVResponse,
    CVSummary,
    CVListResponse,
    ThemeChange,
    PDFRequest,
)
from cvbuilder.schemas.ai import TextExtractionRequest, TailoringRequest, CoverLetterDownload
from cvbuilder.schemas.theme import ThemeCreate, ThemeUpdate, ThemeResponse

__all__ = [
    "CamelModel",
    "envelope",
    "RegisterRequest",
    "LoginRequest",
    "UserResponse",
    "UserUpdate",
    "PasswordChange",
    "Preferences",
    "CVContent",
    "CVCreate",
    "CVResponse",
    "CVSummary",
    "CVListResponse",
    "ThemeChange",
    "PDFRequest",
    "TextExtractionRequest",
    "TailoringRequest",
    "CoverLetterDownload",
    "ThemeCreate",
    "ThemeUpdate",
    "ThemeResponse",
]
