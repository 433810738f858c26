import re
from datetime import datetime
from typing import Any, Literal, Optional
from pydantic import BaseModel, Field, field_validator
from cvbuilder.schemas.common import CamelModel
from cvbuilder.schemas.auth import EMAIL_PATTERN

PHONE_PATTERN = re.compile(r"^[\+]?[1-9][\d]{0,15}$")

CVLanguage = Literal["en", "fr"]
CVTheme = Literal["professional", "modern", "minimal"]


class Contact(CamelModel):
    email: str
    phone: Optional[str] = None
    location: Optional[str] = None
    linkedin: Optional[str] = None
    github: Optional[str] = None
    portfolio: Optional[str] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        value = value.strip().lower()
        if not EMAIL_PATTERN.match(value):
            raise ValueError("Valid email is required")
        return value

    @field_validator("phone")
    @classmethod
    def check_phone(cls, value: Optional[str]) -> Optional[str]:
        if value and not PHONE_PATTERN.match(value.replace(" ", "")):
            raise ValueError("Invalid phone number format")
        return value


class PersonalInfo(CamelModel):
    name: str = Field(min_length=2, max_length=100)
    title: str = Field(min_length=2, max_length=200)
    contact: Contact


class ExperienceItem(CamelModel):
    title: str = Field(min_length=1)
    company: str = Field(min_length=1)
    period: str = Field(min_length=1)
    responsibilities: list[str] = Field(min_length=1)


class ProjectItem(CamelModel):
    name: str
    description: str = ""
    technologies: list[str] = []
    key_features: list[str] = []


class EducationItem(CamelModel):
    degree: str
    institution: str
    period: str = ""
    field: Optional[str] = None
    details: Optional[str] = None
    grade: Optional[str] = None


class CertificationItem(CamelModel):
    name: str
    issuer: str
    type: Optional[str] = None
    skills: Optional[str] = None


class AdditionalExperienceItem(CamelModel):
    organization: str
    period: str = ""
    details: Optional[str] = None


class LanguageItem(CamelModel):
    language: str
    level: str


class CVCreate(CamelModel):
    """Validated CV body for the id-based CRUD endpoints."""

    language: CVLanguage = "en"
    theme: CVTheme = "professional"
    personal_info: PersonalInfo
    summary: str = Field(min_length=10, max_length=1000)
    skills: dict[str, list[str]]
    experience: list[ExperienceItem] = []
    projects: list[ProjectItem] = []
    education: list[EducationItem] = []
    certifications: list[CertificationItem] = []
    additional_experience: list[AdditionalExperienceItem] = []
    languages: list[LanguageItem] = []
    interests: list[str] = []


class StoredContact(CamelModel):
    email: str = Field(min_length=1)
    phone: Optional[str] = None
    location: Optional[str] = None
    linkedin: Optional[str] = None
    github: Optional[str] = None
    portfolio: Optional[str] = None


class StoredPersonalInfo(CamelModel):
    name: str = Field(min_length=1)
    title: str = Field(min_length=1)
    contact: StoredContact


class StoredExperienceItem(CamelModel):
    title: str = Field(min_length=1)
    company: str = Field(min_length=1)
    period: str = Field(min_length=1)
    responsibilities: list[str] = []


class CVContent(CamelModel):
    """
    Shape of a saved master CV.

    Looser than CVCreate (no length limits, no email/phone format checks)
    but every write to /full must leave the CV in this shape, since the
    PDF renderer and the AI services read it back as-is.
    """

    language: CVLanguage = "en"
    theme: CVTheme = "professional"
    personal_info: StoredPersonalInfo
    summary: str
    skills: dict[str, list[str]]
    experience: list[StoredExperienceItem] = []
    projects: list[ProjectItem] = []
    education: list[EducationItem] = []
    certifications: list[CertificationItem] = []
    additional_experience: list[AdditionalExperienceItem] = []
    languages: list[LanguageItem] = []
    interests: list[str] = []


class CVResponse(CamelModel):
    id: str
    user_id: Optional[str] = None
    language: str
    theme: str
    personal_info: dict[str, Any]
    summary: str
    skills: dict[str, Any]
    experience: list[Any]
    projects: list[Any]
    education: list[Any]
    certifications: list[Any]
    additional_experience: list[Any]
    languages: list[Any]
    interests: list[Any]
    version: int
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CVSummary(CamelModel):
    """Listing row; heavy sections are left out."""

    id: str
    language: str
    theme: str
    personal_info: dict[str, Any]
    version: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CVListResponse(CamelModel):
    cvs: list[CVSummary]
    total: int
    page: int
    per_page: int
    pages: int


class ThemeChange(BaseModel):
    theme: str


class PDFRequest(CamelModel):
    cv_data: Optional[dict[str, Any]] = None
    options: dict[str, Any] = {}
