"""
CV Model - Master CV documents

Nested sections (personal info, experience, education, ...) are stored as
JSON columns in the same camelCase layout the API exchanges. Skills are
always stored in the category-keyed form: {"Category": ["Skill", ...]}.

Deletion through the id-based endpoints is soft (is_active=False); the
"full CV" endpoints delete rows outright.
"""

from sqlalchemy import Column, String, Integer, Text, Boolean, JSON, DateTime, ForeignKey
from sqlalchemy.sql import func
from cvbuilder.database import Base
import uuid

CV_LANGUAGES = ("en", "fr")
CV_THEMES = ("professional", "modern", "minimal")

# API (camelCase) key -> column name for every content field of a CV
CONTENT_COLUMNS = {
    "language": "language",
    "theme": "theme",
    "personalInfo": "personal_info",
    "summary": "summary",
    "skills": "skills",
    "experience": "experience",
    "projects": "projects",
    "education": "education",
    "certifications": "certifications",
    "additionalExperience": "additional_experience",
    "languages": "languages",
    "interests": "interests",
}


class CV(Base):
    """
    Structured CV owned by a single user (or anonymous when user_id is None).

    Attributes:
        language: Rendering language for section headings (en/fr)
        theme: Name of the visual theme used for PDF output
        personal_info: {name, title, contact: {email, phone, location, ...}}
        summary: Professional summary paragraph
        skills: Category-keyed skill lists
        experience/projects/education/...: Lists of section entries
        version: Incremented on every update through PUT /cvs/{id}
        is_active: False once soft-deleted
    """

    __tablename__ = "cvs"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True)
    language = Column(String(2), nullable=False, default="en")
    theme = Column(String(50), nullable=False, default="professional")
    personal_info = Column(JSON, nullable=False, default=dict)
    summary = Column(Text, nullable=False, default="")
    skills = Column(JSON, nullable=False, default=dict)
    experience = Column(JSON, nullable=False, default=list)
    projects = Column(JSON, nullable=False, default=list)
    education = Column(JSON, nullable=False, default=list)
    certifications = Column(JSON, nullable=False, default=list)
    additional_experience = Column(JSON, nullable=False, default=list)
    languages = Column(JSON, nullable=False, default=list)
    interests = Column(JSON, nullable=False, default=list)
    version = Column(Integer, nullable=False, default=1)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    created_at = Column(DateTime, server_default=func.now(), index=True)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    def apply_content(self, data: dict) -> None:
        """Copy camelCase content keys present in ``data`` onto the columns."""
        for key, column in CONTENT_COLUMNS.items():
            if key in data and data[key] is not None:
                setattr(self, column, data[key])

    def to_content(self) -> dict:
        """Storage-shape dict of the CV content, keyed the way the API speaks."""
        content = {key: getattr(self, column) for key, column in CONTENT_COLUMNS.items()}
        content["id"] = self.id
        return content
