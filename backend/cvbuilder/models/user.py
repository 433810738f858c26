"""
User Model - Account identity and preferences

Each user owns at most one master CV, referenced through ``cv_id``.
The password hash never leaves the database layer; response schemas
omit it.
"""

from sqlalchemy import Column, String, Boolean, JSON, DateTime
from sqlalchemy.sql import func
from cvbuilder.database import Base
import uuid


DEFAULT_PREFERENCES = {
    "language": "en",
    "emailNotifications": True,
    "dataRetention": "1year",
}


class User(Base):
    """
    Registered account.

    Attributes:
        first_name/last_name: Display name parts (max 50 chars each)
        email: Login identifier, stored lower-cased (unique)
        password_hash: PBKDF2 hash of the password
        phone/location: Optional contact details
        preferences: Dict with language, emailNotifications, dataRetention
        cv_id: ID of the user's master CV, if one was saved
    """

    __tablename__ = "users"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=True)
    location = Column(String(100), nullable=True)
    preferences = Column(JSON, nullable=False, default=lambda: dict(DEFAULT_PREFERENCES))
    cv_id = Column(String, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
