from datetime import datetime
from typing import Literal, Optional
from pydantic import Field, field_validator
from cvbuilder.schemas.common import CamelModel
from cvbuilder.schemas.auth import check_password_strength


class Preferences(CamelModel):
    language: Literal["en", "fr", "es", "de"] = "en"
    email_notifications: bool = True
    data_retention: Literal["6months", "1year", "2years", "indefinite"] = "1year"


class PreferencesUpdate(CamelModel):
    language: Optional[Literal["en", "fr", "es", "de"]] = None
    email_notifications: Optional[bool] = None
    data_retention: Optional[Literal["6months", "1year", "2years", "indefinite"]] = None


class UserResponse(CamelModel):
    # password_hash is never serialized
    id: str
    first_name: str
    last_name: str
    full_name: str
    email: str
    phone: Optional[str] = None
    location: Optional[str] = None
    preferences: Preferences
    cv_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UserUpdate(CamelModel):
    first_name: Optional[str] = Field(default=None, min_length=2, max_length=50)
    last_name: Optional[str] = Field(default=None, min_length=2, max_length=50)
    phone: Optional[str] = Field(default=None, max_length=20)
    location: Optional[str] = Field(default=None, max_length=100)
    preferences: Optional[PreferencesUpdate] = None


class PasswordChange(CamelModel):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=6)

    @field_validator("new_password")
    @classmethod
    def check_new_password(cls, value: str) -> str:
        return check_password_strength(value)
