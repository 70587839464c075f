"""Registration, login and profile schemas."""
import uuid
from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from dashboard.schemas.base import CamelModel, CamelORMModel
from dashboard.schemas.setting import SettingsResponse


class RegisterRequest(CamelModel):
    email: str = Field(..., max_length=320)
    password: str = Field(..., min_length=6, max_length=128)
    name: Optional[str] = Field(None, max_length=200)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        v = v.strip().lower()
        if "@" not in v or v.startswith("@") or v.endswith("@"):
            raise ValueError("Invalid email address")
        return v


class LoginRequest(CamelModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class UserResponse(CamelORMModel):
    id: uuid.UUID
    email: str
    name: Optional[str] = None
    avatar: Optional[str] = None
    created_at: datetime


class TokenResponse(CamelORMModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class ProfileUpdate(CamelModel):
    name: str = Field(..., max_length=200)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name must not be blank")
        return v


class ProfileResponse(UserResponse):
    files_count: int = 0
    storage_used: int = 0
    settings: Optional[SettingsResponse] = None
