from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional

from models.admin import Admin
from schemas.validators import normalize_email

PASSWORD_MIN_LENGTH = 6


def normalize_admin_name(value: str) -> str:
    name = value.strip()
    if not name:
        raise ValueError("Name is required")
    return name


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return v.strip().lower()


class CreateAdminRequest(BaseModel):
    name: str
    email: EmailStr
    password: str = Field(..., min_length=PASSWORD_MIN_LENGTH)
    role: Optional[str] = "admin"

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        return normalize_admin_name(v)

    @field_validator("email", mode="before")
    @classmethod
    def _email(cls, v):
        return normalize_email(v)


class UpdateProfileRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None

    @field_validator("name")
    @classmethod
    def _name(cls, v: Optional[str]) -> Optional[str]:
        return normalize_admin_name(v) if v else None

    @field_validator("email", mode="before")
    @classmethod
    def _email(cls, v):
        return normalize_email(v) if v else None


class ChangePasswordRequest(BaseModel):
    currentPassword: str = Field(..., min_length=1)
    newPassword: str = Field(..., min_length=PASSWORD_MIN_LENGTH)


class AdminSummary(BaseModel):
    id: str
    name: str
    email: str
    role: str

    @classmethod
    def from_admin(cls, admin: Admin) -> "AdminSummary":
        return cls(id=admin.id, name=admin.name, email=admin.email, role=admin.role)


class LoginResponse(BaseModel):
    admin: AdminSummary
    token: str
