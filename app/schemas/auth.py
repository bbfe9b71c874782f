"""Request/response schemas for auth endpoints and the typed request identity."""

from datetime import date
from typing import Literal

from fastapi import Request
from pydantic import BaseModel, EmailStr, Field, field_validator

from app.core.security import PASSWORD_MAX_LEN, PASSWORD_MIN_LEN
from app.schemas.common import Address, Gender


class Anonymous(BaseModel):
    """No credentials have been verified for this request."""

    kind: Literal["anonymous"] = "anonymous"


class Authenticated(BaseModel):
    """Verified caller: resolved user id, admin flag and (when checked) role permissions."""

    model_config = {"frozen": True}

    kind: Literal["authenticated"] = "authenticated"
    user_id: int
    is_admin: bool
    permissions: tuple[str, ...] = ()

    def has_permission(self, permission: str) -> bool:
        return permission in self.permissions


def current_identity(request: Request) -> Anonymous | Authenticated:
    """Identity recorded on the request by the auth dependency, else Anonymous."""
    return getattr(request.state, "identity", None) or Anonymous()


def _normalize_email(v: str) -> str:
    return v.strip().lower()


class RegisterRequest(BaseModel):
    """Registration body (JSON or form). is_admin/address arrive already decoded."""

    model_config = {"extra": "ignore"}

    first_name: str = Field(..., min_length=2, max_length=50)
    last_name: str | None = Field(default=None, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)
    about: str | None = Field(default=None, max_length=1000)
    address: Address | None = None
    is_admin: bool = False
    gender: Gender
    date_of_birth: date | None = Field(default=None, description="YYYY-MM-DD")
    education_qualification: str | None = Field(default=None, max_length=200)

    @field_validator("email")
    @classmethod
    def _lower_email(cls, v: str) -> str:
        return _normalize_email(v)


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: EmailStr
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN)

    @field_validator("email")
    @classmethod
    def _lower_email(cls, v: str) -> str:
        return _normalize_email(v)


class PasswordResetRequest(BaseModel):
    email: EmailStr

    @field_validator("email")
    @classmethod
    def _lower_email(cls, v: str) -> str:
        return _normalize_email(v)


class ResetPasswordRequest(BaseModel):
    password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)


class ResetTokenParams(BaseModel):
    token: str = Field(..., min_length=1, max_length=128)


class RegisterData(BaseModel):
    """Data returned by POST /auth/register."""

    first_name: str
    email: str
    is_admin: bool
    role: str


class LoginUser(BaseModel):
    id: int
    first_name: str
    email: str
    is_admin: bool
    role: str | None = None


class LoginData(BaseModel):
    """Data returned by POST /auth/login."""

    user: LoginUser
    master_data: dict | None = None
    master_data_sync_failed: Literal["Yes", "No"] = "No"
