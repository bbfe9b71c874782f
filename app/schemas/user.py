"""Schemas for user profile reads, updates and role assignment."""

from datetime import date, datetime

from pydantic import AliasChoices, BaseModel, Field, field_validator

from app.schemas.common import Address, Gender


class UserUpdate(BaseModel):
    """Partial profile update; only fields present in the body are applied."""

    model_config = {"extra": "ignore"}

    first_name: str | None = Field(default=None, min_length=2, max_length=50)
    last_name: str | None = Field(default=None, max_length=50)
    about: str | None = Field(default=None, max_length=1000)
    address: Address | None = None
    gender: Gender | None = None
    date_of_birth: date | None = None
    education_qualification: str | None = Field(default=None, max_length=200)

    @field_validator("first_name", "last_name", "about", "gender", "education_qualification")
    @classmethod
    def _not_null(cls, v):
        # Omit a field to leave it unchanged; only address and date_of_birth can be cleared.
        if v is None:
            raise ValueError("must not be null")
        return v


class AssignRoleRequest(BaseModel):
    role_id: int = Field(..., gt=0, validation_alias=AliasChoices("role_id", "roleId"))


class UserOut(BaseModel):
    """Public user representation (never includes the password hash)."""

    model_config = {"from_attributes": True}

    id: int
    first_name: str
    last_name: str | None = None
    email: str
    about: str | None = None
    address: Address | None = None
    gender: str
    date_of_birth: date | None = None
    education_qualification: str | None = None
    is_admin: bool
    is_active: bool
    role_id: int | None = None
    role: str | None = Field(default=None, validation_alias="role_name")
    created_at: datetime | None = None
    updated_at: datetime | None = None


class RoleAssignmentOut(BaseModel):
    first_name: str
    last_name: str | None = None
    email: str
    role: str | None = None
    is_admin: bool
