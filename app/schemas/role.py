"""Schemas for role CRUD and the permission catalogue."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

RoleName = Literal["admin", "editor", "viewer", "super_admin"]


class RoleCreate(BaseModel):
    name: RoleName
    description: str | None = Field(default=None, max_length=200)
    permissions: list[str] = Field(..., min_length=1)


class RoleUpdate(BaseModel):
    """Partial role update (PUT with any subset of fields)."""

    name: RoleName | None = None
    description: str | None = Field(default=None, max_length=200)
    permissions: list[str] | None = Field(default=None, min_length=1)
    is_active: bool | None = None


class RoleOut(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    name: str
    description: str | None = None
    permissions: list[str]
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PermissionInfo(BaseModel):
    name: str
    resource: str
    action: str
    description: str
