"""Pydantic request/response schemas."""

from app.schemas.auth import (
    Anonymous,
    Authenticated,
    LoginData,
    LoginRequest,
    PasswordResetRequest,
    RegisterData,
    RegisterRequest,
    ResetPasswordRequest,
    ResetTokenParams,
)
from app.schemas.common import Address, IdParams, PaginationQuery
from app.schemas.health import HealthResponse
from app.schemas.master_data import MasterDataActiveQuery, MasterDataQuery, MasterDataTypeParams
from app.schemas.post import PostCreate, PostOut, PostUpdate
from app.schemas.role import PermissionInfo, RoleCreate, RoleOut, RoleUpdate
from app.schemas.user import AssignRoleRequest, RoleAssignmentOut, UserOut, UserUpdate

__all__ = [
    "Address",
    "Anonymous",
    "AssignRoleRequest",
    "Authenticated",
    "HealthResponse",
    "IdParams",
    "LoginData",
    "LoginRequest",
    "MasterDataActiveQuery",
    "MasterDataQuery",
    "MasterDataTypeParams",
    "PaginationQuery",
    "PasswordResetRequest",
    "PermissionInfo",
    "PostCreate",
    "PostOut",
    "PostUpdate",
    "RegisterData",
    "RegisterRequest",
    "ResetPasswordRequest",
    "ResetTokenParams",
    "RoleAssignmentOut",
    "RoleCreate",
    "RoleOut",
    "RoleUpdate",
    "UserOut",
    "UserUpdate",
]
