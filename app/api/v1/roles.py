"""Role CRUD (soft delete) and the permission catalogue."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.api.v1.dependencies import require_permission, user_rate_limit
from app.core.database import get_db
from app.core.errors import BadRequest, Conflict, NotFound
from app.core.messages import SuccessMessages
from app.core.responses import api_response
from app.models.role import Role
from app.schemas.auth import Authenticated
from app.schemas.common import IdParams
from app.schemas.role import PermissionInfo, RoleCreate, RoleOut, RoleUpdate
from app.services.rbac import (
    get_role_by_name,
    invalid_permissions,
    permission_catalogue,
    sync_admin_flags,
)
from app.services.validation import ValidatedRequest, validate

logger = logging.getLogger(__name__)

router = APIRouter()


def _check_permission_format(permissions: list[str]) -> None:
    invalid = invalid_permissions(permissions)
    if invalid:
        raise BadRequest(
            "INVALID_PERMISSION_FORMAT",
            message=(
                f"Invalid permission format: {', '.join(invalid)}. "
                "Must be in format: resource.action"
            ),
            details={"invalidPermissions": invalid},
        )


def _get_role_or_404(db: Session, role_id: int) -> Role:
    role = db.get(Role, role_id)
    if role is None:
        raise NotFound("ROLE_NOT_FOUND")
    return role


@router.post("/", status_code=201)
def create_role(
    req: Annotated[ValidatedRequest, Depends(validate(body=RoleCreate))],
    identity: Annotated[Authenticated, Depends(require_permission("roles.create"))],
    _limit: Annotated[None, Depends(user_rate_limit("strict"))],
    db: Annotated[Session, Depends(get_db)],
) -> JSONResponse:
    body: RoleCreate = req.body
    if get_role_by_name(db, body.name) is not None:
        raise Conflict("ROLE_ALREADY_EXISTS")
    _check_permission_format(body.permissions)

    role = Role(name=body.name, description=body.description or "", permissions=body.permissions)
    db.add(role)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("ROLE_ALREADY_EXISTS")
    db.refresh(role)
    logger.info("Role created", extra={"role": role.name, "by": identity.user_id})
    return api_response(RoleOut.model_validate(role), SuccessMessages.ROLE_CREATED, status_code=201)


@router.get("/")
def list_roles(
    _identity: Annotated[Authenticated, Depends(require_permission("roles.view"))],
    db: Annotated[Session, Depends(get_db)],
) -> JSONResponse:
    """Active roles only; soft-deleted roles are hidden."""
    roles = db.execute(select(Role).where(Role.is_active.is_(True)).order_by(Role.id)).scalars().all()
    return api_response([RoleOut.model_validate(r) for r in roles], SuccessMessages.ROLES_RETRIEVED)


@router.get("/permissions")
def list_permissions(
    _identity: Annotated[Authenticated, Depends(require_permission("roles.view"))],
) -> JSONResponse:
    permissions = [PermissionInfo(**p) for p in permission_catalogue()]
    return api_response(permissions, SuccessMessages.PERMISSIONS_RETRIEVED)


@router.get("/{id}")
def get_role(
    req: Annotated[ValidatedRequest, Depends(validate(params=IdParams))],
    _identity: Annotated[Authenticated, Depends(require_permission("roles.view"))],
    db: Annotated[Session, Depends(get_db)],
) -> JSONResponse:
    role = _get_role_or_404(db, req.params.id)
    return api_response(RoleOut.model_validate(role), SuccessMessages.ROLE_RETRIEVED)


@router.put("/{id}")
def update_role(
    req: Annotated[ValidatedRequest, Depends(validate(body=RoleUpdate, params=IdParams))],
    identity: Annotated[Authenticated, Depends(require_permission("roles.update"))],
    db: Annotated[Session, Depends(get_db)],
) -> JSONResponse:
    """
    Partial update. Renaming a role re-derives is_admin for every user holding it.
    """
    body: RoleUpdate = req.body
    changes = body.model_dump(exclude_unset=True)
    if changes.get("permissions") is not None:
        _check_permission_format(changes["permissions"])

    role = _get_role_or_404(db, req.params.id)
    new_name = changes.get("name")
    if new_name is not None and new_name != role.name:
        existing = get_role_by_name(db, new_name)
        if existing is not None:
            raise Conflict("ROLE_ALREADY_EXISTS")

    renamed = new_name is not None and new_name != role.name
    if "description" in changes:
        role.description = changes["description"] or ""
    for field in ("name", "permissions", "is_active"):
        if changes.get(field) is not None:
            setattr(role, field, changes[field])
    if renamed:
        changed = sync_admin_flags(db, role)
        logger.info("Role renamed", extra={"role": role.name, "admin_flags_changed": changed})
    db.commit()
    db.refresh(role)
    logger.info("Role updated", extra={"role_id": role.id, "by": identity.user_id})
    return api_response(RoleOut.model_validate(role), SuccessMessages.ROLE_UPDATED)


@router.delete("/{id}")
def delete_role(
    req: Annotated[ValidatedRequest, Depends(validate(params=IdParams))],
    identity: Annotated[Authenticated, Depends(require_permission("roles.delete"))],
    _limit: Annotated[None, Depends(user_rate_limit("strict"))],
    db: Annotated[Session, Depends(get_db)],
) -> JSONResponse:
    """Soft delete: clears is_active. Users keep their role reference. Idempotent."""
    role = _get_role_or_404(db, req.params.id)
    role.is_active = False
    db.commit()
    db.refresh(role)
    logger.info("Role deactivated", extra={"role": role.name, "by": identity.user_id})
    return api_response(RoleOut.model_validate(role), SuccessMessages.ROLE_DELETED)
