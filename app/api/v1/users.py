"""User listing, profile updates, deletion and role assignment."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.api.v1.dependencies import ensure_owner_or_admin, require_permission, user_rate_limit
from app.core.database import get_db
from app.core.errors import NotFound
from app.core.messages import SuccessMessages
from app.core.responses import api_response, paginated_response
from app.models.role import Role
from app.models.user import User
from app.schemas.auth import Authenticated
from app.schemas.common import IdParams, PaginationQuery
from app.schemas.user import AssignRoleRequest, RoleAssignmentOut, UserOut, UserUpdate
from app.services.rbac import apply_role
from app.services.validation import ValidatedRequest, validate

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_user_or_404(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFound("USER_NOT_FOUND")
    return user


def _role_assignment(user: User) -> RoleAssignmentOut:
    return RoleAssignmentOut(
        first_name=user.first_name,
        last_name=user.last_name,
        email=user.email,
        role=user.role_name,
        is_admin=user.is_admin,
    )


@router.get("/")
def list_users(
    req: Annotated[ValidatedRequest, Depends(validate(query=PaginationQuery))],
    _identity: Annotated[Authenticated, Depends(require_permission("users.view"))],
    db: Annotated[Session, Depends(get_db)],
) -> JSONResponse:
    """Paginated list of users, oldest first."""
    query: PaginationQuery = req.query
    total = db.execute(select(func.count()).select_from(User)).scalar_one()
    users = (
        db.execute(select(User).order_by(User.id).offset(query.offset).limit(query.limit))
        .scalars()
        .all()
    )
    return paginated_response(
        [UserOut.model_validate(u) for u in users],
        page=query.page,
        limit=query.limit,
        total=total,
        message=SuccessMessages.USERS_RETRIEVED,
    )


@router.get("/profile/me")
def get_my_profile(
    identity: Annotated[Authenticated, Depends(require_permission("users.view"))],
    db: Annotated[Session, Depends(get_db)],
) -> JSONResponse:
    user = _get_user_or_404(db, identity.user_id)
    return api_response(UserOut.model_validate(user), SuccessMessages.USER_PROFILE_RETRIEVED)


@router.get("/{id}")
def get_user(
    req: Annotated[ValidatedRequest, Depends(validate(params=IdParams))],
    _identity: Annotated[Authenticated, Depends(require_permission("users.view"))],
    db: Annotated[Session, Depends(get_db)],
) -> JSONResponse:
    user = _get_user_or_404(db, req.params.id)
    return api_response(UserOut.model_validate(user), SuccessMessages.USER_PROFILE_RETRIEVED)


@router.patch("/{id}")
def update_user(
    req: Annotated[ValidatedRequest, Depends(validate(body=UserUpdate, params=IdParams))],
    identity: Annotated[Authenticated, Depends(require_permission("users.update"))],
    db: Annotated[Session, Depends(get_db)],
) -> JSONResponse:
    """Partial profile update. Users may update themselves; admins may update anyone."""
    target_id = req.params.id
    ensure_owner_or_admin(identity, target_id)
    user = _get_user_or_404(db, target_id)

    body: UserUpdate = req.body
    changes = body.model_dump(exclude_unset=True)
    if "address" in changes and body.address is not None:
        changes["address"] = body.address.model_dump(exclude_none=True)
    for field, value in changes.items():
        setattr(user, field, value)
    db.commit()
    db.refresh(user)
    logger.info("User updated", extra={"user_id": user.id, "fields": sorted(changes)})
    return api_response(UserOut.model_validate(user), SuccessMessages.USER_UPDATED)


@router.delete("/{id}")
def delete_user(
    req: Annotated[ValidatedRequest, Depends(validate(params=IdParams))],
    identity: Annotated[Authenticated, Depends(require_permission("users.delete"))],
    _limit: Annotated[None, Depends(user_rate_limit("strict"))],
    db: Annotated[Session, Depends(get_db)],
) -> JSONResponse:
    """Hard-delete a user (and their posts and reset tokens). Self or admin only."""
    target_id = req.params.id
    ensure_owner_or_admin(identity, target_id)
    user = _get_user_or_404(db, target_id)
    db.delete(user)
    db.commit()
    logger.info("User deleted", extra={"user_id": target_id, "by": identity.user_id})
    return api_response(None, SuccessMessages.USER_DELETED)


@router.patch("/{id}/assign-role")
def assign_role(
    req: Annotated[
        ValidatedRequest,
        Depends(validate(body=AssignRoleRequest, params=IdParams)),
    ],
    identity: Annotated[Authenticated, Depends(require_permission("users.update"))],
    _limit: Annotated[None, Depends(user_rate_limit("strict"))],
    db: Annotated[Session, Depends(get_db)],
) -> JSONResponse:
    """Assign an active role; is_admin follows whether the role is admin."""
    user = _get_user_or_404(db, req.params.id)
    role = db.get(Role, req.body.role_id)
    if role is None or not role.is_active:
        raise NotFound("ROLE_NOT_FOUND")

    apply_role(user, role)
    db.commit()
    db.refresh(user)
    logger.info(
        "Role assigned",
        extra={"user_id": user.id, "role": role.name, "by": identity.user_id},
    )
    return api_response(_role_assignment(user), SuccessMessages.ROLE_ASSIGNED_TO_USER)


@router.patch("/{id}/remove-role")
def remove_role(
    req: Annotated[ValidatedRequest, Depends(validate(params=IdParams))],
    identity: Annotated[Authenticated, Depends(require_permission("users.update"))],
    db: Annotated[Session, Depends(get_db)],
) -> JSONResponse:
    """Clear the user's role; the user keeps no permissions and is no longer admin."""
    user = _get_user_or_404(db, req.params.id)
    apply_role(user, None)
    db.commit()
    db.refresh(user)
    logger.info("Role removed", extra={"user_id": user.id, "by": identity.user_id})
    return api_response(_role_assignment(user), SuccessMessages.ROLE_REMOVED_FROM_USER)
