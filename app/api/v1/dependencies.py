"""
Auth dependencies: bearer-token authentication, permission checks and the
per-user rate limit.

Every request re-reads the user and its role, so deactivation, role changes
and role soft-deletes take effect immediately.
"""

import logging
from collections.abc import Callable
from typing import Annotated

import jwt
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.errors import Forbidden, Unauthenticated
from app.core.security import SigningSecretMissingError, decode_access_token
from app.models.user import User
from app.schemas.auth import Authenticated
from app.services.rbac import effective_permissions

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def bearer_token(request: Request) -> str:
    """Token from 'Authorization: Bearer <token>'. Raises 401 TOKEN_NOT_FOUND."""
    header = request.headers.get("Authorization")
    if not header or not header.startswith(BEARER_PREFIX):
        raise Unauthenticated("TOKEN_NOT_FOUND")
    token = header[len(BEARER_PREFIX):].strip()
    if not token:
        raise Unauthenticated("TOKEN_NOT_FOUND")
    return token


def authenticate(
    request: Request,
    db: Annotated[Session, Depends(get_db)],
) -> Authenticated:
    """
    Dependency: verify the bearer token and load the active user with its role.

    Raises 401 AUTHENTICATION_FAILED for bad tokens and missing or inactive users.
    The resulting identity is also stored on request.state.identity.
    """
    token = bearer_token(request)
    settings = request.app.state.context.settings
    try:
        payload = decode_access_token(token, settings)
    except SigningSecretMissingError:
        logger.error("JWT_SECRET is not configured; cannot verify bearer tokens")
        raise Unauthenticated()
    except jwt.PyJWTError:
        raise Unauthenticated()

    try:
        user_id = int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise Unauthenticated()

    user = db.get(User, user_id)
    if user is None or not user.is_active:
        raise Unauthenticated()

    identity = Authenticated(
        user_id=user.id,
        is_admin=user.is_admin,
        permissions=effective_permissions(user.role),
    )
    request.state.identity = identity
    return identity


def require_permission(permission: str | None = None) -> Callable[..., Authenticated]:
    """
    Dependency factory: authenticate, then require permission (if given).

    Raises 403 INSUFFICIENT_PERMISSIONS with {requiredPermission, userPermissions}.
    """

    def dependency(
        identity: Annotated[Authenticated, Depends(authenticate)],
    ) -> Authenticated:
        if permission is not None and not identity.has_permission(permission):
            raise Forbidden(
                details={
                    "requiredPermission": permission,
                    "userPermissions": list(identity.permissions),
                }
            )
        return identity

    return dependency


def user_rate_limit(policy_name: str) -> Callable[..., None]:
    """Dependency factory for per-user policies (key user:<id>, admins bypass)."""

    def dependency(
        request: Request,
        identity: Annotated[Authenticated, Depends(authenticate)],
    ) -> None:
        request.app.state.context.limiter.check(
            policy_name,
            request,
            user_id=identity.user_id,
            is_admin=identity.is_admin,
        )

    return dependency


def ensure_owner_or_admin(identity: Authenticated, owner_id: int) -> None:
    """Raise 403 NOT_OWNER unless identity owns the resource or is an admin."""
    if identity.is_admin or identity.user_id == owner_id:
        return
    raise Forbidden("NOT_OWNER")
