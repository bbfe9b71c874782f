"""Registration, login and password reset."""

import logging
from datetime import UTC, datetime, timedelta
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.errors import BadRequest, Conflict, InternalError, NotFound, Unauthenticated
from app.core.messages import SuccessMessages
from app.core.rate_limit import rate_limit
from app.core.responses import api_response
from app.core.security import (
    create_access_token,
    generate_reset_token,
    hash_password,
    verify_password,
)
from app.models.role import ADMIN_ROLE, DEFAULT_ROLE
from app.models.token import PasswordResetToken
from app.models.user import User
from app.schemas.auth import (
    LoginData,
    LoginRequest,
    LoginUser,
    PasswordResetRequest,
    RegisterData,
    RegisterRequest,
    ResetPasswordRequest,
    ResetTokenParams,
)
from app.services.email import EmailNotConfiguredError, EmailSendError, send_password_reset_email
from app.services.master_data import MasterDataSyncError, sync_master_data
from app.services.rbac import apply_role, get_role_by_name
from app.services.validation import ValidatedRequest, validate

logger = logging.getLogger(__name__)

router = APIRouter()


def _find_user_by_email(db: Session, email: str) -> User | None:
    return db.execute(select(User).where(User.email == email)).scalar_one_or_none()


def _bearer_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@router.post("/register", dependencies=[Depends(rate_limit("auth"))])
def register(
    request: Request,
    req: Annotated[ValidatedRequest, Depends(validate(body=RegisterRequest))],
    db: Annotated[Session, Depends(get_db)],
) -> JSONResponse:
    """
    Create an active user with the viewer role (admin when is_admin is set and
    admin self-registration is allowed). The access token is returned in the
    Authorization response header.
    """
    settings = request.app.state.context.settings
    body: RegisterRequest = req.body

    if _find_user_by_email(db, body.email) is not None:
        raise Conflict("USER_ALREADY_EXISTS")

    wants_admin = body.is_admin and settings.ALLOW_ADMIN_REGISTRATION
    role = get_role_by_name(db, ADMIN_ROLE if wants_admin else DEFAULT_ROLE)
    if role is None or not role.is_active:
        logger.error("Role %s missing at registration; were roles seeded?", ADMIN_ROLE if wants_admin else DEFAULT_ROLE)
        raise InternalError("ROLE_ASSIGNMENT_FAILED")

    user = User(
        first_name=body.first_name,
        last_name=body.last_name or "",
        email=body.email,
        password_hash=hash_password(body.password, rounds=settings.BCRYPT_ROUNDS),
        about=body.about or "",
        address=body.address.model_dump(exclude_none=True) if body.address else None,
        gender=body.gender,
        date_of_birth=body.date_of_birth,
        education_qualification=body.education_qualification or "",
        is_active=True,
    )
    apply_role(user, role)
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("USER_ALREADY_EXISTS")
    db.refresh(user)

    token = create_access_token(user.id, user.is_admin, settings)
    logger.info("User registered", extra={"user_id": user.id, "role": role.name})
    data = RegisterData(
        first_name=user.first_name,
        email=user.email,
        is_admin=user.is_admin,
        role=role.name,
    )
    return api_response(data, SuccessMessages.USER_REGISTERED, headers=_bearer_header(token))


@router.post("/login", dependencies=[Depends(rate_limit("auth"))])
def login(
    request: Request,
    req: Annotated[ValidatedRequest, Depends(validate(body=LoginRequest))],
    db: Annotated[Session, Depends(get_db)],
) -> JSONResponse:
    """
    Authenticate with email and password. Also runs a master-data sync; a failed
    sync does not fail the login (master_data is null, master_data_sync_failed "Yes").
    """
    settings = request.app.state.context.settings
    body: LoginRequest = req.body

    user = db.execute(
        select(User).where(User.email == body.email, User.is_active.is_(True))
    ).scalar_one_or_none()
    if user is None:
        raise Unauthenticated("INVALID_CREDENTIALS_OR_INACTIVE_ID")
    if not verify_password(body.password, user.password_hash):
        raise Unauthenticated("INVALID_CREDENTIALS")

    token = create_access_token(user.id, user.is_admin, settings)
    user_data = LoginUser(
        id=user.id,
        first_name=user.first_name,
        email=user.email,
        is_admin=user.is_admin,
        role=user.role_name,
    )

    try:
        master_data = sync_master_data(db)
        sync_failed = "No"
    except (MasterDataSyncError, SQLAlchemyError) as e:
        db.rollback()
        logger.warning("Master data sync during login failed: %s", e)
        master_data = None
        sync_failed = "Yes"

    data = LoginData(user=user_data, master_data=master_data, master_data_sync_failed=sync_failed)
    return api_response(data, SuccessMessages.USER_SIGNIN, headers=_bearer_header(token))


@router.post("/request-password-reset", dependencies=[Depends(rate_limit("password_reset"))])
def request_password_reset(
    request: Request,
    req: Annotated[ValidatedRequest, Depends(validate(body=PasswordResetRequest))],
    db: Annotated[Session, Depends(get_db)],
) -> JSONResponse:
    """Replace the user's reset token with a new one and email the reset link."""
    settings = request.app.state.context.settings
    body: PasswordResetRequest = req.body

    user = _find_user_by_email(db, body.email)
    if user is None:
        raise NotFound("USER_NOT_FOUND")

    db.query(PasswordResetToken).filter(PasswordResetToken.user_id == user.id).delete(
        synchronize_session=False
    )
    now = datetime.now(UTC)
    token = generate_reset_token()
    db.add(
        PasswordResetToken(
            user_id=user.id,
            token=token,
            created_at=now,
            expires_at=now + timedelta(minutes=settings.RESET_TOKEN_TTL_MINUTES),
        )
    )
    db.commit()

    try:
        send_password_reset_email(settings, user.email, user.first_name, token)
    except (EmailNotConfiguredError, EmailSendError) as e:
        raise InternalError("EMAIL_NOT_SENT") from e
    return api_response(None, SuccessMessages.PASSWORD_RESET_LINK_SENT)


@router.post("/reset-password/{token}", dependencies=[Depends(rate_limit("password_reset"))])
def reset_password(
    request: Request,
    req: Annotated[
        ValidatedRequest,
        Depends(validate(body=ResetPasswordRequest, params=ResetTokenParams)),
    ],
    db: Annotated[Session, Depends(get_db)],
) -> JSONResponse:
    """Set a new password using a single-use reset token; the token is deleted."""
    settings = request.app.state.context.settings
    body: ResetPasswordRequest = req.body
    params: ResetTokenParams = req.params

    record = db.execute(
        select(PasswordResetToken).where(PasswordResetToken.token == params.token)
    ).scalar_one_or_none()
    if record is None or record.is_expired():
        raise BadRequest("INVALID_RESET_TOKEN")

    record.user.password_hash = hash_password(body.password, rounds=settings.BCRYPT_ROUNDS)
    db.delete(record)
    db.commit()
    logger.info("Password reset", extra={"user_id": record.user_id})
    return api_response(None, SuccessMessages.PASSWORD_RESET)
