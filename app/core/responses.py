"""
Uniform response envelope: {status, status_code, message, data | error}.

Every route returns through api_response / paginated_response and every
error passes through error_response, which first writes a Log row.
"""

import logging
import traceback
from datetime import UTC, datetime
from typing import Any

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from app.models import Log
from app.schemas.auth import Authenticated, current_identity

logger = logging.getLogger(__name__)


def envelope(
    status_code: int,
    message: str,
    data: Any = None,
    error: Any = None,
) -> dict[str, Any]:
    """Build the envelope body; status is derived purely from status_code < 400."""
    is_success = status_code < 400
    body: dict[str, Any] = {
        "status": is_success,
        "status_code": status_code,
        "message": message,
    }
    if is_success:
        body["data"] = data
    else:
        body["error"] = error
    return body


def pagination_flags(page: int, limit: int, total: int) -> tuple[bool, bool]:
    """Return (hasNextPage, hasPreviousPage) for a 1-indexed page."""
    return page * limit < total, page > 1


def api_response(
    data: Any,
    message: str,
    status_code: int = 200,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(envelope(status_code, message, data=data)),
        headers=headers,
    )


def paginated_response(
    items: list[Any],
    *,
    page: int,
    limit: int,
    total: int,
    message: str,
    status_code: int = 200,
) -> JSONResponse:
    has_next, has_previous = pagination_flags(page, limit, total)
    body = envelope(status_code, message, data=items)
    body.update(
        {
            "page": page,
            "limit": limit,
            "total": total,
            "hasNextPage": has_next,
            "hasPreviousPage": has_previous,
        }
    )
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


def format_stack(exc: BaseException | None) -> str:
    if exc is None:
        return "No stack available"
    return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))


def log_error_to_db(request: Request, message: str, exc: BaseException | None = None) -> None:
    """
    Persist one error Log row in its own session.

    Best-effort: a failure here is logged and swallowed so the client still
    gets its response.
    """
    identity = current_identity(request)
    meta = {
        "timestamp": datetime.now(UTC).isoformat(),
        "endpoint": str(request.url.path),
        "method": request.method,
        "ip": request.client.host if request.client else "",
        "user_id": str(identity.user_id) if isinstance(identity, Authenticated) else "",
    }
    context = getattr(request.app.state, "context", None)
    if context is None:
        return
    try:
        with context.session_factory() as session:
            session.add(
                Log(level="error", message=message, stack=format_stack(exc), meta=meta)
            )
            session.commit()
    except Exception as log_exc:
        logger.error(
            "CRITICAL: Failed to log error to database: %s",
            log_exc,
            extra={"original_message": message, **meta},
        )


def error_response(
    request: Request,
    status_code: int,
    message: str,
    error: Any = None,
    exc: BaseException | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    log_error_to_db(request, message, exc)
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(envelope(status_code, message, error=error)),
        headers=headers,
    )
