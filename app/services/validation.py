"""
Request validation: typed decoders plus the validate(body=, params=, query=) dependency.

Decoders turn raw JSON/form input into the shapes the pydantic schemas expect
(blank optionals removed, is_admin as a bool, address as an object). The
dependency validates every requested part, collects all field errors and
raises ValidationFailed once, so a client sees every problem in one response.
"""

import json
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any

from fastapi import Request
from pydantic import BaseModel, ValidationError

from app.core.errors import ValidationFailed

logger = logging.getLogger(__name__)

# Body fields whose empty string is passed through to the schema (and rejected there).
REQUIRED_FIELDS = frozenset({"first_name", "email", "password", "gender"})

# Never echoed back in validation errors.
SENSITIVE_FIELDS = frozenset({"password"})

DEFAULT_PAGE = "1"
DEFAULT_LIMIT = "10"

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


class BodyDecodeError(ValueError):
    """Request body could not be read as a JSON object or form."""


def blank_to_none(data: Mapping[str, Any], required: frozenset[str] = REQUIRED_FIELDS) -> dict[str, Any]:
    """Return a copy of data with empty-string optional fields removed."""
    return {k: v for k, v in data.items() if not (v == "" and k not in required)}


def decode_admin_flag(value: Any) -> Any:
    """
    "true" / "1" -> True, any other string -> False.

    Non-string values are returned unchanged for the schema to validate.
    """
    if isinstance(value, str):
        return value in ("true", "1")
    return value


def decode_address(value: Any) -> Any:
    """
    Decode an address sent as a JSON string (form bodies) into a dict.

    Raises ValueError when the string is not valid JSON or not a JSON object.
    """
    if not isinstance(value, str):
        return value
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError as e:
        raise ValueError(f"address must be a valid JSON object: {e.msg}") from e
    if not isinstance(parsed, dict):
        raise ValueError("address must be a JSON object")
    return parsed


def decode_pagination(query: Mapping[str, Any]) -> dict[str, Any]:
    """Drop blank query values and fill page/limit defaults."""
    decoded = {k: v for k, v in query.items() if v != ""}
    decoded.setdefault("page", DEFAULT_PAGE)
    decoded.setdefault("limit", DEFAULT_LIMIT)
    return decoded


def _received(err: dict[str, Any]) -> Any:
    loc = err.get("loc", ())
    if err.get("type") == "missing" or (loc and loc[-1] in SENSITIVE_FIELDS):
        return None
    if not loc and isinstance(err.get("input"), dict):
        return None
    return err.get("input")


def format_errors(errors: list[dict[str, Any]], prefix: str) -> list[dict[str, Any]]:
    """Map pydantic error dicts to {field, message, code, receivedValue}."""
    formatted = []
    for err in errors:
        loc = ".".join(str(part) for part in err.get("loc", ()))
        formatted.append(
            {
                "field": f"{prefix}.{loc}" if loc else prefix,
                "message": err.get("msg", "Invalid value"),
                "code": err.get("type", "value_error"),
                "receivedValue": _received(err),
            }
        )
    return formatted


def field_error(field: str, message: str, code: str = "value_error", received: Any = None) -> dict[str, Any]:
    return {"field": field, "message": message, "code": code, "receivedValue": received}


@dataclass(frozen=True)
class ValidatedRequest:
    """Read-only view of the validated parts of a request."""

    body: Any = None
    params: Any = None
    query: Any = None


async def read_body(request: Request) -> dict[str, Any]:
    """Read a JSON object, urlencoded form or multipart form body as a dict of values."""
    content_type = request.headers.get("content-type", "").lower()
    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        # File parts are not part of any schema; keep text fields only.
        return {k: v for k, v in form.multi_items() if isinstance(v, str)}

    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise BodyDecodeError(f"Request body is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise BodyDecodeError("Request body must be a JSON object")
    return data


def decode_body(raw: Mapping[str, Any]) -> tuple[dict[str, Any], list[dict[str, Any]]]:
    """Apply the body decoders; return (decoded body, decoder field errors)."""
    body = blank_to_none(raw)
    errors: list[dict[str, Any]] = []
    if "is_admin" in body:
        body["is_admin"] = decode_admin_flag(body["is_admin"])
    if "address" in body:
        try:
            body["address"] = decode_address(body["address"])
        except ValueError as e:
            errors.append(field_error("body.address", str(e), received=body.pop("address")))
    return body, errors


def _check(schema: type[BaseModel], data: Mapping[str, Any], prefix: str, errors: list) -> BaseModel | None:
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        errors.extend(format_errors(e.errors(include_url=False), prefix))
        return None


def validate(
    body: type[BaseModel] | None = None,
    params: type[BaseModel] | None = None,
    query: type[BaseModel] | None = None,
) -> Callable[[Request], Awaitable[ValidatedRequest]]:
    """
    Dependency factory validating the body, path params and query of a request.

    Usage: ``req: Annotated[ValidatedRequest, Depends(validate(body=PostCreate))]``.
    Raises ValidationFailed (400) listing every error across all parts.
    """

    async def dependency(request: Request) -> ValidatedRequest:
        errors: list[dict[str, Any]] = []
        validated_body = validated_params = validated_query = None

        if body is not None:
            try:
                raw = await read_body(request)
            except BodyDecodeError as e:
                errors.append(field_error("body", str(e), code="json_invalid"))
            else:
                decoded, decode_errors = decode_body(raw)
                errors.extend(decode_errors)
                validated_body = _check(body, decoded, "body", errors)

        if params is not None:
            raw_params = {k: v for k, v in request.path_params.items() if v != ""}
            validated_params = _check(params, raw_params, "params", errors)

        if query is not None:
            raw_query = dict(request.query_params)
            if "page" in query.model_fields:
                raw_query = decode_pagination(raw_query)
            else:
                raw_query = {k: v for k, v in raw_query.items() if v != ""}
            validated_query = _check(query, raw_query, "query", errors)

        if errors:
            logger.info(
                "Request validation failed",
                extra={"path": request.url.path, "total_errors": len(errors)},
            )
            raise ValidationFailed(errors)
        return ValidatedRequest(body=validated_body, params=validated_params, query=validated_query)

    return dependency
