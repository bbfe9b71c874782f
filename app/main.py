"""FastAPI application entrypoint. No business logic; only wiring, middleware and error rendering."""

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.v1 import router as v1_router
from app.core.config import Settings, get_settings
from app.core.context import AppContext
from app.core.errors import ApiError, ValidationFailed
from app.core.messages import ERROR_MESSAGES
from app.core.responses import error_response, format_stack
from app.models import Base
from app.services.rbac import seed_roles
from app.services.validation import format_errors

logger = logging.getLogger(__name__)

# FastAPI location names -> prefixes used in validation error fields.
LOCATION_PREFIXES = {"body": "body", "path": "params", "query": "query"}

HTTP_ERROR_CODES = {404: "NOT_FOUND", 405: "METHOD_NOT_ALLOWED", 429: "TOO_MANY_REQUESTS"}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables (when enabled) and seed the default roles before serving."""
    context: AppContext = app.state.context
    settings = context.settings
    if settings.JWT_SECRET is None:
        logger.warning("JWT_SECRET is not set; login, registration and authenticated routes will fail")
    if settings.AUTO_CREATE_TABLES:
        Base.metadata.create_all(bind=context.engine)
    try:
        with context.session_factory() as session:
            created = seed_roles(session)
        if created:
            logger.info("Seeded roles: %s", ", ".join(created))
    except SQLAlchemyError as e:
        logger.error("Role seeding failed: %s", e)
    yield
    context.close()


def _request_validation_errors(exc: RequestValidationError) -> list[dict]:
    errors = []
    for err in exc.errors():
        loc = tuple(err.get("loc", ()))
        prefix = LOCATION_PREFIXES.get(str(loc[0]), str(loc[0])) if loc else "body"
        errors.extend(format_errors([{**err, "loc": loc[1:]}], prefix))
    return errors


def register_exception_handlers(app: FastAPI) -> None:
    """Render every error as the response envelope (and record it in the error log)."""

    @app.exception_handler(ApiError)
    async def handle_api_error(request: Request, exc: ApiError) -> JSONResponse:
        return error_response(
            request,
            exc.status_code,
            exc.message,
            error=exc.payload(),
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        failed = ValidationFailed(_request_validation_errors(exc))
        return error_response(request, failed.status_code, failed.message, error=failed.payload())

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        code = HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR")
        message = ERROR_MESSAGES.get(code) or str(exc.detail)
        return error_response(
            request,
            exc.status_code,
            message,
            error={"code": code},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        error: dict = {"code": "INTERNAL_SERVER_ERROR"}
        if request.app.state.context.settings.DEBUG:
            error["message"] = str(exc)
            error["stack"] = format_stack(exc)
        return error_response(
            request,
            500,
            ERROR_MESSAGES["INTERNAL_SERVER_ERROR"],
            error=error,
            exc=exc,
        )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application and its context (engine, sessions, limiter) from settings."""
    settings = settings or get_settings()
    app = FastAPI(
        title="RBAC API",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.context = AppContext.from_settings(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Authorization"],
    )

    register_exception_handlers(app)
    app.include_router(v1_router, prefix=settings.API_V1_PREFIX)

    @app.get("/")
    def root() -> dict[str, str]:
        """Root route; minimal payload for discovery."""
        return {"message": "RBAC API", "docs": "/docs"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    uvicorn.run("app.main:app", host="0.0.0.0", port=get_settings().PORT)
