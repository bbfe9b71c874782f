"""Application context: the explicitly constructed holder of per-app resources."""

from dataclasses import dataclass

from fastapi import Request
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from app.core.config import Settings
from app.core.database import build_engine, build_session_factory
from app.core.rate_limit import RateLimiter


@dataclass
class AppContext:
    """Settings, storage handle and limiter state for one application instance."""

    settings: Settings
    engine: Engine
    session_factory: sessionmaker[Session]
    limiter: RateLimiter

    @classmethod
    def from_settings(cls, settings: Settings) -> "AppContext":
        engine = build_engine(settings)
        return cls(
            settings=settings,
            engine=engine,
            session_factory=build_session_factory(engine),
            limiter=RateLimiter(settings),
        )

    def close(self) -> None:
        self.engine.dispose()


def get_app_settings(request: Request) -> Settings:
    """Dependency: settings of the running app (not the process-wide cached ones)."""
    return request.app.state.context.settings
