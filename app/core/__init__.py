"""Core app configuration, database, security and response plumbing."""

from app.core.config import Settings, get_settings
from app.core.context import AppContext, get_app_settings
from app.core.database import get_db

__all__ = ["AppContext", "Settings", "get_app_settings", "get_db", "get_settings"]
