"""SQLAlchemy ORM models."""

from app.models.base import Base
from app.models.log import Log
from app.models.master_data import MasterData
from app.models.post import Post
from app.models.role import Role
from app.models.token import PasswordResetToken
from app.models.user import User

__all__ = ["Base", "Log", "MasterData", "PasswordResetToken", "Post", "Role", "User"]
