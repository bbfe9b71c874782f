"""ORM model for roles: named bundles of permission strings."""

from sqlalchemy import Boolean, Column, Integer, String
from sqlalchemy.orm import relationship

from app.models.base import Base, JSONType, TimestampMixin

ROLE_NAMES = ("admin", "editor", "viewer", "super_admin")
ADMIN_ROLE = "admin"
DEFAULT_ROLE = "viewer"


class Role(TimestampMixin, Base):
    """
    Permission bundle referenced by users.

    permissions: ordered list of "resource.action" strings (e.g. posts.delete).
    Deleting a role only clears is_active; users keep their reference.
    """

    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(32), nullable=False, unique=True, index=True)
    description = Column(String(500), nullable=False, default="")
    permissions = Column(JSONType, nullable=False, default=list)
    is_active = Column(Boolean, nullable=False, default=True)

    users = relationship("User", back_populates="role", passive_deletes=True)

    @property
    def is_admin_role(self) -> bool:
        return self.name == ADMIN_ROLE
