"""ORM model for application users (auth and RBAC)."""

from sqlalchemy import Boolean, Column, Date, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from app.models.base import Base, JSONType, TimestampMixin


class User(TimestampMixin, Base):
    """
    User account for JWT authentication and role-based access control.

    is_admin mirrors whether the assigned role is "admin"; every code path that
    changes role_id (or renames a role) keeps it in sync.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False, default="")
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    about = Column(Text, nullable=False, default="")
    address = Column(JSONType, nullable=True)
    gender = Column(String(16), nullable=False)
    date_of_birth = Column(Date, nullable=True)
    education_qualification = Column(String(200), nullable=False, default="")
    is_admin = Column(Boolean, nullable=False, default=False, index=True)
    is_active = Column(Boolean, nullable=False, default=False, index=True)
    role_id = Column(
        Integer,
        ForeignKey("roles.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    role = relationship("Role", back_populates="users")
    posts = relationship(
        "Post",
        back_populates="author",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    reset_tokens = relationship(
        "PasswordResetToken",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def role_name(self) -> str | None:
        return self.role.name if self.role is not None else None
