"""ORM model for the append-only error log written by the response formatter."""

from sqlalchemy import Column, DateTime, Integer, String, Text, func

from app.models.base import Base, JSONType

LOG_LEVELS = ("error", "warn", "info", "debug")


class Log(Base):
    __tablename__ = "logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    level = Column(String(16), nullable=False, default="error")
    message = Column(Text, nullable=False)
    stack = Column(Text, nullable=False, default="No stack available")
    # endpoint, method, ip, user_id, timestamp
    meta = Column(JSONType, nullable=False, default=dict)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        index=True,
    )
