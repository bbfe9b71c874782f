"""ORM model for versioned reference data grouped by type."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String, UniqueConstraint, func

from app.models.base import Base, JSONType, TimestampMixin

MASTER_DATA_TYPES = ("roles", "permissions", "modules", "configurations")


class MasterData(TimestampMixin, Base):
    """
    One reference record (data_type, data_key) -> data_value.

    version and last_synced are bumped for every active record on each sync.
    """

    __tablename__ = "master_data"
    __table_args__ = (
        UniqueConstraint("data_type", "data_key", name="uq_master_data_type_key"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    data_type = Column(String(32), nullable=False, index=True)
    data_key = Column(String(255), nullable=False, index=True)
    data_value = Column(JSONType, nullable=False)
    description = Column(String(500), nullable=False, default="")
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    version = Column(Integer, nullable=False, default=1)
    last_synced = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
