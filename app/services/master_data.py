"""
Master (reference) data: grouping for API responses, sync and seeding.

A sync bumps version and last_synced on every active record; it fails when
there is nothing active to sync.
"""

import logging
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from app.models.master_data import MasterData

logger = logging.getLogger(__name__)


class MasterDataSyncError(Exception):
    """Raised when a sync finds no active master data."""


SEED_RECORDS: list[dict[str, Any]] = [
    {
        "data_type": "roles",
        "data_key": "admin",
        "data_value": {
            "name": "Administrator",
            "permissions": ["read", "write", "delete", "manage_users"],
            "level": 1,
        },
        "description": "Full administrative access",
    },
    {
        "data_type": "roles",
        "data_key": "user",
        "data_value": {"name": "Regular User", "permissions": ["read", "write"], "level": 2},
        "description": "Standard user access",
    },
    {
        "data_type": "roles",
        "data_key": "guest",
        "data_value": {"name": "Guest User", "permissions": ["read"], "level": 3},
        "description": "Limited read-only access",
    },
    {
        "data_type": "permissions",
        "data_key": "read",
        "data_value": {
            "name": "Read Access",
            "description": "View data and resources",
            "module": "general",
        },
        "description": "Permission to read/view data",
    },
    {
        "data_type": "permissions",
        "data_key": "write",
        "data_value": {
            "name": "Write Access",
            "description": "Create and modify data",
            "module": "general",
        },
        "description": "Permission to create and modify data",
    },
    {
        "data_type": "permissions",
        "data_key": "delete",
        "data_value": {
            "name": "Delete Access",
            "description": "Remove data and resources",
            "module": "general",
        },
        "description": "Permission to delete data",
    },
    {
        "data_type": "permissions",
        "data_key": "manage_users",
        "data_value": {
            "name": "User Management",
            "description": "Manage user accounts and permissions",
            "module": "user_management",
        },
        "description": "Permission to manage users",
    },
    {
        "data_type": "modules",
        "data_key": "user_management",
        "data_value": {
            "name": "User Management",
            "description": "Module for managing users and their permissions",
            "sort_order": 1,
            "is_visible": True,
        },
        "description": "User management module",
    },
    {
        "data_type": "modules",
        "data_key": "profile_management",
        "data_value": {
            "name": "Profile Management",
            "description": "Module for managing user profiles",
            "sort_order": 2,
            "is_visible": True,
        },
        "description": "Profile management module",
    },
    {
        "data_type": "modules",
        "data_key": "system_settings",
        "data_value": {
            "name": "System Settings",
            "description": "Module for system configuration",
            "sort_order": 3,
            "is_visible": True,
        },
        "description": "System settings module",
    },
    {
        "data_type": "configurations",
        "data_key": "app_settings",
        "data_value": {
            "app_name": "rbac-api",
            "version": "1.0.0",
            "maintenance_mode": False,
            "max_login_attempts": 5,
            "session_timeout": 3600,
        },
        "description": "Application configuration settings",
    },
    {
        "data_type": "configurations",
        "data_key": "email_settings",
        "data_value": {
            "smtp_host": "smtp.gmail.com",
            "smtp_port": 587,
            "from_email": "noreply@example.com",
            "templates_enabled": True,
        },
        "description": "Email service configuration",
    },
]


def record_view(item: MasterData) -> dict[str, Any]:
    """data_value flattened together with the record's bookkeeping fields."""
    return {
        **(item.data_value or {}),
        "description": item.description,
        "version": item.version,
        "last_synced": item.last_synced,
        "is_active": item.is_active,
    }


def group_by_type(items: list[MasterData]) -> dict[str, dict[str, Any]]:
    """{data_type: {data_key: record_view}} preserving input order."""
    grouped: dict[str, dict[str, Any]] = {}
    for item in items:
        grouped.setdefault(item.data_type, {})[item.data_key] = record_view(item)
    return grouped


def list_master_data(
    session: Session,
    data_type: str | None = None,
    is_active: bool | None = None,
) -> list[MasterData]:
    stmt = select(MasterData).order_by(MasterData.data_type, MasterData.data_key)
    if data_type is not None:
        stmt = stmt.where(MasterData.data_type == data_type)
    if is_active is not None:
        stmt = stmt.where(MasterData.is_active.is_(is_active))
    return list(session.execute(stmt).scalars().all())


def sync_master_data(session: Session) -> dict[str, Any]:
    """
    Increment version and stamp last_synced on every active record.

    Returns {master_data, total_records, last_synced}. Raises
    MasterDataSyncError when no active records exist.
    """
    now = datetime.now(UTC)
    result = session.execute(
        update(MasterData)
        .where(MasterData.is_active.is_(True))
        .values(version=MasterData.version + 1, last_synced=now)
        .execution_options(synchronize_session=False)
    )
    if not result.rowcount:
        session.rollback()
        raise MasterDataSyncError("No master data found to sync")
    session.commit()

    items = list_master_data(session, is_active=True)
    logger.info("Master data synced", extra={"total_records": len(items)})
    return {
        "master_data": group_by_type(items),
        "total_records": len(items),
        "last_synced": now,
    }


def seed_master_data(session: Session, reset: bool = False) -> int:
    """Insert SEED_RECORDS that are missing (all of them after reset). Returns rows inserted."""
    if reset:
        deleted = session.query(MasterData).delete(synchronize_session=False)
        logger.info("Cleared %s master data records", deleted)

    existing = {
        (row.data_type, row.data_key)
        for row in session.execute(select(MasterData.data_type, MasterData.data_key))
    }
    inserted = 0
    for record in SEED_RECORDS:
        if (record["data_type"], record["data_key"]) in existing:
            continue
        session.add(MasterData(**record))
        inserted += 1
    session.commit()
    logger.info("Seeded %s master data records", inserted)
    return inserted
