"""Master (reference) data lookup and sync. Any authenticated user may call these."""

from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.api.v1.dependencies import require_permission
from app.core.database import get_db
from app.core.errors import NotFound, ServiceUnavailable
from app.core.messages import SuccessMessages
from app.core.responses import api_response
from app.schemas.auth import Authenticated
from app.schemas.master_data import MasterDataActiveQuery, MasterDataQuery, MasterDataTypeParams
from app.services.master_data import (
    MasterDataSyncError,
    group_by_type,
    list_master_data,
    record_view,
    sync_master_data,
)
from app.services.validation import ValidatedRequest, validate

router = APIRouter()

CurrentIdentity = Annotated[Authenticated, Depends(require_permission())]


@router.get("/")
def get_master_data(
    req: Annotated[ValidatedRequest, Depends(validate(query=MasterDataQuery))],
    _identity: CurrentIdentity,
    db: Annotated[Session, Depends(get_db)],
) -> JSONResponse:
    """All master data grouped by type, optionally filtered by data_type and is_active."""
    query: MasterDataQuery = req.query
    items = list_master_data(db, data_type=query.data_type, is_active=query.is_active)
    data = {
        "master_data": group_by_type(items),
        "total_records": len(items),
        "last_updated": datetime.now(UTC),
    }
    return api_response(data, SuccessMessages.MASTER_DATA_RETRIEVED)


@router.post("/sync")
def sync(
    _identity: CurrentIdentity,
    db: Annotated[Session, Depends(get_db)],
) -> JSONResponse:
    try:
        result = sync_master_data(db)
    except MasterDataSyncError as e:
        raise ServiceUnavailable("MASTER_DATA_SYNC_FAILED", details={"reason": str(e)}) from e
    return api_response({**result, "sync_status": "success"}, SuccessMessages.MASTER_DATA_SYNCED)


@router.get("/{data_type}")
def get_master_data_by_type(
    req: Annotated[
        ValidatedRequest,
        Depends(validate(params=MasterDataTypeParams, query=MasterDataActiveQuery)),
    ],
    _identity: CurrentIdentity,
    db: Annotated[Session, Depends(get_db)],
) -> JSONResponse:
    data_type = req.params.data_type
    items = list_master_data(db, data_type=data_type, is_active=req.query.is_active)
    if not items:
        raise NotFound("MASTER_DATA_NOT_FOUND")
    data = {
        "data_type": data_type,
        "data": {item.data_key: record_view(item) for item in items},
        "total_records": len(items),
    }
    return api_response(data, SuccessMessages.MASTER_DATA_RETRIEVED)
