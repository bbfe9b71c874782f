"""Query and path schemas for master-data lookups."""

from typing import Literal

from pydantic import BaseModel, Field

MasterDataType = Literal["roles", "permissions", "modules", "configurations"]


class MasterDataActiveQuery(BaseModel):
    is_active: bool | None = None


class MasterDataQuery(MasterDataActiveQuery):
    data_type: MasterDataType | None = None


class MasterDataTypeParams(BaseModel):
    data_type: str = Field(..., min_length=1, max_length=32)
