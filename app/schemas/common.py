"""Schemas shared across resources: path ids, pagination and the address object."""

from typing import Literal

from pydantic import BaseModel, Field

Gender = Literal["male", "female", "other"]

MAX_PAGE_LIMIT = 100


class Address(BaseModel):
    """Postal address stored as JSON on the user row."""

    model_config = {"extra": "ignore"}

    street_name: str | None = Field(default=None, max_length=200)
    pincode: int | str | None = None
    state: str | None = Field(default=None, max_length=100)
    country: str | None = Field(default=None, max_length=100)


class IdParams(BaseModel):
    id: int = Field(..., gt=0)


class PaginationQuery(BaseModel):
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=MAX_PAGE_LIMIT)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit
