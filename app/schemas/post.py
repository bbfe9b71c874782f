"""Schemas for posts."""

from datetime import datetime

from pydantic import BaseModel, Field


class PostCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1, max_length=5000)


class PostUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    content: str | None = Field(default=None, min_length=1, max_length=5000)


class PostOut(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    title: str
    content: str
    author_id: int
    created_at: datetime | None = None
    updated_at: datetime | None = None
