"""Pydantic models for the ``hashtags`` table."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class HashtagCreate(BaseModel):
    """Payload for inserting a tracked hashtag (stored without ``#``)."""
    project_id: int
    hashtag: str


class Hashtag(BaseModel):
    """Full hashtag record returned from the database."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    project_id: int
    hashtag: str
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None
