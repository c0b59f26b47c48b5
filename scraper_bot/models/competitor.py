"""Pydantic models for the ``competitors`` table."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class CompetitorCreate(BaseModel):
    """Payload for inserting a tracked Instagram account."""
    project_id: int
    username: str
    instagram_url: str


class Competitor(BaseModel):
    """Full competitor record returned from the database."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    project_id: int
    username: str
    instagram_url: str
    full_name: str | None = None
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None
