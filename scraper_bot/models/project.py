"""Pydantic models for the ``projects`` table."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class ProjectCreate(BaseModel):
    """Payload for inserting a new project."""
    user_id: int
    name: str


class Project(BaseModel):
    """Full project record returned from the database."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    name: str
    description: str | None = None
    industry: str | None = None
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None
