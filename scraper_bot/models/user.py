"""Pydantic models for the ``users`` table and the chat identity."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class ChatUser(BaseModel):
    """External chat identity taken from an incoming Telegram update."""
    telegram_id: int
    username: str | None = None
    first_name: str | None = None
    last_name: str | None = None


class UserCreate(BaseModel):
    """Payload for inserting a new user."""
    telegram_id: int
    username: str | None = None
    first_name: str | None = None
    last_name: str | None = None


class User(BaseModel):
    """Full user record returned from the database."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    telegram_id: int
    username: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None
