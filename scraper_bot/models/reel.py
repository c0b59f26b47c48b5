"""Pydantic models for the ``reels`` table and reel queries."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from scraper_bot.models.enums import SourceType

ReelOrderField = Literal["published_at", "views", "likes", "comments_count", "fetched_at"]


class ReelDraft(BaseModel):
    """Partial reel record produced by the scraping mapper.

    Every field is optional: Apify items are not guaranteed to carry an id,
    a URL or a timestamp.  Drafts are validated into ``ReelUpsert`` before
    they are persisted.
    """
    instagram_id: str | None = None
    shortcode: str | None = None
    url: str | None = None
    caption: str | None = None
    author_username: str | None = None
    author_id: str | None = None
    views: int | None = None
    likes: int | None = None
    comments_count: int | None = None
    duration: float | None = None
    thumbnail_url: str | None = None
    music_title: str | None = None
    music_artist: str | None = None
    published_at: datetime | None = None
    raw_data: dict[str, Any] | None = None


class ReelUpsert(BaseModel):
    """Payload for upserting a reel (conflict on project_id + url)."""
    project_id: int
    source_type: SourceType
    source_id: int
    instagram_id: str = Field(min_length=1)
    url: str = Field(min_length=1)
    published_at: datetime
    shortcode: str | None = None
    caption: str | None = None
    author_username: str | None = None
    author_id: str | None = None
    views: int = 0
    likes: int = 0
    comments_count: int = 0
    duration: float | None = None
    thumbnail_url: str | None = None
    music_title: str | None = None
    music_artist: str | None = None
    raw_data: dict[str, Any] | None = None


class Reel(BaseModel):
    """Full reel record returned from the database."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    project_id: int
    source_type: SourceType
    source_id: int
    instagram_id: str
    url: str
    published_at: datetime
    shortcode: str | None = None
    caption: str | None = None
    author_username: str | None = None
    author_id: str | None = None
    views: int = 0
    likes: int = 0
    comments_count: int = 0
    duration: float | None = None
    thumbnail_url: str | None = None
    music_title: str | None = None
    music_artist: str | None = None
    raw_data: dict[str, Any] | None = None
    fetched_at: datetime | None = None
    is_processed: bool = False
    processing_status: str | None = None
    processing_result: str | None = None


class ReelsFilter(BaseModel):
    """Query options for ``StorageAdapter.get_reels``."""
    project_id: int | None = None
    source_type: SourceType | None = None
    source_id: int | None = None
    min_views: int | None = None
    max_age_days: int | None = None
    after_date: datetime | None = None
    before_date: datetime | None = None
    is_processed: bool | None = None
    order_by: ReelOrderField = "published_at"
    order_direction: Literal["ASC", "DESC"] = "DESC"
    limit: int | None = Field(default=None, ge=1)
    offset: int = Field(default=0, ge=0)


def build_reel_upsert(
    draft: ReelDraft,
    project_id: int,
    source_type: SourceType,
    source_id: int,
) -> ReelUpsert:
    """Validate a draft for persistence.  Raises ``pydantic.ValidationError``."""
    return ReelUpsert.model_validate(
        {
            **draft.model_dump(exclude_none=True),
            "project_id": project_id,
            "source_type": source_type,
            "source_id": source_id,
        }
    )
