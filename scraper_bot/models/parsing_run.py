"""Pydantic models for the ``parsing_run_logs`` table.

One row per scraping invocation against one source.  The row is written
with status ``running`` when the run starts and upserted on the
(run_id, project_id, source_type, source_id) key when it ends.
"""

from datetime import datetime, timezone
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from scraper_bot.models.enums import RunStatus, SourceType


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ParsingRunLogCreate(BaseModel):
    """Payload for creating or closing a parsing run log."""
    run_id: str = Field(default_factory=lambda: str(uuid4()))
    project_id: int
    source_type: SourceType
    source_id: int
    status: RunStatus = RunStatus.running
    started_at: datetime = Field(default_factory=_utcnow)
    ended_at: datetime | None = None
    reels_found_count: int = 0
    reels_added_count: int = 0
    error_message: str | None = None


class ParsingRunLog(BaseModel):
    """Full parsing run log record returned from the database."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    run_id: str
    project_id: int
    source_type: SourceType
    source_id: int
    status: RunStatus
    started_at: datetime
    ended_at: datetime | None = None
    reels_found_count: int = 0
    reels_added_count: int = 0
    error_message: str | None = None
