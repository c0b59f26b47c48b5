"""Pydantic models for per-project reel statistics."""

from pydantic import BaseModel

from scraper_bot.models.reel import Reel


class ProjectReelStats(BaseModel):
    """Aggregated engagement numbers over a project's stored reels."""
    project_id: int
    total_reels: int = 0
    from_competitors: int = 0
    from_hashtags: int = 0
    total_views: int = 0
    avg_views: float = 0.0
    avg_likes: float = 0.0
    avg_comments: float = 0.0
    top_reels: list[Reel] = []
