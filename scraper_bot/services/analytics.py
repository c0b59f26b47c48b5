"""Reel analytics for the analytics scene.

Aggregates engagement numbers over the reels stored for one project.
"""

from __future__ import annotations

import logging

from scraper_bot.core.constants import ANALYTICS_TOP_REELS
from scraper_bot.db.base import StorageAdapter
from scraper_bot.models.analytics import ProjectReelStats
from scraper_bot.models.enums import SourceType
from scraper_bot.models.reel import Reel, ReelsFilter

logger = logging.getLogger(__name__)


def compute_reel_stats(
    project_id: int, reels: list[Reel], top_n: int = ANALYTICS_TOP_REELS
) -> ProjectReelStats:
    """Pure aggregation over an already loaded list of reels."""
    total = len(reels)
    if total == 0:
        return ProjectReelStats(project_id=project_id)

    total_views = sum(r.views for r in reels)
    total_likes = sum(r.likes for r in reels)
    total_comments = sum(r.comments_count for r in reels)
    top = sorted(reels, key=lambda r: r.views, reverse=True)[:top_n]

    return ProjectReelStats(
        project_id=project_id,
        total_reels=total,
        from_competitors=sum(1 for r in reels if r.source_type == SourceType.competitor),
        from_hashtags=sum(1 for r in reels if r.source_type == SourceType.hashtag),
        total_views=total_views,
        avg_views=round(total_views / total, 1),
        avg_likes=round(total_likes / total, 1),
        avg_comments=round(total_comments / total, 1),
        top_reels=top,
    )


async def get_project_reel_stats(storage: StorageAdapter, project_id: int) -> ProjectReelStats:
    """Load every stored reel of the project and aggregate it."""
    reels = await storage.get_reels(ReelsFilter(project_id=project_id, order_by="views"))
    stats = compute_reel_stats(project_id, reels)
    logger.info(
        "project_stats_computed",
        extra={"project_id": project_id, "total_reels": stats.total_reels},
    )
    return stats
