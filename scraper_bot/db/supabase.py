"""Supabase (Postgres) storage adapter.

Uses the async Supabase client and PostgREST table builders.  The schema
is created from ``schema.sql``; upserts rely on its unique constraints.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime, timedelta, timezone
from typing import Any

from pydantic import ValidationError
from supabase import AsyncClient, acreate_client

from scraper_bot.core.exceptions import StorageConfigError, StorageError
from scraper_bot.db.base import StorageAdapter
from scraper_bot.models.competitor import Competitor
from scraper_bot.models.enums import SourceType
from scraper_bot.models.hashtag import Hashtag
from scraper_bot.models.parsing_run import ParsingRunLog, ParsingRunLogCreate
from scraper_bot.models.project import Project
from scraper_bot.models.reel import Reel, ReelDraft, ReelsFilter, build_reel_upsert
from scraper_bot.models.user import ChatUser, User

logger = logging.getLogger(__name__)

REELS_CONFLICT_KEY = "project_id,url"
RUN_LOG_CONFLICT_KEY = "run_id,project_id,source_type,source_id"
# Supabase default max-rows per PostgREST response
REELS_PAGE_ROWS = 1000


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class SupabaseAdapter(StorageAdapter):
    """Storage adapter backed by a Supabase project."""

    def __init__(self, url: str, key: str) -> None:
        self.url = url
        self.key = key
        self._client: AsyncClient | None = None

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    async def initialize(self) -> None:
        if self._client is not None:
            return
        if not self.url or not self.key:
            raise StorageConfigError("SUPABASE_URL and SUPABASE_KEY must be configured")

        try:
            client = await acreate_client(self.url, self.key)
            # Connectivity check
            await client.table("users").select("id").limit(1).execute()
        except Exception as exc:
            raise StorageError(f"Failed to connect to Supabase: {exc}") from exc

        self._client = client
        logger.debug("supabase_initialized")

    async def close(self) -> None:
        client, self._client = self._client, None
        if client is not None:
            await client.postgrest.aclose()

    def _require_client(self) -> AsyncClient:
        if self._client is None:
            raise StorageError("Supabase adapter is not initialized")
        return self._client

    async def _execute(self, query: Any) -> list[dict[str, Any]]:
        """Run a PostgREST query and return its rows."""
        try:
            result = await query.execute()
        except Exception as exc:
            raise StorageError(str(exc)) from exc
        return result.data or []

    def _table(self, name: str) -> Any:
        return self._require_client().table(name)

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    async def get_user_by_telegram_id(self, telegram_id: int) -> User | None:
        rows = await self._execute(
            self._table("users").select("*").eq("telegram_id", telegram_id).limit(1)
        )
        return User.model_validate(rows[0]) if rows else None

    async def create_user(self, chat_user: ChatUser) -> User:
        rows = await self._execute(
            self._table("users").insert({**chat_user.model_dump(), "is_active": True})
        )
        if not rows:
            raise StorageError(f"User insert returned no row for {chat_user.telegram_id}")
        logger.info("user_created", extra={"telegram_id": chat_user.telegram_id})
        return User.model_validate(rows[0])

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    async def get_projects_by_user_id(self, user_id: int) -> list[Project]:
        rows = await self._execute(
            self._table("projects")
            .select("*")
            .eq("user_id", user_id)
            .eq("is_active", True)
            .order("created_at")
        )
        return [Project.model_validate(row) for row in rows]

    async def create_project(self, user_id: int, name: str) -> Project:
        rows = await self._execute(
            self._table("projects").insert({"user_id": user_id, "name": name, "is_active": True})
        )
        if not rows:
            raise StorageError(f"Project insert returned no row for user {user_id}")
        return Project.model_validate(rows[0])

    async def get_project_by_id(self, project_id: int) -> Project | None:
        rows = await self._execute(
            self._table("projects").select("*").eq("id", project_id).limit(1)
        )
        return Project.model_validate(rows[0]) if rows else None

    async def get_active_projects(self) -> list[Project]:
        rows = await self._execute(
            self._table("projects").select("*").eq("is_active", True).order("id")
        )
        return [Project.model_validate(row) for row in rows]

    # ------------------------------------------------------------------
    # Competitors
    # ------------------------------------------------------------------

    async def get_competitor_accounts(
        self, project_id: int, active_only: bool = True
    ) -> list[Competitor]:
        query = self._table("competitors").select("*").eq("project_id", project_id)
        if active_only:
            query = query.eq("is_active", True)
        rows = await self._execute(query.order("id"))
        return [Competitor.model_validate(row) for row in rows]

    async def add_competitor_account(
        self, project_id: int, username: str, instagram_url: str
    ) -> Competitor | None:
        rows = await self._execute(
            self._table("competitors").insert(
                {
                    "project_id": project_id,
                    "username": username,
                    "instagram_url": instagram_url,
                    "is_active": True,
                }
            )
        )
        return Competitor.model_validate(rows[0]) if rows else None

    async def delete_competitor_account(self, project_id: int, username: str) -> bool:
        rows = await self._execute(
            self._table("competitors")
            .update({"is_active": False, "updated_at": _now_iso()})
            .eq("project_id", project_id)
            .eq("username", username)
            .eq("is_active", True)
        )
        return bool(rows)

    # ------------------------------------------------------------------
    # Hashtags
    # ------------------------------------------------------------------

    async def get_hashtags_by_project_id(
        self, project_id: int, active_only: bool = True
    ) -> list[Hashtag]:
        query = self._table("hashtags").select("*").eq("project_id", project_id)
        if active_only:
            query = query.eq("is_active", True)
        rows = await self._execute(query.order("id"))
        return [Hashtag.model_validate(row) for row in rows]

    async def add_hashtag(self, project_id: int, hashtag: str) -> Hashtag | None:
        rows = await self._execute(
            self._table("hashtags").insert(
                {"project_id": project_id, "hashtag": hashtag, "is_active": True}
            )
        )
        return Hashtag.model_validate(rows[0]) if rows else None

    async def remove_hashtag(self, project_id: int, hashtag: str) -> bool:
        rows = await self._execute(
            self._table("hashtags")
            .update({"is_active": False, "updated_at": _now_iso()})
            .eq("project_id", project_id)
            .eq("hashtag", hashtag)
            .eq("is_active", True)
        )
        return bool(rows)

    # ------------------------------------------------------------------
    # Reels
    # ------------------------------------------------------------------

    async def save_reels(
        self,
        reels: Sequence[ReelDraft],
        project_id: int,
        source_type: SourceType,
        source_id: int,
    ) -> int:
        saved = 0
        for draft in reels:
            try:
                upsert = build_reel_upsert(draft, project_id, source_type, source_id)
            except ValidationError as exc:
                logger.warning(
                    "reel_draft_skipped",
                    extra={"project_id": project_id, "url": draft.url, "error": str(exc)},
                )
                continue

            payload = upsert.model_dump(mode="json")
            payload["fetched_at"] = _now_iso()
            try:
                await self._execute(
                    self._table("reels").upsert(payload, on_conflict=REELS_CONFLICT_KEY)
                )
            except StorageError:
                logger.exception(
                    "reel_save_failed",
                    extra={"project_id": project_id, "url": upsert.url},
                )
                continue
            saved += 1

        logger.info(
            "reels_saved",
            extra={
                "project_id": project_id,
                "source_type": source_type.value,
                "source_id": source_id,
                "received": len(reels),
                "saved": saved,
            },
        )
        return saved

    def _reels_query(self, f: ReelsFilter) -> Any:
        query = self._table("reels").select("*")

        if f.project_id is not None:
            query = query.eq("project_id", f.project_id)
        if f.source_type is not None:
            query = query.eq("source_type", f.source_type.value)
        if f.source_id is not None:
            query = query.eq("source_id", f.source_id)
        if f.min_views is not None:
            query = query.gte("views", f.min_views)
        if f.max_age_days is not None:
            cutoff = datetime.now(timezone.utc) - timedelta(days=f.max_age_days)
            query = query.gte("published_at", cutoff.isoformat())
        if f.after_date is not None:
            query = query.gte("published_at", f.after_date.isoformat())
        if f.before_date is not None:
            query = query.lte("published_at", f.before_date.isoformat())
        if f.is_processed is not None:
            query = query.eq("is_processed", f.is_processed)

        return query.order(f.order_by, desc=f.order_direction == "DESC").order("id")

    async def get_reels(self, reels_filter: ReelsFilter | None = None) -> list[Reel]:
        """Matching reels, fetched in pages of ``REELS_PAGE_ROWS``.

        PostgREST caps every response at the server's max-rows, so paging
        is what lets an unbounded filter return every row, as SQLite does.
        """
        f = reels_filter or ReelsFilter()
        end = f.offset + f.limit if f.limit is not None else None

        rows: list[dict[str, Any]] = []
        start = f.offset
        while end is None or start < end:
            stop = start + REELS_PAGE_ROWS if end is None else min(start + REELS_PAGE_ROWS, end)
            page = await self._execute(self._reels_query(f).range(start, stop - 1))
            rows.extend(page)
            if len(page) < stop - start:
                break
            start = stop
        return [Reel.model_validate(row) for row in rows]

    async def update_reel_processing_status(
        self,
        reel_id: int,
        is_processed: bool,
        status: str | None = None,
        result: str | None = None,
    ) -> bool:
        rows = await self._execute(
            self._table("reels")
            .update(
                {
                    "is_processed": is_processed,
                    "processing_status": status,
                    "processing_result": result,
                }
            )
            .eq("id", reel_id)
        )
        return bool(rows)

    # ------------------------------------------------------------------
    # Parsing run logs
    # ------------------------------------------------------------------

    async def log_parsing_run(self, run_log: ParsingRunLogCreate) -> ParsingRunLog:
        rows = await self._execute(
            self._table("parsing_run_logs").upsert(
                run_log.model_dump(mode="json"), on_conflict=RUN_LOG_CONFLICT_KEY
            )
        )
        if not rows:
            raise StorageError(f"Run log upsert returned no row for run {run_log.run_id}")
        return ParsingRunLog.model_validate(rows[0])

    async def get_parsing_run_logs(
        self, source_type: SourceType, source_id: int
    ) -> list[ParsingRunLog]:
        rows = await self._execute(
            self._table("parsing_run_logs")
            .select("*")
            .eq("source_type", source_type.value)
            .eq("source_id", source_id)
            .order("started_at", desc=True)
        )
        return [ParsingRunLog.model_validate(row) for row in rows]
