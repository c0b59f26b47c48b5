"""Embedded SQLite storage adapter.

SQLAlchemy async engine over ``aiosqlite``.  The schema is created on
``initialize()``; every operation runs in its own short transaction, so
no transaction spans several adapter calls.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from sqlalchemy import event, insert, select, update
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from scraper_bot.core.exceptions import StorageConfigError, StorageError
from scraper_bot.db import tables
from scraper_bot.db.base import StorageAdapter
from scraper_bot.models.competitor import Competitor
from scraper_bot.models.enums import SourceType
from scraper_bot.models.hashtag import Hashtag
from scraper_bot.models.parsing_run import ParsingRunLog, ParsingRunLogCreate
from scraper_bot.models.project import Project
from scraper_bot.models.reel import Reel, ReelDraft, ReelsFilter, build_reel_upsert
from scraper_bot.models.user import ChatUser, User

logger = logging.getLogger(__name__)

_REEL_UPDATE_COLUMNS = (
    "source_type",
    "source_id",
    "instagram_id",
    "shortcode",
    "caption",
    "author_username",
    "author_id",
    "views",
    "likes",
    "comments_count",
    "duration",
    "thumbnail_url",
    "music_title",
    "music_artist",
    "published_at",
    "raw_data",
    "fetched_at",
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _utc(value: datetime | None) -> datetime | None:
    """SQLite stores naive timestamps; keep everything in naive UTC."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _enable_foreign_keys(dbapi_connection: Any, _record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class SqliteAdapter(StorageAdapter):
    """Storage adapter backed by a local SQLite file."""

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path
        self._engine: AsyncEngine | None = None

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    async def initialize(self) -> None:
        if self._engine is not None:
            return
        if not self.db_path:
            raise StorageConfigError("SQLITE_DB_PATH is not configured")

        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        engine = create_async_engine(f"sqlite+aiosqlite:///{self.db_path}", echo=False)
        event.listen(engine.sync_engine, "connect", _enable_foreign_keys)
        try:
            async with engine.begin() as conn:
                await conn.run_sync(tables.metadata.create_all)
        except SQLAlchemyError as exc:
            await engine.dispose()
            raise StorageError(f"Failed to open SQLite database {self.db_path}: {exc}") from exc

        self._engine = engine
        logger.debug("sqlite_initialized", extra={"db_path": self.db_path})

    async def close(self) -> None:
        engine, self._engine = self._engine, None
        if engine is not None:
            await engine.dispose()

    def _require_engine(self) -> AsyncEngine:
        if self._engine is None:
            raise StorageError("SQLite adapter is not initialized")
        return self._engine

    async def _fetch_all(self, stmt: Any) -> list[dict[str, Any]]:
        try:
            async with self._require_engine().connect() as conn:
                result = await conn.execute(stmt)
                return [dict(row) for row in result.mappings().all()]
        except SQLAlchemyError as exc:
            raise StorageError(str(exc)) from exc

    async def _fetch_one(self, stmt: Any) -> dict[str, Any] | None:
        rows = await self._fetch_all(stmt.limit(1))
        return rows[0] if rows else None

    async def _write(self, stmt: Any) -> list[dict[str, Any]]:
        try:
            async with self._require_engine().begin() as conn:
                result = await conn.execute(stmt)
                if result.returns_rows:
                    return [dict(row) for row in result.mappings().all()]
                return [{"rowcount": result.rowcount}]
        except SQLAlchemyError as exc:
            raise StorageError(str(exc)) from exc

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    async def get_user_by_telegram_id(self, telegram_id: int) -> User | None:
        row = await self._fetch_one(
            select(tables.users).where(tables.users.c.telegram_id == telegram_id)
        )
        return User.model_validate(row) if row else None

    async def create_user(self, chat_user: ChatUser) -> User:
        rows = await self._write(
            insert(tables.users)
            .values(**chat_user.model_dump(), is_active=True)
            .returning(tables.users)
        )
        logger.info("user_created", extra={"telegram_id": chat_user.telegram_id})
        return User.model_validate(rows[0])

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    async def get_projects_by_user_id(self, user_id: int) -> list[Project]:
        rows = await self._fetch_all(
            select(tables.projects)
            .where(tables.projects.c.user_id == user_id, tables.projects.c.is_active.is_(True))
            .order_by(tables.projects.c.created_at, tables.projects.c.id)
        )
        return [Project.model_validate(row) for row in rows]

    async def create_project(self, user_id: int, name: str) -> Project:
        rows = await self._write(
            insert(tables.projects)
            .values(user_id=user_id, name=name, is_active=True)
            .returning(tables.projects)
        )
        return Project.model_validate(rows[0])

    async def get_project_by_id(self, project_id: int) -> Project | None:
        row = await self._fetch_one(
            select(tables.projects).where(tables.projects.c.id == project_id)
        )
        return Project.model_validate(row) if row else None

    async def get_active_projects(self) -> list[Project]:
        rows = await self._fetch_all(
            select(tables.projects)
            .where(tables.projects.c.is_active.is_(True))
            .order_by(tables.projects.c.id)
        )
        return [Project.model_validate(row) for row in rows]

    # ------------------------------------------------------------------
    # Competitors
    # ------------------------------------------------------------------

    async def get_competitor_accounts(
        self, project_id: int, active_only: bool = True
    ) -> list[Competitor]:
        stmt = select(tables.competitors).where(tables.competitors.c.project_id == project_id)
        if active_only:
            stmt = stmt.where(tables.competitors.c.is_active.is_(True))
        rows = await self._fetch_all(stmt.order_by(tables.competitors.c.id))
        return [Competitor.model_validate(row) for row in rows]

    async def add_competitor_account(
        self, project_id: int, username: str, instagram_url: str
    ) -> Competitor | None:
        rows = await self._write(
            insert(tables.competitors)
            .values(
                project_id=project_id,
                username=username,
                instagram_url=instagram_url,
                is_active=True,
            )
            .returning(tables.competitors)
        )
        return Competitor.model_validate(rows[0]) if rows else None

    async def delete_competitor_account(self, project_id: int, username: str) -> bool:
        rows = await self._write(
            update(tables.competitors)
            .where(
                tables.competitors.c.project_id == project_id,
                tables.competitors.c.username == username,
                tables.competitors.c.is_active.is_(True),
            )
            .values(is_active=False, updated_at=_utcnow())
        )
        return rows[0]["rowcount"] > 0

    # ------------------------------------------------------------------
    # Hashtags
    # ------------------------------------------------------------------

    async def get_hashtags_by_project_id(
        self, project_id: int, active_only: bool = True
    ) -> list[Hashtag]:
        stmt = select(tables.hashtags).where(tables.hashtags.c.project_id == project_id)
        if active_only:
            stmt = stmt.where(tables.hashtags.c.is_active.is_(True))
        rows = await self._fetch_all(stmt.order_by(tables.hashtags.c.id))
        return [Hashtag.model_validate(row) for row in rows]

    async def add_hashtag(self, project_id: int, hashtag: str) -> Hashtag | None:
        rows = await self._write(
            insert(tables.hashtags)
            .values(project_id=project_id, hashtag=hashtag, is_active=True)
            .returning(tables.hashtags)
        )
        return Hashtag.model_validate(rows[0]) if rows else None

    async def remove_hashtag(self, project_id: int, hashtag: str) -> bool:
        rows = await self._write(
            update(tables.hashtags)
            .where(
                tables.hashtags.c.project_id == project_id,
                tables.hashtags.c.hashtag == hashtag,
                tables.hashtags.c.is_active.is_(True),
            )
            .values(is_active=False, updated_at=_utcnow())
        )
        return rows[0]["rowcount"] > 0

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
        engine = self._require_engine()
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

            values = upsert.model_dump(mode="python")
            values["source_type"] = upsert.source_type.value
            values["published_at"] = _utc(upsert.published_at)
            values["fetched_at"] = _utcnow()
            stmt = sqlite_insert(tables.reels).values(**values)
            stmt = stmt.on_conflict_do_update(
                index_elements=["project_id", "url"],
                set_={col: stmt.excluded[col] for col in _REEL_UPDATE_COLUMNS},
            )
            try:
                async with engine.begin() as conn:
                    await conn.execute(stmt)
            except SQLAlchemyError:
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

    async def get_reels(self, reels_filter: ReelsFilter | None = None) -> list[Reel]:
        f = reels_filter or ReelsFilter()
        c = tables.reels.c
        stmt = select(tables.reels)

        if f.project_id is not None:
            stmt = stmt.where(c.project_id == f.project_id)
        if f.source_type is not None:
            stmt = stmt.where(c.source_type == f.source_type.value)
        if f.source_id is not None:
            stmt = stmt.where(c.source_id == f.source_id)
        if f.min_views is not None:
            stmt = stmt.where(c.views >= f.min_views)
        if f.max_age_days is not None:
            cutoff = _utcnow() - timedelta(days=f.max_age_days)
            stmt = stmt.where(c.published_at >= cutoff)
        if f.after_date is not None:
            stmt = stmt.where(c.published_at >= _utc(f.after_date))
        if f.before_date is not None:
            stmt = stmt.where(c.published_at <= _utc(f.before_date))
        if f.is_processed is not None:
            stmt = stmt.where(c.is_processed.is_(f.is_processed))

        column = c[f.order_by]
        stmt = stmt.order_by(column.desc() if f.order_direction == "DESC" else column.asc(), c.id)
        if f.limit is not None:
            stmt = stmt.limit(f.limit)
        if f.offset:
            stmt = stmt.offset(f.offset)

        rows = await self._fetch_all(stmt)
        return [Reel.model_validate(row) for row in rows]

    async def update_reel_processing_status(
        self,
        reel_id: int,
        is_processed: bool,
        status: str | None = None,
        result: str | None = None,
    ) -> bool:
        rows = await self._write(
            update(tables.reels)
            .where(tables.reels.c.id == reel_id)
            .values(is_processed=is_processed, processing_status=status, processing_result=result)
        )
        return rows[0]["rowcount"] > 0

    # ------------------------------------------------------------------
    # Parsing run logs
    # ------------------------------------------------------------------

    async def log_parsing_run(self, run_log: ParsingRunLogCreate) -> ParsingRunLog:
        values = run_log.model_dump(mode="python")
        values["source_type"] = run_log.source_type.value
        values["status"] = run_log.status.value
        values["started_at"] = _utc(run_log.started_at)
        values["ended_at"] = _utc(run_log.ended_at)

        stmt = sqlite_insert(tables.parsing_run_logs).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=["run_id", "project_id", "source_type", "source_id"],
            set_={
                col: stmt.excluded[col]
                for col in (
                    "status",
                    "ended_at",
                    "reels_found_count",
                    "reels_added_count",
                    "error_message",
                )
            },
        ).returning(tables.parsing_run_logs)
        rows = await self._write(stmt)
        return ParsingRunLog.model_validate(rows[0])

    async def get_parsing_run_logs(
        self, source_type: SourceType, source_id: int
    ) -> list[ParsingRunLog]:
        c = tables.parsing_run_logs.c
        rows = await self._fetch_all(
            select(tables.parsing_run_logs)
            .where(c.source_type == source_type.value, c.source_id == source_id)
            .order_by(c.started_at.desc(), c.id.desc())
        )
        return [ParsingRunLog.model_validate(row) for row in rows]
