"""Storage adapter contract.

Every scene and service talks to storage through ``StorageAdapter`` so the
same code runs against Supabase (Postgres) and the embedded SQLite file.

Return discipline:

* single entity lookups return the model or ``None`` (not found);
* collections always return a list, possibly empty;
* delete / remove return ``bool`` (``False`` when no active row matched);
* infrastructure failures raise ``StorageError``.

Transitions acquire the adapter with ``async with storage.opened():`` which
initializes the connection and always closes it on the way out.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager

from scraper_bot.models.competitor import Competitor
from scraper_bot.models.enums import SourceType
from scraper_bot.models.hashtag import Hashtag
from scraper_bot.models.parsing_run import ParsingRunLog, ParsingRunLogCreate
from scraper_bot.models.project import Project
from scraper_bot.models.reel import Reel, ReelDraft, ReelsFilter
from scraper_bot.models.user import ChatUser, User


class StorageAdapter(ABC):
    """Backend-agnostic data access surface."""

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    @abstractmethod
    async def initialize(self) -> None:
        """Open the connection.  Raises ``StorageConfigError`` / ``StorageError``."""

    @abstractmethod
    async def close(self) -> None:
        """Release the connection.  Idempotent, safe before ``initialize``."""

    # Brackets currently open on this instance (chats and the scheduler share it).
    _open_count: int = 0
    # Serializes the first open and the last close; created on first use.
    _open_lock: asyncio.Lock | None = None

    @asynccontextmanager
    async def opened(self) -> AsyncIterator[StorageAdapter]:
        """Scoped acquisition: initialize, yield, always close.

        The outermost bracket owns the connection; nested or interleaved
        brackets on the same instance reuse it and the last one out closes.
        Brackets entering while the connection is being opened wait for it.
        """
        if self._open_lock is None:
            self._open_lock = asyncio.Lock()
        lock = self._open_lock

        async with lock:
            if self._open_count == 0:
                await self.initialize()
            self._open_count += 1
        try:
            yield self
        finally:
            async with lock:
                self._open_count -= 1
                if self._open_count == 0:
                    await self.close()

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    @abstractmethod
    async def get_user_by_telegram_id(self, telegram_id: int) -> User | None: ...

    @abstractmethod
    async def create_user(self, chat_user: ChatUser) -> User: ...

    async def find_user_by_telegram_id_or_create(self, chat_user: ChatUser) -> User:
        """Return the user for ``chat_user.telegram_id``, creating it if absent.

        Not atomic: two concurrent first contacts may both try to insert and
        the second one fails on the unique telegram_id constraint.
        """
        user = await self.get_user_by_telegram_id(chat_user.telegram_id)
        if user is not None:
            return user
        return await self.create_user(chat_user)

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    @abstractmethod
    async def get_projects_by_user_id(self, user_id: int) -> list[Project]:
        """Active projects of the user, oldest first."""

    @abstractmethod
    async def create_project(self, user_id: int, name: str) -> Project: ...

    @abstractmethod
    async def get_project_by_id(self, project_id: int) -> Project | None: ...

    @abstractmethod
    async def get_active_projects(self) -> list[Project]: ...

    # ------------------------------------------------------------------
    # Competitors
    # ------------------------------------------------------------------

    @abstractmethod
    async def get_competitor_accounts(
        self, project_id: int, active_only: bool = True
    ) -> list[Competitor]: ...

    @abstractmethod
    async def add_competitor_account(
        self, project_id: int, username: str, instagram_url: str
    ) -> Competitor | None:
        """Insert a competitor.  ``None`` means the insert produced no row."""

    @abstractmethod
    async def delete_competitor_account(self, project_id: int, username: str) -> bool:
        """Soft delete (``is_active = false``)."""

    # ------------------------------------------------------------------
    # Hashtags
    # ------------------------------------------------------------------

    @abstractmethod
    async def get_hashtags_by_project_id(
        self, project_id: int, active_only: bool = True
    ) -> list[Hashtag]: ...

    @abstractmethod
    async def add_hashtag(self, project_id: int, hashtag: str) -> Hashtag | None: ...

    @abstractmethod
    async def remove_hashtag(self, project_id: int, hashtag: str) -> bool:
        """Soft delete (``is_active = false``)."""

    # ------------------------------------------------------------------
    # Reels
    # ------------------------------------------------------------------

    @abstractmethod
    async def save_reels(
        self,
        reels: Sequence[ReelDraft],
        project_id: int,
        source_type: SourceType,
        source_id: int,
    ) -> int:
        """Upsert reels on (project_id, url) and return the rows written.

        Drafts missing ``instagram_id``, ``url`` or ``published_at`` are
        skipped; a failing row does not abort the batch.
        """

    @abstractmethod
    async def get_reels(self, reels_filter: ReelsFilter | None = None) -> list[Reel]: ...

    @abstractmethod
    async def update_reel_processing_status(
        self,
        reel_id: int,
        is_processed: bool,
        status: str | None = None,
        result: str | None = None,
    ) -> bool: ...

    # ------------------------------------------------------------------
    # Parsing run logs
    # ------------------------------------------------------------------

    @abstractmethod
    async def log_parsing_run(self, run_log: ParsingRunLogCreate) -> ParsingRunLog:
        """Create or update the run log keyed by run/project/source."""

    @abstractmethod
    async def get_parsing_run_logs(
        self, source_type: SourceType, source_id: int
    ) -> list[ParsingRunLog]:
        """Run logs of one source, newest first."""
