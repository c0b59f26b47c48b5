"""SQLAlchemy Core table metadata for the embedded SQLite backend.

Mirrors ``schema.sql`` (the Postgres DDL used by the Supabase backend).
"""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
    func,
)

metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("telegram_id", Integer, nullable=False, unique=True),
    Column("username", String(255)),
    Column("first_name", String(255)),
    Column("last_name", String(255)),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("created_at", DateTime(timezone=True), server_default=func.current_timestamp()),
    Column("updated_at", DateTime(timezone=True), server_default=func.current_timestamp()),
)

projects = Table(
    "projects",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
    Column("name", String(255), nullable=False),
    Column("description", Text),
    Column("industry", String(255)),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("created_at", DateTime(timezone=True), server_default=func.current_timestamp()),
    Column("updated_at", DateTime(timezone=True), server_default=func.current_timestamp()),
)

competitors = Table(
    "competitors",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("project_id", Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False),
    Column("username", String(255), nullable=False),
    Column("instagram_url", Text, nullable=False),
    Column("full_name", String(255)),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("created_at", DateTime(timezone=True), server_default=func.current_timestamp()),
    Column("updated_at", DateTime(timezone=True), server_default=func.current_timestamp()),
)

hashtags = Table(
    "hashtags",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("project_id", Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False),
    Column("hashtag", String(255), nullable=False),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("created_at", DateTime(timezone=True), server_default=func.current_timestamp()),
    Column("updated_at", DateTime(timezone=True), server_default=func.current_timestamp()),
)

reels = Table(
    "reels",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("project_id", Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False),
    Column("source_type", String(32), nullable=False),
    Column("source_id", Integer, nullable=False),
    Column("instagram_id", String(255), nullable=False),
    Column("shortcode", String(255)),
    Column("url", Text, nullable=False),
    Column("caption", Text),
    Column("author_username", String(255)),
    Column("author_id", String(255)),
    Column("views", Integer, nullable=False, default=0),
    Column("likes", Integer, nullable=False, default=0),
    Column("comments_count", Integer, nullable=False, default=0),
    Column("duration", Float),
    Column("thumbnail_url", Text),
    Column("music_title", String(255)),
    Column("music_artist", String(255)),
    Column("published_at", DateTime(timezone=True), nullable=False),
    Column("raw_data", JSON),
    Column("fetched_at", DateTime(timezone=True), server_default=func.current_timestamp()),
    Column("is_processed", Boolean, nullable=False, default=False),
    Column("processing_status", String(64)),
    Column("processing_result", Text),
    UniqueConstraint("project_id", "url", name="uq_reels_project_url"),
)

parsing_run_logs = Table(
    "parsing_run_logs",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("run_id", String(64), nullable=False),
    Column("project_id", Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False),
    Column("source_type", String(32), nullable=False),
    Column("source_id", Integer, nullable=False),
    Column("status", String(32), nullable=False),
    Column("started_at", DateTime(timezone=True), nullable=False),
    Column("ended_at", DateTime(timezone=True)),
    Column("reels_found_count", Integer, nullable=False, default=0),
    Column("reels_added_count", Integer, nullable=False, default=0),
    Column("error_message", Text),
    UniqueConstraint(
        "run_id", "project_id", "source_type", "source_id", name="uq_parsing_run_source"
    ),
)
