"""SQLAlchemy ORM schema for the stack store.

Defines the three tables: branches, repo_meta, sync_runs.
"""

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

SCHEMA_VERSION = 1


class Base(DeclarativeBase):
    """Base class for all stack ORM models."""

    pass


class BranchRow(Base):
    """A tracked branch and its parent link."""

    __tablename__ = "branches"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    parent_branch_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("branches.id", ondelete="SET NULL"),
        nullable=True,
    )
    last_synced_head_sha: Mapped[str | None] = mapped_column(String, nullable=True)
    cached_pr_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    cached_pr_state: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.current_timestamp()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.current_timestamp(),
        onupdate=func.current_timestamp(),
    )


class RepoMetaRow(Base):
    """Singleton row holding the stack's base branch."""

    __tablename__ = "repo_meta"
    __table_args__ = (CheckConstraint("id = 1", name="repo_meta_singleton"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    base_branch: Mapped[str] = mapped_column(String, nullable=False)
    schema_version: Mapped[int] = mapped_column(Integer, nullable=False)


class SyncRunRow(Base):
    """Append-only log of sync executions.

    Timestamps are stored as ISO-8601 text so timezone offsets survive the
    round trip through SQLite.
    """

    __tablename__ = "sync_runs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    started_at: Mapped[str] = mapped_column(Text, nullable=False)
    finished_at: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String, nullable=False)
    summary_json: Mapped[str | None] = mapped_column(Text, nullable=True)
