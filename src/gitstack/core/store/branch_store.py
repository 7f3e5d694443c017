"""Invariant-enforcing operations over the stack database.

BranchStore is the only writer of the branches, repo_meta and sync_runs
tables. Every public method runs in its own transaction: a method either
commits completely or raises with nothing written.
"""

import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path

from sqlalchemy import Engine, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from gitstack.core.errors import (
    ConflictError,
    CycleError,
    InvalidOperationError,
    NotFoundError,
    StorageError,
)
from gitstack.core.store.engine import create_session_factory, create_stack_engine, init_db
from gitstack.core.store.schema import SCHEMA_VERSION, BranchRow, RepoMetaRow, SyncRunRow
from gitstack.core.store.types import (
    BranchRecord,
    ParentUpdate,
    RepoMeta,
    SyncRun,
    SyncRunStatus,
)

logger = logging.getLogger(__name__)


def _to_record(row: BranchRow) -> BranchRecord:
    return BranchRecord(
        id=row.id,
        name=row.name,
        parent_branch_id=row.parent_branch_id,
        last_synced_head_sha=row.last_synced_head_sha,
        cached_pr_number=row.cached_pr_number,
        cached_pr_state=row.cached_pr_state,
    )


def _to_sync_run(row: SyncRunRow) -> SyncRun:
    return SyncRun(
        id=row.id,
        started_at=datetime.fromisoformat(row.started_at),
        finished_at=datetime.fromisoformat(row.finished_at) if row.finished_at else None,
        status=row.status,  # type: ignore[arg-type]
        summary_json=row.summary_json,
    )


class BranchStore:
    """Persistent branch graph with cycle, base-branch and PR-cache invariants."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._session_factory = create_session_factory(engine)
        init_db(engine)

    @classmethod
    def open(cls, db_path: Path | str) -> "BranchStore":
        """Open (creating if needed) the store at db_path."""
        try:
            return cls(create_stack_engine(db_path))
        except SQLAlchemyError as e:
            raise StorageError(f"failed to open store at {db_path}: {e}") from e

    def close(self) -> None:
        self._engine.dispose()

    @contextmanager
    def _transaction(self) -> Iterator[Session]:
        with self._session_factory() as session:
            try:
                with session.begin():
                    yield session
            except IntegrityError as e:
                raise ConflictError(f"store constraint violated: {e.orig}") from e
            except SQLAlchemyError as e:
                raise StorageError(f"store operation failed: {e}") from e

    # Repo metadata

    def set_base_branch_if_missing(self, name: str) -> None:
        """Record the base branch unless one is already stored."""
        with self._transaction() as session:
            if session.get(RepoMetaRow, 1) is None:
                session.add(RepoMetaRow(id=1, base_branch=name, schema_version=SCHEMA_VERSION))
                logger.debug("Recorded base branch %s", name)

    def repo_meta(self) -> RepoMeta:
        with self._transaction() as session:
            row = session.get(RepoMetaRow, 1)
            if row is None:
                raise NotFoundError("repo metadata missing")
            return RepoMeta(base_branch=row.base_branch, schema_version=row.schema_version)

    # Branch records

    def upsert(self, name: str) -> int:
        """Create the record for name if needed and return its id."""
        with self._transaction() as session:
            return self._upsert(session, name).id

    def get(self, name: str) -> BranchRecord | None:
        with self._transaction() as session:
            row = self._find(session, name)
            return _to_record(row) if row is not None else None

    def set_parent(self, child: str, parent: str | None) -> None:
        """Link child under parent, creating either record if missing.

        Raises:
            CycleError: If parent is child or one of child's descendants
            InvalidOperationError: If child is the base branch and parent is not None
        """
        with self._transaction() as session:
            child_row = self._upsert(session, child)
            if parent is None:
                child_row.parent_branch_id = None
                logger.debug("Detached %s", child)
                return

            self._ensure_not_base(session, child)
            parent_row = self._upsert(session, parent)
            self._ensure_no_cycle(session, child_row.id, parent_row.id, child, parent)
            child_row.parent_branch_id = parent_row.id
            logger.debug("Linked %s under %s", child, parent)

    def set_parents_batch(self, updates: Sequence[ParentUpdate]) -> None:
        """Apply many parent changes atomically.

        The updates are first projected onto an in-memory copy of the id space,
        with names that do not exist yet given temporary ids above the current
        maximum. Every chain in the projection is checked for cycles before any
        row is written; the writes then happen in a single transaction.
        """
        if not updates:
            return

        with self._transaction() as session:
            rows = session.scalars(select(BranchRow)).all()
            id_by_name = {row.name: row.id for row in rows}
            parent_by_id: dict[int, int | None] = {row.id: row.parent_branch_id for row in rows}
            next_id = max(parent_by_id, default=0) + 1

            def projected_id(name: str) -> int:
                nonlocal next_id
                if name not in id_by_name:
                    id_by_name[name] = next_id
                    parent_by_id[next_id] = None
                    next_id += 1
                return id_by_name[name]

            for upd in updates:
                if upd.parent is not None:
                    self._ensure_not_base(session, upd.child)
                child_id = projected_id(upd.child)
                parent_id = projected_id(upd.parent) if upd.parent is not None else None
                parent_by_id[child_id] = parent_id

            name_by_id = {branch_id: name for name, branch_id in id_by_name.items()}
            for start in parent_by_id:
                seen: set[int] = set()
                cursor: int | None = start
                while cursor is not None:
                    if cursor in seen:
                        raise CycleError(name_by_id[start])
                    seen.add(cursor)
                    cursor = parent_by_id.get(cursor)

            for upd in updates:
                child_row = self._upsert(session, upd.child)
                if upd.parent is None:
                    child_row.parent_branch_id = None
                else:
                    child_row.parent_branch_id = self._upsert(session, upd.parent).id
            logger.debug("Applied %d parent updates", len(updates))

    def splice_out(self, name: str) -> None:
        """Remove name and re-link its direct children to its former parent.

        Raises:
            NotFoundError: If name is not tracked
        """
        with self._transaction() as session:
            row = self._require(session, name)
            session.execute(
                update(BranchRow)
                .where(BranchRow.parent_branch_id == row.id)
                .values(parent_branch_id=row.parent_branch_id)
            )
            session.delete(row)
            logger.debug("Spliced out %s", name)

    def delete(self, name: str) -> None:
        """Remove name and detach its direct children to roots.

        Raises:
            NotFoundError: If name is not tracked
        """
        with self._transaction() as session:
            row = self._require(session, name)
            session.execute(
                update(BranchRow)
                .where(BranchRow.parent_branch_id == row.id)
                .values(parent_branch_id=None)
            )
            session.delete(row)
            logger.debug("Deleted %s", name)

    def clear_parent(self, name: str) -> None:
        with self._transaction() as session:
            self._require(session, name).parent_branch_id = None

    def set_sync_sha(self, name: str, sha: str) -> None:
        with self._transaction() as session:
            self._require(session, name).last_synced_head_sha = sha

    def set_pr_cache(self, name: str, number: int | None, state: str | None) -> None:
        """Store the cached PR number and state; both must be set or both None."""
        if (number is None) != (state is None):
            raise InvalidOperationError(
                f"PR cache for '{name}' needs both number and state, or neither"
            )
        with self._transaction() as session:
            row = self._require(session, name)
            row.cached_pr_number = number
            row.cached_pr_state = state

    def clear_pr_cache(self, name: str) -> None:
        self.set_pr_cache(name, None, None)

    # Sync run log

    def record_sync_start(self, started_at: datetime) -> int:
        with self._transaction() as session:
            row = SyncRunRow(started_at=started_at.isoformat(), status="running")
            session.add(row)
            session.flush()
            return row.id

    def record_sync_finish(
        self,
        run_id: int,
        status: SyncRunStatus,
        summary_json: str | None,
        finished_at: datetime,
    ) -> None:
        with self._transaction() as session:
            row = session.get(SyncRunRow, run_id)
            if row is None:
                raise NotFoundError(f"sync run {run_id} not found")
            row.status = status
            row.summary_json = summary_json
            row.finished_at = finished_at.isoformat()

    def list_sync_runs(self) -> list[SyncRun]:
        with self._transaction() as session:
            rows = session.scalars(select(SyncRunRow).order_by(SyncRunRow.id)).all()
            return [_to_sync_run(row) for row in rows]

    # Helpers; all run inside the caller's transaction

    def _find(self, session: Session, name: str) -> BranchRow | None:
        return session.scalars(select(BranchRow).where(BranchRow.name == name)).one_or_none()

    def _require(self, session: Session, name: str) -> BranchRow:
        row = self._find(session, name)
        if row is None:
            raise NotFoundError(f"branch '{name}' is not tracked")
        return row

    def _upsert(self, session: Session, name: str) -> BranchRow:
        if not name:
            raise InvalidOperationError("branch name must not be empty")
        row = self._find(session, name)
        if row is None:
            row = BranchRow(name=name)
            session.add(row)
            session.flush()
        return row

    def _ensure_not_base(self, session: Session, child: str) -> None:
        meta = session.get(RepoMetaRow, 1)
        if meta is not None and meta.base_branch == child:
            raise InvalidOperationError(f"base branch '{child}' cannot have a parent")

    def _ensure_no_cycle(
        self, session: Session, child_id: int, parent_id: int, child: str, parent: str
    ) -> None:
        visited: set[int] = set()
        cursor: int | None = parent_id
        while cursor is not None:
            if cursor == child_id:
                raise CycleError(child, parent)
            if cursor in visited:
                # Pre-existing loop that does not pass through child
                return
            visited.add(cursor)
            cursor = session.scalar(
                select(BranchRow.parent_branch_id).where(BranchRow.id == cursor)
            )

    # Defined last so the method name does not shadow the builtin in the
    # annotations above.
    def list(self) -> list[BranchRecord]:
        """All records ordered by name."""
        with self._transaction() as session:
            rows = session.scalars(select(BranchRow).order_by(BranchRow.name)).all()
            return [_to_record(row) for row in rows]
