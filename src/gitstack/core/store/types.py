"""Value types returned by the branch store."""

from dataclasses import dataclass
from datetime import datetime
from typing import Literal

SyncRunStatus = Literal["running", "success", "failed"]


@dataclass(frozen=True)
class BranchRecord:
    """A tracked branch as persisted in the store.

    parent_branch_id is None for roots. cached_pr_number and cached_pr_state
    are either both set or both None.
    """

    id: int
    name: str
    parent_branch_id: int | None
    last_synced_head_sha: str | None
    cached_pr_number: int | None
    cached_pr_state: str | None


@dataclass(frozen=True)
class RepoMeta:
    base_branch: str
    schema_version: int


@dataclass(frozen=True)
class ParentUpdate:
    """One entry of a batch parent change; parent None detaches the child."""

    child: str
    parent: str | None


@dataclass(frozen=True)
class SyncRun:
    id: int
    started_at: datetime
    finished_at: datetime | None
    status: SyncRunStatus
    summary_json: str | None
