"""Persistent branch store."""

from gitstack.core.store.branch_store import BranchStore
from gitstack.core.store.types import BranchRecord, ParentUpdate, RepoMeta, SyncRun, SyncRunStatus

__all__ = [
    "BranchRecord",
    "BranchStore",
    "ParentUpdate",
    "RepoMeta",
    "SyncRun",
    "SyncRunStatus",
]
