"""Sync planning and execution."""

from gitstack.core.sync.executor import execute_sync_plan, summarize_replay_error
from gitstack.core.sync.planner import build_sync_plan
from gitstack.core.sync.types import (
    FetchOp,
    RestackOp,
    SyncOp,
    SyncOutcome,
    SyncPlan,
    UpdatePrCacheOp,
    UpdateShaOp,
    describe_op,
)

__all__ = [
    "FetchOp",
    "RestackOp",
    "SyncOp",
    "SyncOutcome",
    "SyncPlan",
    "UpdatePrCacheOp",
    "UpdateShaOp",
    "build_sync_plan",
    "describe_op",
    "execute_sync_plan",
    "summarize_replay_error",
]
