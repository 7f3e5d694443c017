"""Build a sync plan from the stored stack and the current state of git and PRs.

Planning is read-only: every change it wants (PR cache refresh, recorded head
SHAs, restacks) is expressed as an op for the executor to apply.
"""

import logging
from collections import deque
from pathlib import Path

from gitstack.core.errors import ProviderError
from gitstack.core.git.abc import Git
from gitstack.core.github.abc import GitHub
from gitstack.core.github.types import PRState
from gitstack.core.graph import children_by_parent_id
from gitstack.core.store.branch_store import BranchStore
from gitstack.core.store.types import BranchRecord
from gitstack.core.sync.types import (
    FetchOp,
    RestackOp,
    SyncOp,
    SyncPlan,
    UpdatePrCacheOp,
    UpdateShaOp,
)

logger = logging.getLogger(__name__)


def build_sync_plan(
    store: BranchStore,
    git: Git,
    github: GitHub,
    repo_root: Path,
    base_branch: str,
    base_remote: str,
) -> SyncPlan:
    """Compute the ordered ops that bring the stack up to date.

    Ops are ordered as follows:

    1. One FetchOp for the base remote
    2. For each stored branch whose ref exists, in name order: an
       UpdatePrCacheOp when a PR was found, then an UpdateShaOp with the
       current head
    3. RestackOps in breadth-first discovery order, at most one per branch

    A branch's children are queued for restack when its PR is merged (onto
    the merge commit, or remote/base when there is none) or when its head
    moved since the last recorded sync. Restacking a branch queues its own
    children in turn. PR lookup failures become plan warnings.
    """
    records = store.list()
    by_name = {record.name: record for record in records}
    children = children_by_parent_id(records)
    exists = {record.name: git.branch_exists(repo_root, record.name) for record in records}

    ops: list[SyncOp] = [FetchOp(remote=base_remote)]
    warnings: list[str] = []
    queue: deque[tuple[str, str, str]] = deque()

    def enqueue_children(record: BranchRecord, onto: str, reason: str) -> None:
        for child in children.get(record.id, []):
            if exists[child.name]:
                queue.append((child.name, onto, reason))

    for record in records:
        if not exists[record.name]:
            logger.debug("Skipping %s: branch no longer exists", record.name)
            continue

        try:
            pr = github.resolve_pr_by_head(repo_root, record.name, record.cached_pr_number)
        except ProviderError as e:
            warnings.append(f"could not read PR metadata for '{record.name}': {e}")
            pr = None

        if pr is not None:
            ops.append(UpdatePrCacheOp(branch=record.name, number=pr.number, state=pr.state))
            if pr.state == PRState.MERGED:
                new_base = pr.merge_commit_sha or f"{base_remote}/{base_branch}"
                enqueue_children(record, new_base, f"parent '{record.name}' was merged")

        head = git.get_branch_head(repo_root, record.name)
        if record.last_synced_head_sha is not None and record.last_synced_head_sha != head:
            enqueue_children(record, record.name, f"parent '{record.name}' moved")
        ops.append(UpdateShaOp(branch=record.name, sha=head))

    restacked: set[str] = set()
    while queue:
        name, onto, reason = queue.popleft()
        if name in restacked:
            continue
        restacked.add(name)
        ops.append(RestackOp(branch=name, onto=onto, reason=reason))
        enqueue_children(by_name[name], name, f"parent '{name}' was restacked")

    logger.debug("Planned %d ops (%d restacks)", len(ops), len(restacked))
    return SyncPlan(base_branch=base_branch, ops=ops, warnings=warnings)
