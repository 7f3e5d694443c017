"""Apply a sync plan to the working copy.

Execution is not transactional. The first failing op aborts the rest of the
plan; the starting branch and any auto-stash are then restored on a best-effort
basis and the sync run is recorded as failed.
"""

import json
import logging
from pathlib import Path
from typing import assert_never

from gitstack.core.errors import ExternalToolError, StackError, SyncFailedError
from gitstack.core.git.abc import Git, StashHandle
from gitstack.core.store.branch_store import BranchStore
from gitstack.core.sync.types import (
    FetchOp,
    RestackOp,
    SyncOp,
    SyncOutcome,
    SyncPlan,
    UpdatePrCacheOp,
    UpdateShaOp,
)
from gitstack.core.time.abc import Time

logger = logging.getLogger(__name__)

AUTO_STASH_MESSAGE = "stack-sync-auto-stash"


def summarize_replay_error(error: Exception) -> str:
    """Reduce a failed `git replay` to a short human-readable reason."""
    message = str(error)
    if "replaying down to root commit is not supported" in message:
        return "cannot replay down to the root commit"
    if message.startswith("Failed to ") or "Exit code:" in message:
        return "git replay command failed"
    return message


class _PlanRunner:
    def __init__(self, store: BranchStore, git: Git, repo_root: Path) -> None:
        self._store = store
        self._git = git
        self._repo_root = repo_root
        self._replay_supported: bool | None = None
        self.restacked: list[str] = []
        self.warnings: list[str] = []

    def run(self, ops: list[SyncOp]) -> None:
        for op in ops:
            logger.debug("Applying %s", op)
            match op:
                case FetchOp(remote=remote):
                    self._git.fetch_remote(self._repo_root, remote)
                case UpdatePrCacheOp(branch=branch, number=number, state=state):
                    self._store.set_pr_cache(branch, number, state.value)
                case UpdateShaOp(branch=branch, sha=sha):
                    self._store.set_sync_sha(branch, sha)
                case RestackOp():
                    self._restack(op)
                case _:
                    assert_never(op)

    def _restack(self, op: RestackOp) -> None:
        old_base = self._git.merge_base(self._repo_root, op.branch, op.onto)
        if self._supports_replay():
            try:
                self._git.replay_onto(self._repo_root, op.branch, old_base, op.onto)
            except ExternalToolError as e:
                reason = summarize_replay_error(e)
                self.warnings.append(
                    f"git replay is unavailable for '{op.branch}' ({reason}); "
                    "falling back to rebase"
                )
                self._git.rebase_onto(self._repo_root, op.branch, old_base, op.onto)
        else:
            self._git.rebase_onto(self._repo_root, op.branch, old_base, op.onto)

        head = self._git.get_branch_head(self._repo_root, op.branch)
        self._store.set_sync_sha(op.branch, head)
        self.restacked.append(op.branch)

    def _supports_replay(self) -> bool:
        if self._replay_supported is None:
            self._replay_supported = self._git.supports_replay(self._repo_root)
            if not self._replay_supported:
                self.warnings.append("git replay unavailable; using rebase")
        return self._replay_supported


def _restore_starting_branch(git: Git, repo_root: Path, starting_branch: str | None) -> None:
    if starting_branch is None:
        return
    if git.get_current_branch(repo_root) == starting_branch:
        return
    git.checkout_branch(repo_root, starting_branch)


def _restore_working_copy(
    git: Git,
    repo_root: Path,
    starting_branch: str | None,
    stash: StashHandle | None,
    warnings: list[str],
) -> ExternalToolError | None:
    """Check the starting branch out again and pop the auto-stash.

    Returns the checkout failure, if any; a failed pop only adds a warning.
    """
    restore_error: ExternalToolError | None = None
    try:
        _restore_starting_branch(git, repo_root, starting_branch)
    except ExternalToolError as e:
        restore_error = e

    if stash is not None:
        try:
            git.stash_pop(repo_root, stash)
        except ExternalToolError as e:
            warnings.append(f"could not auto-restore stash {stash.reference}: {e}")
    return restore_error


def execute_sync_plan(
    store: BranchStore,
    git: Git,
    time: Time,
    repo_root: Path,
    plan: SyncPlan,
) -> SyncOutcome:
    """Execute plan against the working copy and log the run.

    A dirty working tree is stashed first and popped afterwards whatever the
    outcome; a failed pop is only reported as a warning. The run is recorded
    as "running" before the first op and finalized as "success" or "failed"
    (with a JSON {"error": ...} summary) at the end. An exception that is not
    a StackError, such as KeyboardInterrupt mid-rebase, still restores the
    working copy and marks the run failed before propagating.

    Raises:
        SyncFailedError: If any op, or restoring the starting branch, failed
    """
    warnings: list[str] = []
    starting_branch = git.get_current_branch(repo_root)

    stash = None
    if git.has_uncommitted_changes(repo_root):
        warnings.append("worktree is dirty; auto-stashing local changes")
        stash = git.stash_push(repo_root, AUTO_STASH_MESSAGE)

    run_id = store.record_sync_start(time.now())
    runner = _PlanRunner(store, git, repo_root)

    op_error: StackError | None = None
    interrupted = True
    try:
        runner.run(plan.ops)
        interrupted = False
    except StackError as e:
        logger.debug("Sync op failed: %s", e)
        op_error = e
        interrupted = False
    finally:
        warnings.extend(runner.warnings)
        restore_error = _restore_working_copy(git, repo_root, starting_branch, stash, warnings)
        if interrupted:
            store.record_sync_finish(
                run_id, "failed", json.dumps({"error": "sync interrupted"}), time.now()
            )

    message: str | None = None
    if op_error is not None and restore_error is not None:
        message = (
            f"{op_error}; additionally failed to restore prior branch "
            f"'{starting_branch}': {restore_error}"
        )
    elif op_error is not None:
        message = str(op_error)
    elif restore_error is not None:
        message = f"failed to restore prior branch '{starting_branch}': {restore_error}"

    if message is not None:
        store.record_sync_finish(run_id, "failed", json.dumps({"error": message}), time.now())
        raise SyncFailedError(run_id, message, warnings)

    store.record_sync_finish(run_id, "success", None, time.now())
    return SyncOutcome(run_id=run_id, restacked=runner.restacked, warnings=warnings)
