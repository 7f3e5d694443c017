"""Tracking: decide parent links for branches and commit them as one batch."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, replace

from gitstack.core.context import StackContext
from gitstack.core.errors import InvalidOperationError, NotFoundError
from gitstack.core.graph import rank_parent_candidates
from gitstack.core.parents import (
    ConflictResolution,
    ParentChange,
    ParentInference,
    ParentSource,
    SkippedBranch,
    infer_parent,
    infer_parent_chain,
    resolve_parent_conflicts,
    stored_parent_name,
)
from gitstack.core.store.branch_store import BranchStore
from gitstack.core.store.types import BranchRecord, ParentUpdate

logger = logging.getLogger(__name__)


class TrackPrompter(ABC):
    """Interactive decisions needed while tracking."""

    @abstractmethod
    def choose_parent(self, branch: str, candidates: list[str]) -> str:
        """Pick a parent for branch from ranked candidates."""
        ...

    @abstractmethod
    def resolve_conflict(self, change: ParentChange) -> ConflictResolution:
        """Decide whether change may replace the stored parent."""
        ...


@dataclass(frozen=True)
class TrackRequest:
    branch: str | None = None
    all_branches: bool = False
    parent: str | None = None
    infer_only: bool = False
    force: bool = False
    dry_run: bool = False


@dataclass(frozen=True)
class TrackResult:
    mode: str
    dry_run: bool
    changes: list[ParentChange]
    skipped: list[SkippedBranch]
    unresolved: list[str]
    warnings: list[str]
    applied: bool
    notes: list[str]


def _validate_request(request: TrackRequest) -> None:
    if request.all_branches and request.branch is not None:
        raise InvalidOperationError("cannot combine --all with a positional branch argument")
    if request.all_branches and request.parent is not None:
        raise InvalidOperationError("cannot combine --all with --parent")


def plan_tracking(
    ctx: StackContext, request: TrackRequest, prompter: TrackPrompter | None
) -> TrackResult:
    """Work out the parent changes a track request would make.

    Nothing is written. Conflicts with stored parents are resolved here
    (force, prompter, or ConflictError), so the returned changes are exactly
    the ones apply_tracking will commit.

    Args:
        ctx: Stack context; must be inside a repository
        request: What to track and how
        prompter: Interactive prompter, or None when running non-interactively
    """
    _validate_request(request)
    repo = ctx.require_repo()
    git = ctx.git
    records = repo.store.list()
    local = git.list_local_branches(repo.root)
    local_set = set(local)
    current = git.get_current_branch(repo.root)

    if request.all_branches:
        targets = [name for name in local if name != repo.base_branch]
    elif request.branch is not None:
        targets = [request.branch]
    elif current is not None and current != repo.base_branch:
        targets = [current]
    else:
        raise InvalidOperationError(
            "no branch given and the current branch cannot be tracked; "
            "pass stack track <branch>"
        )

    proposals: list[ParentChange] = []
    skipped: list[SkippedBranch] = []
    unresolved: list[str] = []
    warnings: list[str] = []
    notes: list[str] = []

    for target in targets:
        if target not in local_set:
            raise NotFoundError(f"branch '{target}' does not exist in git")
        if target == repo.base_branch:
            skipped.append(SkippedBranch(target, "base branch is not eligible for tracking"))
            continue

        if request.parent is not None:
            if request.parent not in local_set:
                raise NotFoundError(f"parent branch does not exist in git: {request.parent}")
            inferred = [
                _change_from(
                    stored_parent_name(records, target),
                    target,
                    ParentInference.from_source(request.parent, ParentSource.EXPLICIT),
                )
            ]
        elif request.all_branches:
            record = next((r for r in records if r.name == target), None)
            inference = infer_parent(
                git,
                ctx.github,
                repo.root,
                target,
                local_branches=local,
                cached_pr_number=record.cached_pr_number if record is not None else None,
                warnings=warnings,
                debug=ctx.debug,
            )
            inferred = (
                []
                if inference is None
                else [_change_from(stored_parent_name(records, target), target, inference)]
            )
        else:
            inferred = infer_parent_chain(
                git,
                ctx.github,
                repo.root,
                target,
                base_branch=repo.base_branch,
                local_branches=local,
                records=records,
                warnings=warnings,
                debug=ctx.debug,
            )
            if not inferred and not request.infer_only:
                parent = _pick_parent(target, current, records, local, prompter, notes)
                inferred = [
                    _change_from(
                        stored_parent_name(records, target),
                        target,
                        ParentInference.from_source(parent, ParentSource.EXPLICIT),
                    )
                ]

        if not inferred:
            unresolved.append(target)
            continue

        for change in inferred:
            if change.new_parent == change.branch:
                unresolved.append(change.branch)
            elif change.old_parent == change.new_parent:
                skipped.append(SkippedBranch(change.branch, "already linked to inferred parent"))
            else:
                proposals.append(change)

    resolved = resolve_parent_conflicts(
        proposals,
        force=request.force,
        resolver=prompter.resolve_conflict if prompter is not None else None,
    )
    return TrackResult(
        mode="all" if request.all_branches else "single",
        dry_run=request.dry_run,
        changes=resolved.accepted,
        skipped=skipped + resolved.skipped,
        unresolved=unresolved,
        warnings=warnings,
        applied=False,
        notes=notes,
    )


def apply_tracking(store: BranchStore, result: TrackResult) -> TrackResult:
    """Commit the planned changes in one batch unless this is a dry run."""
    if result.dry_run or not result.changes:
        return result
    store.set_parents_batch(
        [ParentUpdate(child=change.branch, parent=change.new_parent) for change in result.changes]
    )
    logger.debug("Tracked %d branches", len(result.changes))
    return replace(result, applied=True)


def _change_from(old_parent: str | None, branch: str, inference: ParentInference) -> ParentChange:
    return ParentChange(
        branch=branch,
        old_parent=old_parent,
        new_parent=inference.parent,
        source=inference.source,
        confidence=inference.confidence,
    )


def _pick_parent(
    target: str,
    current: str | None,
    records: Sequence[BranchRecord],
    local: Sequence[str],
    prompter: TrackPrompter | None,
    notes: list[str],
) -> str:
    candidates = [
        name for name in rank_parent_candidates(current or "", records, local) if name != target
    ]
    if not candidates:
        raise NotFoundError(f"no viable parent branches available for '{target}'")
    if len(candidates) == 1:
        notes.append(f"assuming parent branch '{candidates[0]}' (only viable branch)")
        return candidates[0]
    if prompter is None:
        raise InvalidOperationError(
            "could not infer a parent in non-interactive mode; pass --parent <branch> "
            "or use --infer to allow unresolved output"
        )
    return prompter.choose_parent(target, candidates)
