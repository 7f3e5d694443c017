"""Parent inference and parent-conflict resolution.

A branch's parent is decided from three kinds of evidence, strongest first:

1. An explicit parent given by the operator
2. The base branch of the branch's pull request, when that branch exists locally
3. Git ancestry: the closest local branch that is an ancestor of the branch

Inference never picks arbitrarily; two ancestors at the same commit distance
yield no parent at all.
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import assert_never

from gitstack.core.errors import ConflictError, ProviderError, UserCancelled
from gitstack.core.git.abc import Git
from gitstack.core.github.abc import GitHub
from gitstack.core.graph import parent_name_of
from gitstack.core.store.types import BranchRecord

logger = logging.getLogger(__name__)


class Confidence(Enum):
    HIGH = "high"
    MEDIUM = "medium"


class ParentSource(Enum):
    EXPLICIT = "explicit"
    PR_BASE = "pr_base"
    GIT_ANCESTRY = "git_ancestry"

    @property
    def default_confidence(self) -> Confidence:
        match self:
            case ParentSource.EXPLICIT | ParentSource.PR_BASE:
                return Confidence.HIGH
            case ParentSource.GIT_ANCESTRY:
                return Confidence.MEDIUM
            case _:
                assert_never(self)


@dataclass(frozen=True)
class ParentInference:
    parent: str
    source: ParentSource
    confidence: Confidence

    @classmethod
    def from_source(cls, parent: str, source: ParentSource) -> "ParentInference":
        return cls(parent=parent, source=source, confidence=source.default_confidence)


@dataclass(frozen=True)
class ParentChange:
    """A proposed link of branch under new_parent.

    old_parent is the currently stored parent name, or None if the branch is
    untracked or a root.
    """

    branch: str
    old_parent: str | None
    new_parent: str
    source: ParentSource
    confidence: Confidence

    @property
    def is_conflict(self) -> bool:
        return self.old_parent is not None and self.old_parent != self.new_parent


@dataclass(frozen=True)
class SkippedBranch:
    branch: str
    reason: str


class ConflictResolution(Enum):
    REPLACE = "replace"
    SKIP = "skip"
    ABORT = "abort"


ConflictResolver = Callable[[ParentChange], ConflictResolution]


@dataclass(frozen=True)
class ResolvedChanges:
    accepted: list[ParentChange]
    skipped: list[SkippedBranch]


# Substrings of JSON decoder errors that mean gh printed something other than JSON
_JSON_DECODE_MARKERS = (
    "Invalid JSON",
    "expected value at line 1 column 1",
    "EOF while parsing",
    "trailing characters",
)


def format_pr_metadata_warning(branch: str, error: ProviderError, debug: bool) -> str:
    """Describe a failed PR lookup, hiding decoder noise unless debugging."""
    raw = str(error)
    if not debug and any(marker in raw for marker in _JSON_DECODE_MARKERS):
        return (
            f"could not read PR metadata for '{branch}'; gh returned an unexpected "
            "response. Falling back to git ancestry."
        )
    return f"could not read PR metadata for '{branch}'; falling back to git ancestry ({raw})"


def infer_parent_from_ancestry(
    git: Git, repo_root: Path, branch: str, local_branches: Sequence[str]
) -> ParentInference | None:
    """Pick the closest local ancestor of branch; a tie yields None."""
    best_parent: str | None = None
    best_distance: int | None = None
    tied = False
    for candidate in local_branches:
        if candidate == branch:
            continue
        if not git.is_ancestor(repo_root, candidate, branch):
            continue
        distance = git.commit_distance(repo_root, candidate, branch)
        if best_distance is None or distance < best_distance:
            best_parent = candidate
            best_distance = distance
            tied = False
        elif distance == best_distance:
            tied = True

    if tied:
        logger.debug("Ancestry tie for %s at distance %s", branch, best_distance)
        return None
    if best_parent is None:
        return None
    return ParentInference.from_source(best_parent, ParentSource.GIT_ANCESTRY)


def infer_parent(
    git: Git,
    github: GitHub,
    repo_root: Path,
    branch: str,
    *,
    local_branches: Sequence[str],
    cached_pr_number: int | None,
    warnings: list[str],
    explicit_parent: str | None = None,
    debug: bool = False,
) -> ParentInference | None:
    """Infer the parent of branch from the strongest available evidence.

    Provider failures are appended to warnings and inference continues with
    git ancestry.
    """
    if explicit_parent is not None:
        return ParentInference.from_source(explicit_parent, ParentSource.EXPLICIT)

    try:
        pr = github.resolve_pr_by_head(repo_root, branch, cached_pr_number)
    except ProviderError as e:
        warnings.append(format_pr_metadata_warning(branch, e, debug))
        pr = None

    if pr is not None and pr.base_branch is not None and pr.base_branch != branch:
        if git.branch_exists(repo_root, pr.base_branch):
            logger.debug("Parent of %s from PR #%d base: %s", branch, pr.number, pr.base_branch)
            return ParentInference.from_source(pr.base_branch, ParentSource.PR_BASE)

    return infer_parent_from_ancestry(git, repo_root, branch, local_branches)


def _stored(records: Sequence[BranchRecord], name: str) -> BranchRecord | None:
    for record in records:
        if record.name == name:
            return record
    return None


def stored_parent_name(records: Sequence[BranchRecord], name: str) -> str | None:
    record = _stored(records, name)
    if record is None:
        return None
    return parent_name_of(record, records)


def infer_parent_chain(
    git: Git,
    github: GitHub,
    repo_root: Path,
    start: str,
    *,
    base_branch: str,
    local_branches: Sequence[str],
    records: Sequence[BranchRecord],
    warnings: list[str],
    debug: bool = False,
) -> list[ParentChange]:
    """Infer parents hop by hop from start until the base branch is reached.

    The walk also stops when a hop would revisit a branch already on the chain
    or when no parent can be inferred. A hop that lands on the base branch is
    reported with high confidence whatever its source.
    """
    changes: list[ParentChange] = []
    visited = {start}
    cursor = start
    while cursor != base_branch:
        record = _stored(records, cursor)
        inference = infer_parent(
            git,
            github,
            repo_root,
            cursor,
            local_branches=local_branches,
            cached_pr_number=record.cached_pr_number if record is not None else None,
            warnings=warnings,
            debug=debug,
        )
        if inference is None or inference.parent in visited:
            break

        confidence = Confidence.HIGH if inference.parent == base_branch else inference.confidence
        changes.append(
            ParentChange(
                branch=cursor,
                old_parent=stored_parent_name(records, cursor),
                new_parent=inference.parent,
                source=inference.source,
                confidence=confidence,
            )
        )
        visited.add(inference.parent)
        cursor = inference.parent
    return changes


def resolve_parent_conflicts(
    changes: Sequence[ParentChange],
    *,
    force: bool,
    resolver: ConflictResolver | None,
) -> ResolvedChanges:
    """Decide which proposed changes may be applied.

    A change that replaces an existing, different parent is accepted only under
    force or when the resolver answers REPLACE. Nothing is written here; an
    ABORT therefore discards every decision made so far.

    Raises:
        UserCancelled: If the resolver answers ABORT
        ConflictError: If a conflict exists, force is off and there is no
            resolver (non-interactive use)
    """
    accepted: list[ParentChange] = []
    skipped: list[SkippedBranch] = []
    for change in changes:
        if not change.is_conflict or force:
            accepted.append(change)
            continue
        if resolver is None:
            raise ConflictError(
                f"parent conflict for '{change.branch}': existing '{change.old_parent}' "
                f"and proposed '{change.new_parent}' (use --force in non-interactive mode)"
            )
        match resolver(change):
            case ConflictResolution.REPLACE:
                accepted.append(change)
            case ConflictResolution.SKIP:
                skipped.append(SkippedBranch(change.branch, "conflict skipped by user"))
            case ConflictResolution.ABORT:
                logger.debug("Parent conflict for %s aborted", change.branch)
                raise UserCancelled()
            case _ as unreachable:
                assert_never(unreachable)
    return ResolvedChanges(accepted=accepted, skipped=skipped)
