"""Branch creation: start a new branch on a parent and record the link."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from gitstack.core.context import StackContext
from gitstack.core.errors import ConflictError, InvalidOperationError, NotFoundError
from gitstack.core.git.abc import Git
from gitstack.core.graph import parent_name_of, rank_parent_candidates
from gitstack.core.store.types import BranchRecord, ParentUpdate

logger = logging.getLogger(__name__)


class CreatePrompter(ABC):
    """Interactive decisions needed while creating a branch."""

    @abstractmethod
    def choose_parent(self, branch: str, candidates: list[str]) -> str:
        """Pick the parent of the new branch from ranked candidates."""
        ...

    @abstractmethod
    def choose_insert_target(self, candidates: list[str]) -> str:
        """Pick the tracked child the new branch is inserted before."""
        ...


@dataclass(frozen=True)
class CreateRequest:
    """What to create.

    insert names the child to insert the new branch before. An empty string
    asks for the child to be picked among tracked branches with a parent.
    """

    name: str
    parent: str | None = None
    insert: str | None = None


@dataclass(frozen=True)
class CreateResult:
    created: str
    parent: str
    inserted_before: str | None
    head_sha: str
    notes: list[str]


def create_branch(
    ctx: StackContext, request: CreateRequest, prompter: CreatePrompter | None
) -> CreateResult:
    """Create request.name from its parent, check it out and link it.

    In insert mode the parent is the stored parent of the insert target, and
    the target is re-linked under the new branch in the same batch as the
    new branch's own link.

    Raises:
        InvalidOperationError: Empty name, --insert combined with --parent, or
            a choice that needs a prompt while running non-interactively
        NotFoundError: Parent or insert target missing from git or the store
        ConflictError: A branch with the new name already exists
    """
    name = request.name.strip()
    if not name:
        raise InvalidOperationError("branch name cannot be empty")
    if request.insert is not None and request.parent is not None:
        raise InvalidOperationError("cannot combine --insert with --parent")

    repo = ctx.require_repo()
    git = ctx.git
    records = repo.store.list()
    notes: list[str] = []

    inserted_before: str | None = None
    if request.insert is not None:
        inserted_before = _resolve_insert_target(
            git, repo.root, records, request.insert, prompter, notes
        )
        parent = _stored_parent_of(inserted_before, records)
        if not git.branch_exists(repo.root, inserted_before):
            raise NotFoundError(f"child branch does not exist in git: {inserted_before}")
    elif request.parent is not None:
        parent = request.parent
    else:
        parent = _pick_parent(
            name,
            git.get_current_branch(repo.root),
            records,
            git.list_local_branches(repo.root),
            prompter,
            notes,
        )

    if not git.branch_exists(repo.root, parent):
        raise NotFoundError(f"parent branch does not exist in git: {parent}")
    if git.branch_exists(repo.root, name):
        raise ConflictError(f"branch already exists: {name}")

    git.create_branch_from(repo.root, name, parent)
    git.checkout_branch(repo.root, name)

    updates = [ParentUpdate(child=name, parent=parent)]
    if inserted_before is not None:
        updates.append(ParentUpdate(child=inserted_before, parent=name))
    repo.store.set_parents_batch(updates)

    head_sha = git.get_branch_head(repo.root, name)
    repo.store.set_sync_sha(name, head_sha)
    logger.debug("Created %s on %s (inserted before %s)", name, parent, inserted_before)

    return CreateResult(
        created=name,
        parent=parent,
        inserted_before=inserted_before,
        head_sha=head_sha,
        notes=notes,
    )


def _stored_parent_of(child: str, records: Sequence[BranchRecord]) -> str:
    record = next((r for r in records if r.name == child), None)
    if record is None:
        raise NotFoundError(f"child branch is not tracked: {child}")
    parent = parent_name_of(record, records)
    if parent is None:
        raise InvalidOperationError(f"cannot insert before '{child}': branch has no parent")
    return parent


def _resolve_insert_target(
    git: Git,
    repo_root: Path,
    records: Sequence[BranchRecord],
    insert: str,
    prompter: CreatePrompter | None,
    notes: list[str],
) -> str:
    if insert:
        return insert

    candidates = sorted(
        record.name
        for record in records
        if record.parent_branch_id is not None and git.branch_exists(repo_root, record.name)
    )
    if not candidates:
        raise NotFoundError("no tracked child branches are available; pass --insert <child>")
    if len(candidates) == 1:
        notes.append(f"assuming child branch '{candidates[0]}' (only viable branch)")
        return candidates[0]
    if prompter is None:
        raise InvalidOperationError("child required in non-interactive mode; pass --insert <child>")
    return prompter.choose_insert_target(candidates)


def _pick_parent(
    name: str,
    current: str | None,
    records: Sequence[BranchRecord],
    local: Sequence[str],
    prompter: CreatePrompter | None,
    notes: list[str],
) -> str:
    candidates = [
        candidate
        for candidate in rank_parent_candidates(current or "", records, local)
        if candidate != name
    ]
    if not candidates:
        raise NotFoundError(f"no viable parent branches available for '{name}'")
    if len(candidates) == 1:
        notes.append(f"assuming parent branch '{candidates[0]}' (only viable branch)")
        return candidates[0]
    if prompter is None:
        raise InvalidOperationError(
            "parent required in non-interactive mode; pass --parent <branch>"
        )
    return prompter.choose_parent(name, candidates)
