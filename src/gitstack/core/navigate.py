"""Move the checkout along the stored parent graph."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import assert_never

from gitstack.core.context import StackContext
from gitstack.core.errors import InvalidOperationError, NotFoundError
from gitstack.core.git.abc import Git
from gitstack.core.graph import children_by_parent_id
from gitstack.core.store.types import BranchRecord

logger = logging.getLogger(__name__)


class NavDirection(Enum):
    UP = "up"
    DOWN = "down"
    TOP = "top"
    BOTTOM = "bottom"


class NavPrompter(ABC):
    @abstractmethod
    def choose_child(self, branch: str, children: list[str]) -> str:
        """Pick which child of branch to move to."""
        ...


@dataclass(frozen=True)
class NavResult:
    direction: NavDirection
    from_branch: str
    to_branch: str
    changed: bool


def navigate(
    ctx: StackContext, direction: NavDirection, prompter: NavPrompter | None
) -> NavResult:
    """Check out the branch one step or all the way up or down the stack.

    Down follows the stored parent; bottom follows it to the root. Up and top
    only consider children that still exist in git, and ask the prompter
    when a branch has more than one.
    """
    repo = ctx.require_repo()
    git = ctx.git
    current = git.get_current_branch(repo.root)
    if current is None:
        raise InvalidOperationError("cannot navigate stack from detached HEAD")

    records = repo.store.list()
    by_id = {record.id: record for record in records}
    record = next((r for r in records if r.name == current), None)
    if record is None:
        raise NotFoundError(f"current branch '{current}' is not tracked; run `stack track` first")

    children = children_by_parent_id(records)
    match direction:
        case NavDirection.DOWN:
            target = _parent_record(record, by_id).name
        case NavDirection.BOTTOM:
            target = _bottom(record, by_id)
        case NavDirection.UP:
            target = _choose_child(
                current, _viable_children(git, repo.root, children, record.id), prompter
            )
        case NavDirection.TOP:
            target = _top(git, repo.root, record, children, prompter)
        case _:
            assert_never(direction)

    if not git.branch_exists(repo.root, target):
        raise NotFoundError(f"target branch does not exist in git: {target}")

    changed = target != current
    if changed:
        git.checkout_branch(repo.root, target)
    logger.debug("Navigated %s from %s to %s", direction.value, current, target)
    return NavResult(direction=direction, from_branch=current, to_branch=target, changed=changed)


def _parent_record(record: BranchRecord, by_id: Mapping[int, BranchRecord]) -> BranchRecord:
    if record.parent_branch_id is None:
        raise InvalidOperationError(f"branch '{record.name}' has no parent branch in the stack")
    parent = by_id.get(record.parent_branch_id)
    if parent is None:
        raise NotFoundError(f"tracked parent metadata missing for '{record.name}'")
    return parent


def _bottom(record: BranchRecord, by_id: Mapping[int, BranchRecord]) -> str:
    cursor = record
    seen = {cursor.id}
    while cursor.parent_branch_id is not None:
        cursor = _parent_record(cursor, by_id)
        if cursor.id in seen:
            raise InvalidOperationError("detected a cycle while walking stack parents")
        seen.add(cursor.id)
    return cursor.name


def _top(
    git: Git,
    repo_root: Path,
    record: BranchRecord,
    children: Mapping[int, list[BranchRecord]],
    prompter: NavPrompter | None,
) -> str:
    cursor = record
    seen = {cursor.id}
    while True:
        viable = _viable_children(git, repo_root, children, cursor.id)
        if not viable:
            return cursor.name
        chosen = _choose_child(cursor.name, viable, prompter)
        cursor = next(child for child in children[cursor.id] if child.name == chosen)
        if cursor.id in seen:
            raise InvalidOperationError("detected a cycle while walking stack children")
        seen.add(cursor.id)


def _viable_children(
    git: Git, repo_root: Path, children: Mapping[int, list[BranchRecord]], parent_id: int
) -> list[str]:
    return [
        child.name
        for child in children.get(parent_id, [])
        if git.branch_exists(repo_root, child.name)
    ]


def _choose_child(branch: str, children: list[str], prompter: NavPrompter | None) -> str:
    if not children:
        raise InvalidOperationError(f"branch '{branch}' has no child branches in the stack")
    if len(children) == 1:
        return children[0]
    if prompter is None:
        raise InvalidOperationError(
            f"branch '{branch}' has multiple child branches; "
            f"run in interactive mode to choose one: {', '.join(children)}"
        )
    return prompter.choose_child(branch, children)
