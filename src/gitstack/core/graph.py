"""Pure queries over an in-memory snapshot of branch records."""

from collections.abc import Iterable, Sequence

from gitstack.core.store.types import BranchRecord


def rank_parent_candidates(
    current: str,
    tracked: Sequence[BranchRecord],
    local: Iterable[str],
) -> list[str]:
    """Order candidate parents: current branch, tracked branches, other locals.

    Duplicates are dropped, keeping the first occurrence. An empty current
    branch (detached HEAD) is skipped.
    """
    ranked: list[str] = []
    seen: set[str] = set()

    def push(name: str) -> None:
        if name and name not in seen:
            seen.add(name)
            ranked.append(name)

    push(current)
    for record in tracked:
        push(record.name)
    for name in local:
        push(name)
    return ranked


def find_cycle_starts(records: Sequence[BranchRecord]) -> list[BranchRecord]:
    """Return each record whose parent chain revisits a node.

    Every record is walked independently with its own visited set, so a
    record is reported once even when it sits on a cycle shared with others.
    Dangling parent ids end the walk.
    """
    parent_by_id = {record.id: record.parent_branch_id for record in records}
    starts: list[BranchRecord] = []
    for record in records:
        visited: set[int] = set()
        cursor: int | None = record.id
        while cursor is not None:
            if cursor in visited:
                starts.append(record)
                break
            visited.add(cursor)
            cursor = parent_by_id.get(cursor)
    return starts


def children_by_parent_id(records: Sequence[BranchRecord]) -> dict[int, list[BranchRecord]]:
    """Group records under their parent id, preserving input order."""
    children: dict[int, list[BranchRecord]] = {}
    for record in records:
        if record.parent_branch_id is not None:
            children.setdefault(record.parent_branch_id, []).append(record)
    return children


def parent_name_of(record: BranchRecord, records: Sequence[BranchRecord]) -> str | None:
    if record.parent_branch_id is None:
        return None
    for candidate in records:
        if candidate.id == record.parent_branch_id:
            return candidate.name
    return None
