"""Consistency checks over the stored stack, with optional repair.

Checks, each independent (one branch can raise several):

- missing_git_branch: the stored branch no longer exists in git
- missing_parent_record: the parent id points at no stored record
- base_has_parent: the base branch carries a parent link
- incomplete_pr_cache: exactly one of cached PR number and state is set
- cycle: the branch's parent chain loops

With fix enabled, missing_git_branch records are deleted outright first.
Their children are detached rather than spliced onto the deleted branch's
parent, unlike untrack and delete. The snapshot is then re-read once and the
remaining checks are run and repaired against it.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from gitstack.core.git.abc import Git
from gitstack.core.graph import find_cycle_starts
from gitstack.core.store.branch_store import BranchStore
from gitstack.core.store.types import BranchRecord

logger = logging.getLogger(__name__)


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class DoctorIssue:
    severity: Severity
    code: str
    message: str
    branch: str


@dataclass(frozen=True)
class DoctorReport:
    issues: list[DoctorIssue]
    fixes_applied: list[str]
    fix: bool

    @property
    def has_errors(self) -> bool:
        return any(issue.severity == Severity.ERROR for issue in self.issues)


def _missing_git_branch_issues(
    git: Git, repo_root: Path, records: Sequence[BranchRecord]
) -> list[DoctorIssue]:
    return [
        DoctorIssue(
            severity=Severity.ERROR,
            code="missing_git_branch",
            message=f"tracked branch '{record.name}' does not exist in git",
            branch=record.name,
        )
        for record in records
        if not git.branch_exists(repo_root, record.name)
    ]


def _graph_issues(records: Sequence[BranchRecord], base_branch: str) -> list[DoctorIssue]:
    ids = {record.id for record in records}
    issues: list[DoctorIssue] = []
    for record in records:
        if record.parent_branch_id is not None and record.parent_branch_id not in ids:
            issues.append(
                DoctorIssue(
                    severity=Severity.ERROR,
                    code="missing_parent_record",
                    message=(
                        f"branch '{record.name}' points to missing parent id "
                        f"{record.parent_branch_id}"
                    ),
                    branch=record.name,
                )
            )
        if record.name == base_branch and record.parent_branch_id is not None:
            issues.append(
                DoctorIssue(
                    severity=Severity.ERROR,
                    code="base_has_parent",
                    message=f"base branch '{record.name}' must not have a parent",
                    branch=record.name,
                )
            )
        if (record.cached_pr_number is None) != (record.cached_pr_state is None):
            issues.append(
                DoctorIssue(
                    severity=Severity.WARNING,
                    code="incomplete_pr_cache",
                    message=f"branch '{record.name}' has a partial PR cache",
                    branch=record.name,
                )
            )
    for record in find_cycle_starts(records):
        issues.append(
            DoctorIssue(
                severity=Severity.ERROR,
                code="cycle",
                message=f"branch '{record.name}' is part of a parent cycle",
                branch=record.name,
            )
        )
    return issues


def _apply_graph_fix(store: BranchStore, issue: DoctorIssue) -> str:
    match issue.code:
        case "missing_parent_record" | "base_has_parent" | "cycle":
            store.clear_parent(issue.branch)
            return f"cleared parent of '{issue.branch}' ({issue.code})"
        case "incomplete_pr_cache":
            store.clear_pr_cache(issue.branch)
            return f"cleared PR cache of '{issue.branch}'"
        case _:
            raise ValueError(f"no fix for issue code {issue.code}")


def run_doctor(store: BranchStore, git: Git, repo_root: Path, *, fix: bool) -> DoctorReport:
    """Check the stack for invariant violations and optionally repair them.

    Returns:
        DoctorReport listing every issue found and, under fix, a description
        of each repair that was applied
    """
    base_branch = store.repo_meta().base_branch
    records = store.list()
    missing = _missing_git_branch_issues(git, repo_root, records)
    fixes_applied: list[str] = []

    if fix and missing:
        for issue in missing:
            store.delete(issue.branch)
            fixes_applied.append(f"deleted record for missing branch '{issue.branch}'")
        records = store.list()

    graph_issues = _graph_issues(records, base_branch)
    if fix:
        for issue in graph_issues:
            fixes_applied.append(_apply_graph_fix(store, issue))

    issues = missing + graph_issues
    logger.debug("Doctor found %d issues, applied %d fixes", len(issues), len(fixes_applied))
    return DoctorReport(issues=issues, fixes_applied=fixes_applied, fix=fix)
