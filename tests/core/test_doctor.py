"""Tests for the stack consistency check."""

from collections.abc import Callable
from pathlib import Path

from gitstack.core.doctor import DoctorReport, Severity, run_doctor
from gitstack.core.git.fake import FakeGit
from gitstack.core.store.branch_store import BranchStore

REPO = Path("/repo")

RawSql = Callable[..., None]


def _codes(report: DoctorReport) -> list[tuple[str, str]]:
    return [(issue.code, issue.branch) for issue in report.issues]


def _git(*names: str) -> FakeGit:
    return FakeGit(branch_heads={name: f"{name}-sha" for name in names})


def test_clean_stack_has_no_issues(store: BranchStore) -> None:
    store.set_parent("a", "main")
    store.set_parent("b", "a")

    report = run_doctor(store, _git("main", "a", "b"), REPO, fix=False)

    assert report.issues == []
    assert not report.has_errors


def test_missing_git_branch_is_reported(store: BranchStore) -> None:
    store.set_parent("a", "main")

    report = run_doctor(store, _git("main"), REPO, fix=False)

    assert _codes(report) == [("missing_git_branch", "a")]
    assert report.has_errors
    assert store.get("a") is not None


def test_missing_git_branch_fix_deletes_without_splicing(store: BranchStore) -> None:
    store.set_parent("a", "main")
    store.set_parent("b", "a")

    report = run_doctor(store, _git("main", "b"), REPO, fix=True)

    assert store.get("a") is None
    b = store.get("b")
    assert b is not None
    assert b.parent_branch_id is None
    assert report.fixes_applied == ["deleted record for missing branch 'a'"]


def test_incomplete_pr_cache_is_warning_and_fixed(store: BranchStore, raw_sql: RawSql) -> None:
    store.set_parent("a", "main")
    raw_sql("UPDATE branches SET cached_pr_number = 99 WHERE name = 'a'")

    report = run_doctor(store, _git("main", "a"), REPO, fix=False)

    assert _codes(report) == [("incomplete_pr_cache", "a")]
    assert report.issues[0].severity == Severity.WARNING
    assert not report.has_errors

    run_doctor(store, _git("main", "a"), REPO, fix=True)

    a = store.get("a")
    assert a is not None
    assert (a.cached_pr_number, a.cached_pr_state) == (None, None)


def test_base_with_parent_is_fixed(store: BranchStore, raw_sql: RawSql) -> None:
    store.set_parent("a", "main")
    raw_sql(
        "UPDATE branches SET parent_branch_id = (SELECT id FROM branches WHERE name = 'a') "
        "WHERE name = 'main'"
    )

    report = run_doctor(store, _git("main", "a"), REPO, fix=True)

    codes = [code for code, _ in _codes(report)]
    assert "base_has_parent" in codes
    assert "cycle" in codes
    main = store.get("main")
    assert main is not None
    assert main.parent_branch_id is None


def test_dangling_parent_is_reported(store: BranchStore, raw_sql: RawSql) -> None:
    store.upsert("a")
    raw_sql("UPDATE branches SET parent_branch_id = 999 WHERE name = 'a'")

    report = run_doctor(store, _git("a"), REPO, fix=True)

    assert _codes(report) == [("missing_parent_record", "a")]
    a = store.get("a")
    assert a is not None
    assert a.parent_branch_id is None


def test_second_fix_pass_is_clean(store: BranchStore, raw_sql: RawSql) -> None:
    store.set_parent("b", "a")
    store.set_parent("c", "b")
    raw_sql(
        "UPDATE branches SET parent_branch_id = (SELECT id FROM branches WHERE name = 'c') "
        "WHERE name = 'a'"
    )
    raw_sql("UPDATE branches SET cached_pr_state = 'open' WHERE name = 'b'")
    git = _git("main", "a", "b", "c")

    first = run_doctor(store, git, REPO, fix=True)
    second = run_doctor(store, git, REPO, fix=True)

    assert first.issues
    assert second.issues == []
    assert second.fixes_applied == []
