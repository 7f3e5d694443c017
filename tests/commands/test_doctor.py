"""Tests for the doctor command."""

import json
from collections.abc import Callable

from click.testing import CliRunner

from gitstack.cli.cli import cli
from gitstack.core.context import StackContext
from gitstack.core.git.fake import FakeGit
from gitstack.core.store.branch_store import BranchStore

ContextFactory = Callable[..., StackContext]


def test_doctor_clean(make_context: ContextFactory, store: BranchStore) -> None:
    store.set_parent("a", "main")
    git = FakeGit(branch_heads={"main": "m", "a": "1"})
    runner = CliRunner()

    result = runner.invoke(cli, ["doctor"], obj=make_context(git=git))

    assert result.exit_code == 0, result.stderr
    assert result.stdout.strip() == "doctor: no issues found"


def test_doctor_reports_issues(
    make_context: ContextFactory, store: BranchStore, raw_sql: Callable[..., None]
) -> None:
    store.set_parent("a", "main")
    raw_sql("UPDATE branches SET cached_pr_number = 99 WHERE name = 'a'")
    git = FakeGit(branch_heads={"main": "m"})
    runner = CliRunner()

    result = runner.invoke(cli, ["doctor"], obj=make_context(git=git))

    assert result.exit_code == 0, result.stderr
    assert "doctor: 2 issue(s)" in result.stdout
    assert "- [error] missing_git_branch: tracked branch 'a' does not exist in git" in result.stdout
    assert "- [warning] incomplete_pr_cache: branch 'a' has a partial PR cache" in result.stdout


def test_doctor_fix_json(
    make_context: ContextFactory, store: BranchStore, raw_sql: Callable[..., None]
) -> None:
    store.set_parent("a", "main")
    raw_sql("UPDATE branches SET cached_pr_number = 99 WHERE name = 'a'")
    git = FakeGit(branch_heads={"main": "m", "a": "1"})
    runner = CliRunner()

    result = runner.invoke(
        cli, ["doctor", "--fix", "--format", "json"], obj=make_context(git=git)
    )

    assert result.exit_code == 0, result.stderr
    payload = json.loads(result.stdout)
    assert payload["fix_applied"] is True
    assert [issue["code"] for issue in payload["issues"]] == ["incomplete_pr_cache"]
    assert payload["issues"][0]["severity"] == "warning"
    assert payload["fixes"] == ["cleared PR cache of 'a'"]
    a = store.get("a")
    assert a is not None
    assert a.cached_pr_number is None
