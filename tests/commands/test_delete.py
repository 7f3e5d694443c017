"""Tests for the delete command."""

import json
from collections.abc import Callable

from click.testing import CliRunner

from gitstack.cli.cli import cli
from gitstack.core.context import StackContext
from gitstack.core.git.fake import FakeGit
from gitstack.core.github.fake import FakeGitHub
from gitstack.core.github.types import PRState, PullRequest
from gitstack.core.store.branch_store import BranchStore

ContextFactory = Callable[..., StackContext]


def _chain(store: BranchStore, current: str = "main") -> FakeGit:
    store.set_parent("a", "main")
    store.set_parent("b", "a")
    store.set_parent("c", "b")
    return FakeGit(
        branch_heads={"main": "m", "a": "1", "b": "2", "c": "3"}, current_branch=current
    )


def test_delete_splices_and_closes_pr(make_context: ContextFactory, store: BranchStore) -> None:
    git = _chain(store)
    store.set_pr_cache("b", 22, "open")
    github = FakeGitHub()
    runner = CliRunner()

    result = runner.invoke(cli, ["delete", "b", "--yes"], obj=make_context(git=git, github=github))

    assert result.exit_code == 0, result.stderr
    assert "deleted 'b' and spliced stack children to 'a'" in result.stdout
    assert github.closed_prs == [22]
    assert git.deleted_branches == ["b"]
    assert store.get("b") is None
    c = store.get("c")
    a = store.get("a")
    assert c is not None and a is not None
    assert c.parent_branch_id == a.id


def test_delete_current_branch_checks_out_parent(
    make_context: ContextFactory, store: BranchStore
) -> None:
    git = _chain(store, current="b")
    runner = CliRunner()

    result = runner.invoke(cli, ["delete", "b", "--yes"], obj=make_context(git=git))

    assert result.exit_code == 0, result.stderr
    assert git.checked_out == ["a"]
    assert "warning: no upstream PR found for 'b'" in result.stderr


def test_delete_resolves_uncached_pr(make_context: ContextFactory, store: BranchStore) -> None:
    git = _chain(store)
    pr = PullRequest(number=8, state=PRState.OPEN, merge_commit_sha=None, base_branch="a")
    github = FakeGitHub(prs={"b": pr})
    runner = CliRunner()

    result = runner.invoke(cli, ["delete", "b", "--yes"], obj=make_context(git=git, github=github))

    assert result.exit_code == 0, result.stderr
    assert github.closed_prs == [8]


def test_delete_dry_run(make_context: ContextFactory, store: BranchStore) -> None:
    git = _chain(store)
    runner = CliRunner()

    result = runner.invoke(
        cli, ["delete", "b", "--dry-run", "--format", "json"], obj=make_context(git=git)
    )

    assert result.exit_code == 0, result.stderr
    payload = json.loads(result.stdout)
    assert payload["parent"] == "a"
    assert payload["deleted"] is False
    assert git.deleted_branches == []
    assert store.get("b") is not None


def test_delete_declined_without_confirmation(
    make_context: ContextFactory, store: BranchStore
) -> None:
    git = _chain(store)
    runner = CliRunner()

    result = runner.invoke(cli, ["delete", "b"], obj=make_context(git=git))

    assert result.exit_code == 0, result.stderr
    assert "delete not applied: confirmation declined; no changes made" in result.stdout
    assert store.get("b") is not None


def test_delete_interactive_confirm(make_context: ContextFactory, store: BranchStore) -> None:
    git = _chain(store)
    runner = CliRunner()

    result = runner.invoke(
        cli, ["delete", "b"], obj=make_context(git=git, interactive=True), input="y\n"
    )

    assert result.exit_code == 0, result.stderr
    assert store.get("b") is None


def test_delete_base_is_rejected(make_context: ContextFactory, store: BranchStore) -> None:
    git = _chain(store)
    runner = CliRunner()

    result = runner.invoke(cli, ["delete", "main", "--yes"], obj=make_context(git=git))

    assert result.exit_code == 1
    assert "cannot be deleted" in result.stderr
