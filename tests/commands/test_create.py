"""Tests for the create command."""

import json
from collections.abc import Callable

from click.testing import CliRunner

from gitstack.cli.cli import cli
from gitstack.core.context import StackContext
from gitstack.core.git.fake import FakeGit
from gitstack.core.store.branch_store import BranchStore

ContextFactory = Callable[..., StackContext]


def test_create_with_parent(make_context: ContextFactory, store: BranchStore) -> None:
    git = FakeGit(branch_heads={"main": "m", "a": "1"}, current_branch="a")
    runner = CliRunner()

    result = runner.invoke(cli, ["create", "b", "--parent", "a"], obj=make_context(git=git))

    assert result.exit_code == 0, result.stderr
    assert result.stdout.strip() == "created stack branch: a -> b"
    assert git.checked_out == ["b"]
    b = store.get("b")
    a = store.get("a")
    assert a is not None and b is not None
    assert b.parent_branch_id == a.id


def test_create_insert_json(make_context: ContextFactory, store: BranchStore) -> None:
    store.set_parent("a", "main")
    store.set_parent("b", "a")
    git = FakeGit(branch_heads={"main": "m", "a": "1", "b": "2"}, current_branch="b")
    runner = CliRunner()

    result = runner.invoke(
        cli,
        ["create", "mid", "--insert", "b", "--format", "json"],
        obj=make_context(git=git),
    )

    assert result.exit_code == 0, result.stderr
    assert json.loads(result.stdout) == {
        "created": "mid",
        "parent": "a",
        "inserted_before": "b",
        "head_sha": "1",
        "notes": [],
    }
    b = store.get("b")
    mid = store.get("mid")
    assert b is not None and mid is not None
    assert b.parent_branch_id == mid.id


def test_create_insert_without_value_picks_only_child(
    make_context: ContextFactory, store: BranchStore
) -> None:
    store.set_parent("a", "main")
    git = FakeGit(branch_heads={"main": "m", "a": "1"}, current_branch="main")
    runner = CliRunner()

    result = runner.invoke(cli, ["create", "x", "--insert"], obj=make_context(git=git))

    assert result.exit_code == 0, result.stderr
    assert result.stdout.splitlines() == [
        "assuming child branch 'a' (only viable branch)",
        "created stack branch: main -> x (re-linked 'a' under it)",
    ]


def test_create_interactive_parent_choice(
    make_context: ContextFactory, store: BranchStore
) -> None:
    git = FakeGit(branch_heads={"main": "m", "a": "1"}, current_branch="a")
    runner = CliRunner()

    result = runner.invoke(
        cli, ["create", "b"], obj=make_context(git=git, interactive=True), input="2\n"
    )

    assert result.exit_code == 0, result.stderr
    assert "Select parent branch for 'b':" in result.stderr
    assert "created stack branch: main -> b" in result.stdout


def test_create_existing_branch_fails(make_context: ContextFactory) -> None:
    git = FakeGit(branch_heads={"main": "m", "a": "1"}, current_branch="main")
    runner = CliRunner()

    result = runner.invoke(cli, ["create", "a", "--parent", "main"], obj=make_context(git=git))

    assert result.exit_code == 1
    assert "Error: branch already exists: a" in result.stderr
    assert git.created_branches == []


def test_create_needs_parent_non_interactive(make_context: ContextFactory) -> None:
    git = FakeGit(branch_heads={"main": "m", "a": "1"}, current_branch="a")
    runner = CliRunner()

    result = runner.invoke(cli, ["create", "b", "--format", "json"], obj=make_context(git=git))

    assert result.exit_code == 1
    payload = json.loads(result.stdout)
    assert payload["error_type"] == "InvalidOperationError"
    assert "pass --parent <branch>" in payload["error"]
