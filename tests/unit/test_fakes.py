"""Tests for the in-memory fakes used throughout the suite."""

from pathlib import Path

import pytest

from gitstack.core.errors import ExternalToolError, ProviderError
from gitstack.core.git.fake import FakeGit
from gitstack.core.github.fake import FakeGitHub
from gitstack.core.github.types import PRState, PullRequest
from gitstack.core.time.fake import FakeTime

REPO = Path("/repo")


def test_fake_git_branch_queries() -> None:
    git = FakeGit(branch_heads={"main": "m", "a": "1"}, current_branch="a")

    assert git.list_local_branches(REPO) == ["a", "main"]
    assert git.branch_exists(REPO, "a")
    assert not git.branch_exists(REPO, "b")
    assert git.get_current_branch(REPO) == "a"
    assert git.get_git_common_dir(REPO) == REPO / ".git"


def test_fake_git_unknown_head_raises() -> None:
    with pytest.raises(ExternalToolError):
        FakeGit().get_branch_head(REPO, "missing")


def test_fake_git_rebase_moves_head_and_checks_out() -> None:
    git = FakeGit(branch_heads={"main": "m", "a": "1"}, current_branch="main")

    git.rebase_onto(REPO, "a", "old", "main")

    assert git.get_branch_head(REPO, "a") == "1+main"
    assert git.get_current_branch(REPO) == "a"
    assert git.rebased == [("a", "old", "main")]


def test_fake_git_stash_only_when_dirty() -> None:
    clean = FakeGit()
    dirty = FakeGit(dirty=True)

    assert clean.stash_push(REPO, "msg") is None
    handle = dirty.stash_push(REPO, "msg")
    assert handle is not None
    assert not dirty.has_uncommitted_changes(REPO)

    dirty.stash_pop(REPO, handle)
    assert dirty.has_uncommitted_changes(REPO)


def test_fake_git_delete_branch() -> None:
    git = FakeGit(branch_heads={"a": "1"})

    git.delete_branch(REPO, "a", force=True)

    assert not git.branch_exists(REPO, "a")
    assert git.deleted_branches == ["a"]
    with pytest.raises(ExternalToolError):
        git.delete_branch(REPO, "a", force=True)


def test_fake_git_create_branch_copies_start_point() -> None:
    git = FakeGit(branch_heads={"main": "m"})

    git.create_branch_from(REPO, "feature", "main")

    assert git.get_branch_head(REPO, "feature") == "m"
    assert git.created_branches == [("feature", "main")]
    with pytest.raises(ExternalToolError):
        git.create_branch_from(REPO, "feature", "main")


def test_fake_github_records_calls() -> None:
    pr = PullRequest(number=1, state=PRState.OPEN, merge_commit_sha=None, base_branch="main")
    github = FakeGitHub(prs={"a": pr}, errors={"b": "boom"})

    assert github.resolve_pr_by_head(REPO, "a", None) == pr
    with pytest.raises(ProviderError, match="boom"):
        github.resolve_pr_by_head(REPO, "b", 3)
    github.close_pr(REPO, 1)

    assert github.resolve_calls == [("a", None), ("b", 3)]
    assert github.closed_prs == [1]


def test_fake_time_advances() -> None:
    time = FakeTime()

    first = time.now()
    second = time.now()

    assert second > first
    assert time.now_calls == 2
