"""Tests for track planning and batch application."""

from collections.abc import Callable

import pytest

from gitstack.core.context import StackContext
from gitstack.core.errors import (
    ConflictError,
    InvalidOperationError,
    NotFoundError,
    UserCancelled,
)
from gitstack.core.git.fake import FakeGit
from gitstack.core.github.fake import FakeGitHub
from gitstack.core.github.types import PRState, PullRequest
from gitstack.core.parents import ConflictResolution, ParentChange, ParentSource
from gitstack.core.store.branch_store import BranchStore
from gitstack.core.track import TrackPrompter, TrackRequest, apply_tracking, plan_tracking

ContextFactory = Callable[..., StackContext]


class ScriptedPrompter(TrackPrompter):
    def __init__(
        self,
        *,
        parent: str | None = None,
        resolution: ConflictResolution = ConflictResolution.REPLACE,
    ) -> None:
        self._parent = parent
        self._resolution = resolution
        self.parent_prompts: list[tuple[str, list[str]]] = []
        self.conflict_prompts: list[ParentChange] = []

    def choose_parent(self, branch: str, candidates: list[str]) -> str:
        self.parent_prompts.append((branch, candidates))
        assert self._parent is not None
        return self._parent

    def resolve_conflict(self, change: ParentChange) -> ConflictResolution:
        self.conflict_prompts.append(change)
        return self._resolution


def _stack_git() -> FakeGit:
    return FakeGit(
        branch_heads={"main": "m", "a": "1", "b": "2"},
        ancestry={"b": {"main": 4, "a": 1}, "a": {"main": 2}},
        current_branch="b",
    )


def test_current_branch_chain_is_tracked(
    make_context: ContextFactory, store: BranchStore
) -> None:
    ctx = make_context(git=_stack_git())

    result = apply_tracking(store, plan_tracking(ctx, TrackRequest(), None))

    assert result.applied
    assert [(c.branch, c.new_parent) for c in result.changes] == [("b", "a"), ("a", "main")]
    b = store.get("b")
    a = store.get("a")
    assert b is not None and a is not None
    assert b.parent_branch_id == a.id


def test_dry_run_writes_nothing(make_context: ContextFactory, store: BranchStore) -> None:
    ctx = make_context(git=_stack_git())

    result = apply_tracking(store, plan_tracking(ctx, TrackRequest(dry_run=True), None))

    assert not result.applied
    assert len(result.changes) == 2
    assert store.list() == []


def test_explicit_parent(make_context: ContextFactory, store: BranchStore) -> None:
    ctx = make_context(git=_stack_git())

    result = apply_tracking(
        store, plan_tracking(ctx, TrackRequest(branch="b", parent="main"), None)
    )

    assert [(c.branch, c.new_parent, c.source) for c in result.changes] == [
        ("b", "main", ParentSource.EXPLICIT)
    ]


def test_explicit_parent_must_exist(make_context: ContextFactory) -> None:
    ctx = make_context(git=_stack_git())

    with pytest.raises(NotFoundError, match="parent branch does not exist in git: ghost"):
        plan_tracking(ctx, TrackRequest(branch="b", parent="ghost"), None)


def test_unknown_branch_raises(make_context: ContextFactory) -> None:
    ctx = make_context(git=_stack_git())

    with pytest.raises(NotFoundError):
        plan_tracking(ctx, TrackRequest(branch="ghost"), None)


def test_all_conflicts_with_branch_argument(make_context: ContextFactory) -> None:
    ctx = make_context(git=_stack_git())

    with pytest.raises(InvalidOperationError):
        plan_tracking(ctx, TrackRequest(branch="b", all_branches=True), None)
    with pytest.raises(InvalidOperationError):
        plan_tracking(ctx, TrackRequest(parent="a", all_branches=True), None)


def test_on_base_branch_without_argument_raises(make_context: ContextFactory) -> None:
    ctx = make_context(git=FakeGit(branch_heads={"main": "m"}, current_branch="main"))

    with pytest.raises(InvalidOperationError):
        plan_tracking(ctx, TrackRequest(), None)


def test_base_branch_is_skipped(make_context: ContextFactory) -> None:
    ctx = make_context(git=_stack_git())

    result = plan_tracking(ctx, TrackRequest(branch="main"), None)

    assert result.changes == []
    assert [s.reason for s in result.skipped] == ["base branch is not eligible for tracking"]


def test_all_tracks_every_local_branch(make_context: ContextFactory, store: BranchStore) -> None:
    github = FakeGitHub(
        prs={
            "b": PullRequest(number=2, state=PRState.OPEN, merge_commit_sha=None, base_branch="a")
        }
    )
    ctx = make_context(git=_stack_git(), github=github)

    result = apply_tracking(store, plan_tracking(ctx, TrackRequest(all_branches=True), None))

    assert result.mode == "all"
    assert sorted((c.branch, c.new_parent) for c in result.changes) == [
        ("a", "main"),
        ("b", "a"),
    ]


def test_already_linked_is_skipped(make_context: ContextFactory, store: BranchStore) -> None:
    store.set_parent("a", "main")
    ctx = make_context(git=_stack_git())

    result = plan_tracking(ctx, TrackRequest(branch="a"), None)

    assert result.changes == []
    assert [s.reason for s in result.skipped] == ["already linked to inferred parent"]


def test_conflict_requires_force_when_non_interactive(
    make_context: ContextFactory, store: BranchStore
) -> None:
    store.set_parent("b", "main")
    ctx = make_context(git=_stack_git())

    with pytest.raises(ConflictError):
        plan_tracking(ctx, TrackRequest(branch="b", parent="a"), None)

    result = apply_tracking(
        store, plan_tracking(ctx, TrackRequest(branch="b", parent="a", force=True), None)
    )
    assert result.applied


def test_conflict_prompt_abort_discards_batch(
    make_context: ContextFactory, store: BranchStore
) -> None:
    store.set_parent("b", "main")
    ctx = make_context(git=_stack_git())
    prompter = ScriptedPrompter(resolution=ConflictResolution.ABORT)

    with pytest.raises(UserCancelled):
        plan_tracking(ctx, TrackRequest(branch="b", parent="a"), prompter)

    b = store.get("b")
    main = store.get("main")
    assert b is not None and main is not None
    assert b.parent_branch_id == main.id


def test_uninferable_branch_uses_single_candidate(make_context: ContextFactory) -> None:
    git = FakeGit(branch_heads={"main": "m", "orphan": "o"}, current_branch="orphan")
    ctx = make_context(git=git)

    result = plan_tracking(ctx, TrackRequest(), None)

    assert [(c.branch, c.new_parent, c.source) for c in result.changes] == [
        ("orphan", "main", ParentSource.EXPLICIT)
    ]
    assert result.notes == ["assuming parent branch 'main' (only viable branch)"]


def test_uninferable_branch_prompts_among_candidates(make_context: ContextFactory) -> None:
    git = FakeGit(
        branch_heads={"main": "m", "other": "x", "orphan": "o"}, current_branch="orphan"
    )
    ctx = make_context(git=git)
    prompter = ScriptedPrompter(parent="other")

    result = plan_tracking(ctx, TrackRequest(), prompter)

    assert prompter.parent_prompts == [("orphan", ["main", "other"])]
    assert [c.new_parent for c in result.changes] == ["other"]
    assert result.notes == []


def test_uninferable_branch_without_prompter_raises(make_context: ContextFactory) -> None:
    git = FakeGit(
        branch_heads={"main": "m", "other": "x", "orphan": "o"}, current_branch="orphan"
    )
    ctx = make_context(git=git)

    with pytest.raises(InvalidOperationError, match="non-interactive mode"):
        plan_tracking(ctx, TrackRequest(), None)


def test_infer_only_reports_unresolved(make_context: ContextFactory) -> None:
    git = FakeGit(
        branch_heads={"main": "m", "other": "x", "orphan": "o"}, current_branch="orphan"
    )
    ctx = make_context(git=git)

    result = plan_tracking(ctx, TrackRequest(infer_only=True), None)

    assert result.changes == []
    assert result.unresolved == ["orphan"]
