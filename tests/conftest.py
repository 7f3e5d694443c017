"""Shared fixtures: a file-backed store and a context builder wired to fakes."""

import sqlite3
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from gitstack.core.context import RepoContext, StackContext
from gitstack.core.git.abc import Git
from gitstack.core.github.abc import GitHub
from gitstack.core.store.branch_store import BranchStore
from gitstack.core.time.abc import Time

BASE_BRANCH = "main"


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "stack.db"


@pytest.fixture
def store(db_path: Path) -> Iterator[BranchStore]:
    branch_store = BranchStore.open(db_path)
    branch_store.set_base_branch_if_missing(BASE_BRANCH)
    yield branch_store
    branch_store.close()


@pytest.fixture
def raw_sql(db_path: Path) -> Callable[..., None]:
    """Execute SQL against the store file, bypassing the store's invariants.

    The raw connection runs without foreign-key enforcement, so tests can
    plant dangling parents, cycles and partial PR caches.
    """

    def execute(sql: str, *params: object) -> None:
        conn = sqlite3.connect(db_path)
        try:
            conn.execute(sql, params)
            conn.commit()
        finally:
            conn.close()

    return execute


@pytest.fixture
def make_context(store: BranchStore, tmp_path: Path) -> Callable[..., StackContext]:
    def build(
        *,
        git: Git | None = None,
        github: GitHub | None = None,
        time: Time | None = None,
        interactive: bool = False,
        debug: bool = False,
    ) -> StackContext:
        repo = RepoContext(
            root=tmp_path,
            store=store,
            base_branch=BASE_BRANCH,
            base_remote="origin",
        )
        return StackContext.for_test(
            git=git,
            github=github,
            time=time,
            cwd=tmp_path,
            repo=repo,
            debug=debug,
            interactive=interactive,
        )

    return build
