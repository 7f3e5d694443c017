"""Fake git operations for testing.

FakeGit is an in-memory implementation that accepts pre-configured state
in its constructor. Construct instances directly with keyword arguments.
"""

from pathlib import Path

from gitstack.core.errors import ExternalToolError
from gitstack.core.git.abc import Git, StashHandle


class FakeGit(Git):
    """In-memory fake implementation of git operations.

    This class has NO public setup methods. All state is provided via constructor
    using keyword arguments with sensible defaults. Mutating operations are
    recorded and exposed through read-only properties for test assertions.
    """

    def __init__(
        self,
        *,
        repository_root: Path | None = None,
        git_common_dir: Path | None = None,
        trunk_branch: str = "main",
        branch_heads: dict[str, str] | None = None,
        current_branch: str | None = None,
        ancestry: dict[str, dict[str, int]] | None = None,
        merge_bases: dict[tuple[str, str], str] | None = None,
        branch_remotes: dict[str, str] | None = None,
        replay_supported: bool = False,
        replay_failures: dict[str, str] | None = None,
        rebase_failures: dict[str, str] | None = None,
        fetch_failures: set[str] | None = None,
        dirty: bool = False,
        stash_pop_error: str | None = None,
    ) -> None:
        """Create FakeGit with pre-configured state.

        Args:
            repository_root: Value returned by get_repository_root (None = not a repo)
            git_common_dir: Value returned by get_git_common_dir
            trunk_branch: Value returned by get_trunk_branch
            branch_heads: Mapping of local branch name -> head SHA; defines which
                branches exist
            current_branch: Currently checked-out branch (None = detached)
            ancestry: Mapping of descendant -> {ancestor: commit distance}
            merge_bases: Mapping of (branch, onto) -> merge-base SHA
            branch_remotes: Mapping of branch -> tracked remote
            replay_supported: Value returned by supports_replay
            replay_failures: Mapping of branch -> error message raised by replay_onto
            rebase_failures: Mapping of branch -> error message raised by rebase_onto
            fetch_failures: Remotes whose fetch raises
            dirty: Whether the working tree has uncommitted changes
            stash_pop_error: Error message raised by stash_pop, if any
        """
        self._repository_root = repository_root
        self._git_common_dir = git_common_dir
        self._trunk_branch = trunk_branch
        self._branch_heads = dict(branch_heads or {})
        self._current_branch = current_branch
        self._ancestry = ancestry or {}
        self._merge_bases = merge_bases or {}
        self._branch_remotes = branch_remotes or {}
        self._replay_supported = replay_supported
        self._replay_failures = replay_failures or {}
        self._rebase_failures = rebase_failures or {}
        self._fetch_failures = fetch_failures or set()
        self._dirty = dirty
        self._stash_pop_error = stash_pop_error

        self._fetched_remotes: list[str] = []
        self._replayed: list[tuple[str, str, str]] = []
        self._rebased: list[tuple[str, str, str]] = []
        self._pushed: list[tuple[str, str, bool]] = []
        self._stash_pushes: list[str] = []
        self._stash_pops: list[StashHandle] = []
        self._checked_out: list[str] = []
        self._deleted_branches: list[str] = []
        self._created_branches: list[tuple[str, str]] = []

    @property
    def fetched_remotes(self) -> list[str]:
        return self._fetched_remotes

    @property
    def replayed(self) -> list[tuple[str, str, str]]:
        """Successful replays as (branch, old_base, new_base) tuples."""
        return self._replayed

    @property
    def rebased(self) -> list[tuple[str, str, str]]:
        """Successful rebases as (branch, old_base, new_base) tuples."""
        return self._rebased

    @property
    def pushed(self) -> list[tuple[str, str, bool]]:
        """Pushes as (remote, branch, force_with_lease) tuples."""
        return self._pushed

    @property
    def stash_pushes(self) -> list[str]:
        return self._stash_pushes

    @property
    def stash_pops(self) -> list[StashHandle]:
        return self._stash_pops

    @property
    def checked_out(self) -> list[str]:
        return self._checked_out

    @property
    def deleted_branches(self) -> list[str]:
        return self._deleted_branches

    @property
    def created_branches(self) -> list[tuple[str, str]]:
        """Created branches as (name, start_point) tuples."""
        return self._created_branches

    def get_repository_root(self, cwd: Path) -> Path | None:
        return self._repository_root

    def get_git_common_dir(self, repo_root: Path) -> Path:
        if self._git_common_dir is None:
            return repo_root / ".git"
        return self._git_common_dir

    def get_trunk_branch(self, repo_root: Path) -> str:
        return self._trunk_branch

    def branch_exists(self, repo_root: Path, branch: str) -> bool:
        return branch in self._branch_heads

    def get_current_branch(self, repo_root: Path) -> str | None:
        return self._current_branch

    def list_local_branches(self, repo_root: Path) -> list[str]:
        return sorted(self._branch_heads)

    def get_branch_head(self, repo_root: Path, branch: str) -> str:
        if branch not in self._branch_heads:
            raise ExternalToolError(f"Failed to resolve '{branch}'")
        return self._branch_heads[branch]

    def is_ancestor(self, repo_root: Path, ancestor: str, descendant: str) -> bool:
        return ancestor in self._ancestry.get(descendant, {})

    def commit_distance(self, repo_root: Path, base: str, head: str) -> int:
        return self._ancestry.get(head, {}).get(base, 0)

    def merge_base(self, repo_root: Path, branch: str, onto: str) -> str:
        if (branch, onto) in self._merge_bases:
            return self._merge_bases[(branch, onto)]
        return f"base-of-{branch}"

    def fetch_remote(self, repo_root: Path, remote: str) -> None:
        if remote in self._fetch_failures:
            raise ExternalToolError(f"Failed to fetch remote '{remote}'")
        self._fetched_remotes.append(remote)

    def remote_for_branch(self, repo_root: Path, branch: str) -> str | None:
        return self._branch_remotes.get(branch)

    def supports_replay(self, repo_root: Path) -> bool:
        return self._replay_supported

    def replay_onto(self, repo_root: Path, branch: str, old_base: str, new_base: str) -> None:
        if branch in self._replay_failures:
            raise ExternalToolError(self._replay_failures[branch])
        self._replayed.append((branch, old_base, new_base))
        self._move_head(branch, new_base)

    def rebase_onto(self, repo_root: Path, branch: str, old_base: str, new_base: str) -> None:
        if branch in self._rebase_failures:
            raise ExternalToolError(self._rebase_failures[branch])
        self._rebased.append((branch, old_base, new_base))
        self._move_head(branch, new_base)
        # A real rebase leaves the rebased branch checked out
        self._current_branch = branch

    def push_branch(
        self, repo_root: Path, remote: str, branch: str, *, force_with_lease: bool
    ) -> None:
        self._pushed.append((remote, branch, force_with_lease))

    def has_uncommitted_changes(self, repo_root: Path) -> bool:
        return self._dirty

    def stash_push(self, repo_root: Path, message: str) -> StashHandle | None:
        self._stash_pushes.append(message)
        if not self._dirty:
            return None
        self._dirty = False
        return StashHandle(reference="stash@{0}", message=message)

    def stash_pop(self, repo_root: Path, stash: StashHandle) -> None:
        if self._stash_pop_error is not None:
            raise ExternalToolError(self._stash_pop_error)
        self._stash_pops.append(stash)
        self._dirty = True

    def create_branch_from(self, repo_root: Path, name: str, start_point: str) -> None:
        if name in self._branch_heads:
            raise ExternalToolError(f"Failed to create branch '{name}': already exists")
        if start_point not in self._branch_heads:
            raise ExternalToolError(f"Failed to resolve '{start_point}'")
        self._branch_heads[name] = self._branch_heads[start_point]
        self._created_branches.append((name, start_point))

    def checkout_branch(self, repo_root: Path, branch: str) -> None:
        if branch not in self._branch_heads:
            raise ExternalToolError(f"Failed to checkout branch '{branch}'")
        self._checked_out.append(branch)
        self._current_branch = branch

    def delete_branch(self, repo_root: Path, branch: str, *, force: bool) -> None:
        if branch not in self._branch_heads:
            raise ExternalToolError(f"Failed to delete branch '{branch}'")
        del self._branch_heads[branch]
        self._deleted_branches.append(branch)

    def _move_head(self, branch: str, new_base: str) -> None:
        previous = self._branch_heads.get(branch, branch)
        self._branch_heads[branch] = f"{previous}+{new_base}"
