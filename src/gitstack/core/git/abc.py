"""High-level git operations interface.

This module provides a clean abstraction over git subprocess calls, making the
stack logic testable without a real repository.

Architecture:
- Git: Abstract base class defining the interface
- RealGit: Production implementation using subprocess
- FakeGit: In-memory implementation configured through its constructor
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class StashHandle:
    """Reference to a stash entry created by stash_push."""

    reference: str
    message: str


class Git(ABC):
    """Abstract interface for git operations.

    All implementations (real and fake) must implement this interface.
    This interface contains ONLY runtime operations - no test setup methods.
    """

    @abstractmethod
    def get_repository_root(self, cwd: Path) -> Path | None:
        """Get the top-level directory of the repository containing cwd.

        Returns:
            Repository root, or None if cwd is not inside a git repository
        """
        ...

    @abstractmethod
    def get_git_common_dir(self, repo_root: Path) -> Path:
        """Get the common git directory (shared by all worktrees)."""
        ...

    @abstractmethod
    def get_trunk_branch(self, repo_root: Path) -> str:
        """Get the trunk branch name for the repository.

        Detects trunk by checking the origin remote HEAD reference, falling
        back to 'main'.
        """
        ...

    @abstractmethod
    def branch_exists(self, repo_root: Path, branch: str) -> bool:
        """Check whether refs/heads/<branch> exists."""
        ...

    @abstractmethod
    def get_current_branch(self, repo_root: Path) -> str | None:
        """Get the currently checked-out branch, or None when HEAD is detached."""
        ...

    @abstractmethod
    def list_local_branches(self, repo_root: Path) -> list[str]:
        """List all local branch names in the repository."""
        ...

    @abstractmethod
    def get_branch_head(self, repo_root: Path, branch: str) -> str:
        """Resolve a ref to its commit SHA.

        Raises:
            ExternalToolError: If the ref cannot be resolved
        """
        ...

    @abstractmethod
    def is_ancestor(self, repo_root: Path, ancestor: str, descendant: str) -> bool:
        """Check whether ancestor is reachable from descendant."""
        ...

    @abstractmethod
    def commit_distance(self, repo_root: Path, base: str, head: str) -> int:
        """Count commits in base..head."""
        ...

    @abstractmethod
    def merge_base(self, repo_root: Path, branch: str, onto: str) -> str:
        """Compute the merge-base commit of two refs."""
        ...

    @abstractmethod
    def fetch_remote(self, repo_root: Path, remote: str) -> None:
        """Fetch all refs from a named remote."""
        ...

    @abstractmethod
    def remote_for_branch(self, repo_root: Path, branch: str) -> str | None:
        """Get the remote a branch tracks, or None if it tracks nothing."""
        ...

    @abstractmethod
    def supports_replay(self, repo_root: Path) -> bool:
        """Report whether the installed git provides `git replay`."""
        ...

    @abstractmethod
    def replay_onto(self, repo_root: Path, branch: str, old_base: str, new_base: str) -> None:
        """Replay old_base..branch onto new_base and update the branch ref."""
        ...

    @abstractmethod
    def rebase_onto(self, repo_root: Path, branch: str, old_base: str, new_base: str) -> None:
        """Run `git rebase --onto new_base old_base branch`."""
        ...

    @abstractmethod
    def push_branch(
        self, repo_root: Path, remote: str, branch: str, *, force_with_lease: bool
    ) -> None:
        """Push a branch and set its upstream.

        Args:
            repo_root: Repository root
            remote: Remote to push to
            branch: Branch to push
            force_with_lease: Use --force-with-lease instead of a plain push
        """
        ...

    @abstractmethod
    def has_uncommitted_changes(self, repo_root: Path) -> bool:
        """Check whether the working tree differs from HEAD."""
        ...

    @abstractmethod
    def stash_push(self, repo_root: Path, message: str) -> StashHandle | None:
        """Stash local changes (including untracked files).

        Returns:
            Handle to the new stash entry, or None if there was nothing to stash
        """
        ...

    @abstractmethod
    def stash_pop(self, repo_root: Path, stash: StashHandle) -> None:
        """Restore and drop a stash entry."""
        ...

    @abstractmethod
    def create_branch_from(self, repo_root: Path, name: str, start_point: str) -> None:
        """Create a local branch at start_point without checking it out."""
        ...

    @abstractmethod
    def checkout_branch(self, repo_root: Path, branch: str) -> None:
        """Checkout a branch in the repository root."""
        ...

    @abstractmethod
    def delete_branch(self, repo_root: Path, branch: str, *, force: bool) -> None:
        """Delete a local branch.

        Args:
            repo_root: Repository root
            branch: Name of the branch to delete
            force: Use -D (force delete) instead of -d
        """
        ...
