"""Abstract base class for pull-request provider operations."""

from abc import ABC, abstractmethod
from pathlib import Path

from gitstack.core.github.types import PullRequest


class GitHub(ABC):
    """Abstract interface for GitHub operations.

    All implementations (real and fake) must implement this interface.
    """

    @abstractmethod
    def resolve_pr_by_head(
        self, repo_root: Path, branch: str, cached_number: int | None
    ) -> PullRequest | None:
        """Resolve the pull request whose head is the given branch.

        Args:
            repo_root: Repository root directory
            branch: Head branch name
            cached_number: PR number recorded in the store, if any. When set the
                PR is fetched directly instead of searched for.

        Returns:
            The preferred matching PR (highest-numbered open PR, otherwise the
            highest-numbered PR of any state), or None if there is none

        Raises:
            ProviderError: If gh fails or returns output that cannot be parsed
        """
        ...

    @abstractmethod
    def close_pr(self, repo_root: Path, number: int) -> None:
        """Close a pull request.

        Raises:
            ProviderError: If gh fails
        """
        ...
