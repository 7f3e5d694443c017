"""Fake pull-request provider for testing.

FakeGitHub is an in-memory implementation that accepts pre-configured state
in its constructor. Construct instances directly with keyword arguments.
"""

from pathlib import Path

from gitstack.core.errors import ProviderError
from gitstack.core.github.abc import GitHub
from gitstack.core.github.types import PullRequest


class FakeGitHub(GitHub):
    """In-memory fake implementation of GitHub operations.

    This class has NO public setup methods. All state is provided via constructor
    using keyword arguments with sensible defaults (empty dicts).
    """

    def __init__(
        self,
        *,
        prs: dict[str, PullRequest] | None = None,
        errors: dict[str, str] | None = None,
        close_error: str | None = None,
    ) -> None:
        """Create FakeGitHub with pre-configured state.

        Args:
            prs: Mapping of head branch name -> PullRequest
            errors: Mapping of head branch name -> ProviderError message raised
                by resolve_pr_by_head
            close_error: ProviderError message raised by close_pr, if any
        """
        self._prs = prs or {}
        self._errors = errors or {}
        self._close_error = close_error
        self._resolve_calls: list[tuple[str, int | None]] = []
        self._closed_prs: list[int] = []

    @property
    def resolve_calls(self) -> list[tuple[str, int | None]]:
        """Calls to resolve_pr_by_head as (branch, cached_number) tuples."""
        return self._resolve_calls

    @property
    def closed_prs(self) -> list[int]:
        """List of PR numbers that were closed."""
        return self._closed_prs

    def resolve_pr_by_head(
        self, repo_root: Path, branch: str, cached_number: int | None
    ) -> PullRequest | None:
        self._resolve_calls.append((branch, cached_number))
        if branch in self._errors:
            raise ProviderError(self._errors[branch])
        return self._prs.get(branch)

    def close_pr(self, repo_root: Path, number: int) -> None:
        if self._close_error is not None:
            raise ProviderError(self._close_error)
        self._closed_prs.append(number)
