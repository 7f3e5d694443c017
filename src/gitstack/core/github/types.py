"""Type definitions for pull-request lookups."""

from dataclasses import dataclass
from enum import Enum


class PRState(Enum):
    """Provider-reported PR state, stored lower-case in the PR cache."""

    OPEN = "open"
    MERGED = "merged"
    CLOSED = "closed"
    UNKNOWN = "unknown"

    @classmethod
    def from_gh(cls, raw: str) -> "PRState":
        """Map gh's upper-case state names; anything unrecognised is UNKNOWN."""
        match raw.upper():
            case "OPEN":
                return cls.OPEN
            case "MERGED":
                return cls.MERGED
            case "CLOSED":
                return cls.CLOSED
            case _:
                return cls.UNKNOWN


@dataclass(frozen=True)
class PullRequest:
    """Pull request resolved for a head branch."""

    number: int
    state: PRState
    merge_commit_sha: str | None
    base_branch: str | None
    url: str | None = None
