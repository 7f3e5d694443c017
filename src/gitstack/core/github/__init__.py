"""Pull-request provider subpackage."""

from gitstack.core.github.abc import GitHub
from gitstack.core.github.fake import FakeGitHub
from gitstack.core.github.real import RealGitHub
from gitstack.core.github.types import PRState, PullRequest

__all__ = [
    "FakeGitHub",
    "GitHub",
    "PRState",
    "PullRequest",
    "RealGitHub",
]
