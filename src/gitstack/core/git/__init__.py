"""Git operations subpackage.

This subpackage provides abstractions over git operations with support for
testing via fakes.
"""

from gitstack.core.git.abc import Git, StashHandle
from gitstack.core.git.fake import FakeGit
from gitstack.core.git.real import RealGit

__all__ = [
    "FakeGit",
    "Git",
    "RealGit",
    "StashHandle",
]
