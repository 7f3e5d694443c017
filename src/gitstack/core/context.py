"""Application context with dependency injection."""

import logging
import sys
from dataclasses import dataclass
from pathlib import Path

from gitstack.core.config import StackConfig, load_config
from gitstack.core.errors import NotFoundError, StackError
from gitstack.core.git.abc import Git
from gitstack.core.git.real import RealGit
from gitstack.core.github.abc import GitHub
from gitstack.core.github.real import RealGitHub
from gitstack.core.store.branch_store import BranchStore
from gitstack.core.time.abc import Time
from gitstack.core.time.real import RealTime

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RepoContext:
    """The repository a command operates on, with its opened store."""

    root: Path
    store: BranchStore
    base_branch: str
    base_remote: str


@dataclass(frozen=True)
class NoRepoSentinel:
    """Sentinel value indicating execution outside a git repository.

    Commands that need a repository call StackContext.require_repo, which
    fails fast with this message. When the repository was found but could
    not be opened, error holds the original failure and require_repo
    re-raises it instead.
    """

    message: str = "not inside a git repository"
    error: StackError | None = None


@dataclass(frozen=True)
class StackContext:
    """Immutable context holding all dependencies for stack operations.

    Created at CLI entry point and threaded through the application.
    Frozen to prevent accidental modification at runtime.
    """

    git: Git
    github: GitHub
    time: Time
    cwd: Path
    repo: RepoContext | NoRepoSentinel
    debug: bool
    interactive: bool

    def require_repo(self) -> RepoContext:
        if isinstance(self.repo, NoRepoSentinel):
            if self.repo.error is not None:
                raise self.repo.error
            raise NotFoundError(self.repo.message)
        return self.repo

    @staticmethod
    def for_test(
        git: Git | None = None,
        github: GitHub | None = None,
        time: Time | None = None,
        cwd: Path | None = None,
        repo: RepoContext | NoRepoSentinel | None = None,
        debug: bool = False,
        interactive: bool = False,
    ) -> "StackContext":
        """Create test context with fakes for any unspecified integration.

        Args:
            git: Optional Git implementation. If None, creates empty FakeGit.
            github: Optional GitHub implementation. If None, creates empty FakeGitHub.
            time: Optional Time implementation. If None, creates FakeTime.
            cwd: Optional current working directory. If None, uses Path("/test/repo").
            repo: Optional RepoContext or NoRepoSentinel. If None, uses NoRepoSentinel().
            debug: Whether debug output is enabled
            interactive: Whether prompts may be shown
        """
        from gitstack.core.git.fake import FakeGit
        from gitstack.core.github.fake import FakeGitHub
        from gitstack.core.time.fake import FakeTime

        return StackContext(
            git=git if git is not None else FakeGit(),
            github=github if github is not None else FakeGitHub(),
            time=time if time is not None else FakeTime(),
            cwd=cwd if cwd is not None else Path("/test/repo"),
            repo=repo if repo is not None else NoRepoSentinel(),
            debug=debug,
            interactive=interactive,
        )


def open_repo(git: Git, repo_root: Path, config: StackConfig) -> RepoContext:
    """Open the stack store for repo_root and resolve the base branch and remote.

    The store lives in the git common directory so all worktrees of a clone
    share one stack. The base branch is recorded on first open (configured
    value, else the detected trunk) and read back from the store afterwards.
    """
    db_path = git.get_git_common_dir(repo_root) / config.db_filename
    logger.debug("Opening stack store at %s", db_path)
    store = BranchStore.open(db_path)
    store.set_base_branch_if_missing(config.base_branch or git.get_trunk_branch(repo_root))
    base_branch = store.repo_meta().base_branch
    base_remote = config.base_remote or git.remote_for_branch(repo_root, base_branch) or "origin"
    return RepoContext(
        root=repo_root,
        store=store,
        base_branch=base_branch,
        base_remote=base_remote,
    )


def discover_repo_or_sentinel(git: Git, cwd: Path) -> RepoContext | NoRepoSentinel:
    """Find and open the repository containing cwd.

    Failures to open it are returned on the sentinel; require_repo raises
    them later, inside the command.
    """
    try:
        repo_root = git.get_repository_root(cwd)
        if repo_root is None:
            return NoRepoSentinel()
        return open_repo(git, repo_root, load_config(repo_root))
    except StackError as e:
        logger.debug("Could not open repository at %s: %s", cwd, e)
        return NoRepoSentinel(message=str(e), error=e)


def create_context(*, debug: bool) -> StackContext:
    """Create production context with real implementations.

    Called at CLI entry point to create the context for the entire
    command execution.
    """
    git: Git = RealGit()
    cwd = Path.cwd()
    return StackContext(
        git=git,
        github=RealGitHub(),
        time=RealTime(),
        cwd=cwd,
        repo=discover_repo_or_sentinel(git, cwd),
        debug=debug,
        interactive=sys.stdin.isatty() and sys.stdout.isatty(),
    )
