"""Production implementation of pull-request lookups via the gh CLI."""

import logging
import os
from pathlib import Path

from gitstack.core.errors import ExternalToolError, ProviderError
from gitstack.core.github.abc import GitHub
from gitstack.core.github.parsing import (
    PR_JSON_FIELDS,
    parse_pr_list,
    parse_pr_view,
    select_preferred_pr,
)
from gitstack.core.github.types import PullRequest
from gitstack.core.subprocess import run_subprocess_with_context

logger = logging.getLogger(__name__)


def execute_gh_command(cmd: list[str], repo_root: Path, operation_context: str) -> str:
    """Run a gh command with colour disabled and return its stdout.

    Raises:
        ProviderError: If gh is missing or exits non-zero
    """
    env = {**os.environ, "NO_COLOR": "1", "CLICOLOR": "0"}
    logger.debug("$ %s", " ".join(cmd))
    try:
        result = run_subprocess_with_context(
            cmd,
            operation_context=operation_context,
            cwd=repo_root,
            env=env,
        )
    except ExternalToolError as e:
        raise ProviderError(str(e)) from e
    return result.stdout


class RealGitHub(GitHub):
    """Production implementation using gh CLI.

    All GitHub operations execute actual gh commands via subprocess.
    """

    def resolve_pr_by_head(
        self, repo_root: Path, branch: str, cached_number: int | None
    ) -> PullRequest | None:
        if cached_number is not None:
            cmd = ["gh", "pr", "view", str(cached_number), "--json", PR_JSON_FIELDS]
            stdout = execute_gh_command(cmd, repo_root, f"view PR #{cached_number}")
            if not stdout.strip():
                return None
            return parse_pr_view(stdout, f"PR #{cached_number}")

        cmd = [
            "gh",
            "pr",
            "list",
            "--head",
            branch,
            "--state",
            "all",
            "--json",
            PR_JSON_FIELDS,
        ]
        stdout = execute_gh_command(cmd, repo_root, f"list PRs for head '{branch}'")
        if not stdout.strip():
            return None
        return select_preferred_pr(parse_pr_list(stdout, f"--head {branch}"))

    def close_pr(self, repo_root: Path, number: int) -> None:
        execute_gh_command(
            ["gh", "pr", "close", str(number)],
            repo_root,
            f"close PR #{number}",
        )
