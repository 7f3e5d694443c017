"""Production Git implementation using subprocess.

This module provides the real Git implementation that executes actual git
commands via subprocess.
"""

import subprocess
from pathlib import Path

from gitstack.core.errors import ExternalToolError
from gitstack.core.git.abc import Git, StashHandle
from gitstack.core.subprocess import run_subprocess_with_context


class RealGit(Git):
    """Production implementation using subprocess.

    All git operations execute actual git commands via subprocess.
    """

    def get_repository_root(self, cwd: Path) -> Path | None:
        result = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return None
        return Path(result.stdout.strip())

    def get_git_common_dir(self, repo_root: Path) -> Path:
        result = run_subprocess_with_context(
            ["git", "rev-parse", "--git-common-dir"],
            operation_context="locate git directory",
            cwd=repo_root,
        )
        common_dir = Path(result.stdout.strip())
        if not common_dir.is_absolute():
            common_dir = repo_root / common_dir
        return common_dir.resolve()

    def get_trunk_branch(self, repo_root: Path) -> str:
        """Get the trunk branch name for the repository.

        Detects trunk by checking git's remote HEAD reference. Falls back to
        'main' when the remote HEAD is not configured.
        """
        result = subprocess.run(
            ["git", "symbolic-ref", "refs/remotes/origin/HEAD"],
            cwd=repo_root,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode == 0:
            # Parse "refs/remotes/origin/master" -> "master"
            ref = result.stdout.strip()
            if ref.startswith("refs/remotes/origin/"):
                return ref.replace("refs/remotes/origin/", "")

        return "main"

    def branch_exists(self, repo_root: Path, branch: str) -> bool:
        result = subprocess.run(
            ["git", "show-ref", "--verify", "--quiet", f"refs/heads/{branch}"],
            cwd=repo_root,
            capture_output=True,
            check=False,
        )
        return result.returncode == 0

    def get_current_branch(self, repo_root: Path) -> str | None:
        result = run_subprocess_with_context(
            ["git", "branch", "--show-current"],
            operation_context="read current branch",
            cwd=repo_root,
        )
        branch = result.stdout.strip()
        if not branch:
            return None
        return branch

    def list_local_branches(self, repo_root: Path) -> list[str]:
        result = run_subprocess_with_context(
            ["git", "for-each-ref", "--format=%(refname:short)", "refs/heads"],
            operation_context="list local branches",
            cwd=repo_root,
        )
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def get_branch_head(self, repo_root: Path, branch: str) -> str:
        result = run_subprocess_with_context(
            ["git", "rev-parse", branch],
            operation_context=f"resolve '{branch}'",
            cwd=repo_root,
        )
        return result.stdout.strip()

    def is_ancestor(self, repo_root: Path, ancestor: str, descendant: str) -> bool:
        # Exit code 1 means "not an ancestor"; anything else is a real failure
        result = subprocess.run(
            ["git", "merge-base", "--is-ancestor", ancestor, descendant],
            cwd=repo_root,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode == 0:
            return True
        if result.returncode == 1:
            return False
        raise ExternalToolError(
            f"Failed to compare ancestry {ancestor} -> {descendant}\n"
            f"stderr: {result.stderr.strip()}"
        )

    def commit_distance(self, repo_root: Path, base: str, head: str) -> int:
        result = run_subprocess_with_context(
            ["git", "rev-list", "--count", f"{base}..{head}"],
            operation_context=f"count commits in {base}..{head}",
            cwd=repo_root,
        )
        raw = result.stdout.strip()
        if not raw.isdigit():
            raise ExternalToolError(f"invalid commit distance output for {base}..{head}: {raw!r}")
        return int(raw)

    def merge_base(self, repo_root: Path, branch: str, onto: str) -> str:
        result = run_subprocess_with_context(
            ["git", "merge-base", branch, onto],
            operation_context=f"compute merge-base of '{branch}' and '{onto}'",
            cwd=repo_root,
        )
        return result.stdout.strip()

    def fetch_remote(self, repo_root: Path, remote: str) -> None:
        run_subprocess_with_context(
            ["git", "fetch", remote],
            operation_context=f"fetch remote '{remote}'",
            cwd=repo_root,
        )

    def remote_for_branch(self, repo_root: Path, branch: str) -> str | None:
        result = subprocess.run(
            ["git", "config", "--get", f"branch.{branch}.remote"],
            cwd=repo_root,
            capture_output=True,
            text=True,
            check=False,
        )
        remote = result.stdout.strip()
        if result.returncode == 0 and remote:
            return remote
        return None

    def supports_replay(self, repo_root: Path) -> bool:
        result = subprocess.run(
            ["git", "help", "-a"],
            cwd=repo_root,
            capture_output=True,
            text=True,
            check=False,
        )
        return result.returncode == 0 and "replay" in result.stdout

    def replay_onto(self, repo_root: Path, branch: str, old_base: str, new_base: str) -> None:
        revision_range = f"{old_base}..{branch}"
        result = run_subprocess_with_context(
            ["git", "replay", "--onto", new_base, revision_range],
            operation_context=f"replay '{branch}' onto '{new_base}'",
            cwd=repo_root,
        )
        # git replay prints update-ref instructions instead of moving refs itself
        if result.stdout.strip():
            run_subprocess_with_context(
                ["git", "update-ref", "--stdin"],
                operation_context=f"apply replayed refs for '{branch}'",
                cwd=repo_root,
                input=result.stdout,
            )

    def rebase_onto(self, repo_root: Path, branch: str, old_base: str, new_base: str) -> None:
        run_subprocess_with_context(
            ["git", "rebase", "--onto", new_base, old_base, branch],
            operation_context=f"rebase '{branch}' onto '{new_base}'",
            cwd=repo_root,
        )

    def push_branch(
        self, repo_root: Path, remote: str, branch: str, *, force_with_lease: bool
    ) -> None:
        cmd = ["git", "push"]
        if force_with_lease:
            cmd.append("--force-with-lease")
        cmd.extend(["--set-upstream", remote, branch])
        run_subprocess_with_context(
            cmd,
            operation_context=f"push '{branch}' to '{remote}'",
            cwd=repo_root,
        )

    def has_uncommitted_changes(self, repo_root: Path) -> bool:
        result = subprocess.run(
            ["git", "diff", "--quiet", "--ignore-submodules", "HEAD", "--"],
            cwd=repo_root,
            capture_output=True,
            check=False,
        )
        return result.returncode != 0

    def stash_push(self, repo_root: Path, message: str) -> StashHandle | None:
        result = run_subprocess_with_context(
            ["git", "stash", "push", "-u", "-m", message],
            operation_context="stash local changes",
            cwd=repo_root,
        )
        if "No local changes to save" in result.stdout:
            return None
        return StashHandle(reference="stash@{0}", message=message)

    def stash_pop(self, repo_root: Path, stash: StashHandle) -> None:
        run_subprocess_with_context(
            ["git", "stash", "pop", stash.reference],
            operation_context=f"restore stash {stash.reference}",
            cwd=repo_root,
        )

    def create_branch_from(self, repo_root: Path, name: str, start_point: str) -> None:
        run_subprocess_with_context(
            ["git", "branch", name, start_point],
            operation_context=f"create branch '{name}' from '{start_point}'",
            cwd=repo_root,
        )

    def checkout_branch(self, repo_root: Path, branch: str) -> None:
        run_subprocess_with_context(
            ["git", "checkout", branch],
            operation_context=f"checkout branch '{branch}'",
            cwd=repo_root,
        )

    def delete_branch(self, repo_root: Path, branch: str, *, force: bool) -> None:
        flag = "-D" if force else "-d"
        run_subprocess_with_context(
            ["git", "branch", flag, branch],
            operation_context=f"delete branch '{branch}'",
            cwd=repo_root,
        )
