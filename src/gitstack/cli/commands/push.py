"""Push command: force-push every live branch of the stack."""

import click

from gitstack.cli.error_boundary import stack_error_boundary
from gitstack.cli.json_output import emit_json, format_option
from gitstack.cli.output import emit_warnings, machine_output
from gitstack.core.context import StackContext
from gitstack.core.github.types import PRState


@click.command("push")
@format_option
@stack_error_boundary
@click.pass_obj
def push_cmd(ctx: StackContext, format: str) -> None:
    """Push tracked branches with --force-with-lease.

    The base branch, branches whose cached PR is merged, and branches that no
    longer exist locally are skipped.
    """
    repo = ctx.require_repo()
    fallback_remote = ctx.git.remote_for_branch(repo.root, repo.base_branch) or "origin"

    pushed: list[dict[str, str]] = []
    skipped_missing: list[str] = []
    skipped_merged: list[str] = []
    for record in repo.store.list():
        if record.name == repo.base_branch:
            continue
        if record.cached_pr_state == PRState.MERGED.value:
            skipped_merged.append(record.name)
            continue
        if not ctx.git.branch_exists(repo.root, record.name):
            skipped_missing.append(record.name)
            continue
        remote = ctx.git.remote_for_branch(repo.root, record.name) or fallback_remote
        ctx.git.push_branch(repo.root, remote, record.name, force_with_lease=True)
        pushed.append({"branch": record.name, "remote": remote})

    if format == "json":
        emit_json(
            {
                "pushed": pushed,
                "skipped_missing": skipped_missing,
                "skipped_merged": skipped_merged,
            }
        )
        return

    for entry in pushed:
        machine_output(f"pushed '{entry['branch']}' to '{entry['remote']}'")
    emit_warnings(f"skipped '{name}': branch no longer exists" for name in skipped_missing)
    emit_warnings(f"skipped '{name}': pull request is merged" for name in skipped_merged)
    if not pushed:
        machine_output("nothing to push")
