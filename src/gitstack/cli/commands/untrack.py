"""Untrack command: remove a branch from the stack, keeping its children linked."""

import click

from gitstack.cli.error_boundary import stack_error_boundary
from gitstack.cli.json_output import emit_json, format_option
from gitstack.cli.output import machine_output
from gitstack.core.context import StackContext
from gitstack.core.errors import NotFoundError


@click.command("untrack")
@click.argument("branch")
@format_option
@stack_error_boundary
@click.pass_obj
def untrack_cmd(ctx: StackContext, branch: str, format: str) -> None:
    """Stop tracking BRANCH and re-link its children to its parent.

    The git branch itself is left alone. The base branch stays tracked as the
    stack root.
    """
    repo = ctx.require_repo()

    if branch == repo.base_branch:
        if format == "json":
            emit_json(
                {
                    "branch": branch,
                    "action": "untrack",
                    "status": "noop",
                    "reason": "base branch cannot be untracked",
                }
            )
        else:
            machine_output(
                f"base branch '{branch}' remains tracked as stack root; no changes made"
            )
        return

    if repo.store.get(branch) is None:
        raise NotFoundError(f"branch '{branch}' is not tracked")
    repo.store.splice_out(branch)

    if format == "json":
        emit_json({"branch": branch, "action": "untrack", "status": "ok"})
        return
    machine_output(f"removed '{branch}' from the stack and re-linked its child branches")
