"""Delete command: remove a branch from git, its PR, and the stack."""

import click

from gitstack.cli.error_boundary import stack_error_boundary
from gitstack.cli.json_output import emit_json, format_option
from gitstack.cli.output import emit_warnings, machine_output
from gitstack.cli.prompts import confirm_or_cancel
from gitstack.core.context import StackContext
from gitstack.core.errors import InvalidOperationError, NotFoundError, ProviderError
from gitstack.core.parents import stored_parent_name


@click.command("delete")
@click.argument("branch")
@click.option("--dry-run", is_flag=True, help="Show what would be deleted.")
@click.option("-y", "--yes", is_flag=True, help="Delete without confirmation.")
@format_option
@stack_error_boundary
@click.pass_obj
def delete_cmd(ctx: StackContext, branch: str, dry_run: bool, yes: bool, format: str) -> None:
    """Delete BRANCH locally, close its pull request and splice it out.

    Children of BRANCH are re-linked to its parent. When BRANCH is checked
    out, its parent is checked out first.
    """
    repo = ctx.require_repo()
    if branch == repo.base_branch:
        raise InvalidOperationError(f"base branch '{branch}' cannot be deleted")
    record = repo.store.get(branch)
    if record is None:
        raise NotFoundError(f"branch '{branch}' is not tracked")
    if not ctx.git.branch_exists(repo.root, branch):
        raise NotFoundError(f"branch '{branch}' does not exist in git")

    parent = stored_parent_name(repo.store.list(), branch) or repo.base_branch
    warnings: list[str] = []
    pr_number = record.cached_pr_number
    if pr_number is None:
        try:
            pr = ctx.github.resolve_pr_by_head(repo.root, branch, None)
        except ProviderError as e:
            warnings.append(f"could not read PR metadata for '{branch}': {e}")
            pr = None
        if pr is not None:
            pr_number = pr.number

    payload = {"branch": branch, "parent": parent, "pr_number": pr_number}

    if dry_run:
        if format == "json":
            emit_json({**payload, "dry_run": True, "deleted": False, "warnings": warnings})
            return
        emit_warnings(warnings)
        pr_text = f"close PR #{pr_number}, " if pr_number is not None else ""
        machine_output(f"would delete '{branch}': {pr_text}re-link children to '{parent}'")
        return

    confirmed = yes or (
        ctx.interactive
        and format == "text"
        and confirm_or_cancel(f"Delete branch '{branch}' and splice its children onto '{parent}'?")
    )
    if not confirmed:
        if format == "json":
            emit_json({**payload, "dry_run": False, "deleted": False, "warnings": warnings})
            return
        emit_warnings(warnings)
        machine_output("delete not applied: confirmation declined; no changes made")
        return

    if pr_number is not None:
        ctx.github.close_pr(repo.root, pr_number)
    else:
        warnings.append(f"no upstream PR found for '{branch}'")

    if ctx.git.get_current_branch(repo.root) == branch:
        ctx.git.checkout_branch(repo.root, parent)
    ctx.git.delete_branch(repo.root, branch, force=True)
    repo.store.splice_out(branch)

    if format == "json":
        emit_json({**payload, "dry_run": False, "deleted": True, "warnings": warnings})
        return
    emit_warnings(warnings)
    machine_output(f"deleted '{branch}' and spliced stack children to '{parent}'")
