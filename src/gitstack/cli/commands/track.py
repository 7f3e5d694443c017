"""Track command: link branches to their parents."""

import click

from gitstack.cli.error_boundary import stack_error_boundary
from gitstack.cli.json_output import emit_json, format_option
from gitstack.cli.output import emit_warnings, machine_output
from gitstack.cli.prompts import ClickTrackPrompter
from gitstack.core.context import StackContext
from gitstack.core.track import TrackRequest, TrackResult, apply_tracking, plan_tracking


def _render_text(result: TrackResult) -> None:
    for note in result.notes:
        machine_output(note)
    verb = "would track" if result.dry_run else "tracking"
    for change in result.changes:
        machine_output(
            f"{verb} '{change.branch}' under '{change.new_parent}' "
            f"(source: {change.source.value}, confidence: {change.confidence.value})"
        )
    for skip in result.skipped:
        machine_output(f"skipped '{skip.branch}': {skip.reason}")
    for branch in result.unresolved:
        machine_output(f"could not determine a parent for '{branch}'")
    emit_warnings(result.warnings)

    if result.dry_run:
        machine_output("track dry run complete; no changes were made")
    elif result.applied:
        machine_output("tracking updated")
    else:
        machine_output("no tracking changes were needed")


@click.command("track")
@click.argument("branch", required=False)
@click.option("--all", "all_branches", is_flag=True, help="Track every local non-base branch.")
@click.option("--parent", help="Explicit parent branch.")
@click.option(
    "--infer",
    "infer_only",
    is_flag=True,
    help="Only use inference; report branches it cannot place instead of prompting.",
)
@click.option("--force", is_flag=True, help="Replace conflicting parents without asking.")
@click.option("--dry-run", is_flag=True, help="Show the changes without writing them.")
@format_option
@stack_error_boundary
@click.pass_obj
def track_cmd(
    ctx: StackContext,
    branch: str | None,
    all_branches: bool,
    parent: str | None,
    infer_only: bool,
    force: bool,
    dry_run: bool,
    format: str,
) -> None:
    """Record the parent of BRANCH (default: the current branch).

    Without --parent the parent is inferred from the branch's pull request,
    then from git ancestry, following the chain of parents down to the base
    branch. Changing an already-recorded parent requires confirmation or
    --force.
    """
    repo = ctx.require_repo()
    prompter = ClickTrackPrompter() if ctx.interactive and format == "text" else None
    request = TrackRequest(
        branch=branch,
        all_branches=all_branches,
        parent=parent,
        infer_only=infer_only,
        force=force,
        dry_run=dry_run,
    )
    result = apply_tracking(repo.store, plan_tracking(ctx, request, prompter))

    if format == "json":
        emit_json(
            {
                "mode": result.mode,
                "dry_run": result.dry_run,
                "applied": result.applied,
                "changes": result.changes,
                "skipped": result.skipped,
                "unresolved": result.unresolved,
                "warnings": result.warnings,
                "notes": result.notes,
            }
        )
        return
    _render_text(result)
