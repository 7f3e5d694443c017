"""Sync command: fetch, restack moved or merged parents' children, record heads."""

import click

from gitstack.cli.error_boundary import stack_error_boundary
from gitstack.cli.json_output import emit_json, format_option
from gitstack.cli.output import emit_warnings, machine_output
from gitstack.cli.prompts import confirm_or_cancel
from gitstack.core.context import StackContext
from gitstack.core.errors import SyncFailedError
from gitstack.core.sync import build_sync_plan, describe_op, execute_sync_plan


@click.command("sync")
@click.option("--dry-run", is_flag=True, help="Print the plan without applying it.")
@click.option("-y", "--yes", is_flag=True, help="Apply the plan without confirmation.")
@format_option
@stack_error_boundary
@click.pass_obj
def sync_cmd(ctx: StackContext, dry_run: bool, yes: bool, format: str) -> None:
    """Bring the stack up to date with its upstream branches.

    Non-interactive runs only apply the plan when --yes is given.
    """
    repo = ctx.require_repo()
    plan = build_sync_plan(
        repo.store,
        ctx.git,
        ctx.github,
        repo.root,
        repo.base_branch,
        repo.base_remote,
    )
    operations = [describe_op(op) for op in plan.ops]

    if format == "text":
        machine_output(f"sync base: {plan.base_branch}")
        for op in operations:
            machine_output(f"- {op['kind']}: {op['branch']} {op['details']}")
        emit_warnings(plan.warnings)

    if dry_run:
        if format == "json":
            emit_json(
                {
                    "base_branch": plan.base_branch,
                    "operations": operations,
                    "warnings": plan.warnings,
                    "applied": False,
                }
            )
        return

    should_apply = yes or (
        ctx.interactive and format == "text" and confirm_or_cancel("Apply sync plan?")
    )
    if not should_apply:
        if format == "json":
            emit_json(
                {
                    "base_branch": plan.base_branch,
                    "operations": operations,
                    "warnings": plan.warnings,
                    "applied": False,
                }
            )
        else:
            machine_output("sync plan not applied")
        return

    try:
        outcome = execute_sync_plan(repo.store, ctx.git, ctx.time, repo.root, plan)
    except SyncFailedError as e:
        # Text mode already printed the plan warnings above
        if format == "json":
            e.warnings = plan.warnings + e.warnings
        raise

    if format == "json":
        emit_json(
            {
                "base_branch": plan.base_branch,
                "operations": operations,
                "warnings": plan.warnings + outcome.warnings,
                "applied": True,
                "run_id": outcome.run_id,
                "restacked": outcome.restacked,
            }
        )
        return
    emit_warnings(outcome.warnings)
    machine_output("sync completed")
