"""Create command: start a new branch on top of, or in the middle of, a stack."""

import click

from gitstack.cli.error_boundary import stack_error_boundary
from gitstack.cli.json_output import emit_json, format_option
from gitstack.cli.output import machine_output
from gitstack.cli.prompts import ClickCreatePrompter
from gitstack.core.context import StackContext
from gitstack.core.create import CreateRequest, create_branch


@click.command("create")
@click.argument("name")
@click.option("--parent", help="Parent branch for the new branch.")
@click.option(
    "--insert",
    metavar="CHILD",
    is_flag=False,
    flag_value="",
    default=None,
    help="Insert the new branch between CHILD and its parent. Without a value, pick CHILD.",
)
@format_option
@stack_error_boundary
@click.pass_obj
def create_cmd(
    ctx: StackContext, name: str, parent: str | None, insert: str | None, format: str
) -> None:
    """Create branch NAME from its parent, check it out and track it.

    Without --parent the parent is picked among the current branch, tracked
    branches and other local branches.
    """
    prompter = ClickCreatePrompter() if ctx.interactive and format == "text" else None
    result = create_branch(ctx, CreateRequest(name=name, parent=parent, insert=insert), prompter)

    if format == "json":
        emit_json(
            {
                "created": result.created,
                "parent": result.parent,
                "inserted_before": result.inserted_before,
                "head_sha": result.head_sha,
                "notes": result.notes,
            }
        )
        return

    for note in result.notes:
        machine_output(note)
    summary = f"created stack branch: {result.parent} -> {result.created}"
    if result.inserted_before is not None:
        summary += f" (re-linked '{result.inserted_before}' under it)"
    machine_output(summary)
