"""Navigation commands: up, down, top and bottom of the current stack."""

import click

from gitstack.cli.error_boundary import stack_error_boundary
from gitstack.cli.json_output import emit_json, format_option
from gitstack.cli.output import machine_output
from gitstack.cli.prompts import ClickNavPrompter
from gitstack.core.context import StackContext
from gitstack.core.navigate import NavDirection, navigate


def _run_navigation(ctx: StackContext, direction: NavDirection, format: str) -> None:
    prompter = ClickNavPrompter() if ctx.interactive and format == "text" else None
    result = navigate(ctx, direction, prompter)

    if format == "json":
        emit_json(
            {
                "command": result.direction,
                "from": result.from_branch,
                "to": result.to_branch,
                "changed": result.changed,
            }
        )
    elif result.changed:
        machine_output(f"switched: {result.from_branch} -> {result.to_branch}")
    else:
        machine_output(f"already on {result.to_branch}")


@click.command("up")
@format_option
@stack_error_boundary
@click.pass_obj
def up_cmd(ctx: StackContext, format: str) -> None:
    """Check out a child of the current branch."""
    _run_navigation(ctx, NavDirection.UP, format)


@click.command("down")
@format_option
@stack_error_boundary
@click.pass_obj
def down_cmd(ctx: StackContext, format: str) -> None:
    """Check out the parent of the current branch."""
    _run_navigation(ctx, NavDirection.DOWN, format)


@click.command("top")
@format_option
@stack_error_boundary
@click.pass_obj
def top_cmd(ctx: StackContext, format: str) -> None:
    """Check out the last branch of the current stack."""
    _run_navigation(ctx, NavDirection.TOP, format)


@click.command("bottom")
@format_option
@stack_error_boundary
@click.pass_obj
def bottom_cmd(ctx: StackContext, format: str) -> None:
    """Check out the root of the current stack."""
    _run_navigation(ctx, NavDirection.BOTTOM, format)
