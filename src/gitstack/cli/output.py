"""Output helpers that make the destination stream explicit.

user_output goes to stderr (progress, warnings, prompts); machine_output goes
to stdout (summaries and JSON documents that callers may parse).
"""

from collections.abc import Iterable

import click


def user_output(message: str = "", nl: bool = True) -> None:
    click.echo(message, err=True, nl=nl)


def machine_output(message: str = "", nl: bool = True) -> None:
    click.echo(message, nl=nl)


def emit_warnings(warnings: Iterable[str]) -> None:
    """Print one `warning: ...` line per warning to stderr."""
    for warning in warnings:
        user_output(f"warning: {warning}")
