import logging
import os

import click

from gitstack.cli.commands.create import create_cmd
from gitstack.cli.commands.delete import delete_cmd
from gitstack.cli.commands.doctor import doctor_cmd
from gitstack.cli.commands.navigate import bottom_cmd, down_cmd, top_cmd, up_cmd
from gitstack.cli.commands.push import push_cmd
from gitstack.cli.commands.sync import sync_cmd
from gitstack.cli.commands.track import track_cmd
from gitstack.cli.commands.untrack import untrack_cmd
from gitstack.core.context import create_context

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])  # terse help flags

DEBUG_ENV_VAR = "GITSTACK_DEBUG"


@click.group("stack", context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="gitstack")
@click.option("--debug", is_flag=True, help="Show debug logging on stderr.")
@click.pass_context
def cli(ctx: click.Context, debug: bool) -> None:
    """Manage stacks of dependent git branches."""
    debug = debug or bool(os.environ.get(DEBUG_ENV_VAR))
    if debug:
        logging.basicConfig(level=logging.DEBUG, format="[DEBUG %(name)s:%(lineno)d] %(message)s")

    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is None:
        ctx.obj = create_context(debug=debug)


cli.add_command(track_cmd)
cli.add_command(sync_cmd)
cli.add_command(doctor_cmd)
cli.add_command(untrack_cmd)
cli.add_command(delete_cmd)
cli.add_command(push_cmd)
cli.add_command(create_cmd)
cli.add_command(up_cmd)
cli.add_command(down_cmd)
cli.add_command(top_cmd)
cli.add_command(bottom_cmd)


def main() -> None:
    """CLI entry point used by the `stack` console script."""
    cli()
