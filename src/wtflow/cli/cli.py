import logging

import click

from wtflow.cli.commands.config_cmd import config_group
from wtflow.cli.commands.new_cmd import new_cmd
from wtflow.cli.commands.state_cmd import state_cmd
from wtflow.core.context import create_context

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])  # terse help flags


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="wtflow")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, debug: bool) -> None:
    """Turn any repository state into a PR branch, one worktree per PR."""
    if debug:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s - %(levelname)s - %(message)s")

    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is None:
        ctx.obj = create_context(dry_run=False)


cli.add_command(config_group)
cli.add_command(new_cmd)
cli.add_command(state_cmd)


def main() -> None:
    """CLI entry point used by the `wtflow` console script."""
    cli()
