"""gatsby-injector CLI entry point."""

import logging

import click


@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log engine decisions.")
def cli(verbose: bool):
    """Patch Gatsby build files with platform plugins."""
    if verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")


# Register subcommands
from gatsby_injector.cli.inject_cmd import inject, restore, status, symlinks  # noqa: E402

cli.add_command(inject)
cli.add_command(symlinks)
cli.add_command(status)
cli.add_command(restore)
