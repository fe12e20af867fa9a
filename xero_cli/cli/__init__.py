from __future__ import annotations

import sys

import click
from rich.console import Console

from .. import __version__
from ..errors import XeroCliError
from ..logging import setup_logging
from .formatting import RichGroup
from .state import CliState

console = Console(soft_wrap=True)
err_console = Console(stderr=True, soft_wrap=True)


def report_error(message: str) -> None:
    err_console.print(message, style="red", markup=False, highlight=False)


@click.group(cls=RichGroup, invoke_without_command=True)
@click.version_option(version=__version__, prog_name="xero")
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="Log invocation and policy details to stderr",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool):
    """Thin CLI wrapper around xero-node."""
    setup_logging(level="DEBUG" if verbose else "WARNING")

    if ctx.obj is None:
        ctx.obj = CliState.from_environ()

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit(0)


from . import commands  # noqa: E402, F401


def main():
    try:
        cli()
    except KeyboardInterrupt:
        console.print("\n[dim]Shutting down...[/dim]")
        sys.exit(0)
    except XeroCliError as e:
        report_error(str(e))
        sys.exit(1)
