from __future__ import annotations

import sys

import click
from rich import box
from rich.table import Table

from ... import __version__
from ...catalog import load_method_catalog
from .. import cli, console
from ..formatting import RichCommand
from ..state import CliState

ABOUT_LINE = "xero: thin CLI wrapper around xero-node"


class SystemInfoRenderer:
    def __init__(self):
        self._console = console

    def render(self, state: CliState):
        settings = state.settings
        catalog = load_method_catalog(settings.manifest_path)

        table = Table(
            box=box.SIMPLE,
            show_header=False,
            padding=(0, 2),
        )
        table.add_column("Property", style="cyan")
        table.add_column("Value", style="white")
        table.add_row("Version", __version__)
        table.add_row("Python", sys.version.split()[0])
        table.add_row(
            "SDK manifest", f"{catalog.sdk_name} {catalog.sdk_version}"
        )
        table.add_row("Methods", str(catalog.method_count))
        table.add_row("App mode", "proxy" if settings.is_proxy_mode else "direct")
        table.add_row("Auth file", str(settings.auth_file))
        table.add_row("Policy file", str(settings.policy_file))
        table.add_row("Audit log", str(settings.audit_log))

        self._console.print(table)
        self._console.print()


@cli.command(cls=RichCommand)
@click.option(
    "--details",
    is_flag=True,
    help="Also show version, catalog and file locations",
)
@click.pass_obj
def about(state: CliState, details: bool):
    """Show project summary."""
    click.echo(ABOUT_LINE)
    if details:
        console.print()
        SystemInfoRenderer().render(state)
