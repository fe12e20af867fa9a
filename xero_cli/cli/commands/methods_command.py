from __future__ import annotations

from typing import Optional

import click

from ...catalog import load_method_catalog
from ...invocation import InvocationResolver
from .. import cli, console
from ..formatting import RichCommand
from ..renderers import MethodCatalogRenderer
from ..state import CliState


@cli.command(
    cls=RichCommand,
    argument_help={"api": "API alias, for example accounting"},
)
@click.argument("api", required=False)
@click.pass_obj
def methods(state: CliState, api: Optional[str]):
    """
    Browse the catalog of invocable SDK methods.

    Examples:
      xero methods
      xero methods accounting
    """
    catalog = load_method_catalog(state.settings.manifest_path)
    renderer = MethodCatalogRenderer(console)

    if api is None:
        renderer.render_overview(catalog)
        return

    alias = InvocationResolver(catalog).resolve_alias(api)
    manifest_api = catalog.find_api(alias.identifier)
    if manifest_api is None:
        console.print(f"  [dim]No methods catalogued for {alias.alias}.[/dim]")
        return
    renderer.render_api(alias, manifest_api)
