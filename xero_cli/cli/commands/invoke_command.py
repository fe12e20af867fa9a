from __future__ import annotations

import asyncio
from typing import Optional

import click

from ...serialization import dump_json
from ...types import InvokeRequest
from .. import cli
from ..formatting import RichCommand
from ..state import CliState


@cli.command(
    cls=RichCommand,
    argument_help={
        "api": "API alias, for example accounting",
        "method": "Method name, for example getOrganisations",
        "params": "Method parameters as --name=value, after --",
    },
)
@click.argument("api")
@click.argument("method")
@click.argument("params", nargs=-1, type=click.UNPROCESSED)
@click.option("--tenant-id", help="Tenant ID override")
@click.pass_obj
def invoke(
    state: CliState,
    api: str,
    method: str,
    params: tuple[str, ...],
    tenant_id: Optional[str],
):
    """
    Invoke xero-node API method (pass params after "--").

    Values are converted using the method's declared parameter types.
    Structured parameters accept inline JSON or a .json/.yaml file path;
    binary parameters take a file path.

    Examples:
      xero invoke accounting getOrganisations
      xero invoke accounting getInvoices -- --statuses=DRAFT,AUTHORISED
      xero invoke accounting createInvoices -- --invoices=./invoices.json
    """
    if state.settings.is_proxy_mode:
        result = asyncio.run(
            state.delegation_client().invoke(api, method, tenant_id, params)
        )
        if isinstance(result, str):
            click.echo(result)
        else:
            click.echo(dump_json(result, indent=2))
        return

    request = InvokeRequest(
        api=api,
        method=method,
        tenant_id=tenant_id,
        raw_params=tuple(params),
    )
    result = asyncio.run(state.engine().invoke(request))
    click.echo(dump_json(result.to_dict(), indent=2))
