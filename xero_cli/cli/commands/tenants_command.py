from __future__ import annotations

import asyncio

import click

from ...serialization import dump_json
from .. import cli
from ..formatting import RichCommand, RichGroup
from ..state import CliState
from .mode_guard import ensure_direct_mode


@cli.group(cls=RichGroup, invoke_without_command=True)
@click.pass_context
def tenants(ctx: click.Context):
    """Tenant commands."""
    ensure_direct_mode(ctx)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@tenants.command(name="list", cls=RichCommand)
@click.pass_obj
def list_tenants(state: CliState):
    """List connected Xero tenants."""
    state.unlock_credentials()
    provider = state.credential_provider()

    async def fetch():
        grant = await provider.acquire()
        return await provider.identity_client.list_connections(
            grant.access_token, grant.token_type
        )

    click.echo(dump_json(asyncio.run(fetch()), indent=2))
