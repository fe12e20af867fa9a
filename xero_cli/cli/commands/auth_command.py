from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Optional

import click

from ...auth import (
    DEFAULT_SCOPE_PROFILE,
    OAuthLoginFlow,
    render_oauth_scopes_help_text,
    resolve_oauth_scopes,
)
from ...errors import ConfigurationError
from ...types import AuthMode, ClientCredentialsState
from .. import cli, err_console
from ..branding import StatusPrinter
from ..formatting import RichCommand, RichGroup
from ..prompts import prompt_new_keyring_password, prompt_required_value
from ..state import CliState
from .mode_guard import ensure_direct_mode

SUPPORTED_MODES = (AuthMode.CLIENT_CREDENTIALS.value, AuthMode.OAUTH.value)


@cli.group(cls=RichGroup, invoke_without_command=True)
@click.pass_context
def auth(ctx: click.Context):
    """Authentication commands."""
    ensure_direct_mode(ctx)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@auth.command(cls=RichCommand)
@click.pass_obj
def status(state: CliState):
    """Show current auth configuration status."""
    summary = state.credential_provider().summary()

    click.echo("Authentication status:")
    click.echo(f"  configured: {'yes' if summary.is_configured else 'no'}")
    click.echo(f"  mode: {summary.mode.value if summary.mode else 'none'}")
    click.echo(f"  credential source: {summary.credential_source or 'none'}")
    click.echo(
        f"  client id: {'present' if summary.has_client_id else 'missing'}"
    )
    click.echo(
        "  client secret: "
        f"{'present' if summary.has_client_secret else 'missing'}"
    )
    if summary.token_expires_at:
        click.echo(f"  token expires at: {summary.token_expires_at}")
    click.echo(f"  auth file: {summary.auth_file}")


@auth.command(cls=RichCommand)
@click.pass_obj
def logout(state: CliState):
    """Remove stored authentication file."""
    store = state.credential_store()
    if store.delete():
        click.echo("Removed stored authentication file.")
    else:
        click.echo("No stored authentication file to remove.")
    click.echo(f"Auth file: {store.path}")


@auth.command(cls=RichCommand)
def scopes():
    """List OAuth scope profiles and known scope tokens."""
    click.echo(render_oauth_scopes_help_text(), nl=False)


@auth.command(cls=RichCommand)
@click.option(
    "--mode",
    default=AuthMode.CLIENT_CREDENTIALS.value,
    help="Authentication mode: client_credentials or oauth",
)
@click.option(
    "--client-id",
    help="Client ID from the Xero developer app",
)
@click.option(
    "--client-secret",
    help="Client secret from the Xero developer app",
)
@click.option(
    "--redirect-uri",
    help="OAuth redirect URI; must exactly match the app's callback URL",
)
@click.option(
    "--scopes",
    "scope_spec",
    default=DEFAULT_SCOPE_PROFILE,
    help="OAuth scope profile or comma-separated scopes",
)
@click.option(
    "--keyring-password",
    help="Password protecting the encrypted auth file",
)
@click.pass_obj
def login(
    state: CliState,
    mode: str,
    client_id: Optional[str],
    client_secret: Optional[str],
    redirect_uri: Optional[str],
    scope_spec: str,
    keyring_password: Optional[str],
):
    """
    Store authentication credentials.

    Missing values are prompted interactively; the client secret and the
    keyring password are never echoed.

    Examples:
      xero auth login --client-id ABC
      xero auth login --mode oauth --redirect-uri http://localhost:5000/callback
      xero auth login --mode oauth --scopes core-read-write
    """
    normalized_mode = mode.strip().lower()
    if normalized_mode not in SUPPORTED_MODES:
        raise ConfigurationError(
            f'Unsupported auth mode "{mode}". '
            f"Supported: {', '.join(SUPPORTED_MODES)}."
        )

    client_id = _given(client_id) or prompt_required_value("Xero client ID")
    client_secret = _given(client_secret) or prompt_required_value(
        "Xero client secret", hidden=True
    )

    if normalized_mode == AuthMode.CLIENT_CREDENTIALS.value:
        password = _login_keyring_password(state, keyring_password)
        path = state.credential_store().store(
            ClientCredentialsState(
                client_id=client_id,
                client_secret=client_secret,
                saved_at=datetime.now(timezone.utc),
            ),
            password,
        )
        click.echo("Client credentials login complete.")
        click.echo(f"Auth file: {path}")
        return

    _oauth_login(
        state,
        client_id,
        client_secret,
        redirect_uri,
        scope_spec,
        keyring_password,
    )


def _oauth_login(
    state: CliState,
    client_id: str,
    client_secret: str,
    redirect_uri: Optional[str],
    scope_spec: str,
    keyring_password: Optional[str],
):
    redirect_uri = (
        _given(redirect_uri)
        or state.settings.redirect_uri
        or prompt_required_value("OAuth redirect URI")
    )

    resolved = resolve_oauth_scopes(scope_spec)
    warnings = StatusPrinter(err_console)
    for warning in resolved.warnings:
        warnings.print(f"Warning: {warning}", "warning")

    password = _login_keyring_password(state, keyring_password)

    flow = OAuthLoginFlow(
        state.credential_store(),
        state.identity(),
        state.settings.authorize_url,
    )
    consent_url = flow.begin(
        client_id, client_secret, redirect_uri, resolved.scopes, password
    )

    click.echo("OAuth login initialized.")
    click.echo("Open this URL in your browser to grant access:")
    click.echo("")
    click.echo(consent_url)
    click.echo("")

    callback_url = prompt_required_value("Paste full callback URL")
    asyncio.run(flow.complete(callback_url, password))
    click.echo("OAuth login complete.")


def _login_keyring_password(
    state: CliState, explicit: Optional[str]
) -> str:
    return (
        _given(explicit)
        or state.settings.keyring_password
        or prompt_new_keyring_password()
    )


def _given(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None
