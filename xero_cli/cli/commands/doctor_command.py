from __future__ import annotations

import asyncio

import click
from rich.markup import escape

from ...auth import AuthCheckReport, run_auth_check
from .. import cli, console
from ..formatting import RichCommand
from ..state import CliState

SUCCESS = "[green]success[/green]"


def _line(text: str = "") -> None:
    console.print(text, highlight=False)


@cli.command(cls=RichCommand)
@click.pass_obj
def doctor(state: CliState):
    """
    Check direct/proxy chain and auth.

    In direct mode the stored or environment credentials are used to fetch a
    token and list connections. In proxy mode the proxy's health endpoint is
    checked and the proxy runs the same credential check on its side.
    """
    settings = state.settings
    _line("Checking app mode:")
    _line(f"  env var XERO_PROXY_URL: {escape(settings.proxy_url or 'not set')}")

    if settings.is_proxy_mode:
        _doctor_proxy(state)
    else:
        _doctor_direct(state)

    _line()
    _line("Doctor summary:")
    _line("  status: [green]ready[/green]")
    _line("  xero-cli is configured correctly and ready for commands.")


def _doctor_direct(state: CliState):
    _line("  app mode: [green]direct[/green]")
    _line()
    _line("Keyring password:")
    _line(f"  {_keyring_password_source(state)}")
    state.unlock_credentials()
    _line()

    report = asyncio.run(run_auth_check(state.credential_provider()))

    _line("Testing authentication:")
    _line(f"  result: {SUCCESS}")
    _print_auth_details(report)
    _line()
    _line("Testing token validity by calling xero.com endpoint:")
    _line(f"  request: {SUCCESS}")
    _line(f"  connections found: {report.connections}")
    _line("  token valid: yes")


def _doctor_proxy(state: CliState):
    client = state.delegation_client()
    _line("  app mode: proxy")
    _line(f"  proxy url: {escape(client.base_url)}")
    _line()

    _line("Testing proxy reachability:")
    asyncio.run(client.check_health())
    _line(f"  result: {SUCCESS}")
    _line()

    _line("Testing server authentication:")
    report = AuthCheckReport.from_dict(asyncio.run(client.doctor()))
    _line(f"  result: {SUCCESS}")
    _print_auth_details(report)
    _line()
    _line("Testing server token validity by calling xero.com endpoint:")
    _line(f"  request: {SUCCESS}")
    connections = "unknown" if report.connections is None else report.connections
    _line(f"  connections found: {connections}")
    _line("  token valid: yes")


def _print_auth_details(report: AuthCheckReport):
    _line(f"  mode: {escape(report.mode)}")
    _line(f"  credential source: {escape(report.credential_source)}")
    _line(f"  token type: {escape(report.token_type)}")
    _line(f"  token expires at: {escape(report.token_expires_at)}")
    _line(f"  scope: {escape(report.scope)}")


def _keyring_password_source(state: CliState) -> str:
    settings = state.settings
    if settings.has_env_credentials:
        return "not needed (XERO_CLIENT_ID / XERO_CLIENT_SECRET in use)"
    if not state.credential_store().exists():
        return "not needed (no stored credentials)"
    if settings.keyring_password:
        return "from XERO_KEYRING_PASSWORD"
    return "prompting"
