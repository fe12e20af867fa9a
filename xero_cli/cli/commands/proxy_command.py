from __future__ import annotations

import click

from ...config import DEFAULT_PROXY_HOST, DEFAULT_PROXY_PORT
from ...logging import setup_logging
from ...transports import HTTPTransport
from .. import cli, console
from ..branding import StatusPrinter
from ..formatting import RichCommand
from ..renderers import ServerPanelRenderer
from ..state import CliState

_status = StatusPrinter(console)


@cli.command(cls=RichCommand)
@click.option(
    "--host",
    default=DEFAULT_PROXY_HOST,
    help="Interface to bind to",
)
@click.option(
    "--port",
    type=int,
    default=DEFAULT_PROXY_PORT,
    help="Port to listen on",
)
@click.option(
    "-q",
    "--quiet",
    is_flag=True,
    help="Only print the listening address",
)
@click.pass_obj
def proxy(state: CliState, host: str, port: int, quiet: bool):
    """
    Run invoke proxy server on 0.0.0.0:8765.

    Remote xero clients with XERO_PROXY_URL pointing here run invocations
    through this host's credentials, policy file and audit log. Methods with
    an "ask" policy are approved at this terminal.
    """
    state.unlock_credentials()

    logger = setup_logging(level="WARNING" if quiet else "INFO")
    engine = state.engine()
    transport = HTTPTransport(engine, host=host, port=port, xero_logger=logger)

    if not quiet:
        _status.print(
            f"Starting proxy on [cyan]http://{host}:{port}[/cyan]", "security"
        )
        ServerPanelRenderer(console).render(
            host, port, state.settings.policy_file, state.settings.audit_log
        )

    transport.run(
        on_started=lambda url: click.echo(f"Proxy is running on {url}")
    )
