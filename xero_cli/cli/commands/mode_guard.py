from __future__ import annotations

import click

from ...errors import ConfigurationError
from ..state import CliState


def ensure_direct_mode(ctx: click.Context) -> None:
    """Commands that manage local credentials make no sense through a proxy."""
    state: CliState = ctx.obj
    if state.settings.is_proxy_mode:
        raise ConfigurationError(
            f'Command "{ctx.info_name}" is disabled when XERO_PROXY_URL is set.'
        )
