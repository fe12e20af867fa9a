"""
Interactive operator approval for ``ask`` policies.

Prompting requires a terminal on both stdin and stdout; without one the
request fails closed with ApprovalUnavailable. Only parameter names and
uploaded-file flags are displayed, never values.

Empty input answers with the configured default, which is approve unless
XERO_APPROVAL_DEFAULT=deny. Prompts from concurrent invocations (delegation
server) are serialized and have no timeout.
"""

from __future__ import annotations

import asyncio
import sys
from dataclasses import dataclass
from typing import Callable, Optional, TextIO

from rich import box
from rich.console import Console
from rich.prompt import Confirm
from rich.table import Table

from xero_cli.errors import ApprovalUnavailable
from xero_cli.logging import get_logger

logger = get_logger("approval")


@dataclass(frozen=True)
class ApprovalRequest:
    method_key: str
    api: str
    method: str
    tenant_id: Optional[str]
    param_names: tuple[str, ...] = ()
    uploaded_file_params: tuple[str, ...] = ()


class InteractiveApproval:
    def __init__(
        self,
        default_approve: bool = True,
        console: Optional[Console] = None,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
        is_interactive: Optional[Callable[[], bool]] = None,
    ):
        self._default_approve = default_approve
        self._stdin = stdin
        self._stdout = stdout
        self._console = console or Console(file=stdout or sys.stderr)
        self._is_interactive = is_interactive
        self._lock = asyncio.Lock()

    @property
    def default_approve(self) -> bool:
        return self._default_approve

    def is_available(self) -> bool:
        if self._is_interactive is not None:
            return self._is_interactive()
        stdin = self._stdin or sys.stdin
        stdout = self._stdout or sys.stdout
        return _isatty(stdin) and _isatty(stdout)

    async def request(self, request: ApprovalRequest) -> bool:
        if not self.is_available():
            raise ApprovalUnavailable(request.method_key)

        async with self._lock:
            approved = await asyncio.to_thread(self._prompt, request)

        logger.approval_resolved(request.method_key, approved)
        return approved

    def _prompt(self, request: ApprovalRequest) -> bool:
        self._console.print()
        self._console.print(self._build_table(request))
        hint = "Y/n" if self._default_approve else "y/N"
        try:
            return Confirm.ask(
                f"  Approve [bold]{request.method_key}[/bold]? [dim]({hint})[/dim]",
                default=self._default_approve,
                show_default=False,
                show_choices=False,
                console=self._console,
                stream=self._stdin,
            )
        except EOFError:
            # Closed terminal input reads like an empty answer.
            return self._default_approve

    @staticmethod
    def _build_table(request: ApprovalRequest) -> Table:
        table = Table(
            title="[bold yellow]Approval required[/bold yellow]",
            box=box.ROUNDED,
            show_header=False,
            border_style="yellow",
            padding=(0, 2),
        )
        table.add_column("Field", style="cyan")
        table.add_column("Value", style="white")

        table.add_row("API", request.api)
        table.add_row("Method", request.method)
        table.add_row("Tenant", request.tenant_id or "-")
        table.add_row(
            "Parameters",
            ", ".join(
                f"{name} [dim](file)[/dim]"
                if name in request.uploaded_file_params
                else name
                for name in request.param_names
            )
            or "-",
        )
        return table


def _isatty(stream: Optional[TextIO]) -> bool:
    if stream is None:
        return False
    try:
        return stream.isatty()
    except (AttributeError, ValueError):
        return False
