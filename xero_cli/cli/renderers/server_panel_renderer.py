from __future__ import annotations

from pathlib import Path

from rich.console import Console
from rich.panel import Panel


class ServerPanelRenderer:
    def __init__(self, console: Console):
        self._console = console

    def render(self, host: str, port: int, policy_file: Path, audit_log: Path):
        self._console.print()
        self._console.print(
            Panel(
                f"[bold green]Proxy running![/bold green]\n\n"
                f"  Invoke:  [cyan]http://{host}:{port}/v1/invoke[/cyan]\n"
                f"  Doctor:  [cyan]http://{host}:{port}/v1/doctor[/cyan]\n"
                f"  Health:  [cyan]http://{host}:{port}/healthz[/cyan]\n\n"
                f"  Policy:  [dim]{policy_file}[/dim]\n"
                f"  Audit:   [dim]{audit_log}[/dim]\n\n"
                f"[dim]Press Ctrl+C to stop[/dim]",
                title="[bold cyan]🛡️  xero delegation proxy[/bold cyan]",
                border_style="cyan",
            )
        )
        self._console.print()
