XERO_LOGO_FULL = """
[bold cyan]
    ╔═══════════════════════════════════════════════════════════╗
    ║                                                           ║
    ║    ██╗  ██╗███████╗██████╗  ██████╗   [white]xero-cli[/white]            ║
    ║    ╚██╗██╔╝██╔════╝██╔══██╗██╔═══██╗  [dim]v{version}[/dim]              ║
    ║     ╚███╔╝ █████╗  ██████╔╝██║   ██║                      ║
    ║     ██╔██╗ ██╔══╝  ██╔══██╗██║   ██║  [yellow]🔐 Encrypted auth[/yellow]   ║
    ║    ██╔╝ ██╗███████╗██║  ██║╚██████╔╝  [green]🛡️  Policy gated[/green]     ║
    ║    ╚═╝  ╚═╝╚══════╝╚═╝  ╚═╝ ╚═════╝   [blue]📜 Audited[/blue]          ║
    ║                                                           ║
    ╚═══════════════════════════════════════════════════════════╝
[/bold cyan]
"""

XERO_LOGO_SMALL = """[bold cyan]
  ▀▄▀ █▀▀ █▀█ █▀█   [white]xero-cli[/white]
  █░█ ██▄ █▀▄ █▄█   [dim]v{version}[/dim]
[/bold cyan]"""

XERO_LOGO_MINI = (
    "[bold cyan]🛡️  xero[/bold cyan] [dim]v{version}[/dim]"
)

BANNER_STYLE_MAP = {
    "full": XERO_LOGO_FULL,
    "small": XERO_LOGO_SMALL,
    "mini": XERO_LOGO_MINI,
}

STATUS_ICON_MAP = {
    "info": "[blue]ℹ[/blue]",
    "success": "[green]✓[/green]",
    "warning": "[yellow]⚠[/yellow]",
    "error": "[red]✗[/red]",
    "security": "[cyan]🛡️[/cyan]",
    "loading": "[cyan]⟳[/cyan]",
}
