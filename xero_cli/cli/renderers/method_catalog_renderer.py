from __future__ import annotations

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from xero_cli.catalog import API_ALIASES, ApiAlias
from xero_cli.invocation.param_tokens import TENANT_PARAM_NAMES
from xero_cli.types import ManifestApi, ManifestMethod, ManifestParam, MethodCatalog

# Every generated signature ends with the SDK's per-call request options.
HIDDEN_PARAM_NAMES = frozenset({"options"})


class MethodCatalogRenderer:
    """Browse the method catalog: API overview, or one API's methods."""

    def __init__(self, console: Console):
        self._console = console

    def render_overview(self, catalog: MethodCatalog):
        table = Table(
            box=box.ROUNDED,
            show_header=True,
            header_style="bold cyan",
            border_style="dim",
            padding=(0, 2),
        )
        table.add_column("API", style="green")
        table.add_column("SDK client", style="white")
        table.add_column("Tenant", style="dim")
        table.add_column("Methods", justify="right")

        for entry in API_ALIASES:
            api = catalog.find_api(entry.identifier)
            table.add_row(
                entry.alias,
                entry.identifier,
                "required" if entry.requires_tenant_id else "-",
                str(len(api.methods)) if api else "0",
            )

        self._console.print(
            f"  [bold]{catalog.sdk_name}[/bold] [dim]v{catalog.sdk_version}[/dim]"
        )
        self._console.print()
        self._console.print(table)
        self._console.print()
        self._console.print(
            "  [dim]Run[/dim] [cyan]xero methods <api>[/cyan]"
            " [dim]to list an API's methods[/dim]"
        )
        self._console.print()

    def render_api(self, alias: ApiAlias, api: ManifestApi):
        table = Table(
            box=box.SIMPLE,
            show_header=True,
            header_style="bold",
            padding=(0, 2),
            show_edge=False,
        )
        table.add_column("Method", style="bold")
        table.add_column("Parameters")

        for method in api.methods:
            table.add_row(escape(method.name), self._format_params(method))

        self._console.print(
            f"  [bold cyan]{alias.alias}[/bold cyan] [dim]({api.name})[/dim]"
        )
        self._console.print()
        self._console.print(table)
        self._console.print()
        self._console.print(
            "  [blue]tenant[/blue] injected from --tenant-id  "
            "[bold]required[/bold]  [dim]optional?[/dim]"
        )
        self._console.print()

    def _format_params(self, method: ManifestMethod) -> str:
        if not method.signature_found:
            return "[yellow]no signature metadata (not invocable)[/yellow]"

        parts = [
            self._format_param(param)
            for param in method.params
            if param.name not in HIDDEN_PARAM_NAMES
        ]
        return " ".join(parts) if parts else "[dim]-[/dim]"

    @staticmethod
    def _format_param(param: ManifestParam) -> str:
        label = escape(f"{param.name}:{param.declared_type}")
        if param.name in TENANT_PARAM_NAMES:
            return f"[blue]{label}[/blue]"
        if param.is_required:
            return f"[bold]{label}[/bold]"
        return f"[dim]{escape(param.name)}?:{escape(param.declared_type)}[/dim]"
