"""
xero-cli Logging Module

Provides rich logging for the invocation engine and delegation server with:
- Colored output with per-level icons
- Plain structured format when rich output is disabled
- Invocation timing
- Policy decision highlighting

Secret values (passphrases, client secrets, tokens, raw parameter values)
are never passed to these methods.

Usage:
    from xero_cli.logging import setup_logging, XeroLogger

    logger = setup_logging(level="DEBUG")
    logger.policy_decided("accounting.getInvoices", decision)
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text
from rich.theme import Theme

from .types import MethodPolicy, PolicyDecision

# =============================================================================
# CUSTOM THEME
# =============================================================================

XERO_THEME = Theme(
    {
        "info": "cyan",
        "warning": "yellow",
        "error": "bold red",
        "debug": "dim",
        "method": "bold white",
        "policy.allow": "bold green",
        "policy.ask": "bold yellow",
        "policy.block": "bold red",
        "timing": "dim cyan",
        "security": "bold cyan",
    }
)

POLICY_STYLES = {
    MethodPolicy.ALLOW: "[policy.allow]ALLOW[/policy.allow]",
    MethodPolicy.ASK: "[policy.ask]ASK[/policy.ask]",
    MethodPolicy.BLOCK: "[policy.block]BLOCK[/policy.block]",
}


# =============================================================================
# CUSTOM LOG HANDLER
# =============================================================================


class XeroRichHandler(RichHandler):
    """Rich handler with level icons."""

    def __init__(self, *args, **kwargs):
        kwargs.setdefault("show_time", True)
        kwargs.setdefault("show_path", False)
        kwargs.setdefault("rich_tracebacks", True)
        kwargs.setdefault("tracebacks_show_locals", False)
        super().__init__(*args, **kwargs)

    def get_level_text(
        self, record: logging.LogRecord
    ) -> Text:
        level_name = record.levelname

        icons = {
            "DEBUG": "🔍",
            "INFO": "ℹ️ ",
            "WARNING": "⚠️ ",
            "ERROR": "❌",
            "CRITICAL": "🚨",
        }

        style = {
            "DEBUG": "dim",
            "INFO": "cyan",
            "WARNING": "yellow",
            "ERROR": "red",
            "CRITICAL": "bold red",
        }.get(level_name, "white")

        icon = icons.get(level_name, "•")
        return Text(f"{icon} {level_name:<8}", style=style)


# =============================================================================
# XERO LOGGER
# =============================================================================


class XeroLogger:
    """
    High-level logging interface.

    Provides semantic logging methods for invocation operations:
    - invocation_started()
    - policy_decided()
    - invocation_finished()
    - server_started()
    - etc.

    Example:
        logger = XeroLogger("engine")
        logger.invocation_finished("accounting.getInvoices", "success", 12.5)
    """

    def __init__(self, name: str, level: Optional[str] = None):
        self.name = name
        self._logger = logging.getLogger(f"xero_cli.{name}")
        if level:
            self._logger.setLevel(
                getattr(logging, level.upper())
            )

    def _log(self, level: int, message: str, **kwargs):
        extra = {"markup": True, **kwargs}
        self._logger.log(level, message, extra=extra)

    # =========================================================================
    # SEMANTIC LOGGING METHODS
    # =========================================================================

    def server_started(self, transport: str, address: str):
        self._log(
            logging.INFO,
            f"[security]🛡️  Delegation server started[/security] on [cyan]{transport}://{address}[/cyan]",
        )

    def server_stopped(self):
        self._log(logging.INFO, "[dim]Delegation server stopped[/dim]")

    def invocation_started(
        self, method_key: str, mode: str, param_count: int
    ):
        self._log(
            logging.DEBUG,
            f"[method]{method_key}[/method] invoked ({mode}, {param_count} params)",
        )

    def policy_decided(
        self, method_key: str, decision: PolicyDecision
    ):
        decision_str = POLICY_STYLES.get(
            decision.policy, decision.policy.value
        )
        origin = (
            "explicit"
            if decision.has_explicit_entry
            else "default"
        )
        level = (
            logging.WARNING
            if decision.policy == MethodPolicy.BLOCK
            else logging.DEBUG
        )
        self._log(
            level,
            f"[method]{method_key}[/method] → {decision_str} [dim]({origin})[/dim]",
        )

    def approval_resolved(self, method_key: str, approved: bool):
        outcome = (
            "[policy.allow]approved[/policy.allow]"
            if approved
            else "[policy.block]denied[/policy.block]"
        )
        self._log(
            logging.INFO,
            f"[method]{method_key}[/method] {outcome} by operator",
        )

    def invocation_finished(
        self,
        method_key: str,
        status: str,
        elapsed_ms: float,
        error_kind: Optional[str] = None,
    ):
        timing_str = f" [timing]({elapsed_ms:.2f}ms)[/timing]"
        if error_kind:
            self._log(
                logging.WARNING,
                f"[method]{method_key}[/method] failed: {error_kind}{timing_str}",
            )
        else:
            self._log(
                logging.INFO,
                f"[method]{method_key}[/method] → {status}{timing_str}",
            )

    def audit_write_failed(self, path: str, reason: str):
        self._log(
            logging.WARNING,
            f"[warning]Audit log write to {path} failed: {reason}[/warning]",
        )

    def error(self, message: str, exc_info: bool = False):
        self._logger.error(message, exc_info=exc_info)

    def warning(self, message: str):
        self._log(
            logging.WARNING, f"[warning]{message}[/warning]"
        )

    def info(self, message: str):
        self._log(logging.INFO, message)

    def debug(self, message: str):
        self._log(logging.DEBUG, f"[dim]{message}[/dim]")


# =============================================================================
# SETUP FUNCTION
# =============================================================================


def setup_logging(
    level: str = "WARNING",
    rich_output: bool = True,
    log_file: Optional[str] = None,
) -> XeroLogger:
    """
    Configure xero-cli logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        rich_output: Enable rich console output on stderr
        log_file: Optional file path for log output

    Returns:
        XeroLogger instance
    """
    root_logger = logging.getLogger("xero_cli")
    root_logger.setLevel(getattr(logging, level.upper()))
    root_logger.handlers.clear()

    if rich_output:
        console = Console(theme=XERO_THEME, stderr=True)
        handler = XeroRichHandler(
            console=console,
            show_time=True,
            show_path=False,
        )
        handler.setFormatter(
            logging.Formatter("%(message)s")
        )
        root_logger.addHandler(handler)
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        root_logger.addHandler(handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        root_logger.addHandler(file_handler)

    return XeroLogger("main")


def get_logger(name: str) -> XeroLogger:
    """Get or create a logger under the ``xero_cli`` namespace."""
    return XeroLogger(name)
