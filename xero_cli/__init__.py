"""
xero-cli - Thin CLI wrapper around the Xero SDK

One generic ``invoke`` for every catalogued SDK method, behind a per-method
policy gate, an append-only audit log, and an encrypted credential store.

╔═══════════════════════════════════════════════════════════╗
║                                                           ║
║    ██╗  ██╗███████╗██████╗  ██████╗   xero-cli            ║
║    ╚██╗██╔╝██╔════╝██╔══██╗██╔═══██╗                      ║
║     ╚███╔╝ █████╗  ██████╔╝██║   ██║  🔐 Encrypted auth   ║
║     ██╔██╗ ██╔══╝  ██╔══██╗██║   ██║  🛡️  Policy gated     ║
║    ██╔╝ ██╗███████╗██║  ██║╚██████╔╝  📜 Audited          ║
║    ╚═╝  ╚═╝╚══════╝╚═╝  ╚═╝ ╚═════╝                       ║
║                                                           ║
╚═══════════════════════════════════════════════════════════╝

Quick Start - CLI:

    xero auth login --mode client_credentials
    xero methods accounting
    xero invoke accounting getInvoices -- --statuses=DRAFT,AUTHORISED

Quick Start - Library:

    from xero_cli import Settings, InvokeRequest, build_engine

    engine = build_engine(Settings.from_environ())
    result = await engine.invoke(
        InvokeRequest(api="accounting", method="getOrganisations")
    )

Policy file (~/.xero-cli/policy.json):

    {"methods": {"accounting.createInvoices": "ask",
                 "accounting.deleteAccount": "block"}}

Methods without an entry are allowed when their name starts with "get" and
blocked otherwise.
"""

__version__ = "0.1.0"

from .config import Settings
from .errors import ErrorKind, XeroCliError
from .invocation import InvocationEngine, build_engine
from .logging import XeroLogger, get_logger, setup_logging
from .types import (
    AccessGrant,
    AuditEvent,
    AuthMode,
    InvocationMode,
    InvokeRequest,
    InvokeResult,
    MethodPolicy,
    SdkResponse,
)

__all__ = [
    "__version__",
    # Configuration
    "Settings",
    # Engine
    "InvocationEngine",
    "build_engine",
    # Types
    "AccessGrant",
    "AuditEvent",
    "AuthMode",
    "InvocationMode",
    "InvokeRequest",
    "InvokeResult",
    "MethodPolicy",
    "SdkResponse",
    # Errors
    "ErrorKind",
    "XeroCliError",
    # Logging
    "XeroLogger",
    "get_logger",
    "setup_logging",
]
