"""
xero-cli Test Suite - Shared Fixtures

Everything runs in-process against temporary directories:

    - settings          Settings rooted in tmp_path (auth file, policy, audit)
    - fake identity     IdentityClient stand-in returning fixed tokens and
                        connections, recording every call
    - dispatch table    SDK bindings that echo their arguments back
    - approvals         InteractiveApproval fed from a StringIO answer

Key derivation is turned down to a few iterations so the encrypted store
stays fast.
"""

from __future__ import annotations

import io
import json
import os
import sys
import time
from typing import Any, Optional

import pytest
from rich.console import Console

# ---------------------------------------------------------------------------
# Ensure the project root is importable
# ---------------------------------------------------------------------------
sys.path.insert(
    0,
    os.path.dirname(
        os.path.dirname(os.path.abspath(__file__))
    ),
)

from xero_cli.catalog import load_method_catalog  # noqa: E402
from xero_cli.config import Settings  # noqa: E402
from xero_cli.credentials import CredentialStore  # noqa: E402
from xero_cli.invocation import DispatchTable  # noqa: E402
from xero_cli.policy import InteractiveApproval  # noqa: E402
from xero_cli.types import SdkResponse, TokenSet  # noqa: E402

TEST_TENANT_ID = "tenant-123"
TEST_PASSPHRASE = "correct horse battery staple"
TEST_KDF_ITERATIONS = 1_000


# ============================================================================
# Fake identity service
# ============================================================================


class FakeIdentityClient:
    """Records token requests; never touches the network."""

    def __init__(
        self,
        access_token: str = "access-token-1",
        expires_in: int = 1800,
        connections: Optional[list[dict[str, Any]]] = None,
    ):
        self.access_token = access_token
        self.expires_in = expires_in
        self.connections = (
            connections
            if connections is not None
            else [
                {
                    "id": "conn-1",
                    "tenantId": TEST_TENANT_ID,
                    "tenantName": "Demo Company (NZ)",
                    "tenantType": "ORGANISATION",
                    "createdDateUtc": "2026-01-01T00:00:00",
                    "updatedDateUtc": None,
                }
            ]
        )
        self.calls: list[tuple[str, tuple]] = []

    def _token(self, refresh_token: Optional[str] = None) -> TokenSet:
        return TokenSet(
            access_token=self.access_token,
            refresh_token=refresh_token,
            token_type="Bearer",
            expires_at=int(time.time()) + self.expires_in,
            scope="accounting.transactions.read offline_access",
        )

    async def request_client_credentials_token(
        self, client_id, client_secret, scopes=()
    ):
        self.calls.append(("client_credentials", (client_id, tuple(scopes))))
        return self._token()

    async def exchange_authorization_code(
        self, client_id, client_secret, code, redirect_uri
    ):
        self.calls.append(("authorization_code", (client_id, code)))
        return self._token(refresh_token="refresh-1")

    async def refresh_access_token(
        self, client_id, client_secret, refresh_token
    ):
        self.calls.append(("refresh_token", (client_id, refresh_token)))
        return self._token(refresh_token="refresh-2")

    async def list_connections(self, access_token, token_type="Bearer"):
        self.calls.append(("connections", (access_token,)))
        return list(self.connections)

    def grant_types(self) -> list[str]:
        return [name for name, _ in self.calls]


# ============================================================================
# Fake SDK bindings
# ============================================================================


class RecordingBindings:
    """SDK bindings that record the call and echo the arguments."""

    def __init__(self):
        self.calls: list[tuple[str, str, tuple]] = []

    def build_table(self) -> DispatchTable:
        table = DispatchTable()
        for api_identifier, method_name in [
            ("accountingApi", "getInvoices"),
            ("accountingApi", "getOrganisations"),
            ("accountingApi", "getReportProfitAndLoss"),
            ("accountingApi", "createInvoices"),
            ("accountingApi", "deleteAccount"),
            ("accountingApi", "createInvoiceAttachmentByFileName"),
            ("appStoreApi", "getSubscription"),
        ]:
            table.register(
                api_identifier,
                method_name,
                self._binding(api_identifier, method_name),
            )
        return table

    def _binding(self, api_identifier: str, method_name: str):
        async def call(grant, *args):
            self.calls.append((api_identifier, method_name, args))
            return SdkResponse(
                status=200,
                body={"method": method_name, "argCount": len(args)},
            )

        return call

    def last_args(self) -> tuple:
        return self.calls[-1][2]


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def fast_key_derivation(monkeypatch):
    monkeypatch.setattr(
        "xero_cli.credentials.envelope.DEFAULT_KDF_ITERATIONS",
        TEST_KDF_ITERATIONS,
    )


@pytest.fixture
def catalog():
    return load_method_catalog()


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings.from_environ(
        {
            "XERO_CLI_HOME": str(tmp_path / "home"),
            "XERO_TENANT_ID_DEFAULT": TEST_TENANT_ID,
        }
    )


@pytest.fixture
def env_settings(settings) -> Settings:
    return settings.with_overrides(
        client_id="env-client-id", client_secret="env-client-secret"
    )


@pytest.fixture
def credential_store(settings) -> CredentialStore:
    return CredentialStore(settings.auth_file)


@pytest.fixture
def identity_client():
    return FakeIdentityClient()


@pytest.fixture
def bindings():
    return RecordingBindings()


def make_approval(answer: str = "", interactive: bool = True):
    """InteractiveApproval that reads ``answer`` as the operator's reply."""
    return InteractiveApproval(
        default_approve=True,
        console=Console(file=io.StringIO(), force_terminal=False),
        stdin=io.StringIO(answer + "\n"),
        is_interactive=lambda: interactive,
    )


def write_policy(settings: Settings, methods: dict[str, str]) -> None:
    settings.policy_file.parent.mkdir(parents=True, exist_ok=True)
    settings.policy_file.write_text(json.dumps({"methods": methods}))


def read_audit_lines(settings: Settings) -> list[dict[str, Any]]:
    if not settings.audit_log.exists():
        return []
    return [
        json.loads(line)
        for line in settings.audit_log.read_text().splitlines()
        if line.strip()
    ]
