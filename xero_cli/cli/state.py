from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from xero_cli.auth import CredentialProvider, IdentityClient
from xero_cli.auth.credential_provider import PassphraseSource
from xero_cli.config import Settings
from xero_cli.credentials import CredentialStore
from xero_cli.invocation import DispatchTable, InvocationEngine, build_engine
from xero_cli.policy import InteractiveApproval
from xero_cli.transports import DelegationClient

from .prompts import prompt_runtime_keyring_password


@dataclass
class CliState:
    """
    Per-run collaborators shared by the commands through ``ctx.obj``.

    Anything left as ``None`` is built from ``settings`` on first use, so
    tests can pass a prepared state to ``CliRunner.invoke(obj=...)``.
    """

    settings: Settings
    identity_client: Optional[IdentityClient] = None
    dispatch_table: Optional[DispatchTable] = None
    approval: Optional[InteractiveApproval] = None
    passphrase_source: PassphraseSource = prompt_runtime_keyring_password

    @classmethod
    def from_environ(cls) -> CliState:
        return cls(settings=Settings.from_environ())

    def identity(self) -> IdentityClient:
        if self.identity_client is None:
            self.identity_client = IdentityClient(
                identity_url=self.settings.identity_url,
                api_url=self.settings.api_url,
            )
        return self.identity_client

    def credential_store(self) -> CredentialStore:
        return CredentialStore(self.settings.auth_file)

    def credential_provider(self) -> CredentialProvider:
        return CredentialProvider(
            self.settings,
            self.credential_store(),
            self.identity(),
            passphrase_source=self.passphrase_source,
        )

    def engine(self) -> InvocationEngine:
        return build_engine(
            self.settings,
            approval=self.approval,
            passphrase_source=self.passphrase_source,
            dispatch_table=self.dispatch_table,
            identity_client=self.identity(),
            credential_store=self.credential_store(),
        )

    def delegation_client(self) -> DelegationClient:
        return DelegationClient(self.settings.proxy_url)

    def unlock_credentials(self) -> Optional[str]:
        """
        Resolve the keyring password up front when stored credentials will
        be read: not when environment credentials are in use or nothing is
        stored. The password is pinned into ``settings`` for later reads.
        """
        if self.settings.has_env_credentials:
            return None
        if not self.credential_store().exists():
            return None
        if self.settings.keyring_password:
            return self.settings.keyring_password

        password = self.passphrase_source()
        self.settings = self.settings.with_overrides(keyring_password=password)
        return password
