from __future__ import annotations

import dataclasses
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional

from xero_cli.config import Settings
from xero_cli.credentials import CredentialStore
from xero_cli.errors import CredentialsIncomplete, CredentialsMissing
from xero_cli.logging import get_logger
from xero_cli.types import (
    AccessGrant,
    AuthMode,
    ClientCredentialsState,
    OAuthState,
    TokenSet,
)

from .token_client import IdentityClient

logger = get_logger("auth")

PassphraseSource = Callable[[], str]


@dataclass(frozen=True)
class AuthSummary:
    """Auth configuration as reported by ``xero auth status``; no secrets."""

    auth_file: Path
    is_configured: bool
    mode: Optional[AuthMode]
    credential_source: Optional[str]
    has_client_id: bool
    has_client_secret: bool
    token_expires_at: Optional[str] = None


class CredentialProvider:
    """
    Turns configured credentials into an AccessGrant for SDK bindings.

    Credentials in XERO_CLIENT_ID / XERO_CLIENT_SECRET take precedence over
    the encrypted auth file. The keyring password is only requested when the
    file is actually read.
    """

    def __init__(
        self,
        settings: Settings,
        store: CredentialStore,
        identity_client: IdentityClient,
        passphrase_source: Optional[PassphraseSource] = None,
        clock: Callable[[], float] = time.time,
    ):
        self._settings = settings
        self._store = store
        self._identity_client = identity_client
        self._passphrase_source = passphrase_source
        self._clock = clock
        self._passphrase: Optional[str] = None

    @property
    def store(self) -> CredentialStore:
        return self._store

    @property
    def identity_client(self) -> IdentityClient:
        return self._identity_client

    def credential_source(self) -> Optional[str]:
        if self._settings.has_env_credentials:
            return "env"
        if self._store.exists():
            return "file"
        return None

    def summary(self) -> AuthSummary:
        if self._settings.has_env_credentials:
            has_client_id = self._settings.client_id is not None
            has_client_secret = self._settings.client_secret is not None
            return AuthSummary(
                auth_file=self._store.path,
                is_configured=has_client_id and has_client_secret,
                mode=AuthMode.CLIENT_CREDENTIALS,
                credential_source="env",
                has_client_id=has_client_id,
                has_client_secret=has_client_secret,
            )

        status = self._store.status()
        return AuthSummary(
            auth_file=status.path,
            is_configured=status.exists and status.mode is not None,
            mode=status.mode,
            credential_source="file" if status.exists else None,
            has_client_id=status.exists,
            has_client_secret=status.exists,
            token_expires_at=status.token_expires_at,
        )

    async def acquire(self) -> AccessGrant:
        if self._settings.has_env_credentials:
            return await self._acquire_from_environment()

        if not self._store.exists():
            raise CredentialsMissing(
                f"No stored credentials at {self._store.path}. Run "
                "`xero auth login` or set XERO_CLIENT_ID and "
                "XERO_CLIENT_SECRET."
            )

        passphrase = self._resolve_passphrase()
        state = self._store.load(passphrase)

        if isinstance(state, ClientCredentialsState):
            token_set = (
                await self._identity_client.request_client_credentials_token(
                    state.client_id,
                    state.client_secret,
                    self._settings.scopes,
                )
            )
            return _grant(AuthMode.CLIENT_CREDENTIALS, token_set, "file")

        token_set = await self._usable_oauth_token(state, passphrase)
        return _grant(AuthMode.OAUTH, token_set, "file")

    async def _acquire_from_environment(self) -> AccessGrant:
        client_id = self._settings.client_id
        client_secret = self._settings.client_secret
        if not client_id or not client_secret:
            missing = "XERO_CLIENT_ID" if not client_id else "XERO_CLIENT_SECRET"
            raise CredentialsIncomplete(
                f"Missing {missing}. Set both XERO_CLIENT_ID and "
                "XERO_CLIENT_SECRET, or unset both to use the stored "
                "credentials."
            )

        token_set = await self._identity_client.request_client_credentials_token(
            client_id, client_secret, self._settings.scopes
        )
        return _grant(AuthMode.CLIENT_CREDENTIALS, token_set, "env")

    async def _usable_oauth_token(
        self, state: OAuthState, passphrase: str
    ) -> TokenSet:
        token_set = state.token_set
        if token_set is None:
            raise CredentialsIncomplete(
                "OAuth login has not been completed. "
                "Run `xero auth login --mode oauth`."
            )
        if not token_set.is_expired(self._clock()):
            return token_set

        if not token_set.refresh_token:
            raise CredentialsIncomplete(
                "OAuth access token has expired and no refresh token is "
                "stored. Run `xero auth login --mode oauth` again."
            )

        logger.debug("OAuth access token expired; refreshing")
        refreshed = await self._identity_client.refresh_access_token(
            state.client_id,
            state.client_secret,
            token_set.refresh_token,
        )
        self._store.store(
            dataclasses.replace(
                state,
                token_set=refreshed,
                saved_at=datetime.now(timezone.utc),
            ),
            passphrase,
        )
        return refreshed

    def _resolve_passphrase(self) -> str:
        if self._settings.keyring_password:
            return self._settings.keyring_password
        if self._passphrase is None:
            if self._passphrase_source is None:
                raise CredentialsMissing(
                    "Keyring password required to read stored credentials. "
                    "Set XERO_KEYRING_PASSWORD."
                )
            self._passphrase = self._passphrase_source()
        return self._passphrase


def _grant(
    mode: AuthMode, token_set: TokenSet, credential_source: str
) -> AccessGrant:
    return AccessGrant(
        mode=mode,
        access_token=token_set.access_token,
        token_type=token_set.token_type,
        expires_at=token_set.expires_at,
        scope=token_set.scope,
        credential_source=credential_source,
    )
