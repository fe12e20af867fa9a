from __future__ import annotations

import secrets
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import parse_qs, urlencode, urlsplit

from xero_cli.credentials import CredentialStore
from xero_cli.errors import TokenRequestFailure
from xero_cli.types import OAuthState

from .token_client import IdentityClient


def generate_state() -> str:
    return secrets.token_urlsafe(24)


def build_consent_url(
    authorize_url: str,
    client_id: str,
    redirect_uri: str,
    scopes: Sequence[str],
    state: str,
) -> str:
    query = urlencode(
        {
            "response_type": "code",
            "client_id": client_id,
            "redirect_uri": redirect_uri,
            "scope": " ".join(scopes),
            "state": state,
        }
    )
    return f"{authorize_url}?{query}"


def parse_callback_url(callback_url: str, expected_state: str) -> str:
    """Return the authorization code from a pasted callback URL."""
    query = parse_qs(urlsplit(callback_url.strip()).query)

    def first(name: str) -> Optional[str]:
        values = query.get(name)
        return values[0] if values else None

    error = first("error")
    if error:
        detail = first("error_description") or error
        raise TokenRequestFailure(f"Authorization was not granted: {detail}")

    if first("state") != expected_state:
        raise TokenRequestFailure(
            "OAuth state mismatch. Restart `xero auth login --mode oauth`."
        )

    code = first("code")
    if not code:
        raise TokenRequestFailure(
            "Callback URL does not contain an authorization code."
        )
    return code


class OAuthLoginFlow:
    """
    Two-step delegated login.

    ``begin`` stores the app configuration (no token yet) and returns the
    consent URL; ``complete`` exchanges the callback's code and rewrites the
    store with the token set.
    """

    def __init__(
        self,
        store: CredentialStore,
        identity_client: IdentityClient,
        authorize_url: str,
    ):
        self._store = store
        self._identity_client = identity_client
        self._authorize_url = authorize_url
        self._state: Optional[str] = None
        self._pending: Optional[OAuthState] = None

    def begin(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        scopes: Sequence[str],
        passphrase: str,
    ) -> str:
        self._pending = OAuthState(
            client_id=client_id,
            client_secret=client_secret,
            redirect_uri=redirect_uri,
            scopes=tuple(scopes),
            saved_at=datetime.now(timezone.utc),
        )
        self._store.store(self._pending, passphrase)
        self._state = generate_state()
        return build_consent_url(
            self._authorize_url,
            client_id,
            redirect_uri,
            scopes,
            self._state,
        )

    async def complete(self, callback_url: str, passphrase: str) -> OAuthState:
        if self._pending is None or self._state is None:
            raise TokenRequestFailure("OAuth login was not started.")

        code = parse_callback_url(callback_url, self._state)
        token_set = await self._identity_client.exchange_authorization_code(
            self._pending.client_id,
            self._pending.client_secret,
            code,
            self._pending.redirect_uri,
        )

        completed = OAuthState(
            client_id=self._pending.client_id,
            client_secret=self._pending.client_secret,
            redirect_uri=self._pending.redirect_uri,
            scopes=self._pending.scopes,
            saved_at=datetime.now(timezone.utc),
            token_set=token_set,
        )
        self._store.store(completed, passphrase)
        return completed
