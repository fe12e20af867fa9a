from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from xero_cli.errors import DecryptFailure
from xero_cli.types import (
    AuthMode,
    ClientCredentialsState,
    OAuthState,
    StoredAuthState,
    TokenSet,
)


class TokenSetSerializer:
    def serialize(self, token_set: TokenSet) -> dict[str, Any]:
        return {
            "access_token": token_set.access_token,
            "refresh_token": token_set.refresh_token,
            "token_type": token_set.token_type,
            "expires_at": token_set.expires_at,
            "scope": token_set.scope,
            "id_token": token_set.id_token,
        }

    def deserialize(self, data: dict[str, Any]) -> TokenSet:
        expires_at = data.get("expires_at")
        return TokenSet(
            access_token=str(data["access_token"]),
            refresh_token=data.get("refresh_token"),
            token_type=data.get("token_type") or "Bearer",
            expires_at=int(expires_at) if expires_at is not None else None,
            scope=_scope_text(data.get("scope")),
            id_token=data.get("id_token"),
        )


class AuthStateSerializer:
    """Plaintext form of the stored auth state (encrypted before it hits disk)."""

    def __init__(self):
        self._token_set_serializer = TokenSetSerializer()

    def serialize(self, state: StoredAuthState) -> dict[str, Any]:
        data: dict[str, Any] = {
            "mode": state.mode.value,
            "clientId": state.client_id,
            "clientSecret": state.client_secret,
            "savedAt": state.saved_at.isoformat(),
        }
        if isinstance(state, OAuthState):
            data["redirectUri"] = state.redirect_uri
            data["scopes"] = list(state.scopes)
            data["tokenSet"] = (
                self._token_set_serializer.serialize(state.token_set)
                if state.token_set is not None
                else None
            )
        return data

    def deserialize(self, data: Any) -> StoredAuthState:
        """Rebuild the state; malformed payloads surface as DecryptFailure."""
        if not isinstance(data, dict):
            raise DecryptFailure()
        try:
            mode = AuthMode(data["mode"])
            saved_at = _parse_timestamp(data.get("savedAt"))

            if mode == AuthMode.CLIENT_CREDENTIALS:
                return ClientCredentialsState(
                    client_id=str(data["clientId"]),
                    client_secret=str(data["clientSecret"]),
                    saved_at=saved_at,
                )

            raw_token_set = data.get("tokenSet")
            return OAuthState(
                client_id=str(data["clientId"]),
                client_secret=str(data["clientSecret"]),
                redirect_uri=str(data["redirectUri"]),
                scopes=tuple(str(scope) for scope in data.get("scopes", [])),
                saved_at=saved_at,
                token_set=(
                    self._token_set_serializer.deserialize(raw_token_set)
                    if raw_token_set
                    else None
                ),
            )
        except (KeyError, TypeError, ValueError):
            raise DecryptFailure() from None


def token_expiry_iso(state: StoredAuthState) -> Optional[str]:
    """Clear-text expiry recorded in the envelope header for status checks."""
    if not isinstance(state, OAuthState) or state.token_set is None:
        return None
    if state.token_set.expires_at is None:
        return None
    return epoch_to_iso(state.token_set.expires_at)


def epoch_to_iso(epoch_seconds: int) -> str:
    return (
        datetime.fromtimestamp(epoch_seconds, tz=timezone.utc)
        .isoformat()
        .replace("+00:00", "Z")
    )


def _parse_timestamp(value: Optional[str]) -> datetime:
    if value is None:
        return datetime.now(timezone.utc)
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _scope_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return " ".join(str(scope) for scope in value)
    return str(value)
