from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from xero_cli.credentials.state_serializer import epoch_to_iso

from .credential_provider import CredentialProvider

UNKNOWN = "unknown"


@dataclass(frozen=True)
class AuthCheckReport:
    """Outcome of a live credential check: token acquired, tenants listed."""

    mode: str
    credential_source: str
    token_type: str
    token_expires_at: str
    scope: str
    connections: Optional[int]

    def to_dict(self) -> dict[str, Any]:
        return {
            "mode": self.mode,
            "credentialSource": self.credential_source,
            "tokenType": self.token_type,
            "tokenExpiresAt": self.token_expires_at,
            "scope": self.scope,
            "connections": self.connections,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AuthCheckReport:
        connections = data.get("connections")
        return cls(
            mode=str(data.get("mode") or UNKNOWN),
            credential_source=str(data.get("credentialSource") or UNKNOWN),
            token_type=str(data.get("tokenType") or UNKNOWN),
            token_expires_at=str(data.get("tokenExpiresAt") or UNKNOWN),
            scope=str(data.get("scope") or UNKNOWN),
            connections=connections if isinstance(connections, int) else None,
        )


async def run_auth_check(provider: CredentialProvider) -> AuthCheckReport:
    grant = await provider.acquire()
    connections = await provider.identity_client.list_connections(
        grant.access_token, grant.token_type
    )
    return AuthCheckReport(
        mode=grant.mode.value,
        credential_source=grant.credential_source,
        token_type=grant.token_type or UNKNOWN,
        token_expires_at=epoch_to_iso(grant.expires_at)
        if grant.expires_at is not None
        else UNKNOWN,
        scope=grant.scope or UNKNOWN,
        connections=len(connections),
    )
