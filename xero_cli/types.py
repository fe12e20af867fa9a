"""
xero-cli - Core Types

Design Philosophy:
- The method catalog is static data generated offline, immutable once loaded
- Policies are keyed by `alias.methodName` and resolve to allow/ask/block
- Stored credentials are an explicit tagged union, never overlapping fields
- Every invocation attempt is described by exactly one audit event
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Mapping, Optional, Union

# =============================================================================
# METHOD CATALOG - What can be invoked
# =============================================================================


@dataclass(frozen=True)
class ManifestParam:
    """One declared parameter of an SDK method."""

    name: str
    declared_type: str
    is_optional: bool = False
    has_default_value: bool = False
    is_required: bool = True


@dataclass(frozen=True)
class ManifestMethod:
    """
    One SDK method and its positional parameter list.

    `signature_found=False` means the generator could not discover a
    reliable signature; such methods are never invocable.
    """

    name: str
    signature_found: bool
    params: tuple[ManifestParam, ...] = ()

    def find_param(self, name: str) -> Optional[ManifestParam]:
        for param in self.params:
            if param.name == name:
                return param
        return None


@dataclass(frozen=True)
class ManifestApi:
    """A group of methods exposed by one SDK API client."""

    name: str
    methods: tuple[ManifestMethod, ...] = ()

    def find_method(self, name: str) -> Optional[ManifestMethod]:
        for method in self.methods:
            if method.name == name:
                return method
        return None


@dataclass(frozen=True)
class MethodCatalog:
    schema_version: int
    generated_at: Optional[str]
    sdk_name: str
    sdk_version: str
    apis: tuple[ManifestApi, ...] = ()

    def find_api(self, name: str) -> Optional[ManifestApi]:
        for api in self.apis:
            if api.name == name:
                return api
        return None

    @property
    def method_count(self) -> int:
        return sum(len(api.methods) for api in self.apis)


# =============================================================================
# POLICY - allow / ask / block per method key
# =============================================================================


class MethodPolicy(str, Enum):
    """
    Per-method authorization decisions.

    - ALLOW: Invoke without asking
    - ASK: Require interactive operator approval
    - BLOCK: Never invoke
    """

    ALLOW = "allow"
    ASK = "ask"
    BLOCK = "block"


@dataclass(frozen=True)
class PolicyDocument:
    path: Path
    methods: Mapping[str, MethodPolicy] = field(
        default_factory=dict
    )


@dataclass(frozen=True)
class PolicyDecision:
    policy: MethodPolicy
    has_explicit_entry: bool
    source_policy_path: Optional[Path] = None


# =============================================================================
# AUDIT
# =============================================================================


class InvocationMode(str, Enum):
    DIRECT = "direct"
    DELEGATED = "delegated"


class AuditStatus(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class AuditEvent:
    """One record per invocation attempt, success or failure."""

    timestamp: datetime
    mode: InvocationMode
    api: str
    method: str
    tenant_id: Optional[str]
    param_count: int
    file_param_count: int
    policy: Optional[MethodPolicy]
    status: AuditStatus
    duration_ms: float
    response_status: Optional[int] = None
    error: Optional[str] = None

    # Only populated in full audit mode
    raw_params: Optional[list[str]] = None
    uploaded_file_params: Optional[list[str]] = None


# =============================================================================
# CREDENTIALS - Stored auth state (tagged union)
# =============================================================================


class AuthMode(str, Enum):
    CLIENT_CREDENTIALS = "client_credentials"
    OAUTH = "oauth"


@dataclass(frozen=True)
class TokenSet:
    """Delegated-authorization token state as returned by the identity service."""

    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "Bearer"
    expires_at: Optional[int] = None  # epoch seconds
    scope: Optional[str] = None
    id_token: Optional[str] = None

    def is_expired(self, now: float, leeway_seconds: int = 60) -> bool:
        if self.expires_at is None:
            return False
        return self.expires_at - leeway_seconds <= now


@dataclass(frozen=True)
class ClientCredentialsState:
    client_id: str
    client_secret: str
    saved_at: datetime

    mode = AuthMode.CLIENT_CREDENTIALS


@dataclass(frozen=True)
class OAuthState:
    client_id: str
    client_secret: str
    redirect_uri: str
    scopes: tuple[str, ...]
    saved_at: datetime
    token_set: Optional[TokenSet] = None

    mode = AuthMode.OAUTH


StoredAuthState = Union[ClientCredentialsState, OAuthState]


@dataclass(frozen=True)
class AuthFileStatus:
    """What can be learned about the auth file without decrypting it."""

    path: Path
    exists: bool
    mode: Optional[AuthMode] = None
    token_expires_at: Optional[str] = None


@dataclass(frozen=True)
class AccessGrant:
    """Usable credentials handed to SDK bindings."""

    mode: AuthMode
    access_token: str
    token_type: str = "Bearer"
    expires_at: Optional[int] = None
    scope: Optional[str] = None
    credential_source: str = "file"


# =============================================================================
# INVOCATION
# =============================================================================


@dataclass(frozen=True)
class InvokeRequest:
    api: str
    method: str
    tenant_id: Optional[str] = None
    raw_params: tuple[str, ...] = ()
    uploaded_files: Mapping[str, bytes] = field(
        default_factory=dict
    )


@dataclass(frozen=True)
class SdkResponse:
    """Optional wrapper SDK bindings may return to report an HTTP status."""

    status: Optional[int]
    body: Any


@dataclass(frozen=True)
class InvokeResult:
    status: Optional[int]
    body: Any

    def to_dict(self) -> dict[str, Any]:
        return {"status": self.status, "body": self.body}
