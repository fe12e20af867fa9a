from .credential_provider import AuthSummary, CredentialProvider
from .doctor import AuthCheckReport, run_auth_check
from .oauth_flow import (
    OAuthLoginFlow,
    build_consent_url,
    parse_callback_url,
)
from .scopes import (
    DEFAULT_SCOPE_PROFILE,
    load_scope_catalog,
    render_oauth_scopes_help_text,
    resolve_oauth_scopes,
)
from .token_client import IdentityClient, extract_error_detail

__all__ = [
    "AuthCheckReport",
    "AuthSummary",
    "CredentialProvider",
    "OAuthLoginFlow",
    "build_consent_url",
    "parse_callback_url",
    "DEFAULT_SCOPE_PROFILE",
    "load_scope_catalog",
    "render_oauth_scopes_help_text",
    "resolve_oauth_scopes",
    "IdentityClient",
    "extract_error_detail",
    "run_auth_check",
]
