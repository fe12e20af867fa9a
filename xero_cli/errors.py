from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional


class ErrorKind(str, Enum):
    UNKNOWN_ALIAS = "UnknownAlias"
    UNKNOWN_METHOD = "UnknownMethod"
    NO_SIGNATURE_METADATA = "NoSignatureMetadata"
    MISSING_TENANT_ID = "MissingTenantId"
    MALFORMED_PARAM_TOKEN = "MalformedParamToken"
    DUPLICATE_PARAM = "DuplicateParam"
    UNKNOWN_PARAM = "UnknownParam"
    MISSING_REQUIRED_PARAM = "MissingRequiredParam"
    TYPE_MISMATCH = "TypeMismatch"
    STRUCTURED_DATA_PARSE_FAILURE = "StructuredDataParseFailure"
    POLICY_BLOCKED = "PolicyBlocked"
    POLICY_DENIED = "PolicyDenied"
    APPROVAL_UNAVAILABLE = "ApprovalUnavailable"
    CREDENTIALS_MISSING = "CredentialsMissing"
    CREDENTIALS_INCOMPLETE = "CredentialsIncomplete"
    DECRYPT_FAILURE = "DecryptFailure"
    STORED_MODE_MISMATCH = "StoredModeMismatch"
    REMOTE_CALL_FAILURE = "RemoteCallFailure"
    TOKEN_REQUEST_FAILURE = "TokenRequestFailure"
    POLICY_CONFIG = "PolicyConfigError"
    CATALOG = "CatalogError"
    CONFIGURATION = "ConfigurationError"
    DELEGATION_FAILURE = "DelegationFailure"


class XeroCliError(Exception):
    """Terminal failure of one operation; the message is safe to show."""

    kind: ErrorKind = ErrorKind.CONFIGURATION


# -----------------------------------------------------------------------------
# Resolution
# -----------------------------------------------------------------------------


class UnknownAlias(XeroCliError):
    kind = ErrorKind.UNKNOWN_ALIAS

    def __init__(self, alias: str, known: list[str]) -> None:
        self.alias = alias
        super().__init__(
            f'Unknown API "{alias}". Known APIs: {", ".join(known)}.'
        )


class UnknownMethod(XeroCliError):
    kind = ErrorKind.UNKNOWN_METHOD

    def __init__(self, alias: str, method: str, detail: str = "") -> None:
        self.alias = alias
        self.method = method
        message = f'Unknown method "{method}" for API "{alias}".'
        if detail:
            message = f"{message} {detail}"
        super().__init__(message)


class NoSignatureMetadata(XeroCliError):
    kind = ErrorKind.NO_SIGNATURE_METADATA

    def __init__(self, alias: str, method: str) -> None:
        self.alias = alias
        self.method = method
        super().__init__(
            f'No signature metadata for "{alias}.{method}"; '
            "refusing to invoke it without typed parameters."
        )


class MissingTenantId(XeroCliError):
    kind = ErrorKind.MISSING_TENANT_ID

    def __init__(self) -> None:
        super().__init__(
            "Missing tenant ID. Set --tenant-id or XERO_TENANT_ID_DEFAULT."
        )


class MalformedParamToken(XeroCliError):
    kind = ErrorKind.MALFORMED_PARAM_TOKEN

    def __init__(self, token: str, reason: str) -> None:
        self.token = token
        super().__init__(f"Invalid parameter token: {reason}")


class DuplicateParam(XeroCliError):
    kind = ErrorKind.DUPLICATE_PARAM

    def __init__(self, name: str) -> None:
        self.param_name = name
        super().__init__(f'Duplicate parameter "--{name}".')


class UnknownParam(XeroCliError):
    kind = ErrorKind.UNKNOWN_PARAM

    def __init__(self, name: str, method: str, known: list[str]) -> None:
        self.param_name = name
        listed = ", ".join(known) if known else "(none)"
        super().__init__(
            f'Unknown parameter "--{name}" for {method}. '
            f"Accepted parameters: {listed}."
        )


class MissingRequiredParam(XeroCliError):
    kind = ErrorKind.MISSING_REQUIRED_PARAM

    def __init__(self, name: str, declared_type: str) -> None:
        self.param_name = name
        super().__init__(
            f'Missing required parameter "--{name}" ({declared_type}).'
        )


class TypeMismatch(XeroCliError):
    kind = ErrorKind.TYPE_MISMATCH

    def __init__(self, name: str, declared_type: str, reason: str) -> None:
        self.param_name = name
        self.declared_type = declared_type
        super().__init__(
            f'Invalid value for "--{name}" ({declared_type}): {reason}'
        )


class StructuredDataParseFailure(XeroCliError):
    kind = ErrorKind.STRUCTURED_DATA_PARSE_FAILURE

    def __init__(self, name: str, declared_type: str, reason: str) -> None:
        self.param_name = name
        self.declared_type = declared_type
        super().__init__(
            f'Could not parse "--{name}" as {declared_type}: {reason}'
        )


# -----------------------------------------------------------------------------
# Policy
# -----------------------------------------------------------------------------


class PolicyBlocked(XeroCliError):
    kind = ErrorKind.POLICY_BLOCKED

    def __init__(
        self,
        method_key: str,
        explicit: bool,
        policy_path: Optional[Path] = None,
    ) -> None:
        self.method_key = method_key
        self.explicit = explicit
        self.policy_path = policy_path
        if explicit:
            message = (
                f'"{method_key}" is blocked by policy file {policy_path}.'
            )
        else:
            message = (
                f'"{method_key}" is blocked by default: policy file '
                f"{policy_path} has no entry for it and only get* methods "
                "are allowed implicitly."
            )
        super().__init__(message)


class PolicyDenied(XeroCliError):
    kind = ErrorKind.POLICY_DENIED

    def __init__(self, method_key: str) -> None:
        self.method_key = method_key
        super().__init__(f'"{method_key}" was denied by user.')


class ApprovalUnavailable(XeroCliError):
    kind = ErrorKind.APPROVAL_UNAVAILABLE

    def __init__(self, method_key: str) -> None:
        self.method_key = method_key
        super().__init__(
            f'Policy requires interactive approval for "{method_key}" but '
            "no interactive terminal is attached. Run the command from a "
            "terminal, or set the policy entry to allow or block."
        )


class PolicyConfigError(XeroCliError):
    kind = ErrorKind.POLICY_CONFIG

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f"Invalid policy file {path}: {reason}")


# -----------------------------------------------------------------------------
# Credentials
# -----------------------------------------------------------------------------


class CredentialsMissing(XeroCliError):
    kind = ErrorKind.CREDENTIALS_MISSING


class CredentialsIncomplete(XeroCliError):
    kind = ErrorKind.CREDENTIALS_INCOMPLETE


class DecryptFailure(XeroCliError):
    kind = ErrorKind.DECRYPT_FAILURE

    def __init__(self) -> None:
        super().__init__(
            "Failed to decrypt stored credentials. Check the keyring password."
        )


class StoredModeMismatch(XeroCliError):
    kind = ErrorKind.STORED_MODE_MISMATCH

    def __init__(self, expected: str, stored: str) -> None:
        self.expected = expected
        self.stored = stored
        super().__init__(
            f'Stored credentials are in "{stored}" mode but "{expected}" '
            "mode is required. Run `xero auth login` again."
        )


class TokenRequestFailure(XeroCliError):
    kind = ErrorKind.TOKEN_REQUEST_FAILURE


# -----------------------------------------------------------------------------
# Remote / infrastructure
# -----------------------------------------------------------------------------


class RemoteCallFailure(XeroCliError):
    kind = ErrorKind.REMOTE_CALL_FAILURE

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        self.status = status
        super().__init__(message)


class DelegationFailure(XeroCliError):
    kind = ErrorKind.DELEGATION_FAILURE


class CatalogError(XeroCliError):
    kind = ErrorKind.CATALOG


class ConfigurationError(XeroCliError):
    kind = ErrorKind.CONFIGURATION
