from __future__ import annotations

from collections.abc import Collection, Iterable
from typing import Optional

from xero_cli.errors import (
    DuplicateParam,
    MalformedParamToken,
    UnknownParam,
)

TENANT_PARAM_NAMES = frozenset({"xeroTenantId", "xeroTentantId"})
RESERVED_PARAM_NAMES = frozenset(
    {"xeroTenantId", "xeroTentantId", "tenant-id", "tenantId"}
)


def split_param_token(token: str) -> Optional[tuple[str, str]]:
    """Split `--name=value` into (name, value); None when malformed."""
    if not token.startswith("--"):
        return None
    separator_index = token.find("=")
    if separator_index < 0:
        return None
    name = token[2:separator_index].strip()
    if not name:
        return None
    return name, token[separator_index + 1 :]


def parse_param_tokens(
    tokens: Iterable[str],
    accepted_names: Optional[Collection[str]] = None,
    method_label: str = "",
) -> dict[str, str]:
    """
    Parse pass-through tokens into an ordered name -> raw value mapping.

    Tokens are checked one at a time in order; the first offending token
    raises. ``accepted_names`` restricts names to a method's declared
    parameters.
    """
    parsed: dict[str, str] = {}

    for position, token in enumerate(tokens, start=1):
        pair = split_param_token(token)
        if pair is None:
            raise MalformedParamToken(
                token,
                f"argument #{position} must have the form --name=value.",
            )

        name, value = pair
        if name in RESERVED_PARAM_NAMES:
            raise MalformedParamToken(
                token,
                f'"--{name}" is reserved for the tenant ID; pass it as '
                "--tenant-id before the -- separator.",
            )
        if name in parsed:
            raise DuplicateParam(name)
        if accepted_names is not None and name not in accepted_names:
            raise UnknownParam(name, method_label, list(accepted_names))

        parsed[name] = value

    return parsed
