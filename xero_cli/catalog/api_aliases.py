from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ApiAlias:
    alias: str
    identifier: str
    requires_tenant_id: bool


API_ALIASES: tuple[ApiAlias, ...] = (
    ApiAlias("accounting", "accountingApi", True),
    ApiAlias("asset", "assetApi", True),
    ApiAlias("files", "filesApi", True),
    ApiAlias("project", "projectApi", True),
    ApiAlias("payroll-au", "payrollAUApi", True),
    ApiAlias("payroll-nz", "payrollNZApi", True),
    ApiAlias("payroll-uk", "payrollUKApi", True),
    ApiAlias("bankfeeds", "bankFeedsApi", True),
    ApiAlias("appstore", "appStoreApi", False),
    ApiAlias("finance", "financeApi", True),
)


def find_api_alias(value: str) -> Optional[ApiAlias]:
    """Match a user-supplied API name against aliases and identifiers, ignoring case."""
    normalized = value.strip().lower()
    for entry in API_ALIASES:
        if (
            entry.alias == normalized
            or entry.identifier.lower() == normalized
        ):
            return entry
    return None


def known_aliases() -> list[str]:
    return [entry.alias for entry in API_ALIASES]
