from __future__ import annotations

import json
from dataclasses import dataclass, field
from functools import lru_cache
from importlib import resources
from typing import Any, Optional

from xero_cli.errors import ConfigurationError

SCOPES_RESOURCE_NAME = "xero-scopes.json"
DEFAULT_SCOPE_PROFILE = "core-read-only"


@dataclass(frozen=True)
class ScopeCatalog:
    date_created: str = "unknown"
    source_url: str = "unknown"
    descriptions: dict[str, str] = field(default_factory=dict)
    scope_names: tuple[str, ...] = ()
    profiles: dict[str, tuple[str, ...]] = field(default_factory=dict)

    def describe(self, scope_name: str) -> str:
        return self.descriptions.get(scope_name, "")


@dataclass(frozen=True)
class ResolvedScopes:
    scopes: tuple[str, ...]
    warnings: tuple[str, ...] = ()


@lru_cache(maxsize=1)
def load_scope_catalog() -> ScopeCatalog:
    resource = resources.files("xero_cli.resources").joinpath(
        SCOPES_RESOURCE_NAME
    )
    try:
        raw = resource.read_text(encoding="utf-8")
    except OSError:
        raise ConfigurationError(
            f'Failed to read scope catalog "{resource}".'
        ) from None
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        raise ConfigurationError(
            f'Failed to parse scope catalog "{resource}".'
        ) from None
    return _parse_scope_catalog(data)


def _parse_scope_catalog(data: dict[str, Any]) -> ScopeCatalog:
    metadata = data.get("metadata") or {}
    descriptions: dict[str, str] = {}
    scope_names: list[str] = []

    for entry in data.get("scopes") or []:
        name = entry.get("scope_name")
        if not name:
            continue
        scope_names.append(name)
        descriptions.setdefault(name, str(entry.get("description") or ""))

    profiles = {
        name: tuple(scope.strip() for scope in scopes if scope.strip())
        for name, scopes in (data.get("profiles") or {}).items()
    }

    return ScopeCatalog(
        date_created=metadata.get("date_created") or "unknown",
        source_url=metadata.get("source_url") or "unknown",
        descriptions=descriptions,
        scope_names=tuple(scope_names),
        profiles=profiles,
    )


def resolve_oauth_scopes(
    raw: Optional[str],
    catalog: Optional[ScopeCatalog] = None,
) -> ResolvedScopes:
    """
    Expand a ``--scopes`` value into scope tokens.

    Accepts profile names and scope tokens separated by commas or
    whitespace. Unknown tokens are kept and reported as warnings; the
    catalog is scraped documentation, not an authority.
    """
    catalog = catalog or load_scope_catalog()
    tokens = [
        token
        for token in (raw or DEFAULT_SCOPE_PROFILE).replace(",", " ").split()
        if token
    ]

    scopes: list[str] = []
    warnings: list[str] = []
    for token in tokens:
        expanded = catalog.profiles.get(token, (token,))
        if token not in catalog.profiles and token not in catalog.descriptions:
            warnings.append(
                f'Scope "{token}" is not in the known scope list; '
                "passing it through unchanged."
            )
        for scope in expanded:
            if scope not in scopes:
                scopes.append(scope)

    if scopes and "offline_access" not in scopes:
        warnings.append(
            "offline_access is not requested; the access token cannot be "
            "refreshed and login will be needed again after it expires."
        )

    return ResolvedScopes(scopes=tuple(scopes), warnings=tuple(warnings))


def render_oauth_scopes_help_text(
    catalog: Optional[ScopeCatalog] = None,
) -> str:
    catalog = catalog or load_scope_catalog()

    lines = [
        "OAuth scopes for `xero auth login --mode oauth --scopes=...`.",
        "Use a profile name or a comma-separated list of scope tokens.",
        "Manually scraped from Xero Api Docs, treat as guidance only.",
        "",
        f"Date scraped: {catalog.date_created}",
        f"Source URL: {catalog.source_url}",
        "",
        "Scopes:",
    ]
    lines.extend(
        _scope_line(catalog, scope_name)
        for scope_name in catalog.scope_names
    )

    for profile_name, profile_scopes in catalog.profiles.items():
        lines.append("")
        lines.append(f"Profile {profile_name}:")
        lines.extend(
            _scope_line(catalog, scope_name)
            for scope_name in profile_scopes
        )

    return "\n".join(lines) + "\n"


def _scope_line(catalog: ScopeCatalog, scope_name: str) -> str:
    description = catalog.describe(scope_name)
    if not description:
        return f"  {scope_name}"
    return f"  {scope_name} - {description}"
