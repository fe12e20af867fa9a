"""
Invocation Resolver

Maps a user-facing ``(api alias, method)`` pair onto the method catalog and
turns pass-through ``--name=value`` tokens into the positional argument
vector the SDK method expects.

Resolution happens in two phases so that the policy gate can run between
them:

- ``plan()`` is pure: alias lookup, catalog lookup, tenant id, token
  grammar. It never touches the filesystem or credentials.
- ``build_arguments()`` converts every raw value with the parameter parser,
  which may read local files.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Optional

from xero_cli.catalog import ApiAlias, find_api_alias, known_aliases
from xero_cli.errors import (
    MissingRequiredParam,
    MissingTenantId,
    NoSignatureMetadata,
    UnknownAlias,
    UnknownMethod,
)
from xero_cli.types import ManifestMethod, MethodCatalog

from .param_tokens import TENANT_PARAM_NAMES, parse_param_tokens
from .parameter_parser import BINARY_TYPES, parse_parameter, reads_file


@dataclass(frozen=True)
class InvocationPlan:
    alias: ApiAlias
    method: ManifestMethod
    tenant_id: Optional[str]
    params: Mapping[str, str] = field(default_factory=dict)

    @property
    def api_identifier(self) -> str:
        return self.alias.identifier

    @property
    def method_key(self) -> str:
        return f"{self.alias.alias}.{self.method.name}"


@dataclass(frozen=True)
class ResolvedInvocation:
    plan: InvocationPlan
    ordered_args: tuple[Any, ...]
    file_param_names: tuple[str, ...] = ()

    @property
    def api_identifier(self) -> str:
        return self.plan.api_identifier

    @property
    def method_name(self) -> str:
        return self.plan.method.name

    @property
    def method_key(self) -> str:
        return self.plan.method_key


class InvocationResolver:
    def __init__(
        self,
        catalog: MethodCatalog,
        default_tenant_id: Optional[str] = None,
    ):
        self._catalog = catalog
        self._default_tenant_id = default_tenant_id

    @property
    def catalog(self) -> MethodCatalog:
        return self._catalog

    def resolve_alias(self, api_alias: str) -> ApiAlias:
        alias = find_api_alias(api_alias)
        if alias is None:
            raise UnknownAlias(api_alias, known_aliases())
        return alias

    def find_method(
        self, alias: ApiAlias, method_name: str
    ) -> ManifestMethod:
        api = self._catalog.find_api(alias.identifier)
        method = api.find_method(method_name) if api else None
        if method is None:
            raise UnknownMethod(
                alias.alias,
                method_name,
                f"Run `xero methods {alias.alias}` to list methods.",
            )
        if not method.signature_found:
            raise NoSignatureMetadata(alias.alias, method_name)
        return method

    def plan(
        self,
        api_alias: str,
        method_name: str,
        explicit_tenant_id: Optional[str] = None,
        raw_tokens: Sequence[str] = (),
    ) -> InvocationPlan:
        alias = self.resolve_alias(api_alias)
        method = self.find_method(alias, method_name)
        tenant_id = self._resolve_tenant_id(
            alias, method, explicit_tenant_id
        )

        accepted_names = [
            param.name
            for param in method.params
            if param.name not in TENANT_PARAM_NAMES
        ]
        params = parse_param_tokens(
            raw_tokens,
            accepted_names=accepted_names,
            method_label=f"{alias.alias}.{method.name}",
        )

        return InvocationPlan(
            alias=alias,
            method=method,
            tenant_id=tenant_id,
            params=params,
        )

    def build_arguments(
        self,
        plan: InvocationPlan,
        uploaded_files: Optional[Mapping[str, bytes]] = None,
    ) -> ResolvedInvocation:
        uploaded_files = uploaded_files or {}
        slots: list[tuple[Any, bool]] = []
        file_param_names: list[str] = []

        for param in plan.method.params:
            if param.name in TENANT_PARAM_NAMES:
                if plan.tenant_id is None and param.is_required:
                    raise MissingTenantId()
                slots.append((plan.tenant_id, plan.tenant_id is not None))
                continue

            if param.name not in plan.params:
                if param.is_required:
                    raise MissingRequiredParam(
                        param.name, param.declared_type
                    )
                slots.append((None, False))
                continue

            raw_value = plan.params[param.name]
            is_binary = param.declared_type.strip() in BINARY_TYPES
            value = parse_parameter(
                param.declared_type,
                raw_value,
                param.name,
                uploaded_files.get(param.name) if is_binary else None,
            )
            if reads_file(param.declared_type, raw_value):
                file_param_names.append(param.name)
            slots.append((value, True))

        while slots and not slots[-1][1]:
            slots.pop()

        return ResolvedInvocation(
            plan=plan,
            ordered_args=tuple(value for value, _ in slots),
            file_param_names=tuple(file_param_names),
        )

    def resolve(
        self,
        api_alias: str,
        method_name: str,
        explicit_tenant_id: Optional[str] = None,
        raw_tokens: Sequence[str] = (),
        uploaded_files: Optional[Mapping[str, bytes]] = None,
    ) -> ResolvedInvocation:
        plan = self.plan(
            api_alias, method_name, explicit_tenant_id, raw_tokens
        )
        return self.build_arguments(plan, uploaded_files)

    def _resolve_tenant_id(
        self,
        alias: ApiAlias,
        method: ManifestMethod,
        explicit_tenant_id: Optional[str],
    ) -> Optional[str]:
        tenant_id = (explicit_tenant_id or "").strip() or (
            self._default_tenant_id or ""
        ).strip()

        needs_tenant = alias.requires_tenant_id or any(
            param.name in TENANT_PARAM_NAMES and param.is_required
            for param in method.params
        )
        if needs_tenant and not tenant_id:
            raise MissingTenantId()
        return tenant_id or None
