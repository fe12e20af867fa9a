"""
Invocation engine: one generic ``invoke`` for every catalogued SDK method.

Control flow for one attempt:

    plan (alias, catalog entry, tokens, tenant)
      -> policy gate (+ interactive approval for ``ask``)
      -> SDK binding lookup
      -> typed arguments (parameter parser, local file reads)
      -> credentials (decrypt store / token request)
      -> SDK call
      -> exactly one audit line, success or failure

Every failure is terminal for the attempt; nothing is retried.
"""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Optional

from xero_cli.audit import AuditLogger
from xero_cli.auth import CredentialProvider, IdentityClient
from xero_cli.auth.credential_provider import PassphraseSource
from xero_cli.catalog import load_method_catalog
from xero_cli.config import Settings
from xero_cli.credentials import CredentialStore
from xero_cli.errors import PolicyDenied, RemoteCallFailure, XeroCliError
from xero_cli.logging import get_logger
from xero_cli.policy import ApprovalRequest, InteractiveApproval, PolicyGate
from xero_cli.types import (
    AuditEvent,
    AuditStatus,
    InvocationMode,
    InvokeRequest,
    InvokeResult,
    MethodPolicy,
)

from .dispatch import DispatchTable, call_sdk_method, load_dispatch_table
from .parameter_parser import reads_file
from .resolver import InvocationPlan, InvocationResolver, ResolvedInvocation

logger = get_logger("engine")


class InvocationEngine:
    def __init__(
        self,
        resolver: InvocationResolver,
        policy_gate: PolicyGate,
        approval: InteractiveApproval,
        audit_logger: AuditLogger,
        dispatch_table: DispatchTable,
        credential_provider: CredentialProvider,
    ):
        self._resolver = resolver
        self._policy_gate = policy_gate
        self._approval = approval
        self._audit_logger = audit_logger
        self._dispatch_table = dispatch_table
        self._credential_provider = credential_provider

    @property
    def resolver(self) -> InvocationResolver:
        return self._resolver

    @property
    def credential_provider(self) -> CredentialProvider:
        return self._credential_provider

    async def invoke(
        self,
        request: InvokeRequest,
        mode: InvocationMode = InvocationMode.DIRECT,
    ) -> InvokeResult:
        start = time.perf_counter()
        timestamp = datetime.now(timezone.utc)
        method_key = f"{request.api}.{request.method}"

        plan: Optional[InvocationPlan] = None
        resolved: Optional[ResolvedInvocation] = None
        policy: Optional[MethodPolicy] = None
        result: Optional[InvokeResult] = None
        failure: Optional[BaseException] = None

        logger.invocation_started(
            method_key, mode.value, len(request.raw_params)
        )

        try:
            plan = self._resolver.plan(
                request.api,
                request.method,
                request.tenant_id,
                request.raw_params,
            )
            method_key = plan.method_key

            decision = self._policy_gate.decide(method_key)
            policy = decision.policy
            self._policy_gate.enforce(method_key, decision)
            sdk_method = self._dispatch_table.require(
                plan.alias.alias, plan.api_identifier, plan.method.name
            )
            if policy == MethodPolicy.ASK:
                await self._request_approval(plan, request)

            resolved = self._resolver.build_arguments(
                plan, request.uploaded_files
            )
            grant = await self._credential_provider.acquire()

            result = await call_sdk_method(
                sdk_method, grant, resolved.ordered_args
            )
            return result
        except BaseException as error:
            failure = error
            raise
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            self._audit_logger.record(
                self._build_audit_event(
                    request=request,
                    mode=mode,
                    timestamp=timestamp,
                    plan=plan,
                    resolved=resolved,
                    policy=policy,
                    result=result,
                    failure=failure,
                    elapsed_ms=elapsed_ms,
                )
            )
            logger.invocation_finished(
                method_key,
                AuditStatus.ERROR.value if failure else AuditStatus.SUCCESS.value,
                elapsed_ms,
                error_kind=_error_kind(failure) if failure else None,
            )

    async def _request_approval(
        self, plan: InvocationPlan, request: InvokeRequest
    ) -> None:
        approved = await self._approval.request(
            ApprovalRequest(
                method_key=plan.method_key,
                api=plan.alias.alias,
                method=plan.method.name,
                tenant_id=plan.tenant_id,
                param_names=tuple(plan.params),
                uploaded_file_params=tuple(
                    name
                    for name, raw_value in plan.params.items()
                    if name in request.uploaded_files
                    or reads_file(
                        plan.method.find_param(name).declared_type, raw_value
                    )
                ),
            )
        )
        if not approved:
            raise PolicyDenied(plan.method_key)

    @staticmethod
    def _build_audit_event(
        request: InvokeRequest,
        mode: InvocationMode,
        timestamp: datetime,
        plan: Optional[InvocationPlan],
        resolved: Optional[ResolvedInvocation],
        policy: Optional[MethodPolicy],
        result: Optional[InvokeResult],
        failure: Optional[BaseException],
        elapsed_ms: float,
    ) -> AuditEvent:
        if resolved is not None:
            file_params = list(resolved.file_param_names)
        else:
            file_params = sorted(request.uploaded_files)

        response_status = result.status if result is not None else None
        if isinstance(failure, RemoteCallFailure):
            response_status = failure.status

        return AuditEvent(
            timestamp=timestamp,
            mode=mode,
            api=plan.alias.alias if plan is not None else request.api,
            method=request.method,
            tenant_id=plan.tenant_id if plan is not None else request.tenant_id,
            param_count=len(request.raw_params),
            file_param_count=len(file_params),
            policy=policy,
            status=AuditStatus.ERROR if failure else AuditStatus.SUCCESS,
            duration_ms=elapsed_ms,
            response_status=response_status,
            error=_error_message(failure) if failure else None,
            raw_params=list(request.raw_params),
            uploaded_file_params=file_params,
        )


def _error_kind(error: BaseException) -> str:
    if isinstance(error, XeroCliError):
        return error.kind.value
    return type(error).__name__


def _error_message(error: BaseException) -> str:
    if isinstance(error, XeroCliError):
        return f"{error.kind.value}: {error}"
    return f"{type(error).__name__}: {error}"


def build_engine(
    settings: Settings,
    approval: Optional[InteractiveApproval] = None,
    passphrase_source: Optional[PassphraseSource] = None,
    dispatch_table: Optional[DispatchTable] = None,
    identity_client: Optional[IdentityClient] = None,
    credential_store: Optional[CredentialStore] = None,
) -> InvocationEngine:
    """Wire an engine from settings; collaborators can be swapped for tests."""
    catalog = load_method_catalog(settings.manifest_path)
    identity_client = identity_client or IdentityClient(
        identity_url=settings.identity_url,
        api_url=settings.api_url,
    )
    store = credential_store or CredentialStore(settings.auth_file)

    return InvocationEngine(
        resolver=InvocationResolver(
            catalog, default_tenant_id=settings.tenant_id_default
        ),
        policy_gate=PolicyGate(settings.policy_file),
        approval=approval
        or InteractiveApproval(
            default_approve=settings.approval_default
        ),
        audit_logger=AuditLogger(settings.audit_log, full=settings.audit_full),
        dispatch_table=dispatch_table
        if dispatch_table is not None
        else load_dispatch_table(settings.sdk_module),
        credential_provider=CredentialProvider(
            settings,
            store,
            identity_client,
            passphrase_source=passphrase_source,
        ),
    )
