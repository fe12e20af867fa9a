from __future__ import annotations

from pathlib import Path
from typing import Optional

from xero_cli.errors import PolicyBlocked
from xero_cli.logging import get_logger
from xero_cli.types import MethodPolicy, PolicyDecision

from .policy_loader import PolicyDocumentLoader

logger = get_logger("policy")

READ_METHOD_PREFIX = "get"


def fallback_policy(method_key: str) -> MethodPolicy:
    """Policy for a key the policy file does not mention."""
    method_name = method_key.rsplit(".", 1)[-1]
    if method_name.startswith(READ_METHOD_PREFIX):
        return MethodPolicy.ALLOW
    return MethodPolicy.BLOCK


class PolicyGate:
    """
    Decides allow / ask / block for ``alias.methodName`` keys.

    The policy file is read on every decision so edits take effect without
    restarting a long-running delegation server.
    """

    def __init__(
        self,
        policy_path: Optional[Path],
        loader: Optional[PolicyDocumentLoader] = None,
    ):
        self._policy_path = policy_path
        self._loader = loader or PolicyDocumentLoader()

    @property
    def policy_path(self) -> Optional[Path]:
        return self._policy_path

    def decide(self, method_key: str) -> PolicyDecision:
        document = (
            self._loader.load(self._policy_path)
            if self._policy_path is not None
            else None
        )

        if document is None:
            decision = PolicyDecision(
                policy=MethodPolicy.ALLOW,
                has_explicit_entry=False,
                source_policy_path=None,
            )
        elif method_key in document.methods:
            decision = PolicyDecision(
                policy=document.methods[method_key],
                has_explicit_entry=True,
                source_policy_path=document.path,
            )
        else:
            decision = PolicyDecision(
                policy=fallback_policy(method_key),
                has_explicit_entry=False,
                source_policy_path=document.path,
            )

        logger.policy_decided(method_key, decision)
        return decision

    @staticmethod
    def enforce(method_key: str, decision: PolicyDecision) -> None:
        if decision.policy == MethodPolicy.BLOCK:
            raise PolicyBlocked(
                method_key,
                explicit=decision.has_explicit_entry,
                policy_path=decision.source_policy_path,
            )
