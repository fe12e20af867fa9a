from .approval import ApprovalRequest, InteractiveApproval
from .policy_gate import PolicyGate, fallback_policy
from .policy_loader import PolicyDocumentLoader, load_policy_document

__all__ = [
    "ApprovalRequest",
    "InteractiveApproval",
    "PolicyGate",
    "fallback_policy",
    "PolicyDocumentLoader",
    "load_policy_document",
]
