from .delegation_client import DelegationClient
from .http import HTTPTransport, create_http_application
from .proxy_payload import ProxyInvokePayload, prepare_proxy_payload

__all__ = [
    "DelegationClient",
    "HTTPTransport",
    "ProxyInvokePayload",
    "create_http_application",
    "prepare_proxy_payload",
]
