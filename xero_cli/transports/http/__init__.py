from .app_factory import create_http_application
from .http_transport import HTTPTransport

__all__ = [
    "HTTPTransport",
    "create_http_application",
]
