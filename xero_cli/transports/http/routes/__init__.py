from aiohttp import web

from .doctor_route import handle_doctor
from .health_route import handle_health
from .invoke_route import (
    InvokePayloadDeserializer,
    InvokeRouteHandler,
    handle_invoke,
)

HEALTH_PATH = "/healthz"
DOCTOR_PATH = "/v1/doctor"
INVOKE_PATH = "/v1/invoke"


def register_all_routes(app: web.Application) -> None:
    app.router.add_get(HEALTH_PATH, handle_health)
    app.router.add_post(DOCTOR_PATH, handle_doctor)
    app.router.add_post(INVOKE_PATH, handle_invoke)


__all__ = [
    "DOCTOR_PATH",
    "HEALTH_PATH",
    "INVOKE_PATH",
    "InvokePayloadDeserializer",
    "InvokeRouteHandler",
    "handle_doctor",
    "handle_health",
    "handle_invoke",
    "register_all_routes",
]
