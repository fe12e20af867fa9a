from typing import TYPE_CHECKING

from aiohttp import web

from xero_cli.logging import XeroLogger

from .middleware import MIDDLEWARE_STACK
from .routes import register_all_routes

if TYPE_CHECKING:
    from xero_cli.invocation import InvocationEngine


def create_http_application(
    engine: "InvocationEngine",
    logger: XeroLogger | None = None,
) -> web.Application:
    app = web.Application(middlewares=MIDDLEWARE_STACK)

    app["engine"] = engine

    if logger:
        app["logger"] = logger

    register_all_routes(app)

    return app
