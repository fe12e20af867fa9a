import asyncio
import errno
from typing import TYPE_CHECKING, Callable, Optional

from aiohttp import web

from xero_cli.config import DEFAULT_PROXY_HOST, DEFAULT_PROXY_PORT
from xero_cli.errors import DelegationFailure
from xero_cli.logging import XeroLogger, get_logger

from .app_factory import create_http_application

if TYPE_CHECKING:
    from xero_cli.invocation import InvocationEngine

logger = get_logger("transport.http")


class HTTPTransport:
    """
    Delegation server: runs invocations on behalf of remote ``xero``
    clients using this host's credentials, policy and audit log.
    """

    def __init__(
        self,
        engine: "InvocationEngine",
        host: str = DEFAULT_PROXY_HOST,
        port: int = DEFAULT_PROXY_PORT,
        xero_logger: XeroLogger | None = None,
    ):
        self._engine = engine
        self._host = host
        self._port = port
        self._logger = xero_logger or logger
        self._runner: web.AppRunner | None = None
        self._site: web.TCPSite | None = None

    @property
    def url(self) -> str:
        return f"http://{self._host}:{self._port}"

    def run(self, on_started: Optional[Callable[[str], None]] = None) -> None:
        asyncio.run(self._run_until_stopped(on_started))

    async def start(self) -> None:
        app = create_http_application(self._engine, self._logger)

        self._runner = web.AppRunner(app)
        await self._runner.setup()

        self._site = web.TCPSite(self._runner, self._host, self._port)

        try:
            await self._site.start()
        except OSError as e:
            await self._runner.cleanup()
            self._runner = None
            if e.errno in (errno.EADDRINUSE, 48):
                raise DelegationFailure(
                    f"Port {self._port} is already in use on {self._host}."
                ) from None
            raise

        self._logger.server_started("http", f"{self._host}:{self._port}")

    async def stop(self) -> None:
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
            self._logger.server_stopped()

    async def _run_until_stopped(
        self, on_started: Optional[Callable[[str], None]]
    ) -> None:
        await self.start()
        if on_started is not None:
            on_started(self.url)

        try:
            while True:
                await asyncio.sleep(3600)
        except asyncio.CancelledError:
            pass
        finally:
            await self.stop()
