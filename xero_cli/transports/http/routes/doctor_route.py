from aiohttp import web

from xero_cli.auth import run_auth_check
from xero_cli.errors import XeroCliError


async def handle_doctor(request: web.Request) -> web.Response:
    engine = request.app["engine"]

    try:
        report = await run_auth_check(engine.credential_provider)
    except XeroCliError as e:
        return web.json_response({"error": str(e)}, status=400)

    return web.json_response(report.to_dict())
