import uuid

from aiohttp import web
from aiohttp.web import middleware

REQUEST_ID_HEADER = "X-Request-ID"


@middleware
async def request_id_middleware(request: web.Request, handler):
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
    request["request_id"] = request_id

    response = await handler(request)
    response.headers[REQUEST_ID_HEADER] = request_id

    return response
