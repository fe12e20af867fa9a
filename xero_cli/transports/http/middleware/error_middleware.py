from aiohttp import web
from aiohttp.web import middleware


@middleware
async def error_middleware(request: web.Request, handler):
    try:
        return await handler(request)
    except web.HTTPNotFound:
        return web.json_response({"error": "Not found."}, status=404)
    except web.HTTPMethodNotAllowed:
        return web.json_response({"error": "Not found."}, status=404)
    except web.HTTPException:
        raise
    except Exception as e:
        if "logger" in request.app:
            request.app["logger"].error(f"Unhandled error: {e}", exc_info=True)
        return web.json_response({"error": str(e)}, status=500)
