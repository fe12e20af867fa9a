import base64
import binascii
import json
from typing import Any

from aiohttp import web

from xero_cli.errors import XeroCliError
from xero_cli.serialization import dump_json
from xero_cli.types import InvocationMode, InvokeRequest


class InvalidPayload(ValueError):
    pass


class InvokePayloadDeserializer:
    """
    Validates a delegated invoke body.

    ``rawParams`` is only honoured when it is a list of strings; anything
    else is treated as no parameters. Uploaded files arrive base64 encoded.
    """

    def deserialize(self, raw: str) -> InvokeRequest:
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError:
            raise InvalidPayload("Invalid JSON payload.") from None

        if not isinstance(payload, dict):
            raise InvalidPayload("Payload must be object.")

        api = payload.get("api")
        method = payload.get("method")
        if not isinstance(api, str) or not isinstance(method, str):
            raise InvalidPayload("Payload requires string api and method.")

        tenant_id = payload.get("tenantId")

        return InvokeRequest(
            api=api,
            method=method,
            tenant_id=tenant_id if isinstance(tenant_id, str) else None,
            raw_params=self._raw_params(payload.get("rawParams")),
            uploaded_files=self._uploaded_files(payload.get("uploadedFiles")),
        )

    @staticmethod
    def _raw_params(value: Any) -> tuple[str, ...]:
        if isinstance(value, list) and all(
            isinstance(item, str) for item in value
        ):
            return tuple(value)
        return ()

    @staticmethod
    def _uploaded_files(value: Any) -> dict[str, bytes]:
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise InvalidPayload("Payload uploadedFiles must be object.")

        uploaded: dict[str, bytes] = {}
        for name, encoded in value.items():
            if not isinstance(encoded, str):
                raise InvalidPayload(
                    f"Payload uploadedFiles.{name} must be string."
                )
            try:
                uploaded[name] = base64.b64decode(encoded, validate=True)
            except (binascii.Error, ValueError):
                raise InvalidPayload(
                    f"Payload uploadedFiles.{name} must be base64."
                ) from None
        return uploaded


class InvokeRouteHandler:
    def __init__(self):
        self._deserializer = InvokePayloadDeserializer()

    async def handle(self, request: web.Request) -> web.Response:
        engine = request.app["engine"]

        raw = await request.text()
        try:
            invoke_request = self._deserializer.deserialize(raw)
        except InvalidPayload as e:
            return web.json_response({"error": str(e)}, status=400)

        try:
            result = await engine.invoke(
                invoke_request, mode=InvocationMode.DELEGATED
            )
        except XeroCliError as e:
            return web.json_response({"error": str(e)}, status=400)

        return web.json_response(result.to_dict(), dumps=dump_json)


_handler = InvokeRouteHandler()
handle_invoke = _handler.handle
