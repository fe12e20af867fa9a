from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any, Optional

import aiohttp

from xero_cli.errors import DelegationFailure
from xero_cli.logging import get_logger

from .http.routes import DOCTOR_PATH, HEALTH_PATH, INVOKE_PATH
from .proxy_payload import prepare_proxy_payload

logger = get_logger("transport.client")

_NOT_JSON = object()


class DelegationClient:
    """Talks to a delegation server started with ``xero proxy``."""

    def __init__(self, base_url: str, timeout_seconds: float = 120.0) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)

    @property
    def base_url(self) -> str:
        return self._base_url

    async def check_health(self) -> None:
        try:
            async with aiohttp.ClientSession(timeout=self._timeout) as session:
                async with session.get(
                    f"{self._base_url}{HEALTH_PATH}"
                ) as response:
                    if response.status != 200:
                        raise DelegationFailure(
                            "Testing proxy reachability failed: "
                            f"health check failed ({response.status})"
                        )
        except aiohttp.ClientError as e:
            raise DelegationFailure(
                f"Testing proxy reachability failed: {e}"
            ) from None

    async def doctor(self) -> dict[str, Any]:
        status, raw, parsed = await self._post(DOCTOR_PATH, None)
        if status != 200:
            error = _error_of(parsed)
            if error is not None:
                raise DelegationFailure(
                    f"Testing server authentication failed: {error}"
                )
            raise DelegationFailure(
                f"Testing server authentication failed ({status})."
            )
        return parsed if isinstance(parsed, dict) else {}

    async def invoke(
        self,
        api: str,
        method: str,
        tenant_id: Optional[str] = None,
        raw_params: Sequence[str] = (),
    ) -> Any:
        """
        Forward one invocation. Returns the decoded JSON result, or the raw
        body text when the server did not answer with JSON.
        """
        payload = prepare_proxy_payload(raw_params)
        body = payload.to_request_body(api, method, tenant_id)
        logger.debug(
            f"Delegating {api}.{method} to {self._base_url} "
            f"({len(payload.uploaded_files)} uploaded files)"
        )

        status, raw, parsed = await self._post(INVOKE_PATH, body)
        if status != 200:
            error = _error_of(parsed)
            if error is not None:
                raise DelegationFailure(error)
            raise DelegationFailure(raw or f"Proxy request failed ({status}).")

        if parsed is _NOT_JSON:
            return raw
        return parsed

    async def _post(
        self, path: str, body: Optional[dict[str, Any]]
    ) -> tuple[int, str, Any]:
        headers = {"Accept": "application/json"}
        try:
            async with aiohttp.ClientSession(timeout=self._timeout) as session:
                async with session.post(
                    f"{self._base_url}{path}", json=body, headers=headers
                ) as response:
                    raw = await response.text()
                    status = response.status
        except aiohttp.ClientError as e:
            raise DelegationFailure(
                f"Proxy request to {self._base_url}{path} failed: {e}"
            ) from None

        return status, raw, _parse_body(raw)


def _parse_body(raw: str) -> Any:
    if not raw:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return _NOT_JSON


def _error_of(parsed: Any) -> Optional[str]:
    if isinstance(parsed, dict) and isinstance(parsed.get("error"), str):
        return parsed["error"]
    return None
