from __future__ import annotations

import json
import time
from collections.abc import Sequence
from typing import Any, Callable, Optional

import aiohttp

from xero_cli.config import DEFAULT_API_URL, DEFAULT_IDENTITY_URL
from xero_cli.errors import RemoteCallFailure, TokenRequestFailure
from xero_cli.logging import get_logger
from xero_cli.types import TokenSet

logger = get_logger("auth.token")

TOKEN_PATH = "/connect/token"
CONNECTIONS_PATH = "/connections"
TENANT_FIELDS = (
    "id",
    "tenantId",
    "tenantName",
    "tenantType",
    "createdDateUtc",
    "updatedDateUtc",
)


class IdentityClient:
    """
    Client for the identity service token endpoint and the connections API.

    A new ``aiohttp.ClientSession`` is opened per call; these requests run
    once per invocation at most.
    """

    def __init__(
        self,
        identity_url: str = DEFAULT_IDENTITY_URL,
        api_url: str = DEFAULT_API_URL,
        clock: Callable[[], float] = time.time,
        timeout_seconds: float = 30.0,
    ) -> None:
        self._identity_url = identity_url.rstrip("/")
        self._api_url = api_url.rstrip("/")
        self._clock = clock
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)

    @property
    def token_url(self) -> str:
        return f"{self._identity_url}{TOKEN_PATH}"

    async def request_client_credentials_token(
        self,
        client_id: str,
        client_secret: str,
        scopes: Sequence[str] = (),
    ) -> TokenSet:
        form = {"grant_type": "client_credentials"}
        if scopes:
            form["scope"] = " ".join(scopes)
        return await self._request_token(client_id, client_secret, form)

    async def exchange_authorization_code(
        self,
        client_id: str,
        client_secret: str,
        code: str,
        redirect_uri: str,
    ) -> TokenSet:
        form = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": redirect_uri,
        }
        return await self._request_token(client_id, client_secret, form)

    async def refresh_access_token(
        self,
        client_id: str,
        client_secret: str,
        refresh_token: str,
    ) -> TokenSet:
        form = {
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
        }
        token_set = await self._request_token(client_id, client_secret, form)
        if token_set.refresh_token is None:
            # Some grants do not rotate the refresh token.
            return TokenSet(
                access_token=token_set.access_token,
                refresh_token=refresh_token,
                token_type=token_set.token_type,
                expires_at=token_set.expires_at,
                scope=token_set.scope,
                id_token=token_set.id_token,
            )
        return token_set

    async def list_connections(
        self, access_token: str, token_type: str = "Bearer"
    ) -> list[dict[str, Any]]:
        url = f"{self._api_url}{CONNECTIONS_PATH}"
        headers = {
            "Authorization": f"{token_type} {access_token}",
            "Accept": "application/json",
        }

        try:
            async with aiohttp.ClientSession(timeout=self._timeout) as session:
                async with session.get(url, headers=headers) as response:
                    raw = await response.text()
                    if response.status != 200:
                        raise RemoteCallFailure(
                            f"Connections request failed ({response.status}): "
                            f"{extract_error_detail(raw)}",
                            status=response.status,
                        )
        except aiohttp.ClientError as request_error:
            raise RemoteCallFailure(
                f"Connections request failed: {request_error}"
            ) from None

        try:
            connections = json.loads(raw) if raw else []
        except json.JSONDecodeError:
            raise RemoteCallFailure(
                "Connections response is not valid JSON."
            ) from None
        if not isinstance(connections, list):
            return []

        return [
            summarize_tenant(entry)
            for entry in connections
            if isinstance(entry, dict)
        ]

    async def _request_token(
        self,
        client_id: str,
        client_secret: str,
        form: dict[str, str],
    ) -> TokenSet:
        headers = {"Accept": "application/json"}
        auth = aiohttp.BasicAuth(client_id, client_secret)
        logger.debug(
            f"Requesting {form['grant_type']} token from {self.token_url}"
        )

        try:
            async with aiohttp.ClientSession(timeout=self._timeout) as session:
                async with session.post(
                    self.token_url, data=form, headers=headers, auth=auth
                ) as response:
                    raw = await response.text()
                    if response.status != 200:
                        status_line = " ".join(
                            part
                            for part in (str(response.status), response.reason)
                            if part
                        )
                        raise TokenRequestFailure(
                            f"Token request failed ({status_line}): "
                            f"{extract_error_detail(raw)}"
                        )
        except aiohttp.ClientError as request_error:
            raise TokenRequestFailure(
                f"Token request failed: {request_error}"
            ) from None

        try:
            payload = json.loads(raw)
        except json.JSONDecodeError:
            raise TokenRequestFailure(
                "Token response is not valid JSON."
            ) from None

        return self._token_set_from_payload(payload)

    def _token_set_from_payload(self, payload: Any) -> TokenSet:
        if not isinstance(payload, dict) or not payload.get("access_token"):
            raise TokenRequestFailure(
                "Token request succeeded but access_token is missing."
            )

        expires_in = payload.get("expires_in")
        expires_at = (
            int(self._clock() + float(expires_in))
            if isinstance(expires_in, (int, float))
            else None
        )
        scope = payload.get("scope")
        if isinstance(scope, list):
            scope = " ".join(str(item) for item in scope)

        return TokenSet(
            access_token=str(payload["access_token"]),
            refresh_token=payload.get("refresh_token"),
            token_type=payload.get("token_type") or "Bearer",
            expires_at=expires_at,
            scope=scope,
            id_token=payload.get("id_token"),
        )


def extract_error_detail(raw: str) -> str:
    if not raw:
        return "No response body"
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        return raw
    if isinstance(parsed, dict):
        for field in ("error_description", "error", "message"):
            value = parsed.get(field)
            if isinstance(value, str) and value:
                return value
    return raw


def summarize_tenant(entry: dict[str, Any]) -> dict[str, Optional[str]]:
    summary: dict[str, Optional[str]] = {}
    for field in TENANT_FIELDS:
        value = entry.get(field)
        if field in ("createdDateUtc", "updatedDateUtc"):
            summary[field] = value if value else None
        else:
            summary[field] = value or ""
    return summary
