"""
Client-side preparation of delegated invoke payloads.

The delegation server cannot read the caller's filesystem, so before a
request leaves this host:

- ``--name=<file>.json`` (or ``.yaml`` / ``.yml``) tokens are replaced by the
  file's content as compact inline JSON;
- any other ``--name=<path>`` naming an existing regular file is kept as is
  and the file is attached base64 encoded under ``uploadedFiles[name]``.
  The server only consults an attachment when the parameter is binary.
"""

from __future__ import annotations

import base64
import json
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from xero_cli.errors import DelegationFailure

STRUCTURED_SUFFIXES = (".json", ".yaml", ".yml")


@dataclass(frozen=True)
class ProxyInvokePayload:
    raw_params: tuple[str, ...]
    uploaded_files: dict[str, str] = field(default_factory=dict)

    def to_request_body(
        self, api: str, method: str, tenant_id: Optional[str]
    ) -> dict[str, Any]:
        body: dict[str, Any] = {
            "api": api,
            "method": method,
            "rawParams": list(self.raw_params),
        }
        if tenant_id is not None:
            body["tenantId"] = tenant_id
        if self.uploaded_files:
            body["uploadedFiles"] = dict(self.uploaded_files)
        return body


def prepare_proxy_payload(raw_params: Sequence[str]) -> ProxyInvokePayload:
    uploaded_files: dict[str, str] = {}
    prepared = [
        _prepare_token(token, uploaded_files) for token in raw_params
    ]
    return ProxyInvokePayload(
        raw_params=tuple(prepared), uploaded_files=uploaded_files
    )


def _prepare_token(token: str, uploaded_files: dict[str, str]) -> str:
    if not token.startswith("--"):
        return token

    separator = token.find("=")
    if separator <= 0:
        return token

    name = token[2:separator].strip()
    if not name:
        return token

    value = token[separator + 1 :].strip()
    if not value.lower().endswith(STRUCTURED_SUFFIXES):
        path = Path(value)
        if value and path.is_file():
            uploaded_files[name] = base64.b64encode(path.read_bytes()).decode(
                "ascii"
            )
        return token

    inline = json.dumps(
        _load_structured_file(value), separators=(",", ":")
    )
    return f"{token[: separator + 1]}{inline}"


def _load_structured_file(value: str) -> Any:
    path = Path(value)
    kind = "JSON" if value.lower().endswith(".json") else "YAML"

    if not path.exists():
        raise DelegationFailure(f'Proxy {kind} file does not exist: "{value}".')
    if not path.is_file():
        raise DelegationFailure(f'Proxy {kind} path is not a file: "{value}".')

    try:
        text = path.read_text(encoding="utf-8")
        if kind == "JSON":
            return json.loads(text)
        return yaml.safe_load(text)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError, yaml.YAMLError):
        raise DelegationFailure(
            f'Proxy {kind} file is invalid: "{value}".'
        ) from None
