from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from xero_cli.logging import get_logger
from xero_cli.types import AuditEvent

logger = get_logger("audit")


class AuditEventSerializer:
    def serialize(
        self, event: AuditEvent, full: bool = False
    ) -> dict[str, Any]:
        record: dict[str, Any] = {
            "timestamp": event.timestamp.isoformat(),
            "mode": event.mode.value,
            "api": event.api,
            "method": event.method,
            "tenantId": event.tenant_id,
            "paramCount": event.param_count,
            "fileParamCount": event.file_param_count,
            "policy": event.policy.value if event.policy else None,
            "status": event.status.value,
            "durationMs": round(event.duration_ms, 3),
            "responseStatus": event.response_status,
            "error": event.error,
        }

        if full:
            record["rawParams"] = list(event.raw_params or [])
            record["uploadedFileParams"] = list(
                event.uploaded_file_params or []
            )

        return record


class AuditLogger:
    """
    Appends one JSON line per invocation attempt.

    Writing is best-effort: an unwritable log produces a warning and never
    fails the invocation.
    """

    def __init__(self, path: Path | str, full: bool = False):
        self._path = Path(path)
        self._full = full
        self._serializer = AuditEventSerializer()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def full(self) -> bool:
        return self._full

    def record(self, event: AuditEvent) -> bool:
        line = json.dumps(
            self._serializer.serialize(event, full=self._full),
            default=str,
        )
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._path, "a", encoding="utf-8") as file_handle:
                file_handle.write(line + "\n")
        except OSError as write_error:
            logger.audit_write_failed(
                str(self._path),
                write_error.strerror or type(write_error).__name__,
            )
            return False
        return True
