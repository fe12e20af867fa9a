from __future__ import annotations

import json
from datetime import date, datetime, timezone
from pathlib import Path

from xero_cli.audit import AuditLogger
from xero_cli.audit.audit_logger import AuditEventSerializer
from xero_cli.serialization import dump_json
from xero_cli.types import (
    AuditEvent,
    AuditStatus,
    InvocationMode,
    MethodPolicy,
)


def _event(**overrides):
    fields = dict(
        timestamp=datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc),
        mode=InvocationMode.DIRECT,
        api="accounting",
        method="createInvoices",
        tenant_id="tenant-123",
        param_count=2,
        file_param_count=1,
        policy=MethodPolicy.ASK,
        status=AuditStatus.SUCCESS,
        duration_ms=12.34567,
        response_status=200,
        raw_params=["--invoices=./invoices.json", "--summarizeErrors=true"],
        uploaded_file_params=["invoices"],
    )
    fields.update(overrides)
    return AuditEvent(**fields)


class TestAuditEventSerializer:

    def setup_method(self):
        self.serializer = AuditEventSerializer()

    def test_minimal_record(self):
        data = self.serializer.serialize(_event())

        assert data == {
            "timestamp": "2026-10-18T12:00:00+00:00",
            "mode": "direct",
            "api": "accounting",
            "method": "createInvoices",
            "tenantId": "tenant-123",
            "paramCount": 2,
            "fileParamCount": 1,
            "policy": "ask",
            "status": "success",
            "durationMs": 12.346,
            "responseStatus": 200,
            "error": None,
        }

    def test_full_record_adds_raw_params(self):
        data = self.serializer.serialize(_event(), full=True)

        assert data["rawParams"] == [
            "--invoices=./invoices.json",
            "--summarizeErrors=true",
        ]
        assert data["uploadedFileParams"] == ["invoices"]

    def test_unresolved_policy(self):
        data = self.serializer.serialize(
            _event(policy=None, status=AuditStatus.ERROR, error="X: y")
        )
        assert data["policy"] is None
        assert data["status"] == "error"


class TestAuditLogger:

    def test_appends_one_line_per_event(self, tmp_path):
        audit = AuditLogger(tmp_path / "logs" / "audit.jsonl")

        assert audit.record(_event()) is True
        assert audit.record(_event(method="getInvoices")) is True

        lines = audit.path.read_text().splitlines()
        assert [json.loads(line)["method"] for line in lines] == [
            "createInvoices",
            "getInvoices",
        ]

    def test_write_failure_is_reported_not_raised(self, tmp_path):
        audit = AuditLogger(tmp_path)
        assert audit.record(_event()) is False


class TestDumpJson:

    def test_sdk_values(self):
        payload = {
            "when": datetime(2026, 1, 2, 3, 4, 5),
            "day": date(2026, 1, 2),
            "file": b"\x01\x02",
            "path": Path("/tmp/x"),
            "mode": InvocationMode.DELEGATED,
        }

        assert json.loads(dump_json(payload)) == {
            "when": "2026-01-02T03:04:05",
            "day": "2026-01-02",
            "file": "AQI=",
            "path": "/tmp/x",
            "mode": "delegated",
        }

    def test_model_objects_with_to_dict(self):
        class Invoice:
            def to_dict(self):
                return {"invoiceID": "inv-1"}

        assert json.loads(dump_json({"invoice": Invoice()})) == {
            "invoice": {"invoiceID": "inv-1"}
        }
