from __future__ import annotations

import base64

import pytest
import pytest_asyncio

from xero_cli.errors import DelegationFailure
from xero_cli.invocation import build_engine
from xero_cli.transports import (
    DelegationClient,
    HTTPTransport,
    create_http_application,
)
from xero_cli.transports.http.middleware import REQUEST_ID_HEADER

from conftest import make_approval, read_audit_lines, write_policy


@pytest.fixture
def engine(env_settings, bindings, identity_client):
    return build_engine(
        env_settings,
        approval=make_approval("y"),
        dispatch_table=bindings.build_table(),
        identity_client=identity_client,
    )


@pytest_asyncio.fixture
async def client(aiohttp_client, engine):
    return await aiohttp_client(create_http_application(engine))


class TestHealth:

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/healthz")
        assert response.status == 200
        assert await response.text() == "ok\n"
        assert response.content_type == "text/plain"

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, client):
        response = await client.get(
            "/healthz", headers={REQUEST_ID_HEADER: "req-42"}
        )
        assert response.headers[REQUEST_ID_HEADER] == "req-42"

    @pytest.mark.asyncio
    async def test_request_id_is_generated(self, client):
        response = await client.get("/healthz")
        assert len(response.headers[REQUEST_ID_HEADER]) == 32

    @pytest.mark.asyncio
    async def test_unknown_route(self, client):
        response = await client.get("/v2/anything")
        assert response.status == 404
        assert await response.json() == {"error": "Not found."}

    @pytest.mark.asyncio
    async def test_wrong_method_is_not_found(self, client):
        response = await client.get("/v1/invoke")
        assert response.status == 404
        assert await response.json() == {"error": "Not found."}


class TestInvokeRoute:

    @pytest.mark.asyncio
    async def test_invoke(self, client, env_settings, bindings):
        response = await client.post(
            "/v1/invoke",
            json={
                "api": "accounting",
                "method": "getInvoices",
                "rawParams": ["--page=3"],
            },
        )

        assert response.status == 200
        assert await response.json() == {
            "status": 200,
            "body": {"method": "getInvoices", "argCount": 9},
        }
        assert bindings.last_args()[-1] == 3
        assert read_audit_lines(env_settings)[0]["mode"] == "delegated"

    @pytest.mark.asyncio
    async def test_tenant_override(self, client, bindings):
        response = await client.post(
            "/v1/invoke",
            json={
                "api": "accounting",
                "method": "getOrganisations",
                "tenantId": "remote-tenant",
            },
        )
        assert response.status == 200
        assert bindings.last_args() == ("remote-tenant",)

    @pytest.mark.asyncio
    async def test_non_string_raw_params_are_ignored(self, client, bindings):
        response = await client.post(
            "/v1/invoke",
            json={
                "api": "accounting",
                "method": "getOrganisations",
                "rawParams": [1, 2],
            },
        )
        assert response.status == 200
        assert bindings.last_args() == ("tenant-123",)

    @pytest.mark.asyncio
    async def test_uploaded_file_reaches_binary_param(
        self, client, env_settings, bindings
    ):
        write_policy(
            env_settings, {"accounting.createInvoiceAttachmentByFileName": "allow"}
        )
        response = await client.post(
            "/v1/invoke",
            json={
                "api": "accounting",
                "method": "createInvoiceAttachmentByFileName",
                "rawParams": [
                    "--invoiceID=inv-1",
                    "--fileName=receipt.pdf",
                    "--body=/home/caller/receipt.pdf",
                ],
                "uploadedFiles": {
                    "body": base64.b64encode(b"%PDF-1.7").decode()
                },
            },
        )

        assert response.status == 200
        assert bindings.last_args()[-1] == b"%PDF-1.7"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body, error",
        [
            ("{", "Invalid JSON payload."),
            ("[]", "Payload must be object."),
            ('{"api": "accounting"}', "Payload requires string api and method."),
            (
                '{"api": "accounting", "method": "getOrganisations",'
                ' "uploadedFiles": []}',
                "Payload uploadedFiles must be object.",
            ),
            (
                '{"api": "accounting", "method": "getOrganisations",'
                ' "uploadedFiles": {"body": 1}}',
                "Payload uploadedFiles.body must be string.",
            ),
            (
                '{"api": "accounting", "method": "getOrganisations",'
                ' "uploadedFiles": {"body": "***"}}',
                "Payload uploadedFiles.body must be base64.",
            ),
        ],
    )
    async def test_invalid_payloads(self, client, bindings, body, error):
        response = await client.post(
            "/v1/invoke",
            data=body,
            headers={"Content-Type": "application/json"},
        )
        assert response.status == 400
        assert await response.json() == {"error": error}
        assert bindings.calls == []

    @pytest.mark.asyncio
    async def test_policy_block_is_a_client_error(
        self, client, env_settings, bindings
    ):
        write_policy(env_settings, {"accounting.getInvoices": "block"})
        response = await client.post(
            "/v1/invoke",
            json={"api": "accounting", "method": "getInvoices"},
        )

        assert response.status == 400
        payload = await response.json()
        assert "blocked by policy file" in payload["error"]
        assert bindings.calls == []


class TestDoctorRoute:

    @pytest.mark.asyncio
    async def test_doctor(self, client):
        response = await client.post("/v1/doctor")

        assert response.status == 200
        report = await response.json()
        assert report["mode"] == "client_credentials"
        assert report["credentialSource"] == "env"
        assert report["connections"] == 1

    @pytest.mark.asyncio
    async def test_doctor_without_credentials(
        self, aiohttp_client, settings, bindings, identity_client
    ):
        engine = build_engine(
            settings,
            approval=make_approval("y"),
            dispatch_table=bindings.build_table(),
            identity_client=identity_client,
        )
        client = await aiohttp_client(create_http_application(engine))

        response = await client.post("/v1/doctor")
        assert response.status == 400
        assert "xero auth login" in (await response.json())["error"]


class TestDelegationClient:

    @pytest_asyncio.fixture
    async def proxy_url(self, aiohttp_server, engine):
        server = await aiohttp_server(create_http_application(engine))
        return str(server.make_url("")).rstrip("/")

    @pytest.mark.asyncio
    async def test_health_and_doctor(self, proxy_url):
        delegation = DelegationClient(proxy_url)
        await delegation.check_health()

        report = await delegation.doctor()
        assert report["credentialSource"] == "env"

    @pytest.mark.asyncio
    async def test_invoke_round_trip(self, proxy_url, bindings):
        result = await DelegationClient(proxy_url).invoke(
            "accounting", "getOrganisations", "t-9"
        )

        assert result == {
            "status": 200,
            "body": {"method": "getOrganisations", "argCount": 1},
        }
        assert bindings.last_args() == ("t-9",)

    @pytest.mark.asyncio
    async def test_structured_file_is_inlined(
        self, proxy_url, env_settings, bindings, tmp_path
    ):
        write_policy(env_settings, {"accounting.createInvoices": "allow"})
        invoices = tmp_path / "invoices.yaml"
        invoices.write_text("invoices:\n  - type: ACCREC\n")

        await DelegationClient(proxy_url).invoke(
            "accounting", "createInvoices", None, [f"--invoices={invoices}"]
        )

        assert bindings.last_args()[1] == {"invoices": [{"type": "ACCREC"}]}

    @pytest.mark.asyncio
    async def test_binary_file_is_uploaded(
        self, proxy_url, env_settings, bindings, tmp_path
    ):
        write_policy(
            env_settings, {"accounting.createInvoiceAttachmentByFileName": "allow"}
        )
        receipt = tmp_path / "receipt.pdf"
        receipt.write_bytes(b"%PDF-1.7 local")

        await DelegationClient(proxy_url).invoke(
            "accounting",
            "createInvoiceAttachmentByFileName",
            None,
            ["--invoiceID=inv-1", "--fileName=receipt.pdf", f"--body={receipt}"],
        )

        assert bindings.last_args()[3] == b"%PDF-1.7 local"

    @pytest.mark.asyncio
    async def test_server_error_is_raised(self, proxy_url, env_settings):
        write_policy(env_settings, {})
        with pytest.raises(DelegationFailure) as exc_info:
            await DelegationClient(proxy_url).invoke(
                "accounting", "deleteAccount", None, ["--accountID=a"]
            )
        assert "blocked by default" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_unreachable_proxy(self, unused_tcp_port):
        delegation = DelegationClient(f"http://127.0.0.1:{unused_tcp_port}")
        with pytest.raises(
            DelegationFailure, match="Testing proxy reachability failed"
        ):
            await delegation.check_health()


class TestHTTPTransport:

    @pytest.mark.asyncio
    async def test_start_and_stop(self, engine, unused_tcp_port):
        transport = HTTPTransport(engine, host="127.0.0.1", port=unused_tcp_port)
        await transport.start()
        try:
            await DelegationClient(transport.url).check_health()
        finally:
            await transport.stop()

    @pytest.mark.asyncio
    async def test_port_in_use(self, engine, unused_tcp_port):
        first = HTTPTransport(engine, host="127.0.0.1", port=unused_tcp_port)
        second = HTTPTransport(engine, host="127.0.0.1", port=unused_tcp_port)
        await first.start()
        try:
            with pytest.raises(DelegationFailure, match="already in use"):
                await second.start()
        finally:
            await first.stop()

