from __future__ import annotations

import pytest

from xero_cli.catalog import find_api_alias, known_aliases
from xero_cli.errors import (
    DuplicateParam,
    MalformedParamToken,
    MissingRequiredParam,
    MissingTenantId,
    NoSignatureMetadata,
    TypeMismatch,
    UnknownAlias,
    UnknownMethod,
    UnknownParam,
)
from xero_cli.invocation import (
    InvocationResolver,
    parse_param_tokens,
    split_param_token,
)

from conftest import TEST_TENANT_ID


@pytest.fixture
def resolver(catalog):
    return InvocationResolver(catalog, default_tenant_id=TEST_TENANT_ID)


class TestParamTokens:

    def test_split_token(self):
        assert split_param_token("--where=Status==\"PAID\"") == (
            "where",
            'Status=="PAID"',
        )
        assert split_param_token("--empty=") == ("empty", "")

    @pytest.mark.parametrize("token", ["where=x", "--where", "--=x", "-w=x"])
    def test_malformed_tokens(self, token):
        assert split_param_token(token) is None

    def test_parse_keeps_order(self):
        parsed = parse_param_tokens(["--page=2", "--order=Date"])
        assert list(parsed.items()) == [("page", "2"), ("order", "Date")]

    def test_malformed_token_reports_position(self):
        with pytest.raises(MalformedParamToken, match="argument #2"):
            parse_param_tokens(["--page=2", "order"])

    def test_duplicate_name(self):
        with pytest.raises(DuplicateParam, match='"--page"'):
            parse_param_tokens(["--page=1", "--page=2"])

    @pytest.mark.parametrize(
        "name", ["xeroTenantId", "xeroTentantId", "tenant-id", "tenantId"]
    )
    def test_tenant_names_are_reserved(self, name):
        with pytest.raises(MalformedParamToken, match="reserved for the tenant ID"):
            parse_param_tokens([f"--{name}=abc"])

    def test_unknown_name_lists_accepted(self):
        with pytest.raises(UnknownParam) as exc_info:
            parse_param_tokens(
                ["--pages=2"],
                accepted_names=["page", "order"],
                method_label="accounting.getInvoices",
            )
        message = str(exc_info.value)
        assert "accounting.getInvoices" in message
        assert "page, order" in message


class TestAliases:

    def test_alias_and_identifier_match_case_insensitively(self):
        assert find_api_alias("Accounting").identifier == "accountingApi"
        assert find_api_alias("ACCOUNTINGAPI").alias == "accounting"
        assert find_api_alias("payroll-uk").identifier == "payrollUKApi"

    def test_unknown_alias(self, resolver):
        with pytest.raises(UnknownAlias) as exc_info:
            resolver.resolve_alias("acounting")
        assert ", ".join(known_aliases()) in str(exc_info.value)

    def test_appstore_does_not_need_a_tenant(self):
        assert find_api_alias("appstore").requires_tenant_id is False


class TestPlan:

    def test_plan_for_read_method(self, resolver):
        plan = resolver.plan(
            "accounting", "getInvoices", raw_tokens=["--page=2"]
        )
        assert plan.method_key == "accounting.getInvoices"
        assert plan.api_identifier == "accountingApi"
        assert plan.tenant_id == TEST_TENANT_ID
        assert dict(plan.params) == {"page": "2"}

    def test_method_key_uses_canonical_alias(self, resolver):
        plan = resolver.plan("AccountingApi", "getOrganisations")
        assert plan.method_key == "accounting.getOrganisations"

    def test_explicit_tenant_wins(self, resolver):
        plan = resolver.plan("accounting", "getOrganisations", "other-tenant")
        assert plan.tenant_id == "other-tenant"

    def test_missing_tenant(self, catalog):
        resolver = InvocationResolver(catalog)
        with pytest.raises(MissingTenantId):
            resolver.plan("accounting", "getOrganisations")

    def test_blank_tenant_counts_as_missing(self, catalog):
        resolver = InvocationResolver(catalog, default_tenant_id="  ")
        with pytest.raises(MissingTenantId):
            resolver.plan("accounting", "getOrganisations", "   ")

    def test_tenantless_api(self, catalog):
        resolver = InvocationResolver(catalog)
        plan = resolver.plan(
            "appstore", "getSubscription", raw_tokens=["--subscriptionId=s-1"]
        )
        assert plan.tenant_id is None

    def test_unknown_method(self, resolver):
        with pytest.raises(UnknownMethod, match="xero methods accounting"):
            resolver.plan("accounting", "getInvoicez")

    def test_method_without_signature(self, resolver):
        with pytest.raises(NoSignatureMetadata):
            resolver.plan("accounting", "getTaxRates")

    def test_unknown_param_for_method(self, resolver):
        with pytest.raises(UnknownParam):
            resolver.plan(
                "accounting", "getOrganisations", raw_tokens=["--page=1"]
            )


class TestBuildArguments:

    def test_tenant_injected_and_trailing_optionals_trimmed(self, resolver):
        resolved = resolver.resolve("accounting", "getOrganisations")
        assert resolved.ordered_args == (TEST_TENANT_ID,)

    def test_gaps_are_filled_with_none(self, resolver):
        resolved = resolver.resolve(
            "accounting",
            "getInvoices",
            raw_tokens=["--statuses=DRAFT,AUTHORISED", "--page=2"],
        )
        # xeroTenantId, ifModifiedSince, where, order, iDs, invoiceNumbers,
        # contactIDs, statuses, page
        assert resolved.ordered_args == (
            TEST_TENANT_ID,
            None,
            None,
            None,
            None,
            None,
            None,
            ["DRAFT", "AUTHORISED"],
            2,
        )

    def test_token_order_does_not_matter(self, resolver):
        forward = resolver.resolve(
            "accounting",
            "getInvoices",
            raw_tokens=["--page=1", "--includeArchived=true"],
        )
        backward = resolver.resolve(
            "accounting",
            "getInvoices",
            raw_tokens=["--includeArchived=true", "--page=1"],
        )
        assert forward.ordered_args == backward.ordered_args

    def test_missing_required_param(self, resolver):
        plan = resolver.plan("accounting", "getInvoice")
        with pytest.raises(MissingRequiredParam, match='"--invoiceID"'):
            resolver.build_arguments(plan)

    def test_type_errors_surface(self, resolver):
        plan = resolver.plan(
            "accounting", "getInvoices", raw_tokens=["--page=two"]
        )
        with pytest.raises(TypeMismatch):
            resolver.build_arguments(plan)

    def test_structured_file_is_reported(self, resolver, tmp_path):
        path = tmp_path / "invoices.json"
        path.write_text('{"invoices": [{"type": "ACCREC"}]}')

        resolved = resolver.resolve(
            "accounting",
            "createInvoices",
            raw_tokens=[f"--invoices={path}"],
        )
        assert resolved.ordered_args == (
            TEST_TENANT_ID,
            {"invoices": [{"type": "ACCREC"}]},
        )
        assert resolved.file_param_names == ("invoices",)

    def test_uploaded_binary_replaces_path(self, resolver):
        resolved = resolver.resolve(
            "accounting",
            "createInvoiceAttachmentByFileName",
            raw_tokens=[
                "--invoiceID=inv-1",
                "--fileName=receipt.pdf",
                "--body=/client/only/receipt.pdf",
            ],
            uploaded_files={"body": b"%PDF"},
        )
        assert resolved.ordered_args == (
            TEST_TENANT_ID,
            "inv-1",
            "receipt.pdf",
            b"%PDF",
        )
        assert resolved.file_param_names == ("body",)
