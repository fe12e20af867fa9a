from __future__ import annotations


class TestCoreImports:

    def test_top_level_package(self):
        import xero_cli

        assert hasattr(xero_cli, "__version__")

    def test_public_api_exports(self):
        from xero_cli import (
            AccessGrant,
            AuditEvent,
            AuthMode,
            ErrorKind,
            InvocationEngine,
            InvocationMode,
            InvokeRequest,
            InvokeResult,
            MethodPolicy,
            SdkResponse,
            Settings,
            XeroCliError,
            XeroLogger,
            build_engine,
            get_logger,
            setup_logging,
        )

    def test_error_kinds_match_class_names(self):
        from xero_cli import errors

        for kind in errors.ErrorKind:
            error_class = getattr(errors, kind.value)
            assert error_class.kind is kind


class TestSubpackageImports:

    def test_invocation_package(self):
        from xero_cli.invocation import (
            DispatchTable,
            InvocationResolver,
            ParameterParser,
            load_dispatch_table,
        )

    def test_transport_package(self):
        from xero_cli.transports import (
            DelegationClient,
            HTTPTransport,
            create_http_application,
            prepare_proxy_payload,
        )

    def test_cli_entry_point(self):
        from xero_cli.cli import cli, main

        assert callable(main)
        assert "invoke" in cli.commands
        assert "proxy" in cli.commands
