from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from xero_cli.config import (
    DEFAULT_IDENTITY_URL,
    Settings,
    parse_scope_list,
)
from xero_cli.errors import ConfigurationError


class TestSettings:

    def test_defaults_live_under_home_dir(self, tmp_path):
        settings = Settings.from_environ({"XERO_CLI_HOME": str(tmp_path)})

        assert settings.cli_home == tmp_path
        assert settings.auth_file == tmp_path / "auth.json"
        assert settings.policy_file == tmp_path / "policy.json"
        assert settings.audit_log == tmp_path / "audit.jsonl"
        assert settings.audit_full is False
        assert settings.approval_default is True
        assert settings.identity_url == DEFAULT_IDENTITY_URL
        assert settings.is_proxy_mode is False
        assert settings.has_env_credentials is False

    def test_default_home(self):
        settings = Settings.from_environ({})
        assert settings.cli_home == Path.home() / ".xero-cli"

    def test_explicit_file_locations(self, tmp_path):
        settings = Settings.from_environ(
            {
                "XERO_AUTH_FILE": str(tmp_path / "a.json"),
                "XERO_POLICY_FILE": str(tmp_path / "p.yaml"),
                "XERO_AUDIT_LOG": str(tmp_path / "audit.log"),
            }
        )
        assert settings.auth_file == tmp_path / "a.json"
        assert settings.policy_file == tmp_path / "p.yaml"
        assert settings.audit_log == tmp_path / "audit.log"

    def test_blank_values_are_unset(self):
        settings = Settings.from_environ(
            {"XERO_TENANT_ID_DEFAULT": "   ", "XERO_PROXY_URL": ""}
        )
        assert settings.tenant_id_default is None
        assert settings.proxy_url is None

    def test_proxy_url_trailing_slash(self):
        settings = Settings.from_environ({"XERO_PROXY_URL": "http://box:8765/"})
        assert settings.proxy_url == "http://box:8765"
        assert settings.is_proxy_mode is True

    @pytest.mark.parametrize("raw, expected", [("1", True), ("off", False)])
    def test_audit_full_flag(self, raw, expected):
        assert Settings.from_environ({"XERO_AUDIT_FULL": raw}).audit_full is expected

    def test_invalid_boolean(self):
        with pytest.raises(ConfigurationError, match="XERO_AUDIT_FULL"):
            Settings.from_environ({"XERO_AUDIT_FULL": "sometimes"})

    def test_approval_default(self):
        assert (
            Settings.from_environ(
                {"XERO_APPROVAL_DEFAULT": "deny"}
            ).approval_default
            is False
        )
        with pytest.raises(ConfigurationError):
            Settings.from_environ({"XERO_APPROVAL_DEFAULT": "maybe"})

    def test_single_env_credential_counts(self):
        settings = Settings.from_environ({"XERO_CLIENT_SECRET": "s"})
        assert settings.has_env_credentials is True

    def test_overrides_ignore_none(self, tmp_path):
        settings = Settings.from_environ(
            {"XERO_CLI_HOME": str(tmp_path), "XERO_TENANT_ID_DEFAULT": "t-1"}
        )
        overridden = settings.with_overrides(
            tenant_id_default=None, keyring_password="pw"
        )
        assert overridden.tenant_id_default == "t-1"
        assert overridden.keyring_password == "pw"

    def test_scope_list(self):
        assert parse_scope_list("openid, offline_access  email") == (
            "openid",
            "offline_access",
            "email",
        )
        assert parse_scope_list(None) == ()

    def test_scopes_from_environment(self):
        settings = Settings.from_environ({"XERO_SCOPES": "openid,offline_access"})
        assert settings.scopes == ("openid", "offline_access")

    def test_prefix_is_case_insensitive_and_others_ignored(self, tmp_path):
        settings = Settings.from_environ(
            {
                "xero_cli_home": str(tmp_path),
                "CLIENT_ID": "not-ours",
                "XERO_UNKNOWN_SETTING": "ignored",
            }
        )
        assert settings.cli_home == tmp_path
        assert settings.client_id is None

    def test_invalid_approval_default_names_variable(self):
        with pytest.raises(ConfigurationError, match="XERO_APPROVAL_DEFAULT"):
            Settings.from_environ({"XERO_APPROVAL_DEFAULT": "maybe"})

    def test_settings_are_frozen(self, tmp_path):
        settings = Settings.from_environ({"XERO_CLI_HOME": str(tmp_path)})
        with pytest.raises(ValidationError):
            settings.proxy_url = "http://elsewhere"

    def test_explicit_construction_fills_file_locations(self, tmp_path):
        settings = Settings(cli_home=tmp_path)
        assert settings.auth_file == tmp_path / "auth.json"
        assert settings.is_proxy_mode is False
