from __future__ import annotations

from urllib.parse import parse_qs, urlsplit

import pytest

from xero_cli.auth import (
    OAuthLoginFlow,
    build_consent_url,
    load_scope_catalog,
    parse_callback_url,
    render_oauth_scopes_help_text,
    resolve_oauth_scopes,
)
from xero_cli.errors import TokenRequestFailure
from xero_cli.types import AuthMode

from conftest import TEST_PASSPHRASE


class TestScopes:

    def test_default_profile(self):
        resolved = resolve_oauth_scopes(None)

        assert resolved.scopes == load_scope_catalog().profiles["core-read-only"]
        assert "offline_access" in resolved.scopes
        assert resolved.warnings == ()

    def test_profiles_and_tokens_mix_without_duplicates(self):
        resolved = resolve_oauth_scopes("core-read-only,openid accounting.settings")

        assert resolved.scopes.count("openid") == 1
        assert resolved.scopes[-1] == "accounting.settings"

    def test_unknown_scope_is_kept_with_warning(self):
        resolved = resolve_oauth_scopes("offline_access,made.up")

        assert "made.up" in resolved.scopes
        assert any("made.up" in warning for warning in resolved.warnings)

    def test_missing_offline_access_warns(self):
        resolved = resolve_oauth_scopes("accounting.transactions.read")
        assert any("offline_access" in warning for warning in resolved.warnings)

    def test_help_text(self):
        text = render_oauth_scopes_help_text()

        assert text.startswith("OAuth scopes for `xero auth login")
        assert "Profile core-read-only:" in text
        assert "  offline_access\n" in text
        assert text.endswith("\n")


class TestConsentUrl:

    def test_query(self):
        url = build_consent_url(
            "https://login.example/authorize",
            "cid",
            "http://localhost:5000/callback",
            ("openid", "offline_access"),
            "state-1",
        )
        parts = urlsplit(url)
        query = parse_qs(parts.query)

        assert f"{parts.scheme}://{parts.netloc}{parts.path}" == (
            "https://login.example/authorize"
        )
        assert query["response_type"] == ["code"]
        assert query["scope"] == ["openid offline_access"]
        assert query["state"] == ["state-1"]

    def test_callback_code(self):
        assert (
            parse_callback_url(
                "http://localhost:5000/callback?code=abc&state=s1", "s1"
            )
            == "abc"
        )

    def test_callback_state_mismatch(self):
        with pytest.raises(TokenRequestFailure, match="state mismatch"):
            parse_callback_url("http://x/cb?code=abc&state=other", "s1")

    def test_callback_error(self):
        with pytest.raises(TokenRequestFailure, match="access_denied"):
            parse_callback_url("http://x/cb?error=access_denied&state=s1", "s1")

    def test_callback_without_code(self):
        with pytest.raises(TokenRequestFailure, match="authorization code"):
            parse_callback_url("http://x/cb?state=s1", "s1")


class TestOAuthLoginFlow:

    @pytest.mark.asyncio
    async def test_begin_and_complete(self, credential_store, identity_client):
        flow = OAuthLoginFlow(
            credential_store, identity_client, "https://login.example/authorize"
        )
        consent_url = flow.begin(
            "cid",
            "secret",
            "http://localhost:5000/callback",
            ("openid", "offline_access"),
            TEST_PASSPHRASE,
        )

        pending = credential_store.load(TEST_PASSPHRASE)
        assert pending.mode == AuthMode.OAUTH
        assert pending.token_set is None

        state = parse_qs(urlsplit(consent_url).query)["state"][0]
        completed = await flow.complete(
            f"http://localhost:5000/callback?code=code-1&state={state}",
            TEST_PASSPHRASE,
        )

        assert completed.token_set.refresh_token == "refresh-1"
        assert identity_client.calls == [("authorization_code", ("cid", "code-1"))]
        assert credential_store.load(TEST_PASSPHRASE).token_set is not None

    @pytest.mark.asyncio
    async def test_complete_without_begin(self, credential_store, identity_client):
        flow = OAuthLoginFlow(credential_store, identity_client, "https://x")
        with pytest.raises(TokenRequestFailure, match="not started"):
            await flow.complete("http://x/cb?code=a&state=b", TEST_PASSPHRASE)
