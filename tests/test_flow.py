"""Tests for the login, revocation and status flows."""

from __future__ import annotations

import json
from datetime import datetime, timezone

import httpx
import pytest

from cookctl.auth.credentials import Credential
from cookctl.auth.flow import (
    clear_local_credentials,
    get_auth_status,
    parse_expires_at,
    revoke_stored_token,
    run_login_flow,
    save_token,
)
from cookctl.auth.resolver import TokenResolver
from cookctl.config import Config
from cookctl.exceptions import APIError, AuthMissingError, ConnectivityError, CookctlError, UsageError


def _login(store, api, **kwargs):
    kwargs.setdefault("token_name", "cookctl")
    kwargs.setdefault("timeout", 5.0)
    return run_login_flow(store, api.url, "sam", "pw", transport=api.transport, **kwargs)


class TestRunLoginFlow:
    def test_login_stores_token_for_server(self, store, api):
        api.install_login()

        result = _login(store, api)

        assert result.token == "pat_abc"
        assert result.id == "token-1"
        credential = store.load()
        assert credential.token == "pat_abc"
        assert credential.token_id == "token-1"
        assert credential.token_name == "cookctl"
        assert credential.api_url == api.url
        assert credential.created_at == datetime(2025, 1, 1, tzinfo=timezone.utc)
        assert store.path.stat().st_mode & 0o777 == 0o600

    def test_health_check_runs_first(self, store, api):
        api.install_login()
        _login(store, api)
        assert api.calls()[0] == ("GET", "/api/v1/healthz")

    def test_failed_health_check_never_logs_in(self, store, api):
        api.install_login()
        api.route("GET", "/api/v1/healthz", lambda request: httpx.Response(503))

        with pytest.raises(ConnectivityError, match="unable to reach API"):
            _login(store, api)

        assert api.calls() == [("GET", "/api/v1/healthz")]
        assert store.load() is None

    def test_skip_health_check(self, store, api):
        api.install_login()
        _login(store, api, check_health=False)
        assert ("GET", "/api/v1/healthz") not in api.calls()

    def test_expires_at_is_stored(self, store, api):
        api.install_login()
        expires = datetime(2026, 1, 1, tzinfo=timezone.utc)

        _login(store, api, expires_at=expires)

        assert store.load().expires_at == expires
        assert json.loads(api.requests[2].content)["expires_at"] == "2026-01-01T00:00:00Z"

    def test_rejected_login_keeps_existing_credentials(self, store, api):
        api.install_login()
        existing = Credential(token="pat_old", token_id="old")
        store.save(existing)

        with pytest.raises(APIError):
            run_login_flow(store, api.url, "sam", "wrong", token_name="cookctl", timeout=5.0, transport=api.transport)

        assert store.load() == existing

    def test_missing_token_in_response(self, store, api):
        api.install_login()
        api.route("POST", "/api/v1/tokens", lambda request: httpx.Response(201, json={"id": "token-1", "name": "x"}))

        with pytest.raises(CookctlError, match="did not include a token"):
            _login(store, api)

        assert store.load() is None
        assert api.calls()[-1] == ("POST", "/api/v1/auth/logout")

    @pytest.mark.parametrize(
        "username,password,token_name",
        [("", "pw", "cookctl"), ("sam", "", "cookctl"), ("sam", "pw", "  ")],
    )
    def test_blank_inputs_fail_before_network(self, store, api, username, password, token_name):
        with pytest.raises(UsageError):
            run_login_flow(store, api.url, username, password, token_name=token_name, timeout=5.0, transport=api.transport)
        assert api.requests == []


class TestParseExpiresAt:
    def test_empty_means_no_expiry(self):
        assert parse_expires_at(None) is None
        assert parse_expires_at("  ") is None

    def test_rfc3339(self):
        assert parse_expires_at("2026-01-01T00:00:00Z") == datetime(2026, 1, 1, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", ["tomorrow", "2026-01-01", "2026-01-01T00:00:00"])
    def test_invalid_values(self, value):
        with pytest.raises(UsageError, match="RFC3339"):
            parse_expires_at(value)


class TestRevokeStoredToken:
    def _resolver(self, store, api, environ=None):
        return TokenResolver(store, Config(api_url="http://unused.test"), environ or {})

    def test_revoke_then_clear(self, store, api):
        store.save(Credential(token="pat_abc", token_id="token-1", api_url=api.url))
        api.route("DELETE", "/api/v1/tokens/token-1", lambda request: httpx.Response(204))

        result = revoke_stored_token(store, self._resolver(store, api), timeout=5.0, transport=api.transport)

        assert result.revoked is True
        assert result.message == "token revoked and credentials cleared"
        assert not store.path.exists()
        delete = api.requests[-1]
        assert delete.method == "DELETE"
        assert delete.headers["Authorization"] == "Bearer pat_abc"

    def test_revoke_targets_stored_server(self, store, api):
        store.save(Credential(token="pat_abc", token_id="token-1", api_url=api.url))
        api.route("DELETE", "/api/v1/tokens/token-1", lambda request: httpx.Response(204))

        revoke_stored_token(store, self._resolver(store, api), timeout=5.0, transport=api.transport)

        assert {request.url.host for request in api.requests} == {"cooking.test"}

    def test_missing_token_id_leaves_file(self, store, api):
        store.save(Credential(token="pat_abc", api_url=api.url))
        before = store.path.read_text()

        with pytest.raises(CookctlError, match="token id is missing"):
            revoke_stored_token(store, self._resolver(store, api), timeout=5.0, transport=api.transport)

        assert store.path.read_text() == before
        assert api.requests == []

    def test_nothing_stored(self, store, api):
        with pytest.raises(AuthMissingError, match="no stored token"):
            revoke_stored_token(store, self._resolver(store, api), timeout=5.0, transport=api.transport)

    def test_remote_failure_keeps_credentials(self, store, api):
        credential = Credential(token="pat_abc", token_id="token-1", api_url=api.url)
        store.save(credential)
        api.route(
            "DELETE",
            "/api/v1/tokens/token-1",
            lambda request: httpx.Response(403, json={"code": "forbidden", "message": "nope"}),
        )

        with pytest.raises(APIError) as exc_info:
            revoke_stored_token(store, self._resolver(store, api), timeout=5.0, transport=api.transport)

        assert exc_info.value.status_code == 403
        assert store.load() == credential

    def test_failed_health_check_keeps_credentials(self, store, api):
        credential = Credential(token="pat_abc", token_id="token-1", api_url=api.url)
        store.save(credential)
        api.route("GET", "/api/v1/healthz", lambda request: httpx.Response(500))

        with pytest.raises(ConnectivityError):
            revoke_stored_token(store, self._resolver(store, api), timeout=5.0, transport=api.transport)

        assert store.load() == credential
        assert api.calls() == [("GET", "/api/v1/healthz")]

    def test_env_token_still_active(self, store, api):
        store.save(Credential(token="pat_abc", token_id="token-1", api_url=api.url))
        api.route("DELETE", "/api/v1/tokens/token-1", lambda request: httpx.Response(204))
        resolver = self._resolver(store, api, {"COOKING_PAT": "pat_env"})

        result = revoke_stored_token(store, resolver, timeout=5.0, transport=api.transport)

        assert result.env_token_active is True
        assert result.message.endswith("COOKING_PAT is still set")


class TestLocalLogout:
    def test_clear_without_network(self, store):
        store.save(Credential(token="pat_abc"))
        resolver = TokenResolver(store, Config(), {})

        result = clear_local_credentials(store, resolver)

        assert result.revoked is False
        assert result.message == "credentials cleared"
        assert store.load() is None

    def test_clear_with_env_token(self, store):
        store.save(Credential(token="pat_abc"))
        resolver = TokenResolver(store, Config(), {"COOKING_PAT": "pat_env"})

        result = clear_local_credentials(store, resolver)

        assert result.env_token_active is True
        assert result.message == "credentials cleared; COOKING_PAT is still set"

    def test_clear_when_nothing_stored(self, store):
        result = clear_local_credentials(store, TokenResolver(store, Config(), {}))
        assert result.revoked is False


class TestSaveToken:
    def test_save(self, store):
        credential = save_token(store, "  pat_manual\n", "https://cooking.example.com")
        assert store.load() == credential
        assert credential.token == "pat_manual"

    def test_empty_token(self, store):
        with pytest.raises(UsageError):
            save_token(store, "  ", "https://cooking.example.com")


class TestAuthStatus:
    def test_file_token_is_masked(self, store):
        store.save(Credential(token="pat_abcdef1234", token_id="token-1", token_name="laptop", api_url="https://a.test"))

        status = get_auth_status(store, TokenResolver(store, Config(), {}))

        assert status.source == "credentials-file"
        assert status.token_present is True
        assert status.masked_token == "****1234"
        assert status.api_url == "https://a.test"
        assert status.token_id == "token-1"
        assert status.token_name == "laptop"
        assert status.credentials_path == str(store.path)

    def test_env_token(self, store):
        store.save(Credential(token="pat_file", token_id="token-1"))

        status = get_auth_status(store, TokenResolver(store, Config(), {"COOKING_PAT": "pat_env_9876"}))

        assert status.source == "env"
        assert status.masked_token == "****9876"
        assert status.token_id is None

    def test_no_token(self, store):
        status = get_auth_status(store, TokenResolver(store, Config(), {}))
        assert status.source == "none"
        assert status.token_present is False
        assert status.masked_token == ""
