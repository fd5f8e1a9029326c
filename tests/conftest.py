"""Test configuration for cookctl tests."""

from __future__ import annotations

import json
from typing import Callable

import httpx
import pytest

from cookctl.auth.credentials import CredentialStore

API_URL = "http://cooking.test"

Handler = Callable[[httpx.Request], httpx.Response]


class FakeCookingAPI:
    """In-memory Cooking App API served through httpx.MockTransport."""

    url = API_URL

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Handler] = {}
        self.requests: list[httpx.Request] = []
        self.route("GET", "/api/v1/healthz", lambda request: httpx.Response(200, json={"ok": True}))

    def route(self, method: str, path: str, handler: Handler) -> None:
        self.routes[(method, path)] = handler

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"code": "not_found", "message": "not found"})
        return handler(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def calls(self) -> list[tuple[str, str]]:
        return [(request.method, request.url.path) for request in self.requests]

    def install_login(self, *, token: str = "pat_abc", token_id: str = "token-1", csrf: str = "csrf123") -> None:
        """Serve the session login / token mint / session logout endpoints."""

        def login(request: httpx.Request) -> httpx.Response:
            payload = json.loads(request.content)
            if payload != {"username": "sam", "password": "pw"}:
                return httpx.Response(401, json={"code": "unauthorized", "message": "invalid credentials"})
            return httpx.Response(
                204,
                headers=[
                    ("Set-Cookie", "cooking_app_session=sess; Path=/"),
                    ("Set-Cookie", f"cooking_app_session_csrf={csrf}; Path=/"),
                ],
            )

        def create_token(request: httpx.Request) -> httpx.Response:
            if request.headers.get("X-CSRF-Token") != csrf:
                return httpx.Response(403, json={"code": "csrf_failed", "message": "missing csrf token"})
            if "cooking_app_session=sess" not in request.headers.get("cookie", ""):
                return httpx.Response(401, json={"code": "unauthorized", "message": "no session"})
            payload = json.loads(request.content)
            return httpx.Response(
                201,
                json={
                    "id": token_id,
                    "name": payload["name"],
                    "token": token,
                    "created_at": "2025-01-01T00:00:00Z",
                },
            )

        self.route("POST", "/api/v1/auth/login", login)
        self.route("POST", "/api/v1/tokens", create_token)
        self.route("POST", "/api/v1/auth/logout", lambda request: httpx.Response(204))


@pytest.fixture
def api() -> FakeCookingAPI:
    return FakeCookingAPI()


@pytest.fixture
def store(tmp_path) -> CredentialStore:
    return CredentialStore(tmp_path / "cookctl" / "credentials.json")
