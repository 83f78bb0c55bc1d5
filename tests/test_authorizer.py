"""
Tests for the default bearer attacher.
"""

import httpx
import pytest

from ctview.auth.authorizer import RequestAuthorizer, is_handshake_path
from ctview.auth.state import SessionSnapshot


def _authorize(auth: RequestAuthorizer, request: httpx.Request) -> httpx.Request:
    flow = auth.auth_flow(request)
    return next(flow)


class TestHandshakePaths:
    @pytest.mark.parametrize(
        "path",
        ["/auth/login", "/auth/register", "/auth/verify", "/auth/2fa/setup", "/ctapi/auth/login"],
    )
    def test_handshake(self, path):
        assert is_handshake_path(path)

    @pytest.mark.parametrize("path", ["/auth/me", "/operations", "/users/12"])
    def test_not_handshake(self, path):
        assert not is_handshake_path(path)


class TestRequestAuthorizer:
    def test_attaches_active_token(self):
        auth = RequestAuthorizer("FINAL1")
        request = _authorize(auth, httpx.Request("GET", "http://ctview.test/operations"))
        assert request.headers["Authorization"] == "Bearer FINAL1"

    def test_no_token_no_header(self):
        auth = RequestAuthorizer()
        request = _authorize(auth, httpx.Request("GET", "http://ctview.test/operations"))
        assert "Authorization" not in request.headers

    def test_skips_handshake(self):
        auth = RequestAuthorizer("FINAL1")
        request = _authorize(auth, httpx.Request("POST", "http://ctview.test/auth/login"))
        assert "Authorization" not in request.headers

    def test_explicit_header_wins(self):
        auth = RequestAuthorizer("FINAL1")
        request = httpx.Request(
            "GET",
            "http://ctview.test/auth/me",
            headers={"Authorization": "Bearer OTHER"},
        )
        assert _authorize(auth, request).headers["Authorization"] == "Bearer OTHER"

    def test_follows_session_changes(self):
        auth = RequestAuthorizer()
        auth.handle_session_change(SessionSnapshot(token="T2"))
        assert auth.token == "T2"

        auth.handle_session_change(SessionSnapshot())
        assert auth.token is None

    @pytest.mark.asyncio
    async def test_applied_by_client(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.headers.get("Authorization"))
            return httpx.Response(200, json={})

        async with httpx.AsyncClient(
            base_url="http://ctview.test",
            auth=RequestAuthorizer("FINAL1"),
            transport=httpx.MockTransport(handler),
        ) as client:
            await client.get("/operations")
            await client.post("/auth/verify", json={}, headers={"Authorization": "Bearer TMP1"})
            await client.post("/auth/login", json={})

        assert seen == ["Bearer FINAL1", "Bearer TMP1", None]
