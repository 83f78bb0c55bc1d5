"""
Default bearer attachment for outgoing API requests.
"""

from typing import Generator

import httpx

from ctview.auth.state import SessionSnapshot

LOGIN_PATH = "/auth/login"
REGISTER_PATH = "/auth/register"
VERIFY_PATH = "/auth/verify"
TWO_FACTOR_SETUP_PATH = "/auth/2fa/setup"
ME_PATH = "/auth/me"

# Handshake endpoints either need no bearer or bring their own (the temp ticket).
HANDSHAKE_PATHS = (LOGIN_PATH, REGISTER_PATH, VERIFY_PATH, TWO_FACTOR_SETUP_PATH)


def is_handshake_path(path: str) -> bool:
    """True when ``path`` belongs to the authentication handshake."""
    return any(path.endswith(p) or f"{p}/" in path for p in HANDSHAKE_PATHS)


class RequestAuthorizer(httpx.Auth):
    """
    httpx auth flow that adds ``Authorization: Bearer <token>``.

    The token is whatever the session currently holds; register
    ``handle_session_change`` with the session's ``on_session_change``. A
    header set explicitly on a request is left untouched.
    """

    def __init__(self, token: str | None = None):
        self._token = token

    @property
    def token(self) -> str | None:
        return self._token

    def set_token(self, token: str | None) -> None:
        self._token = token or None

    def handle_session_change(self, snapshot: SessionSnapshot) -> None:
        self.set_token(snapshot.token)

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        if (
            self._token
            and "Authorization" not in request.headers
            and not is_handshake_path(request.url.path)
        ):
            request.headers["Authorization"] = f"Bearer {self._token}"
        yield request
