"""Shared pytest fixtures: a fake ContainerView auth server and session builders."""

import httpx
import pytest
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse
from starlette.routing import Route

from ctview.auth.api import AuthApi
from ctview.auth.persistence import MemoryTokenStore
from ctview.auth.store import SessionStore
from ctview.config import Config
from ctview.context import AppContext

BASE_URL = "http://ctview.test"

TWO_FACTOR_CPF = "12345678900"
PLAIN_CPF = "98765432100"


class FakeAuthServer:
    """
    Minimal in-process stand-in for the ContainerView /auth API.

    Tokens are issued in order: temporary tickets as TMP1, TMP2, ... and
    session tokens as FINAL1, FINAL2, ...
    """

    def __init__(self):
        self.users = {
            TWO_FACTOR_CPF: {
                "password": "secret",
                "profile": {
                    "id": 7,
                    "cpf": TWO_FACTOR_CPF,
                    "firstName": "Ana",
                    "lastName": "Silva",
                    "email": "ana@ct-view.com",
                    "role": "admin",
                    "twoFactorEnabled": True,
                },
            },
            PLAIN_CPF: {
                "password": "hunter2",
                "profile": {
                    "id": "u-2",
                    "cpf": PLAIN_CPF,
                    "firstName": "Bruno",
                    "lastName": "Costa",
                    "email": "bruno@ct-view.com",
                    "role": "inspetor",
                    "twoFactorEnabled": False,
                },
            },
        }
        self.valid_codes = {"123456"}
        self.tickets: dict[str, str] = {}
        self.sessions: dict[str, str] = {}
        self.requests: list[dict] = []
        self._tmp_count = 0
        self._final_count = 0
        self.app = Starlette(
            routes=[
                Route("/auth/login", self.login, methods=["POST"]),
                Route("/auth/verify", self.verify, methods=["POST"]),
                Route("/auth/me", self.me, methods=["GET"]),
                Route("/auth/register", self.register, methods=["POST"]),
                Route("/auth/2fa/setup", self.setup_two_factor, methods=["POST"]),
                Route("/operations", self.operations, methods=["GET"]),
            ]
        )

    def transport(self) -> httpx.ASGITransport:
        return httpx.ASGITransport(app=self.app)

    def paths(self) -> list[str]:
        return [r["path"] for r in self.requests]

    def issue_session(self, cpf: str) -> str:
        self._final_count += 1
        token = f"FINAL{self._final_count}"
        self.sessions[token] = cpf
        return token

    async def _record(self, request: Request) -> dict:
        body = {}
        if request.method == "POST":
            body = await request.json()
        self.requests.append(
            {
                "path": request.url.path,
                "authorization": request.headers.get("authorization"),
                "body": body,
            }
        )
        return body

    @staticmethod
    def _bearer(request: Request) -> str | None:
        header = request.headers.get("authorization", "")
        if header.startswith("Bearer "):
            return header[len("Bearer "):]
        return None

    async def login(self, request: Request):
        body = await self._record(request)
        user = self.users.get(body.get("cpf", ""))
        if not user or user["password"] != body.get("password"):
            return JSONResponse({"message": "Invalid credentials for user"}, status_code=401)

        cpf = body["cpf"]
        if user["profile"]["twoFactorEnabled"]:
            self._tmp_count += 1
            ticket = f"TMP{self._tmp_count}"
            self.tickets[ticket] = cpf
            return JSONResponse({"cpf": cpf, "twoFactorEnabled": True, "token": ticket})

        return JSONResponse(
            {"cpf": cpf, "twoFactorEnabled": False, "token": self.issue_session(cpf)}
        )

    async def verify(self, request: Request):
        body = await self._record(request)
        ticket = self._bearer(request)
        if ticket not in self.tickets:
            return JSONResponse({"message": "Ticket expired"}, status_code=401)
        if body.get("code") not in self.valid_codes:
            return JSONResponse({"message": "Code mismatch at step 3"}, status_code=401)

        cpf = self.tickets.pop(ticket)
        return JSONResponse(
            {"cpf": cpf, "token": self.issue_session(cpf), "status": "verified"}
        )

    async def me(self, request: Request):
        await self._record(request)
        cpf = self.sessions.get(self._bearer(request))
        if cpf is None:
            return JSONResponse({"error": "Token expired"}, status_code=401)
        return JSONResponse(self.users[cpf]["profile"])

    async def register(self, request: Request):
        body = await self._record(request)
        if body.get("cpf") in self.users:
            return JSONResponse({"message": "CPF already registered"}, status_code=409)

        self.users[body["cpf"]] = {
            "password": body["password"],
            "profile": {k: v for k, v in body.items() if k != "password"},
        }
        if body.get("twoFactorEnabled"):
            return JSONResponse(
                {
                    "message": "User registered",
                    "totpSecret": "JBSWY3DPEHPK3PXP",
                    "qrCodeDataUri": "data:image/png;base64,iVBORw0KGgo=",
                }
            )
        return PlainTextResponse("User registered")

    async def setup_two_factor(self, request: Request):
        body = await self._record(request)
        if body.get("cpf") not in self.users:
            return JSONResponse({"error": "Unknown user"}, status_code=404)
        return JSONResponse(
            {
                "secret": "KRSXG5CTMVRXEZLU",
                "qrCodeDataUri": "data:image/png;base64,iVBORw0KGgo=",
                "message": "Scan the QR code with your authenticator app",
            }
        )

    async def operations(self, request: Request):
        await self._record(request)
        if self._bearer(request) not in self.sessions:
            return JSONResponse({"error": "Unauthorized"}, status_code=401)
        return JSONResponse({"items": []})


@pytest.fixture
def server():
    """Provide a fresh fake auth server."""
    return FakeAuthServer()


@pytest.fixture
def config(tmp_path):
    """Config pointing at the fake server with a temporary data dir."""
    return Config(api_url=BASE_URL, data_dir=tmp_path)


@pytest.fixture
def token_store():
    return MemoryTokenStore()


@pytest.fixture
def make_store(config, server, token_store):
    """Factory for a SessionStore wired to the fake server."""

    def _make(persistence=None, transport=None) -> SessionStore:
        api = AuthApi.from_config(config, transport=transport or server.transport())
        return SessionStore(api, persistence if persistence is not None else token_store)

    return _make


@pytest.fixture
def make_context(config, server, token_store):
    """Factory for an AppContext wired to the fake server."""

    def _make(cfg=None, persistence=None) -> AppContext:
        return AppContext(
            cfg or config,
            persistence=persistence if persistence is not None else token_store,
            transport=server.transport(),
        )

    return _make
