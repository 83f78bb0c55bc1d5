"""
HTTP adapter for the /auth endpoints.

Wraps an ``httpx.AsyncClient`` and turns transport and status failures into
the auth error taxonomy. Raw server detail goes to the log and into the
exception text, never into ``user_message``.
"""

from typing import Any, Type

import httpx

from ctview.auth.authorizer import (
    LOGIN_PATH,
    ME_PATH,
    REGISTER_PATH,
    TWO_FACTOR_SETUP_PATH,
    VERIFY_PATH,
    RequestAuthorizer,
)
from ctview.auth.errors import (
    AuthError,
    CredentialError,
    NetworkError,
    RegistrationError,
    SessionExpiredError,
    TwoFactorError,
)
from ctview.auth.models import (
    LoginRequest,
    LoginResponse,
    RegisterResponse,
    RegisterUserPayload,
    TotpSetup,
    TwoFactorSetupRequest,
    UserProfile,
    VerifyRequest,
    VerifyResponse,
)
from ctview.config import Config
from ctview.logger import get_logger

logger = get_logger(__name__)

DEFAULT_REGISTER_MESSAGE = "User registered successfully"


def _response_detail(response: httpx.Response) -> str:
    """Extract a short server-provided reason from an error response."""
    try:
        body = response.json()
    except ValueError:
        return response.text.strip() or response.reason_phrase

    if isinstance(body, dict):
        return str(body.get("message") or body.get("error") or response.reason_phrase)
    if isinstance(body, str) and body.strip():
        return body.strip()
    return response.reason_phrase


def _bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


class AuthApi:
    """Typed client for login, verify, profile and enrolment calls."""

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    @classmethod
    def from_config(
        cls,
        config: Config,
        auth: RequestAuthorizer | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "AuthApi":
        """
        Build an AuthApi with its own AsyncClient.

        Args:
            config: Supplies the base URL and request timeout.
            auth: Default authorizer attached to every request.
            transport: Optional transport override (tests, proxies).
        """
        client = httpx.AsyncClient(
            base_url=config.api_url,
            timeout=config.request_timeout,
            auth=auth,
            transport=transport,
        )
        return cls(client)

    async def aclose(self) -> None:
        await self.client.aclose()

    async def __aenter__(self) -> "AuthApi":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _send(
        self,
        method: str,
        path: str,
        error_cls: Type[AuthError],
        **kwargs: Any,
    ) -> httpx.Response:
        try:
            response = await self.client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            detail = _response_detail(e.response)
            logger.warning(f"{method} {path} rejected with {status}: {detail}")
            raise error_cls(f"[{status}] {detail}") from e
        except httpx.RequestError as e:
            logger.warning(f"{method} {path} failed: {type(e).__name__}: {e}")
            raise NetworkError(f"{type(e).__name__}: {e}") from e
        return response

    @staticmethod
    def _parse(response: httpx.Response, model, error_cls: Type[AuthError]):
        try:
            return model.model_validate(response.json())
        except ValueError as e:
            logger.warning(f"Malformed response from {response.request.url.path}: {e}")
            raise error_cls(f"Malformed response: {e}") from e

    async def login(self, cpf: str, password: str) -> LoginResponse:
        """POST /auth/login with normalized credentials."""
        body = LoginRequest(cpf=cpf, password=password).to_wire()
        response = await self._send("POST", LOGIN_PATH, CredentialError, json=body)
        result = self._parse(response, LoginResponse, CredentialError)
        if not result.token:
            logger.warning("Login response carried no token")
            raise CredentialError("Login response carried no token")
        return result

    async def verify(self, code: str, temp_token: str) -> VerifyResponse:
        """POST /auth/verify, authorized by the temporary ticket."""
        body = VerifyRequest(code=code).to_wire()
        response = await self._send(
            "POST", VERIFY_PATH, TwoFactorError, json=body, headers=_bearer(temp_token)
        )
        result = self._parse(response, VerifyResponse, TwoFactorError)
        if not result.token:
            logger.warning(f"Verify response carried no token (status={result.status})")
            raise TwoFactorError("Verify response carried no token")
        return result

    async def me(self, token: str) -> UserProfile:
        """GET /auth/me for the given session token."""
        response = await self._send("GET", ME_PATH, SessionExpiredError, headers=_bearer(token))
        return self._parse(response, UserProfile, SessionExpiredError)

    async def register(self, payload: RegisterUserPayload) -> RegisterResponse:
        """
        POST /auth/register.

        The server answers either with a plain string or a JSON object that
        may include TOTP enrolment data.

        Raises:
            RegistrationError: With the server's message (prefixed by the HTTP
                status) as ``user_message`` when one is available.
        """
        try:
            response = await self._send(
                "POST", REGISTER_PATH, RegistrationError, json=payload.to_wire()
            )
        except RegistrationError as e:
            # Registration is an admin flow; the server's reason is safe to show.
            raise RegistrationError(e.detail, user_message=e.detail) from e

        try:
            body = response.json()
        except ValueError:
            body = response.text

        if isinstance(body, str):
            return RegisterResponse(message=body.strip() or DEFAULT_REGISTER_MESSAGE)
        if isinstance(body, dict):
            result = RegisterResponse.model_validate(body)
            if not result.message:
                result.message = DEFAULT_REGISTER_MESSAGE
            return result
        return RegisterResponse(message=DEFAULT_REGISTER_MESSAGE)

    async def setup_two_factor(self, cpf: str) -> TotpSetup:
        """POST /auth/2fa/setup to (re)generate a TOTP secret for ``cpf``."""
        body = TwoFactorSetupRequest(cpf=cpf).to_wire()
        response = await self._send("POST", TWO_FACTOR_SETUP_PATH, RegistrationError, json=body)
        return self._parse(response, TotpSetup, RegistrationError)
