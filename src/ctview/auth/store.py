"""
Session state machine for the ContainerView API.

States: Unauthenticated -> (AwaitingTwoFactor) -> Authenticated.

Each async operation captures the session epoch before its network call and
drops its result if the epoch moved while it was suspended (a logout, a
cancelled challenge or a newer login). Operations of the same kind are
serialized with one lock each.
"""

import asyncio
import re

from ctview.auth.api import AuthApi
from ctview.auth.base import SessionBase
from ctview.auth.errors import (
    CredentialError,
    MissingTicketError,
    NetworkError,
    SessionExpiredError,
    TwoFactorError,
    ValidationError,
)
from ctview.auth.models import UserProfile
from ctview.auth.persistence import TokenPersistence
from ctview.auth.state import (
    UNAUTHENTICATED,
    Authenticated,
    AwaitingTwoFactor,
    SessionSnapshot,
    TempAuthTicket,
)
from ctview.logger import get_logger, mask_token

logger = get_logger(__name__)

CPF_DIGITS = 11
TOTP_CODE_RE = re.compile(r"[0-9]{6}")


def normalize_cpf(cpf: str) -> str:
    """Strip display formatting (dots, dashes, spaces) from a CPF."""
    return re.sub(r"[^0-9]", "", cpf or "")


def normalize_code(code: str) -> str:
    return re.sub(r"\s", "", code or "")


class SessionStore(SessionBase):
    """
    Production session backed by the /auth API and a token slot.

    Args:
        api: Transport adapter for the /auth endpoints.
        persistence: Durable slot that mirrors the active token.
    """

    def __init__(self, api: AuthApi, persistence: TokenPersistence):
        super().__init__()
        self.api = api
        self.persistence = persistence
        self._login_lock = asyncio.Lock()
        self._verify_lock = asyncio.Lock()
        self._refresh_lock = asyncio.Lock()

    def _authenticate(self, token: str, user: UserProfile) -> None:
        # Persist first: nothing may observe a received-but-unsaved token.
        self.persistence.save(token)
        self._commit(state=Authenticated(token, user), token=token, error_message=None)
        logger.info(f"Authenticated as {user.display_name} (token {mask_token(token)})")

    async def submit_credentials(self, cpf: str, password: str) -> SessionSnapshot:
        """
        Submit CPF and password.

        Args:
            cpf: 11 digits, display formatting allowed.
            password: Non-empty password.

        Returns:
            The snapshot after the attempt. Rejected credentials and network
            failures are reported through ``error_message``, not raised.

        Raises:
            ValidationError: If the input is malformed. No request is made.
        """
        digits = normalize_cpf(cpf)
        if len(digits) != CPF_DIGITS:
            logger.debug(f"Rejected CPF with {len(digits)} digits")
            raise ValidationError(f"CPF must have {CPF_DIGITS} digits, got {len(digits)}")
        if not password:
            logger.debug("Rejected empty password")
            raise ValidationError("Password is required")

        with self.loading_scope():
            if await self._login(digits, password):
                await self.refresh_me()
        return self.snapshot()

    async def _login(self, digits: str, password: str) -> bool:
        """Run the login exchange. Returns True once a session token is held."""
        async with self._login_lock:
            if self.get_active_token():
                logger.info("New login requested with an active token; dropping current session")
                self.logout()

            epoch = self._bump_epoch()
            self._commit(state=UNAUTHENTICATED, error_message=None)

            try:
                result = await self.api.login(digits, password)
            except (CredentialError, NetworkError) as e:
                logger.warning(f"Login failed: {type(e).__name__}: {e}")
                if not self._is_stale(epoch):
                    self._commit(error_message=e.user_message)
                return False

            if self._is_stale(epoch):
                logger.debug("Discarding login response from a stale session epoch")
                return False

            if result.second_factor_required:
                ticket = TempAuthTicket(temp_token=result.token, cpf=result.cpf or digits)
                self._commit(state=AwaitingTwoFactor(ticket))
                logger.info(f"Second factor required for CPF ending {digits[-4:]}")
                return False

            self._authenticate(
                result.token,
                UserProfile(cpf=result.cpf or digits, two_factor_enabled=False),
            )
            return True

    async def submit_two_factor_code(self, code: str) -> SessionSnapshot:
        """
        Answer the pending second-factor challenge.

        A rejected code keeps the challenge open so the user can retry.

        Raises:
            MissingTicketError: If no challenge is pending.
            ValidationError: If the code is not 6 digits.
        """
        if self._snapshot.ticket is None:
            raise MissingTicketError("No pending two-factor challenge")

        digits = normalize_code(code)
        if not TOTP_CODE_RE.fullmatch(digits):
            logger.debug("Rejected malformed two-factor code")
            raise ValidationError("Verification code must be 6 digits")

        with self.loading_scope():
            if await self._verify(digits):
                await self.refresh_me()
        return self.snapshot()

    async def _verify(self, digits: str) -> bool:
        async with self._verify_lock:
            # Another verify may have settled the challenge while we waited.
            ticket = self._snapshot.ticket
            if ticket is None:
                raise MissingTicketError("Two-factor challenge already resolved")

            epoch = self.epoch
            try:
                result = await self.api.verify(digits, ticket.temp_token)
            except (TwoFactorError, NetworkError) as e:
                logger.warning(f"Two-factor verification failed: {type(e).__name__}: {e}")
                if not self._is_stale(epoch):
                    self._commit(error_message=e.user_message)
                return False

            if self._is_stale(epoch) or self._snapshot.ticket != ticket:
                logger.debug("Discarding verify response from a stale session epoch")
                return False

            self._authenticate(
                result.token,
                UserProfile(cpf=result.cpf or ticket.cpf, two_factor_enabled=True),
            )
            return True

    def cancel_two_factor(self) -> None:
        if not isinstance(self.state, AwaitingTwoFactor):
            return
        self._bump_epoch()
        self._commit(state=UNAUTHENTICATED, error_message=None)
        logger.info("Two-factor challenge cancelled")

    def logout(self) -> None:
        self._bump_epoch()
        self.persistence.clear()
        changed = self._commit(state=UNAUTHENTICATED, token=None, error_message=None)
        if changed:
            logger.info("Session cleared")

    def activate(self, token: str) -> None:
        if not token:
            raise ValueError("Cannot activate an empty token")

        self._bump_epoch()
        if self.persistence.load() != token:
            self.persistence.save(token)
        self._commit(state=UNAUTHENTICATED, token=token, error_message=None)
        logger.debug(f"Activated stored token {mask_token(token)}")

    async def refresh_me(self) -> SessionSnapshot:
        """
        Validate the active token against GET /auth/me.

        Any failure logs the session out without surfacing an error message;
        this is the only path from Authenticated back to Unauthenticated
        other than an explicit logout.
        """
        if not self.get_active_token():
            return self.snapshot()

        with self.loading_scope():
            await self._refresh()
        return self.snapshot()

    async def _refresh(self) -> None:
        async with self._refresh_lock:
            token = self.get_active_token()
            if not token:
                return

            epoch = self.epoch
            try:
                user = await self.api.me(token)
            except (SessionExpiredError, NetworkError) as e:
                if self._is_stale(epoch):
                    logger.debug(f"Ignoring refresh failure from a stale session epoch: {e}")
                    return
                logger.warning(f"Session validation failed, logging out: {type(e).__name__}: {e}")
                self.logout()
                return

            if self._is_stale(epoch) or self.get_active_token() != token:
                logger.debug("Discarding profile response from a stale session epoch")
                return

            self._commit(state=Authenticated(token, user), error_message=None)
            logger.debug(f"Profile refreshed for {user.display_name}")
