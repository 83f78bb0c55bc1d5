"""
Development session that bypasses authentication.

Selected by ``create_session`` when ``CTVIEW_DISABLE_AUTH`` is set. It is a
separate implementation of the session interface; the production
``SessionStore`` knows nothing about it.
"""

from ctview.auth.base import SessionBase
from ctview.auth.models import UserProfile
from ctview.auth.state import Authenticated, SessionSnapshot
from ctview.logger import get_logger

logger = get_logger(__name__)

DEV_TOKEN = "dev-auth-disabled"

DEV_USER = UserProfile(
    id="dev-user",
    cpf="00000000000",
    first_name="Dev",
    last_name="User",
    email="dev@localhost",
    role="admin",
    two_factor_enabled=False,
)


class DevSession(SessionBase):
    """Always-authenticated session with a fixed fake user. Never touches the network."""

    def __init__(self, user: UserProfile | None = None):
        super().__init__()
        logger.warning("Authentication is DISABLED; using a hardcoded development user")
        self._user = user or DEV_USER
        self._commit(state=Authenticated(DEV_TOKEN, self._user), token=DEV_TOKEN)

    async def submit_credentials(self, cpf: str, password: str) -> SessionSnapshot:
        return self.snapshot()

    async def submit_two_factor_code(self, code: str) -> SessionSnapshot:
        return self.snapshot()

    def cancel_two_factor(self) -> None:
        pass

    def logout(self) -> None:
        logger.debug("Ignoring logout: authentication is disabled")

    async def refresh_me(self) -> SessionSnapshot:
        return self.snapshot()

    def activate(self, token: str) -> None:
        pass
