"""
Startup restore of a previously persisted session.
"""

from ctview.auth.base import SessionBase
from ctview.auth.persistence import TokenPersistence
from ctview.auth.state import SessionSnapshot
from ctview.logger import get_logger

logger = get_logger(__name__)


class SessionBootstrap:
    """
    Restores the session once at process start.

    With no stored token the session settles as Unauthenticated without any
    network traffic. Otherwise the token is activated (so the request
    authorizer picks it up) and validated through ``refresh_me``; a failed
    validation logs out and clears the stale slot.
    """

    def __init__(self, session: SessionBase, persistence: TokenPersistence):
        self.session = session
        self.persistence = persistence
        self._done = False
        self._restored = False

    @property
    def done(self) -> bool:
        return self._done

    async def run(self) -> SessionSnapshot:
        if self._done:
            return self.session.snapshot()
        self._done = True

        with self.session.loading_scope():
            await self._restore()

        snapshot = self.session.snapshot()
        if self._restored and not snapshot.is_authenticated:
            logger.info("Stored session was rejected; starting unauthenticated")
        return snapshot

    async def _restore(self) -> None:
        token = self.persistence.load()
        if not token:
            logger.debug("No stored token; starting unauthenticated")
            return

        logger.info("Restoring stored session")
        self._restored = True
        self.session.activate(token)
        await self.session.refresh_me()
