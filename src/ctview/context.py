"""
Application root: builds and owns the single session for an app instance.

Consumers receive the session from the context instead of importing a
global, e.g.::

    async with AppContext(Config.from_env()) as ctx:
        await ctx.session.submit_credentials(cpf, password)
"""

import httpx

from ctview.auth.api import AuthApi
from ctview.auth.authorizer import RequestAuthorizer
from ctview.auth.base import SessionBase
from ctview.auth.bootstrap import SessionBootstrap
from ctview.auth.dev import DevSession
from ctview.auth.persistence import FileTokenStore, MemoryTokenStore, TokenPersistence
from ctview.auth.state import SessionSnapshot
from ctview.auth.store import SessionStore
from ctview.config import Config
from ctview.logger import get_logger

logger = get_logger(__name__)


def create_session(
    config: Config,
    api: AuthApi,
    persistence: TokenPersistence,
) -> SessionBase:
    """Pick the session implementation for ``config``."""
    if config.disable_auth:
        return DevSession()
    return SessionStore(api, persistence)


class AppContext:
    """
    Owns config, HTTP client, token slot, session and bootstrap.

    Entering the context runs the bootstrap once; leaving it closes the HTTP
    client.

    Args:
        config: Runtime settings.
        persistence: Token slot override. Defaults to a file under
            ``config.data_dir`` (or memory when auth is disabled).
        transport: Optional httpx transport override.
    """

    def __init__(
        self,
        config: Config,
        persistence: TokenPersistence | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config
        if persistence is None:
            persistence = (
                MemoryTokenStore() if config.disable_auth else FileTokenStore(config.token_path)
            )
        self.persistence = persistence
        self.authorizer = RequestAuthorizer()
        self.api = AuthApi.from_config(config, auth=self.authorizer, transport=transport)
        self.session = create_session(config, self.api, self.persistence)
        self._unsubscribe = self.session.on_session_change(self.authorizer.handle_session_change)
        self.bootstrap = SessionBootstrap(self.session, self.persistence)

    @property
    def http(self) -> httpx.AsyncClient:
        """Client for other API consumers; carries the session bearer."""
        return self.api.client

    async def start(self) -> SessionSnapshot:
        return await self.bootstrap.run()

    async def aclose(self) -> None:
        self._unsubscribe()
        await self.api.aclose()

    async def __aenter__(self) -> "AppContext":
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
