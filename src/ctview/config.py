"""
Runtime configuration for ctview.

Values come from the environment (optionally seeded from a ``.env`` file).
``Config.from_env()`` builds a fresh instance; there is no module-level
config object so tests and the CLI can construct their own.
"""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field

PROD_API_URL = "https://api.ct-view.com"
DEFAULT_DATA_DIR = Path.home() / ".ctview"
DEFAULT_TOKEN_SLOT = "authToken"

_TRUTHY = {"1", "true", "yes", "on"}


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUTHY


class Config(BaseModel):
    """Settings shared by the session, transport and CLI."""

    api_url: str = PROD_API_URL
    data_dir: Path = Field(default_factory=lambda: DEFAULT_DATA_DIR)
    token_slot: str = DEFAULT_TOKEN_SLOT
    request_timeout: float = 15.0
    disable_auth: bool = False

    @classmethod
    def from_env(cls, env_file: str | None = None) -> "Config":
        """
        Build a config from environment variables.

        Args:
            env_file: Optional path to a dotenv file. Variables already set in
                the process environment win over the file.

        Returns:
            A populated Config.
        """
        load_dotenv(env_file)

        # A dev proxy prefix (e.g. /ctapi behind a local reverse proxy) is only
        # a default; an explicit API URL still wins.
        api_url = os.getenv("CTVIEW_API_URL") or os.getenv("CTVIEW_DEV_PROXY") or PROD_API_URL

        data_dir = os.getenv("CTVIEW_DATA_DIR")
        timeout = os.getenv("CTVIEW_TIMEOUT")

        return cls(
            api_url=api_url.rstrip("/"),
            data_dir=Path(data_dir).expanduser() if data_dir else DEFAULT_DATA_DIR,
            token_slot=os.getenv("CTVIEW_TOKEN_SLOT") or DEFAULT_TOKEN_SLOT,
            request_timeout=float(timeout) if timeout else 15.0,
            disable_auth=_env_flag("CTVIEW_DISABLE_AUTH"),
        )

    @property
    def token_path(self) -> Path:
        """File backing the persisted token slot."""
        return self.data_dir / self.token_slot
