"""
Single-slot storage for the bearer token.

Absence of the slot is the "logged out" signal; an empty string is never
stored. Writes complete before ``save`` returns so the caller can issue
dependent requests right after.
"""

import os
from abc import ABC, abstractmethod
from pathlib import Path

from ctview.logger import get_logger, mask_token

logger = get_logger(__name__)


class TokenPersistence(ABC):
    """A named slot holding at most one bearer token."""

    @abstractmethod
    def load(self) -> str | None:
        """Return the stored token, or None when the slot is empty."""

    @abstractmethod
    def save(self, token: str) -> None:
        """Store ``token``, replacing any previous value."""

    @abstractmethod
    def clear(self) -> None:
        """Remove the slot entirely. Safe to call when already empty."""


class MemoryTokenStore(TokenPersistence):
    """In-process token slot, for tests and short-lived tools."""

    def __init__(self, token: str | None = None):
        self._slot: dict[str, str] = {}
        if token:
            self._slot["token"] = token

    def load(self) -> str | None:
        return self._slot.get("token")

    def save(self, token: str) -> None:
        if not token:
            raise ValueError("Refusing to persist an empty token")
        self._slot["token"] = token

    def clear(self) -> None:
        self._slot.pop("token", None)


class FileTokenStore(TokenPersistence):
    """
    Token slot backed by a single file.

    The file holds the raw token text. It is written via a temporary file and
    an atomic rename, and is readable only by the owner.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load(self) -> str | None:
        try:
            token = self.path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        return token or None

    def save(self, token: str) -> None:
        if not token:
            raise ValueError("Refusing to persist an empty token")

        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(f".{self.path.name}.tmp")
        tmp.write_text(token, encoding="utf-8")
        os.chmod(tmp, 0o600)
        os.replace(tmp, self.path)
        logger.debug(f"Persisted token {mask_token(token)} to {self.path}")

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
        logger.debug(f"Cleared token slot {self.path}")
