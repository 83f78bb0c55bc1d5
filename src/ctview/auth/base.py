"""
Shared session interface.

``SessionBase`` owns the snapshot, the listener registry and the loading
counter. Concrete sessions (the real ``SessionStore`` and the development
``DevSession``) implement the four mutating operations on top of it.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import replace
from typing import Any, Callable, Iterator

from ctview.auth.models import UserProfile
from ctview.auth.state import (
    Authenticated,
    SessionSnapshot,
    SessionState,
)
from ctview.logger import get_logger

logger = get_logger(__name__)

SessionListener = Callable[[SessionSnapshot], None]


class SessionBase(ABC):
    """Observable session holder consumed by guards, views and the authorizer."""

    def __init__(self):
        self._snapshot = SessionSnapshot()
        self._listeners: list[SessionListener] = []
        self._loading_depth = 0

    # ─── Read side ───────────────────────────────────────────────────

    def snapshot(self) -> SessionSnapshot:
        return self._snapshot

    @property
    def state(self) -> SessionState:
        return self._snapshot.state

    @property
    def loading(self) -> bool:
        return self._snapshot.loading

    @property
    def error_message(self) -> str | None:
        return self._snapshot.error_message

    @property
    def epoch(self) -> int:
        return self._snapshot.epoch

    def get_active_token(self) -> str | None:
        return self._snapshot.token

    def is_authenticated(self) -> bool:
        return self._snapshot.is_authenticated

    def current_user(self) -> UserProfile | None:
        return self._snapshot.user

    # ─── Subscription ────────────────────────────────────────────────

    def on_session_change(self, callback: SessionListener) -> Callable[[], None]:
        """
        Register ``callback`` for every visible session change.

        The callback is called once immediately with the current snapshot so
        late subscribers start in sync.

        Returns:
            A function that removes the subscription.
        """
        self._listeners.append(callback)
        self._call(callback, self._snapshot)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _call(self, callback: SessionListener, snapshot: SessionSnapshot) -> None:
        try:
            callback(snapshot)
        except Exception as e:
            logger.error(f"Session listener {callback!r} failed: {e}")

    def _commit(self, **changes: Any) -> bool:
        """
        Apply ``changes`` to the snapshot and notify listeners.

        Listeners only hear about changes they could observe; an epoch bump
        on its own is silent.

        Returns:
            True if anything other than the epoch changed.
        """
        before = self._snapshot
        after = replace(before, **changes)
        self._snapshot = after

        if replace(before, epoch=0) == replace(after, epoch=0):
            return False

        for callback in list(self._listeners):
            self._call(callback, after)
        return True

    def _bump_epoch(self) -> int:
        self._commit(epoch=self._snapshot.epoch + 1)
        return self._snapshot.epoch

    def _is_stale(self, epoch: int) -> bool:
        return self._snapshot.epoch != epoch

    @contextmanager
    def loading_scope(self) -> Iterator[None]:
        """Mark the session as loading for the duration of the block (re-entrant)."""
        self._loading_depth += 1
        if self._loading_depth == 1:
            self._commit(loading=True)
        try:
            yield
        finally:
            self._loading_depth -= 1
            if self._loading_depth == 0:
                self._commit(loading=False)

    # ─── Operations ──────────────────────────────────────────────────

    @abstractmethod
    async def submit_credentials(self, cpf: str, password: str) -> SessionSnapshot:
        """Start a login with CPF and password."""

    @abstractmethod
    async def submit_two_factor_code(self, code: str) -> SessionSnapshot:
        """Answer a pending second-factor challenge."""

    @abstractmethod
    def cancel_two_factor(self) -> None:
        """Abandon a pending second-factor challenge."""

    @abstractmethod
    def logout(self) -> None:
        """Drop the session. Idempotent."""

    @abstractmethod
    async def refresh_me(self) -> SessionSnapshot:
        """Re-validate the active token and reload the user profile."""

    @abstractmethod
    def activate(self, token: str) -> None:
        """Adopt a previously persisted token pending validation."""

    def update_user(self, partial: dict[str, Any]) -> None:
        """Merge a partial profile update into the authenticated user."""
        state = self._snapshot.state
        if not isinstance(state, Authenticated):
            return
        self._commit(state=Authenticated(state.token, state.user.merged(partial)))
