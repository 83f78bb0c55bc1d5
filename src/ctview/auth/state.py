"""
Session states and the snapshot handed to listeners.

The three state classes form a closed union; exactly one of them describes a
session at any time. Transient UI flags (``loading``, ``error_message``) live
beside the state on the snapshot instead of inside it.
"""

from dataclasses import dataclass
from typing import Union

from ctview.auth.models import UserProfile


@dataclass(frozen=True)
class TempAuthTicket:
    """Short-lived bearer value that only authorizes POST /auth/verify."""

    temp_token: str
    cpf: str

    def __repr__(self) -> str:
        return f"TempAuthTicket(cpf={self.cpf!r})"


@dataclass(frozen=True)
class Unauthenticated:
    pass


@dataclass(frozen=True)
class AwaitingTwoFactor:
    ticket: TempAuthTicket


@dataclass(frozen=True)
class Authenticated:
    token: str
    user: UserProfile

    def __post_init__(self):
        if not self.token:
            raise ValueError("Authenticated state requires a non-empty token")

    def __repr__(self) -> str:
        return f"Authenticated(user={self.user.display_name!r})"


SessionState = Union[Unauthenticated, AwaitingTwoFactor, Authenticated]

UNAUTHENTICATED = Unauthenticated()


@dataclass(frozen=True)
class SessionSnapshot:
    """Immutable view of a session after a transition."""

    state: SessionState = UNAUTHENTICATED
    token: str | None = None
    loading: bool = False
    error_message: str | None = None
    epoch: int = 0

    @property
    def is_authenticated(self) -> bool:
        return isinstance(self.state, Authenticated)

    @property
    def user(self) -> UserProfile | None:
        if isinstance(self.state, Authenticated):
            return self.state.user
        return None

    @property
    def ticket(self) -> TempAuthTicket | None:
        if isinstance(self.state, AwaitingTwoFactor):
            return self.state.ticket
        return None

    @property
    def label(self) -> str:
        return type(self.state).__name__
