"""
Authentication and session management.

- store: the login / two-factor / refresh state machine
- persistence: single-slot token storage
- authorizer: bearer attachment for outgoing requests
- bootstrap: restore of a persisted session at startup
- dev: authentication-disabled session for local development
- guard: route decisions for protected views
"""

from ctview.auth.base import SessionBase
from ctview.auth.errors import (
    AuthError,
    CredentialError,
    MissingTicketError,
    NetworkError,
    RegistrationError,
    SessionExpiredError,
    TwoFactorError,
    ValidationError,
)
from ctview.auth.state import (
    Authenticated,
    AwaitingTwoFactor,
    SessionSnapshot,
    TempAuthTicket,
    Unauthenticated,
)
from ctview.auth.store import SessionStore

__all__ = [
    "AuthError",
    "Authenticated",
    "AwaitingTwoFactor",
    "CredentialError",
    "MissingTicketError",
    "NetworkError",
    "RegistrationError",
    "SessionBase",
    "SessionExpiredError",
    "SessionSnapshot",
    "SessionStore",
    "TempAuthTicket",
    "TwoFactorError",
    "Unauthenticated",
    "ValidationError",
]
