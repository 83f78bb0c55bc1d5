"""
Error taxonomy for the authentication flow.

Every error carries a ``user_message``: the one generic sentence a UI may
show. The exception's own ``str()`` may hold server or transport detail and
is meant for logs only.
"""


class AuthError(Exception):
    """Base class for session and authentication failures."""

    user_message = "Something went wrong. Please try again."

    def __init__(self, detail: str = "", *, user_message: str | None = None):
        super().__init__(detail or self.user_message)
        self.detail = detail
        if user_message is not None:
            self.user_message = user_message


class ValidationError(AuthError):
    """Input was malformed; raised before any network call."""

    user_message = "Please check the information you entered."


class MissingTicketError(AuthError):
    """A two-factor code was submitted without a pending challenge."""

    user_message = "Your verification session has ended. Please sign in again."


class CredentialError(AuthError):
    """The server rejected the submitted credentials."""

    user_message = "Invalid CPF or password."


class TwoFactorError(AuthError):
    """The second-factor code was invalid or expired."""

    user_message = "Invalid or expired verification code."


class SessionExpiredError(AuthError):
    """The server no longer accepts the active token."""

    user_message = "Your session has expired. Please sign in again."


class NetworkError(AuthError):
    """The request never produced a usable response."""

    user_message = "Could not reach the server. Check your connection and try again."


class RegistrationError(AuthError):
    """User registration or two-factor enrolment failed."""

    user_message = "Could not complete the registration. Please try again."
