"""
Route guard for views that require a session.
"""

from dataclasses import dataclass
from enum import Enum

from ctview.auth.state import SessionSnapshot

LOGIN_ROUTE = "/login"
INSPECTOR_HOME = "/operations"
INSPECTOR_ROLE = "inspetor"


class RouteAction(str, Enum):
    ALLOW = "allow"
    WAIT = "wait"
    REDIRECT = "redirect"


@dataclass(frozen=True)
class RouteDecision:
    action: RouteAction
    target: str | None = None
    from_path: str | None = None


def _inspector_allowed(path: str) -> bool:
    return path.startswith(INSPECTOR_HOME) or path == "/profile"


def guard_route(snapshot: SessionSnapshot, path: str) -> RouteDecision:
    """
    Decide what a protected view should do for ``path``.

    While the session is loading the view waits instead of flashing the
    login page. Unauthenticated users go to the login route, remembering
    where they came from. Inspectors are confined to operations and their
    own profile.
    """
    if snapshot.loading:
        return RouteDecision(RouteAction.WAIT)

    if not snapshot.is_authenticated:
        return RouteDecision(RouteAction.REDIRECT, LOGIN_ROUTE, from_path=path)

    role = (snapshot.user.role or "").lower()
    if role == INSPECTOR_ROLE and not _inspector_allowed(path or ""):
        return RouteDecision(RouteAction.REDIRECT, INSPECTOR_HOME)

    return RouteDecision(RouteAction.ALLOW)
