# Overview: Request gate; refreshes the session cookie and applies navigation redirects.

"""
Request Gate

Runs for every request, before any view:

1. Decode the session cookie (missing, invalid and expired all mean "no session").
2. Redirect:
   - no session, GET /           -> /login
   - session, /login             -> /
   - not ADMIN, /admin/...       -> /
3. After the response is built, re-issue the cookie with a fresh 24h
   expiry whenever the request carried a valid session, whether or not
   the route needed one. Views that set or clear the cookie themselves
   (login, logout) are left alone.

The gate never blocks on other requests; it only short-circuits with a
redirect. Views still re-check the session themselves.
"""

from flask import g, redirect, request

from .permissions import Role
from .services import session_service


LOGIN_PATH = "/login"
ROOT_PATH = "/"
ADMIN_PREFIX = "/admin"


def is_admin_path(path: str) -> bool:
    return path == ADMIN_PREFIX or path.startswith(ADMIN_PREFIX + "/")


def redirect_target(path: str, session) -> str | None:
    """Where the gate sends a request, or None to let it through."""
    if session is None and path == ROOT_PATH:
        return LOGIN_PATH
    if session is not None and path == LOGIN_PATH:
        return ROOT_PATH
    if is_admin_path(path) and (session is None or session.user.role != Role.ADMIN):
        return ROOT_PATH
    return None


def register_request_gate(app) -> None:
    @app.before_request
    def gate_request():
        # g outlives the request when an app context was already pushed
        g.session_cookie_written = False
        session = session_service.read_session(request)
        g.gate_session = session

        target = redirect_target(request.path, session)
        if target is not None:
            return redirect(target)
        return None

    @app.after_request
    def refresh_session_cookie(response):
        session = g.get("gate_session")
        if session is None or session_service.cookie_written():
            return response

        refreshed, token = session_service.update_session(session)
        session_service.set_session_cookie(response, token, refreshed.expires)
        return response
