"""Session cookie handling.

The cookie carries only the opaque session id. Resolving it into a
SessionContext is the one place the API touches the session store
before handing off to the auth service.
"""

import os
import logging
from fastapi import Depends, Request, Response

from api.dependencies import get_session_store
from domain.model.errors import NotAuthenticatedError
from domain.model.session import SESSION_TTL, SessionContext
from port.session_store import SessionStore

logger = logging.getLogger(__name__)

SESSION_COOKIE_NAME = "sid_travel_planner"
SESSION_COOKIE_MAX_AGE = int(SESSION_TTL.total_seconds())
SESSION_COOKIE_SECURE = os.getenv("APP_ENV", "development") == "production"


def get_session_context(
    request: Request,
    sessions: SessionStore = Depends(get_session_store),
) -> SessionContext:
    """Resolve the session cookie. Unknown or expired ids yield the anonymous context."""
    session_id = request.cookies.get(SESSION_COOKIE_NAME)
    if not session_id:
        return SessionContext.anonymous()

    session = sessions.get(session_id)
    if session is None:
        logger.debug("Session cookie did not match a live session")
        return SessionContext.anonymous()

    return SessionContext.for_session(session)


def apply_session(response: Response, before: SessionContext, after: SessionContext) -> None:
    """Reflect a context change returned by the auth service onto the cookie."""
    if after.session_id == before.session_id:
        return

    if after.session_id:
        response.set_cookie(
            key=SESSION_COOKIE_NAME,
            value=after.session_id,
            max_age=SESSION_COOKIE_MAX_AGE,
            path="/",
            secure=SESSION_COOKIE_SECURE,
            httponly=True,
            samesite="strict",
        )
    else:
        clear_session_cookie(response)


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=SESSION_COOKIE_NAME,
        path="/",
        secure=SESSION_COOKIE_SECURE,
        httponly=True,
        samesite="strict",
    )


def require_session(ctx: SessionContext = Depends(get_session_context)) -> SessionContext:
    """Reject anonymous callers before the request body is validated."""
    if not ctx.is_authenticated:
        raise NotAuthenticatedError()
    return ctx
