"""Double-submit-cookie CSRF protection for non-API form routes.

JSON API calls under /api are exempt: the session cookie is
SameSite=Strict, so browsers never attach it to cross-site requests.
"""

import logging
import secrets
from typing import Callable
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

CSRF_COOKIE_NAME = "csrf_token"
CSRF_HEADER_NAME = "X-CSRF-Token"
CSRF_FORM_FIELD = "csrf_token"
SAFE_METHODS = {"GET", "HEAD", "OPTIONS", "TRACE"}
FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


def _is_exempt(request: Request) -> bool:
    content_type = request.headers.get("content-type", "")
    return request.url.path.startswith("/api") or content_type.startswith("application/json")


class CSRFMiddleware(BaseHTTPMiddleware):
    """Reject state-changing non-API requests whose token does not match the cookie."""

    def __init__(self, app, secure: bool = False):
        super().__init__(app)
        self.secure = secure

    async def _submitted_token(self, request: Request) -> str | None:
        token = request.headers.get(CSRF_HEADER_NAME)
        if token:
            return token
        if request.headers.get("content-type", "").startswith(FORM_CONTENT_TYPES):
            form = await request.form()
            value = form.get(CSRF_FORM_FIELD)
            return value if isinstance(value, str) else None
        return None

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if _is_exempt(request):
            return await call_next(request)

        cookie_token = request.cookies.get(CSRF_COOKIE_NAME)

        if request.method not in SAFE_METHODS:
            submitted = await self._submitted_token(request)
            if not cookie_token or not submitted or not secrets.compare_digest(cookie_token, submitted):
                logger.warning("CSRF check failed", extra={"path": request.url.path, "method": request.method})
                return JSONResponse(status_code=403, content={"message": "Invalid CSRF token"})
            request.state.csrf_token = cookie_token
            return await call_next(request)

        token = cookie_token or secrets.token_urlsafe(32)
        request.state.csrf_token = token
        response = await call_next(request)
        if not cookie_token:
            # Readable by page scripts on purpose: they echo it back in the header.
            response.set_cookie(
                key=CSRF_COOKIE_NAME,
                value=token,
                path="/",
                secure=self.secure,
                httponly=False,
                samesite="strict",
            )
        return response
