"""Per-client-address rate limiting.

Every client address gets 100 requests per 15 minutes across the whole
app; login and registration additionally share one window of 10 per 15
minutes. Excess requests are rejected, never queued.

Limits are route dependencies rather than middleware, so they are
counted before the session check and body validation run.
"""

import os
import logging
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from limits import parse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from slowapi.wrappers import Limit, LimitGroup

logger = logging.getLogger(__name__)

GLOBAL_RATE_LIMIT = "100 per 15 minutes"
AUTH_RATE_LIMIT = "10 per 15 minutes"

# Same scope everywhere, so each window is keyed by client address alone
RATE_LIMIT_SCOPE = "client"

limiter = Limiter(
    key_func=get_remote_address,
    headers_enabled=True,
    storage_uri=os.getenv("RATELIMIT_STORAGE_URI", "memory://"),
)

_AUTH_LIMIT_ITEM = parse(AUTH_RATE_LIMIT)


class RateLimit:
    """Route dependency counting the request against fixed windows.

    Windows are hit in order and checking stops at the first full one,
    so a request refused by the global window does not use up an auth
    attempt. The tightest window is reported in the response headers.
    """

    def __init__(self, *limit_values: str):
        self.limits: list[Limit] = [
            limit
            for value in limit_values
            for limit in LimitGroup(value, get_remote_address, RATE_LIMIT_SCOPE, False, None, None, None, 1, True)
        ]

    def __call__(self, request: Request, response: Response) -> None:
        if not limiter.enabled:
            return

        identifiers = [get_remote_address(request), RATE_LIMIT_SCOPE]
        reported = None
        for limit in self.limits:
            if not limiter.limiter.hit(limit.limit, *identifiers):
                request.state.view_rate_limit = (limit.limit, identifiers)
                raise RateLimitExceeded(limit)
            if reported is None or limit.limit.amount < reported[0].amount:
                reported = (limit.limit, identifiers)

        request.state.view_rate_limit = reported
        limiter._inject_headers(response, reported)


global_rate_limit = RateLimit(GLOBAL_RATE_LIMIT)
auth_rate_limit = RateLimit(GLOBAL_RATE_LIMIT, AUTH_RATE_LIMIT)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Uniform 429 body, with the rate-limit headers attached."""
    if exc.limit.limit == _AUTH_LIMIT_ITEM:
        message = "Too many login attempts, please try again later."
    else:
        message = "Too many requests, please try again later."

    logger.warning(
        "Rate limit exceeded",
        extra={"path": request.url.path, "client": get_remote_address(request), "limit": str(exc.detail)},
    )
    response = JSONResponse(status_code=429, content={"message": message})
    return limiter._inject_headers(response, request.state.view_rate_limit)
