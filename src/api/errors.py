"""Map domain errors and framework errors onto JSON responses.

Every error body has a ``message``; schema failures add ``errors``.
Unexpected exceptions are logged in full and answered with a generic 500.
"""

import logging
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from domain.model.errors import (
    AuthenticationError,
    ConflictError,
    DomainError,
    NotAuthenticatedError,
    ValidationError,
)

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"

_STATUS_BY_ERROR = [
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (ConflictError, status.HTTP_400_BAD_REQUEST),
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED),
    (NotAuthenticatedError, status.HTTP_401_UNAUTHORIZED),
]


def format_validation_errors(errors) -> list[dict]:
    """Reduce pydantic error dicts to ``{path, message, code}`` without the ``body`` prefix."""
    formatted = []
    for error in errors:
        loc = list(error.get("loc", ()))
        if loc and loc[0] == "body":
            loc = loc[1:]
        formatted.append({
            "path": loc,
            "message": error.get("msg", ""),
            "code": error.get("type", ""),
        })
    return formatted


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            body = {"message": str(exc)}
            if isinstance(exc, ValidationError) and exc.errors:
                body["errors"] = exc.errors
            return JSONResponse(status_code=status_code, content=body)

    logger.error(
        "Unhandled domain error",
        extra={"path": request.url.path, "error": str(exc), "errorType": type(exc).__name__},
    )
    return JSONResponse(status_code=500, content={"message": INTERNAL_ERROR_MESSAGE})


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": "Validation error", "errors": format_validation_errors(exc.errors())},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled exception",
        extra={"path": request.url.path, "method": request.method},
        exc_info=exc,
    )
    return JSONResponse(status_code=500, content={"message": INTERNAL_ERROR_MESSAGE})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
