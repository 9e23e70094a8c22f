"""Domain-level exceptions.

Services raise these errors to express business rule violations.
The API layer maps them to HTTP status codes (see api/errors.py).
"""


class DomainError(Exception):
    """Base class for all domain errors."""


class ConflictError(DomainError):
    """Entity with the same unique key already exists."""


class ValidationError(DomainError):
    """Input violates a business validation rule.

    ``errors`` optionally enumerates field-level problems as
    ``{"path": [...], "message": ..., "code": ...}`` dicts.
    """

    def __init__(self, message: str, errors: list[dict] | None = None):
        super().__init__(message)
        self.errors = errors


class AuthenticationError(DomainError):
    """Supplied credentials do not match. Message is deliberately generic."""


class NotAuthenticatedError(DomainError):
    """No valid session is associated with the request."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)
