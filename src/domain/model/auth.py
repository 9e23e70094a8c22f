"""Validated input schemas for the auth operations.

Each operation takes exactly one of these. Unknown keys are rejected and
JSON keys are camelCase (``firstName``), while Python code may use the
snake_case field names.
"""

import re

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

PASSWORD_MIN_LENGTH = 8
# bcrypt only hashes the first 72 bytes and newer releases refuse anything longer
PASSWORD_MAX_BYTES = 72

_PASSWORD_RULES = (
    (re.compile(r"[a-z]"), "Password must contain at least one lowercase letter"),
    (re.compile(r"[A-Z]"), "Password must contain at least one uppercase letter"),
    (re.compile(r"[0-9]"), "Password must contain at least one number"),
)


def password_policy_violations(password: str) -> list[str]:
    """Return every complexity rule the password breaks, in a stable order."""
    problems = []
    if len(password) < PASSWORD_MIN_LENGTH:
        problems.append(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")
    for pattern, message in _PASSWORD_RULES:
        if not pattern.search(password):
            problems.append(message)
    return problems


def check_password_length(password: str) -> str:
    if len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise PydanticCustomError(
            "password_too_long",
            "Password must be at most {max_bytes} bytes",
            {"max_bytes": PASSWORD_MAX_BYTES},
        )
    return password


class _AuthInput(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra='forbid',
    )


class Registration(_AuthInput):
    """Body of a registration request."""
    username: str = Field(..., min_length=3, max_length=20)
    email: EmailStr
    password: str = Field(..., min_length=PASSWORD_MIN_LENGTH)
    first_name: str | None = None
    last_name: str | None = None

    @field_validator('password')
    @classmethod
    def check_length(cls, value: str) -> str:
        return check_password_length(value)


class Credentials(_AuthInput):
    """Username/password pair submitted on login."""
    username: str
    password: str


class ProfileUpdate(_AuthInput):
    """Partial profile update. Only fields present in the request are applied."""
    first_name: str | None = None
    last_name: str | None = None
    email: EmailStr | None = None
    bio: str | None = None
    location: str | None = None
    phone: str | None = None
    avatar: str | None = None

    @field_validator('email', mode='before')
    @classmethod
    def email_not_null(cls, value):
        if value is None:
            raise PydanticCustomError('email_required', 'Email cannot be removed')
        return value

    def changes(self) -> dict:
        """Fields explicitly supplied by the caller, keyed by attribute name."""
        return self.model_dump(exclude_unset=True)


class PasswordChange(_AuthInput):
    """Current password plus the replacement, which must satisfy the complexity policy."""
    current_password: str
    new_password: str

    @field_validator('new_password')
    @classmethod
    def check_complexity(cls, value: str) -> str:
        check_password_length(value)
        problems = password_policy_violations(value)
        if problems:
            raise PydanticCustomError('password_policy', problems[0])
        return value
