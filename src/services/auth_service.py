"""Auth service: registration, login and session lifecycle.

Pure business logic with no HTTP dependencies. Every operation takes the
caller's SessionContext explicitly and returns the context the caller
should hold afterwards, so nothing here reads ambient request state.
Raises domain errors that the API layer maps to HTTP status codes.
"""

import logging
from functools import lru_cache

import bcrypt

from domain.model.auth import (
    PASSWORD_MAX_BYTES,
    Credentials,
    PasswordChange,
    ProfileUpdate,
    Registration,
)
from domain.model.errors import (
    AuthenticationError,
    ConflictError,
    DomainError,
    NotAuthenticatedError,
    ValidationError,
)
from domain.model.session import SessionContext
from domain.model.user import User
from port.session_store import SessionStore
from port.user_repository import UserRepository

logger = logging.getLogger(__name__)

BCRYPT_ROUNDS = 12

INVALID_CREDENTIALS = "Invalid username or password"


def _hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def _verify_password(plain: str, hashed: str) -> bool:
    candidate = plain.encode("utf-8")
    if len(candidate) > PASSWORD_MAX_BYTES:
        # No stored hash can match; still pay for one comparison.
        bcrypt.checkpw(candidate[:PASSWORD_MAX_BYTES], hashed.encode("utf-8"))
        return False
    return bcrypt.checkpw(candidate, hashed.encode("utf-8"))


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    # Compared against when the username is unknown, so both failure paths pay for one bcrypt check.
    return _hash_password("dummy-password-for-timing")


def _start_session(sessions: SessionStore, ctx: SessionContext, user_id: str) -> SessionContext:
    """Drop whatever session the caller held and issue a fresh one."""
    if ctx.session_id:
        sessions.delete(ctx.session_id)
    return SessionContext.for_session(sessions.create(user_id))


def _require_user(users: UserRepository, sessions: SessionStore, ctx: SessionContext) -> User:
    if not ctx.is_authenticated:
        raise NotAuthenticatedError()

    session = sessions.get(ctx.session_id)
    if session is None or session.user_id != ctx.user_id:
        raise NotAuthenticatedError()

    user = users.get_by_id(ctx.user_id)
    if user is None:
        raise NotAuthenticatedError()
    return user


def register(
    users: UserRepository,
    sessions: SessionStore,
    ctx: SessionContext,
    registration: Registration,
) -> tuple[User, SessionContext]:
    """Register a new user and log them in.

    Returns the created User and the new session context.

    Raises:
        ConflictError: username or email already registered
    """
    if users.get_by_username(registration.username):
        raise ConflictError("Username already exists")
    if users.get_by_email(registration.email):
        raise ConflictError("Email already exists")

    user = users.create(
        username=registration.username,
        email=registration.email,
        password_hash=_hash_password(registration.password),
        first_name=registration.first_name,
        last_name=registration.last_name,
    )
    if not user:
        # Lost a race against a concurrent registration of the same key.
        if users.get_by_username(registration.username):
            raise ConflictError("Username already exists")
        if users.get_by_email(registration.email):
            raise ConflictError("Email already exists")
        raise DomainError("Failed to create user")

    new_ctx = _start_session(sessions, ctx, user.id)
    logger.info("User registered", extra={"userId": user.id, "username": user.username})
    return user, new_ctx


def login(
    users: UserRepository,
    sessions: SessionStore,
    ctx: SessionContext,
    credentials: Credentials,
) -> tuple[User, SessionContext]:
    """Verify credentials, record the login and rotate the session.

    Unknown usernames and wrong passwords fail identically.

    Raises:
        AuthenticationError: invalid credentials (deliberately vague)
    """
    user = users.get_by_username(credentials.username)
    if user is None:
        _verify_password(credentials.password, _dummy_hash())
        logger.warning("Login failed", extra={"username": credentials.username})
        raise AuthenticationError(INVALID_CREDENTIALS)

    if not _verify_password(credentials.password, user.password_hash):
        logger.warning("Login failed", extra={"username": credentials.username})
        raise AuthenticationError(INVALID_CREDENTIALS)

    refreshed = users.record_login(user.id)
    if refreshed is None:
        raise DomainError("Failed to retrieve updated user data")

    new_ctx = _start_session(sessions, ctx, refreshed.id)
    logger.info("User logged in", extra={"userId": refreshed.id, "loginCount": refreshed.login_count})
    return refreshed, new_ctx


def logout(sessions: SessionStore, ctx: SessionContext) -> SessionContext:
    """Destroy the caller's session, if any. Safe to call repeatedly."""
    if ctx.session_id and sessions.delete(ctx.session_id):
        logger.info("User logged out", extra={"userId": ctx.user_id})
    return SessionContext.anonymous()


def get_current_user(
    users: UserRepository,
    sessions: SessionStore,
    ctx: SessionContext,
) -> User:
    """Return the user bound to the context.

    Raises:
        NotAuthenticatedError: anonymous context, expired session or vanished user
    """
    return _require_user(users, sessions, ctx)


def update_profile(
    users: UserRepository,
    sessions: SessionStore,
    ctx: SessionContext,
    update: ProfileUpdate,
) -> tuple[User, SessionContext]:
    """Apply the supplied profile fields to the logged-in user.

    Raises:
        NotAuthenticatedError: no valid session
        ConflictError: new email belongs to another user
    """
    user = _require_user(users, sessions, ctx)
    changes = update.changes()

    new_email = changes.get("email")
    if new_email and new_email != user.email:
        owner = users.get_by_email(new_email)
        if owner and owner.id != user.id:
            raise ConflictError("Email already in use")

    if not changes:
        return user, ctx

    updated = users.update_profile(user.id, changes)
    if updated is None:
        if new_email and users.get_by_email(new_email):
            raise ConflictError("Email already in use")
        raise NotAuthenticatedError()

    logger.info("Profile updated", extra={"userId": user.id, "fields": sorted(changes)})
    return updated, ctx


def change_password(
    users: UserRepository,
    sessions: SessionStore,
    ctx: SessionContext,
    change: PasswordChange,
) -> SessionContext:
    """Replace the logged-in user's password after re-verifying the current one.

    Sessions on other devices are left untouched.

    Raises:
        NotAuthenticatedError: no valid session
        ValidationError: current password does not match
    """
    user = _require_user(users, sessions, ctx)

    if not _verify_password(change.current_password, user.password_hash):
        raise ValidationError(
            "Current password is incorrect",
            errors=[{
                "path": ["currentPassword"],
                "message": "Current password is incorrect",
                "code": "invalid_password",
            }],
        )

    if not users.update_password(user.id, _hash_password(change.new_password)):
        raise DomainError("Failed to update password")

    logger.info("Password changed", extra={"userId": user.id})
    return ctx
