"""Authentication routes (register, login, logout, profile, password change).

Handlers are plain ``def`` so bcrypt work runs in the threadpool rather
than on the event loop.
"""

from fastapi import APIRouter, Depends, Response, status

from api.dependencies import get_session_store, get_user_repo
from api.models import MessageResponse, UserResponse
from api.rate_limit import auth_rate_limit, global_rate_limit
from api.security import apply_session, clear_session_cookie, get_session_context, require_session
from domain.model.auth import Credentials, PasswordChange, ProfileUpdate, Registration
from domain.model.session import SessionContext
from port.session_store import SessionStore
from port.user_repository import UserRepository
from services import auth_service

router = APIRouter(prefix="/api", tags=["auth"])


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(auth_rate_limit)],
)
def register(
    response: Response,
    registration: Registration,
    ctx: SessionContext = Depends(get_session_context),
    users: UserRepository = Depends(get_user_repo),
    sessions: SessionStore = Depends(get_session_store),
):
    """Create an account and start a session for it.

    Raises (mapped in api/errors.py):
        400: schema failure, or username/email already exists
    """
    user, new_ctx = auth_service.register(users, sessions, ctx, registration)
    apply_session(response, ctx, new_ctx)
    return UserResponse.from_user(user)


@router.post(
    "/login",
    response_model=UserResponse,
    dependencies=[Depends(auth_rate_limit)],
)
def login(
    response: Response,
    credentials: Credentials,
    ctx: SessionContext = Depends(get_session_context),
    users: UserRepository = Depends(get_user_repo),
    sessions: SessionStore = Depends(get_session_store),
):
    """Log in with username and password.

    Raises:
        401: invalid credentials, same message whichever half was wrong
    """
    user, new_ctx = auth_service.login(users, sessions, ctx, credentials)
    apply_session(response, ctx, new_ctx)
    return UserResponse.from_user(user)


@router.post(
    "/logout",
    response_model=MessageResponse,
    dependencies=[Depends(global_rate_limit)],
)
def logout(
    response: Response,
    ctx: SessionContext = Depends(get_session_context),
    sessions: SessionStore = Depends(get_session_store),
):
    """End the current session. Succeeds even without one."""
    auth_service.logout(sessions, ctx)
    # Cleared unconditionally so a stale cookie does not linger either.
    clear_session_cookie(response)
    return MessageResponse(message="Logged out successfully")


@router.get(
    "/user",
    response_model=UserResponse,
    dependencies=[Depends(global_rate_limit)],
)
def get_user(
    ctx: SessionContext = Depends(require_session),
    users: UserRepository = Depends(get_user_repo),
    sessions: SessionStore = Depends(get_session_store),
):
    """Return the logged-in user's profile, or 401."""
    user = auth_service.get_current_user(users, sessions, ctx)
    return UserResponse.from_user(user)


@router.put(
    "/user",
    response_model=UserResponse,
    dependencies=[Depends(global_rate_limit)],
)
def update_user(
    response: Response,
    update: ProfileUpdate,
    ctx: SessionContext = Depends(require_session),
    users: UserRepository = Depends(get_user_repo),
    sessions: SessionStore = Depends(get_session_store),
):
    """Update profile fields of the logged-in user.

    Anonymous callers get 401 before the body is looked at.
    """
    user, new_ctx = auth_service.update_profile(users, sessions, ctx, update)
    apply_session(response, ctx, new_ctx)
    return UserResponse.from_user(user)


@router.post(
    "/user/change-password",
    response_model=MessageResponse,
    dependencies=[Depends(global_rate_limit)],
)
def change_password(
    change: PasswordChange,
    ctx: SessionContext = Depends(require_session),
    users: UserRepository = Depends(get_user_repo),
    sessions: SessionStore = Depends(get_session_store),
):
    """Change the logged-in user's password after re-checking the current one."""
    auth_service.change_password(users, sessions, ctx, change)
    return MessageResponse(message="Password updated successfully")
