# domain/model/session.py

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

SESSION_TTL = timedelta(days=7)
SESSION_ID_BYTES = 32


@dataclass(frozen=True)
class Session:
    """Server-side session record. The client only ever sees ``id``."""
    id: str
    user_id: str
    created_at: datetime
    expires_at: datetime

    @classmethod
    def start(cls, user_id: str, now: datetime | None = None) -> 'Session':
        """New session with a random id and a fixed one-week lifetime."""
        now = now or datetime.now(timezone.utc)
        return cls(
            id=secrets.token_urlsafe(SESSION_ID_BYTES),
            user_id=user_id,
            created_at=now,
            expires_at=now + SESSION_TTL,
        )

    def is_expired(self, now: datetime | None = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return now >= self.expires_at


@dataclass(frozen=True)
class SessionContext:
    """Explicit per-request session state handed to every auth operation.

    Anonymous when both fields are None. Operations that log a user in or
    out return a new context instead of mutating request state.
    """
    session_id: str | None = None
    user_id: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.session_id is not None and self.user_id is not None

    @classmethod
    def anonymous(cls) -> 'SessionContext':
        return cls()

    @classmethod
    def for_session(cls, session: Session) -> 'SessionContext':
        return cls(session_id=session.id, user_id=session.user_id)
