from typing import Protocol
from domain.model.session import Session


class SessionStore(Protocol):
    """Protocol defining the interface for server-side session storage."""
    def create(self, user_id: str) -> Session:
        """Create a session for the user with a fresh unguessable id."""
        ...

    def get(self, session_id: str) -> Session | None:
        """Return the session, or None if it is unknown or expired."""
        ...

    def delete(self, session_id: str) -> bool:
        """Destroy a session. Return True if one was removed; never raises for unknown ids."""
        ...
