"""In-memory implementation of SessionStore for testing."""

from datetime import datetime, timezone

from domain.model.session import Session


class FakeSessionStore:
    def __init__(self):
        self.store: dict[str, Session] = {}

    def create(self, user_id: str) -> Session:
        session = Session.start(user_id)
        self.store[session.id] = session
        return session

    def get(self, session_id: str) -> Session | None:
        session = self.store.get(session_id)
        if session is None:
            return None
        if session.is_expired(datetime.now(timezone.utc)):
            del self.store[session_id]
            return None
        return session

    def delete(self, session_id: str) -> bool:
        return self.store.pop(session_id, None) is not None

    def sessions_for(self, user_id: str) -> list[Session]:
        """Test helper: live sessions belonging to a user."""
        return [s for s in self.store.values() if s.user_id == user_id]
