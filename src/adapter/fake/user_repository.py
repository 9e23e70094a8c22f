"""In-memory implementation of UserRepository for testing."""

import uuid
from dataclasses import replace
from datetime import datetime, timezone
from domain.model.user import PROFILE_FIELDS, User


class FakeUserRepository:
    def __init__(self):
        self.store: dict[str, User] = {}

    # ── write operations ─────────────────────────────────────

    def create(
        self,
        username: str,
        email: str,
        password_hash: str,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> User | None:
        if any(u.username == username or u.email == email for u in self.store.values()):
            return None

        user = User(
            id=uuid.uuid4().hex,
            username=username,
            email=email,
            password_hash=password_hash,
            created_at=datetime.now(timezone.utc),
            first_name=first_name,
            last_name=last_name,
        )
        self.store[user.id] = user
        return replace(user)

    def update_profile(self, user_id: str, changes: dict) -> User | None:
        user = self.store.get(user_id)
        if not user:
            return None

        for field_name, value in changes.items():
            if field_name in PROFILE_FIELDS:
                setattr(user, field_name, value)
        return replace(user)

    def update_password(self, user_id: str, password_hash: str) -> bool:
        user = self.store.get(user_id)
        if not user:
            return False

        user.password_hash = password_hash
        return True

    def record_login(self, user_id: str) -> User | None:
        user = self.store.get(user_id)
        if not user:
            return None

        user.last_login = datetime.now(timezone.utc)
        user.login_count += 1
        return replace(user)

    # ── read operations ──────────────────────────────────────

    def get_by_id(self, user_id: str) -> User | None:
        user = self.store.get(user_id)
        return replace(user) if user else None

    def get_by_username(self, username: str) -> User | None:
        for user in self.store.values():
            if user.username == username:
                return replace(user)
        return None

    def get_by_email(self, email: str) -> User | None:
        for user in self.store.values():
            if user.email == email:
                return replace(user)
        return None
