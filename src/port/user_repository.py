from typing import Protocol
from domain.model.user import User


class UserRepository(Protocol):
    """Protocol defining the interface for user data access."""
    def create(
        self,
        username: str,
        email: str,
        password_hash: str,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> User | None:
        """Create a new user. Return User or None if username/email is already taken."""
        ...

    def get_by_id(self, user_id: str) -> User | None:
        """Find a user by ID. Return User or None if not found."""
        ...

    def get_by_username(self, username: str) -> User | None:
        """Find a user by username. Return User or None if not found."""
        ...

    def get_by_email(self, email: str) -> User | None:
        """Find a user by email. Return User or None if not found."""
        ...

    def update_profile(self, user_id: str, changes: dict) -> User | None:
        """Apply profile field changes. Return the updated User or None if not found."""
        ...

    def update_password(self, user_id: str, password_hash: str) -> bool:
        """Replace the stored password hash. Return True if the user exists."""
        ...

    def record_login(self, user_id: str) -> User | None:
        """Atomically set last_login to now and increment login_count. Return the updated User."""
        ...
