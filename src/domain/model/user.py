from dataclasses import dataclass
from datetime import datetime

# Fields a user may change through a profile update.
PROFILE_FIELDS = ('first_name', 'last_name', 'email', 'bio', 'location', 'phone', 'avatar')


@dataclass
class User:
    """Domain model representing a registered user."""
    id: str
    username: str
    email: str
    password_hash: str
    created_at: datetime
    first_name: str | None = None
    last_name: str | None = None
    bio: str | None = None
    location: str | None = None
    phone: str | None = None
    avatar: str | None = None
    last_login: datetime | None = None
    login_count: int = 0
