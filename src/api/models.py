"""Pydantic models for API responses."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from domain.model.user import User


class UserResponse(BaseModel):
    """Public profile of a user. Never carries the password hash."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(..., description="User ID")
    username: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    phone: Optional[str] = None
    avatar: Optional[str] = None
    created_at: datetime
    last_login: Optional[datetime] = None
    login_count: int = Field(0, ge=0, description="Number of successful logins")

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        """Convert domain User to API UserResponse."""
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            bio=user.bio,
            location=user.location,
            phone=user.phone,
            avatar=user.avatar,
            created_at=user.created_at,
            last_login=user.last_login,
            login_count=user.login_count,
        )


class MessageResponse(BaseModel):
    """Plain acknowledgement or error body."""
    message: str
