"""User domain entity."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import UUID, uuid4


class UserType(StrEnum):
    """Account role. Also the role an invitation grants."""

    ADMIN = "admin"
    OWNER = "owner"
    USER = "user"


class UserStatus(StrEnum):
    PENDING = "pending"
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


@dataclass
class User:
    """Domain entity for a user account (synced from Supabase auth)."""

    email: str
    user_type: UserType = UserType.USER
    id: UUID = field(default_factory=uuid4)
    full_name: str | None = None
    status: UserStatus = UserStatus.ACTIVE
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def is_admin(self) -> bool:
        return self.user_type == UserType.ADMIN

    @property
    def is_owner(self) -> bool:
        return self.user_type == UserType.OWNER

    @property
    def display_name(self) -> str:
        return self.full_name or self.email
