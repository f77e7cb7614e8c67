from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """An account that can sign in."""

    user_id: int
    name: str
    email: str
    password_hash: str
    is_active: bool = True
    last_login_at: Optional[datetime] = None
    last_login_device_id: Optional[str] = None
    last_login_location: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.name or self.email or "Unknown User"


@dataclass(frozen=True)
class RoleAssignment:
    """Role row of a user: gates every endpoint and scopes by location."""

    user_id: int
    role: Role
    locations: tuple[str, ...] = ()
    assigned_by: Optional[int] = None
    assigned_at: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


@dataclass(frozen=True)
class PasswordResetToken:
    token_id: int
    user_id: int
    token: str
    expires_at: datetime
    used: bool = False
    used_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
