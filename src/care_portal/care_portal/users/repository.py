from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import PasswordResetToken, RoleAssignment, User


class UserRepository(Protocol):
    """Accounts. Services depend on this interface, never on MySQL directly."""

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def list_all(self) -> Sequence[User]:
        raise NotImplementedError

    def create_user(self, *, name: str, email: str, password_hash: str, created_at: datetime) -> int:
        raise NotImplementedError

    def update_password(self, user_id: int, *, password_hash: str, updated_at: datetime) -> bool:
        raise NotImplementedError

    def record_login(self, user_id: int, *, at: datetime, device_id: str, location: str) -> bool:
        raise NotImplementedError


class RoleRepository(Protocol):
    def get_for_user(self, user_id: int) -> Optional[RoleAssignment]:
        raise NotImplementedError

    def list_all(self) -> Sequence[RoleAssignment]:
        raise NotImplementedError

    def count_admins(self) -> int:
        raise NotImplementedError

    def upsert(
        self,
        *,
        user_id: int,
        role: Role,
        locations: Sequence[str],
        assigned_by: Optional[int],
        assigned_at: datetime,
    ) -> None:
        raise NotImplementedError

    def delete_for_user(self, user_id: int) -> bool:
        raise NotImplementedError


class PasswordResetRepository(Protocol):
    def create(self, *, user_id: int, token: str, expires_at: datetime, created_at: datetime) -> int:
        raise NotImplementedError

    def find_unused(self, *, user_id: int, token: str) -> Optional[PasswordResetToken]:
        raise NotImplementedError

    def mark_used(self, token_id: int, *, used_at: datetime) -> bool:
        raise NotImplementedError
