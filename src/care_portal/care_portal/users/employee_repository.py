from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .employee_model import Employee


class EmployeeRepository(Protocol):
    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_user_id(self, user_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_email(self, work_email: str) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_invite_token(self, token: str) -> Optional[Employee]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Employee]:
        raise NotImplementedError

    def create(
        self,
        *,
        name: str,
        work_email: str,
        role: Role,
        locations: Sequence[str],
        created_at: datetime,
        created_by: Optional[int],
        user_id: Optional[int] = None,
        invite_token: Optional[str] = None,
        invite_expires_at: Optional[datetime] = None,
        has_accepted_invite: bool = False,
    ) -> int:
        raise NotImplementedError

    def mark_invite_accepted(self, employee_id: int, *, user_id: int) -> bool:
        raise NotImplementedError

    def any_with_location(self, location: str) -> bool:
        raise NotImplementedError
