from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Employee:
    """HR-side record of a staff member.

    `user_id` stays empty until the invite is accepted and an account exists.
    """

    employee_id: int
    name: str
    work_email: str
    user_id: Optional[int] = None
    phone: Optional[str] = None
    role: Optional[Role] = None
    locations: tuple[str, ...] = ()
    assigned_device_id: Optional[str] = None
    invite_token: Optional[str] = None
    invite_expires_at: Optional[datetime] = None
    invited_at: Optional[datetime] = None
    invited_by: Optional[int] = None
    has_accepted_invite: bool = False
    employment_status: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def display_name(self) -> str:
        return self.name or self.work_email or "Unknown"
