from __future__ import annotations

import dataclasses
import logging
from datetime import datetime
from typing import Optional

from ..access.guard import AccessGuard
from ..audit.repository import AuditRepository
from ..audit.service import AuditService
from ..common.datetime_utils import fmt_datetime, now_local
from ..common.validators import clean_locations, parse_role
from ..core.constants import DEFAULT_AUDIT_LIMIT, RECENT_ACTIVITY_COUNT
from ..core.enums import KioskStatus, Role
from ..core.exceptions import NotFoundError, ValidationError
from ..kiosks.repository import KioskRepository
from ..residents.repository import ResidentRepository
from ..users.employee_repository import EmployeeRepository
from ..users.repository import RoleRepository, UserRepository
from .model import AppSettings
from .repository import SettingsRepository

logger = logging.getLogger(__name__)

_BOUNDS = {
    "alert_weekday": (0, 6),
    "alert_hour": (0, 23),
    "alert_minute": (0, 59),
}


def _coerce_setting(key: str, value):
    if key in _BOUNDS:
        low, high = _BOUNDS[key]
        try:
            number = int(value)
        except (TypeError, ValueError):
            raise ValidationError(f"{key} must be a number")
        if not low <= number <= high:
            raise ValidationError(f"{key} must be between {low} and {high}")
        return number
    if key == "selfie_enforced":
        if not isinstance(value, bool):
            raise ValidationError("selfie_enforced must be true or false")
        return value
    return "" if value is None else str(value)


class SettingsService:
    """Admin settings: app config, user roles and the location overview."""

    def __init__(
        self,
        settings: SettingsRepository,
        users: UserRepository,
        roles: RoleRepository,
        employees: EmployeeRepository,
        residents: ResidentRepository,
        kiosks: KioskRepository,
        audit_entries: AuditRepository,
        guard: AccessGuard,
        audit: AuditService,
    ):
        self._settings = settings
        self._users = users
        self._roles = roles
        self._employees = employees
        self._residents = residents
        self._kiosks = kiosks
        self._audit_entries = audit_entries
        self._guard = guard
        self._audit = audit

    # ---- app config ----

    def get_app_settings(self, *, actor_id: Optional[int]) -> dict:
        self._guard.require_admin(actor_id)
        return (self._settings.get() or AppSettings()).to_dict()

    def update_app_settings(self, *, actor_id: Optional[int], changes: dict, now: Optional[datetime] = None) -> dict:
        """Apply only the keys present in `changes`; the rest keep their value."""
        self._guard.require_admin(actor_id)
        allowed = {f.name for f in dataclasses.fields(AppSettings)}
        unknown = sorted(set(changes) - allowed)
        if unknown:
            raise ValidationError(f"Unknown settings: {', '.join(unknown)}")

        patch = {key: _coerce_setting(key, value) for key, value in changes.items()}
        current = self._settings.get() or AppSettings()
        updated = dataclasses.replace(current, **patch)
        self._settings.save(updated)
        self._audit.log(
            "update_app_settings",
            user_id=int(actor_id),
            details=f"settings={','.join(changes)}",
            now=now,
        )
        logger.info("app settings updated keys=%s", ",".join(changes))
        return updated.to_dict()

    # ---- roles ----

    def get_all_users_with_roles(self, *, actor_id: Optional[int]) -> list[dict]:
        self._guard.require_admin(actor_id)
        roles = {r.user_id: r for r in self._roles.list_all()}
        entries = list(self._audit_entries.list_recent(limit=DEFAULT_AUDIT_LIMIT))

        out: list[dict] = []
        for employee in self._employees.list_all():
            uid = employee.user_id
            role = roles.get(uid) if uid is not None else None
            mine = [e for e in entries if uid is not None and e.user_id == uid]
            out.append(
                {
                    "id": uid,
                    "employee_id": employee.employee_id,
                    "name": employee.display_name,
                    "email": employee.work_email or "No email",
                    "role": role.role.value if role else None,
                    "locations": list(role.locations) if role else [],
                    "last_active": fmt_datetime(mine[0].timestamp) if mine else None,
                    "recent_activity": [
                        {"event": e.event, "timestamp": fmt_datetime(e.timestamp), "location": e.location}
                        for e in mine[:RECENT_ACTIVITY_COUNT]
                    ],
                }
            )
        return out

    def update_user_role(
        self,
        *,
        actor_id: Optional[int],
        target_user_id: int,
        role: str,
        locations,
        now: Optional[datetime] = None,
    ) -> bool:
        self._guard.require_admin(actor_id)
        new_role = parse_role(role)
        locs = clean_locations(locations)
        if not self._users.get_by_id(int(target_user_id)):
            raise NotFoundError("User not found")

        existing = self._roles.get_for_user(int(target_user_id))
        if existing and existing.is_admin and new_role != Role.ADMIN and self._roles.count_admins() <= 1:
            raise ValidationError("Cannot remove the last admin")

        now = now or now_local()
        self._roles.upsert(
            user_id=int(target_user_id),
            role=new_role,
            locations=locs,
            assigned_by=int(actor_id),
            assigned_at=now,
        )
        self._audit.log(
            "update_user_role",
            user_id=int(actor_id),
            details=f"targetUserId={target_user_id},role={new_role.value},locations={','.join(locs)}",
            now=now,
        )
        logger.info("role updated target=%s role=%s", target_user_id, new_role.value)
        return True

    def delete_user_role(self, *, actor_id: Optional[int], target_user_id: int, now: Optional[datetime] = None) -> bool:
        self._guard.require_admin(actor_id)
        existing = self._roles.get_for_user(int(target_user_id))
        if existing and existing.is_admin and self._roles.count_admins() <= 1:
            raise ValidationError("Cannot remove the last admin")
        if existing:
            self._roles.delete_for_user(int(target_user_id))
        self._audit.log(
            "delete_user_role",
            user_id=int(actor_id),
            details=f"targetUserId={target_user_id}",
            now=now,
        )
        return True

    def get_user_role(self, user_id: Optional[int]) -> Optional[dict]:
        if not user_id:
            return None
        role = self._roles.get_for_user(int(user_id))
        return {
            "role": role.role.value if role else None,
            "locations": list(role.locations) if role else [],
        }

    # ---- location overview ----

    def get_locations(self, *, actor_id: Optional[int]) -> list[dict]:
        self._guard.require_admin(actor_id)
        residents = list(self._residents.list_all())
        kiosks = list(self._kiosks.list_all())
        roles = list(self._roles.list_all())

        names: list[str] = []
        for loc in [r.location for r in residents] + [k.location for k in kiosks]:
            if loc and loc not in names:
                names.append(loc)

        return [
            {
                "name": name,
                "resident_count": sum(1 for r in residents if r.location == name),
                "kiosk_count": sum(1 for k in kiosks if k.location == name and k.status == KioskStatus.ACTIVE),
                "staff_count": sum(1 for r in roles if r.role == Role.STAFF and name in r.locations),
            }
            for name in names
        ]
