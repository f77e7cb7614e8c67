from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime, timedelta
from typing import Optional

from ..access.guard import AccessGuard
from ..common.datetime_utils import fmt_datetime, now_local, parse_iso_datetime
from ..core.constants import DEFAULT_LOG_LIMIT
from ..core.exceptions import AuthorizationError, ValidationError
from ..logs.repository import ResidentLogRepository
from ..residents.repository import ResidentRepository
from ..residents.service import visible_residents
from ..shifts.repository import ShiftRepository
from ..users.employee_repository import EmployeeRepository
from ..users.model import RoleAssignment
from ..users.repository import RoleRepository

logger = logging.getLogger(__name__)


def parse_date_range(date_from: Optional[str], date_to: Optional[str]) -> tuple[Optional[datetime], Optional[datetime]]:
    """Inclusive bounds. A bare YYYY-MM-DD upper bound covers that whole day."""
    for value in (date_from, date_to):
        if value is not None and not isinstance(value, str):
            raise ValidationError("Invalid date")
    try:
        start = parse_iso_datetime(date_from)
        end = parse_iso_datetime(date_to)
    except ValueError:
        raise ValidationError("Invalid date")
    if end is not None and len(date_to.strip()) == 10:
        end = end + timedelta(days=1) - timedelta(microseconds=1)
    if start and end and start > end:
        raise ValidationError("date_from must be before date_to")
    return start, end


class TeamService:
    """What a supervisor's team has been doing: notes written and hours worked.

    A team is everyone whose role shares a location with the caller. Admins see
    every employee through the `get_all_*` variants.
    """

    def __init__(
        self,
        roles: RoleRepository,
        employees: EmployeeRepository,
        shifts: ShiftRepository,
        logs: ResidentLogRepository,
        residents: ResidentRepository,
        guard: AccessGuard,
    ):
        self._roles = roles
        self._employees = employees
        self._shifts = shifts
        self._logs = logs
        self._residents = residents
        self._guard = guard

    def _team(self, role: RoleAssignment) -> list[RoleAssignment]:
        members = list(self._roles.list_all())
        if role.is_admin:
            return members
        return [m for m in members if set(m.locations) & set(role.locations)]

    def _names(self) -> dict[int, str]:
        return {e.user_id: e.display_name for e in self._employees.list_all() if e.user_id is not None}

    def _member_ids(self, role: RoleAssignment, staff_id) -> list[int]:
        ids = [m.user_id for m in self._team(role)]
        if staff_id in (None, ""):
            return ids
        try:
            wanted = int(staff_id)
        except (TypeError, ValueError):
            raise ValidationError("Invalid staff id")
        if wanted not in ids:
            raise AuthorizationError("Staff member is not on your team")
        return [wanted]

    # ---- activity ----

    def _activities(self, role: RoleAssignment, *, staff_id, date_from, date_to, limit) -> list[dict]:
        start, end = parse_date_range(date_from, date_to)
        try:
            limit = max(1, int(limit))
        except (TypeError, ValueError):
            raise ValidationError("Invalid limit")
        residents = {r.resident_id: r for r in visible_residents(self._residents, role)}
        logs = self._logs.list_between(start=start, end=end, author_ids=self._member_ids(role, staff_id))
        if not role.is_admin:
            logs = [log for log in logs if log.resident_id in residents]
        names = self._names()
        out: list[dict] = []
        for log in logs[:limit]:
            resident = residents.get(log.resident_id)
            out.append(
                {
                    "id": log.log_id,
                    "author_id": log.author_id,
                    "author_name": names.get(log.author_id, "Unknown User"),
                    "resident_id": log.resident_id,
                    "resident_name": resident.name if resident else "Unknown Resident",
                    "location": log.location or (resident.location if resident else None),
                    "template": log.template,
                    "version": log.version,
                    "created_at": fmt_datetime(log.created_at),
                }
            )
        return out

    def get_team_activities(
        self,
        *,
        user_id: Optional[int],
        staff_id=None,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        limit=DEFAULT_LOG_LIMIT,
    ) -> list[dict]:
        role = self._guard.require_supervisor(user_id)
        return self._activities(role, staff_id=staff_id, date_from=date_from, date_to=date_to, limit=limit)

    def get_all_employee_activities(
        self,
        *,
        actor_id: Optional[int],
        staff_id=None,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        limit=DEFAULT_LOG_LIMIT,
    ) -> list[dict]:
        role = self._guard.require_admin(actor_id)
        return self._activities(role, staff_id=staff_id, date_from=date_from, date_to=date_to, limit=limit)

    def get_team_log_stats(
        self, *, user_id: Optional[int], date_from: Optional[str] = None, date_to: Optional[str] = None
    ) -> dict:
        role = self._guard.require_supervisor(user_id)
        start, end = parse_date_range(date_from, date_to)
        residents = {r.resident_id: r for r in visible_residents(self._residents, role)}
        logs = self._logs.list_between(start=start, end=end, author_ids=self._member_ids(role, None))
        if not role.is_admin:
            logs = [log for log in logs if log.resident_id in residents]
        names = self._names()
        return {
            "total_logs": len(logs),
            "logs_by_author": dict(Counter(names.get(log.author_id, "Unknown User") for log in logs)),
            "logs_by_template": dict(Counter(log.template or "free_text" for log in logs)),
            "logs_by_location": dict(Counter(log.location or "Unknown Location" for log in logs)),
        }

    # ---- roster ----

    def get_team_roster(self, *, user_id: Optional[int]) -> list[dict]:
        role = self._guard.require_supervisor(user_id)
        names = self._names()
        out = []
        for member in self._team(role):
            employee = self._employees.get_by_user_id(member.user_id)
            out.append(
                {
                    "id": member.user_id,
                    "name": names.get(member.user_id, "Unknown"),
                    "email": employee.work_email if employee else None,
                    "role": member.role.value,
                    "locations": list(member.locations),
                    "is_currently_working": self._shifts.get_open_for_user(member.user_id) is not None,
                }
            )
        out.sort(key=lambda m: m["name"])
        return out

    def get_managed_locations(self, *, user_id: Optional[int]) -> list[str]:
        uid = self._guard.require_user(user_id)
        role = self._guard.get_role(uid)
        if not role:
            raise AuthorizationError("Access denied")
        if role.is_admin:
            return sorted({r.location for r in self._residents.list_all() if r.location})
        return sorted(role.locations)

    # ---- shifts ----

    def _shift_summary(self, role: RoleAssignment, *, staff_id, date_from, date_to, now: Optional[datetime]) -> dict:
        start, end = parse_date_range(date_from, date_to)
        now = now or now_local()
        user_ids = self._member_ids(role, staff_id)
        shifts = self._shifts.list_between(
            start=start,
            end=end,
            user_ids=user_ids,
            locations=None if role.is_admin else list(role.locations),
        )
        names = self._names()
        rows: list[dict] = []
        totals: dict[int, dict] = {}
        for shift in shifts:
            seconds = int(((shift.clock_out_time or now) - shift.clock_in_time).total_seconds())
            rows.append(
                {
                    "id": shift.shift_id,
                    "user_id": shift.user_id,
                    "user_name": names.get(shift.user_id, "Unknown"),
                    "location": shift.location,
                    "clock_in_time": fmt_datetime(shift.clock_in_time),
                    "clock_out_time": fmt_datetime(shift.clock_out_time),
                    "duration_seconds": seconds,
                    "is_currently_working": shift.is_open,
                }
            )
            total = totals.setdefault(
                shift.user_id,
                {
                    "user_id": shift.user_id,
                    "user_name": names.get(shift.user_id, "Unknown"),
                    "shift_count": 0,
                    "total_seconds": 0,
                    "is_currently_working": False,
                },
            )
            total["shift_count"] += 1
            total["total_seconds"] += seconds
            total["is_currently_working"] = total["is_currently_working"] or shift.is_open
        return {"shifts": rows, "totals": sorted(totals.values(), key=lambda t: t["user_name"])}

    def get_team_shift_summary(
        self,
        *,
        user_id: Optional[int],
        staff_id=None,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> dict:
        role = self._guard.require_supervisor(user_id)
        return self._shift_summary(role, staff_id=staff_id, date_from=date_from, date_to=date_to, now=now)

    def get_all_employee_shift_summary(
        self,
        *,
        actor_id: Optional[int],
        staff_id=None,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> dict:
        role = self._guard.require_admin(actor_id)
        return self._shift_summary(role, staff_id=staff_id, date_from=date_from, date_to=date_to, now=now)
