from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional

from ..access.guard import AccessGuard
from ..audit.service import AuditService
from ..common.datetime_utils import fmt_datetime, now_local
from ..core.constants import LONG_SHIFT_HOURS, MISSED_CLOCK_OUT_HOURS, TIME_EXCEPTION_LOOKBACK_DAYS
from ..core.enums import ReviewStatus, Role, TimeExceptionKind
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..isp.repository import AcknowledgmentRepository, IspRepository
from ..residents.repository import ResidentRepository
from ..residents.service import visible_residents
from ..shifts.model import Shift
from ..shifts.repository import ShiftRepository
from ..users.employee_repository import EmployeeRepository
from ..users.model import RoleAssignment
from ..users.repository import RoleRepository
from .repository import TimeExceptionReviewRepository

logger = logging.getLogger(__name__)


def neutral_resident_id(resident_id) -> str:
    """Stable 4-digit label so supervisor dashboards can avoid resident names."""
    value = 0
    for ch in str(resident_id):
        value = ((value << 5) - value + ord(ch)) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return str(abs(value) % 9999).zfill(4)


class SupervisorService:
    """Read-only team and ISP compliance views for supervisors."""

    def __init__(
        self,
        roles: RoleRepository,
        employees: EmployeeRepository,
        shifts: ShiftRepository,
        residents: ResidentRepository,
        isps: IspRepository,
        acks: AcknowledgmentRepository,
        guard: AccessGuard,
    ):
        self._roles = roles
        self._employees = employees
        self._shifts = shifts
        self._residents = residents
        self._isps = isps
        self._acks = acks
        self._guard = guard

    def _staff_for(self, role: RoleAssignment) -> list[RoleAssignment]:
        staff = [r for r in self._roles.list_all() if r.role == Role.STAFF]
        if role.is_admin:
            return staff
        return [r for r in staff if set(r.locations) & set(role.locations)]

    def get_team_members(self, *, user_id: Optional[int]) -> list[dict]:
        role = self._guard.require_supervisor(user_id)
        out: list[dict] = []
        for member in self._staff_for(role):
            employee = self._employees.get_by_user_id(member.user_id)
            if not employee:
                continue
            latest = self._shifts.get_latest_for_user(member.user_id)
            shared = list(member.locations) if role.is_admin else [l for l in member.locations if l in role.locations]
            out.append(
                {
                    "id": member.user_id,
                    "name": employee.name or "Unknown",
                    "role": member.role.value,
                    "locations": shared,
                    "is_currently_clocked": self._shifts.get_open_for_user(member.user_id) is not None,
                    "last_clock_in": fmt_datetime(latest.clock_in_time) if latest else None,
                }
            )
        return out

    def get_location_isps(self, *, user_id: Optional[int]) -> list[dict]:
        role = self._guard.require_supervisor(user_id)
        residents = list(visible_residents(self._residents, role))
        isps = self._isps.list_for_residents([r.resident_id for r in residents])
        items = [
            {
                "id": isp.isp_id,
                "resident_neutral_id": neutral_resident_id(isp.resident_id),
                "version": isp.version,
                "published": isp.published,
                "content": isp.content,
                "goals": list(isp.goals),
                "created_at": isp.created_at,
                "due_at": fmt_datetime(isp.due_at),
            }
            for isp in isps
        ]
        items.sort(key=lambda i: (i["created_at"] is not None, i["created_at"]), reverse=True)
        for item in items:
            item["created_at"] = fmt_datetime(item["created_at"])
        return items

    def get_isp_acknowledgments(self, *, user_id: Optional[int]) -> list[dict]:
        """Per published ISP in scope: which location staff have acknowledged it."""
        role = self._guard.require_supervisor(user_id)
        residents = {r.resident_id: r for r in visible_residents(self._residents, role)}
        published = [isp for isp in self._isps.list_for_residents(list(residents)) if isp.published]
        acks = self._acks.list_for_isps([isp.isp_id for isp in published])
        acked = {(a.isp_id, a.user_id): a.acknowledged_at for a in acks}
        staff_roles = [r for r in self._roles.list_all() if r.role == Role.STAFF]

        out: list[dict] = []
        for isp in published:
            resident = residents[isp.resident_id]
            staff = []
            for member in staff_roles:
                if resident.location not in member.locations:
                    continue
                employee = self._employees.get_by_user_id(member.user_id)
                if not employee:
                    continue
                staff.append(
                    {
                        "user_id": member.user_id,
                        "user_name": employee.name,
                        "acknowledged_at": fmt_datetime(acked.get((isp.isp_id, member.user_id))),
                    }
                )
            staff.sort(key=lambda s: (s["acknowledged_at"] is not None, s["user_name"] or ""))
            out.append(
                {
                    "isp_id": isp.isp_id,
                    "isp_version": isp.version,
                    "resident_neutral_id": neutral_resident_id(isp.resident_id),
                    "location": resident.location,
                    "acknowledged": sum(1 for s in staff if s["acknowledged_at"]),
                    "total_staff": len(staff),
                    "staff": staff,
                }
            )
        out.sort(key=lambda i: (i["acknowledged"] == i["total_staff"], i["resident_neutral_id"]))
        return out


def detect_time_exception(shift: Shift, now: datetime) -> Optional[TimeExceptionKind]:
    if shift.clock_out_time is None:
        if now - shift.clock_in_time > timedelta(hours=MISSED_CLOCK_OUT_HOURS):
            return TimeExceptionKind.MISSED_CLOCK_OUT
        return None
    if shift.clock_out_time - shift.clock_in_time > timedelta(hours=LONG_SHIFT_HOURS):
        return TimeExceptionKind.LONG_SHIFT
    return None


def parse_exception_id(exception_id) -> tuple[int, TimeExceptionKind]:
    """`"<shift_id>:<kind>"` -> (shift_id, kind)."""
    shift_part, _, kind_part = str(exception_id or "").partition(":")
    try:
        return int(shift_part), TimeExceptionKind(kind_part)
    except ValueError:
        raise ValidationError("Invalid time exception id")


class TimeExceptionService:
    """Flags unusual shifts for supervisor review.

    A closed shift longer than LONG_SHIFT_HOURS, or one still open
    MISSED_CLOCK_OUT_HOURS after clock-in, is an exception until a supervisor
    approves or denies it. Decisions are final.
    """

    def __init__(
        self,
        shifts: ShiftRepository,
        employees: EmployeeRepository,
        reviews: TimeExceptionReviewRepository,
        guard: AccessGuard,
        audit: AuditService,
    ):
        self._shifts = shifts
        self._employees = employees
        self._reviews = reviews
        self._guard = guard
        self._audit = audit

    def _to_dict(self, shift: Shift, kind: TimeExceptionKind, now: datetime) -> dict:
        employee = self._employees.get_by_user_id(shift.user_id)
        end = shift.clock_out_time or now
        return {
            "id": f"{shift.shift_id}:{kind.value}",
            "shift_id": shift.shift_id,
            "kind": kind.value,
            "user_id": shift.user_id,
            "user_name": employee.display_name if employee else "Unknown",
            "location": shift.location,
            "clock_in_time": fmt_datetime(shift.clock_in_time),
            "clock_out_time": fmt_datetime(shift.clock_out_time),
            "duration_hours": round((end - shift.clock_in_time).total_seconds() / 3600, 2),
        }

    def get_pending_time_exceptions(self, *, user_id: Optional[int], now: Optional[datetime] = None) -> list[dict]:
        role = self._guard.require_supervisor(user_id)
        now = now or now_local()
        shifts = self._shifts.list_between(
            start=now - timedelta(days=TIME_EXCEPTION_LOOKBACK_DAYS),
            locations=None if role.is_admin else list(role.locations),
        )
        flagged = []
        for shift in shifts:
            kind = detect_time_exception(shift, now)
            if kind:
                flagged.append((shift, kind))
        reviewed = {(r.shift_id, r.kind) for r in self._reviews.list_for_shifts([s.shift_id for s, _ in flagged])}
        return [self._to_dict(s, kind, now) for s, kind in flagged if (s.shift_id, kind) not in reviewed]

    def _decide(
        self,
        *,
        user_id: Optional[int],
        exception_id,
        status: ReviewStatus,
        reason: Optional[str],
        now: Optional[datetime],
    ) -> dict:
        role = self._guard.require_supervisor(user_id)
        shift_id, kind = parse_exception_id(exception_id)
        shift = self._shifts.get_by_id(shift_id)
        if not shift:
            raise NotFoundError("Shift not found")
        if not self._guard.can_access_location(role, shift.location):
            self._audit.log("access_denied", user_id=role.user_id, details=f"shift_access_denied={shift_id}")
            raise AuthorizationError("Access denied to this shift")

        now = now or now_local()
        if detect_time_exception(shift, now) != kind:
            raise ValidationError("Shift is not a time exception")
        if self._reviews.find(shift_id=shift_id, kind=kind):
            raise ValidationError("Time exception already reviewed")

        self._reviews.create(
            shift_id=shift_id, kind=kind, status=status, decided_by=int(user_id), decided_at=now, reason=reason
        )
        event = "approve_time_exception" if status == ReviewStatus.APPROVED else "deny_time_exception"
        details = f"exceptionId={shift_id}:{kind.value}"
        if reason:
            details += f",reason={reason}"
        self._audit.log(event, user_id=int(user_id), details=details, location=shift.location, now=now)
        logger.info("time exception %s shift_id=%s kind=%s", status.value, shift_id, kind.value)
        return {"id": f"{shift_id}:{kind.value}", "status": status.value, "decided_at": fmt_datetime(now)}

    def approve_time_exception(
        self, *, user_id: Optional[int], exception_id, note: Optional[str] = None, now: Optional[datetime] = None
    ) -> dict:
        reason = note.strip() if isinstance(note, str) and note.strip() else None
        return self._decide(
            user_id=user_id, exception_id=exception_id, status=ReviewStatus.APPROVED, reason=reason, now=now
        )

    def deny_time_exception(
        self, *, user_id: Optional[int], exception_id, reason: Optional[str], now: Optional[datetime] = None
    ) -> dict:
        if not isinstance(reason, str) or not reason.strip():
            raise ValidationError("Reason is required")
        return self._decide(
            user_id=user_id, exception_id=exception_id, status=ReviewStatus.DENIED, reason=reason.strip(), now=now
        )
