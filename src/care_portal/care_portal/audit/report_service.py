from __future__ import annotations

import csv
import io
from datetime import datetime, time, timedelta
from typing import Optional

from ..access.guard import AccessGuard
from ..common.datetime_utils import fmt_datetime, parse_iso_datetime
from ..core.constants import DEFAULT_AUDIT_LIMIT
from ..core.exceptions import ValidationError
from ..users.employee_repository import EmployeeRepository
from ..users.repository import RoleRepository, UserRepository
from .model import AuditEntry
from .repository import AuditRepository

CSV_FIELDS = ["id", "timestamp", "actor_id", "actor_name", "event", "location", "object_type", "device_id"]


def object_type_for(details: Optional[str]) -> str:
    """Classify an audit row by the identifiers in its details text."""
    text = details or ""
    if "residentId=" in text or "resident_id=" in text:
        return "Resident Record"
    if "employeeId=" in text or "employee_id=" in text:
        return "Employee Record"
    if "kioskId=" in text or "kiosk_id=" in text:
        return "Kiosk Device"
    if "alertId=" in text or "alert_id=" in text:
        return "Compliance Alert"
    return "System"


def _parse_bound(value: Optional[str], *, end_of_day: bool) -> Optional[datetime]:
    try:
        parsed = parse_iso_datetime(value)
    except ValueError:
        raise ValidationError(f"Invalid date: {value}")
    if parsed and end_of_day and parsed.time() == time.min and len((value or "").strip()) == 10:
        return parsed + timedelta(days=1) - timedelta(microseconds=1)
    return parsed


class AuditReportService:
    """Admin-only views over the audit trail."""

    def __init__(
        self,
        audit: AuditRepository,
        users: UserRepository,
        employees: EmployeeRepository,
        roles: RoleRepository,
        guard: AccessGuard,
    ):
        self._audit = audit
        self._users = users
        self._employees = employees
        self._roles = roles
        self._guard = guard

    def list_logs(
        self,
        *,
        actor_id: Optional[int],
        actor: Optional[str] = None,
        action: Optional[str] = None,
        location: Optional[str] = None,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        limit: int = DEFAULT_AUDIT_LIMIT,
    ) -> list[dict]:
        self._guard.require_admin(actor_id)

        start = _parse_bound(date_from, end_of_day=False)
        end = _parse_bound(date_to, end_of_day=True)
        names = {u.user_id: u.display_name for u in self._users.list_all()}

        out: list[dict] = []
        for entry in self._audit.list_recent(limit=int(limit)):
            if not self._matches(entry, actor=actor, action=action, location=location, start=start, end=end):
                continue
            out.append(
                {
                    "id": entry.audit_id,
                    "timestamp": fmt_datetime(entry.timestamp),
                    "actor_id": entry.user_id if entry.user_id is not None else "system",
                    "actor_name": names.get(entry.user_id, "Unknown User") if entry.user_id is not None else "System",
                    "event": entry.event,
                    "location": entry.location or "System",
                    "object_type": object_type_for(entry.details),
                    "device_id": entry.device_id,
                }
            )
        return out

    @staticmethod
    def _matches(
        entry: AuditEntry,
        *,
        actor: Optional[str],
        action: Optional[str],
        location: Optional[str],
        start: Optional[datetime],
        end: Optional[datetime],
    ) -> bool:
        if actor:
            entry_actor = str(entry.user_id) if entry.user_id is not None else "system"
            if entry_actor != str(actor):
                return False
        if action and entry.event != action:
            return False
        if location and (entry.location or "System") != location:
            return False
        if start and entry.timestamp < start:
            return False
        if end and entry.timestamp > end:
            return False
        return True

    def list_actors(self, *, actor_id: Optional[int]) -> list[dict]:
        self._guard.require_admin(actor_id)
        roles = {r.user_id: r.role.value for r in self._roles.list_all()}
        return [
            {"id": e.user_id, "name": e.display_name, "role": roles.get(e.user_id, "No role")}
            for e in self._employees.list_all()
            if e.user_id is not None
        ]

    def list_actions(self, *, actor_id: Optional[int]) -> list[str]:
        self._guard.require_admin(actor_id)
        return sorted(set(self._audit.distinct_events()))

    def list_locations(self, *, actor_id: Optional[int]) -> list[str]:
        self._guard.require_admin(actor_id)
        return sorted({loc for loc in self._audit.distinct_locations() if loc})

    def export_csv(self, *, actor_id: Optional[int], **filters) -> bytes:
        rows = self.list_logs(actor_id=actor_id, **filters)
        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for row in rows:
            writer.writerow(row)
        return out.getvalue().encode("utf-8-sig")
