from __future__ import annotations

import dataclasses
import logging
from datetime import datetime, timedelta
from typing import Optional

from ..access.guard import AccessGuard
from ..audit.service import AuditService
from ..common.datetime_utils import fmt_datetime, now_local, parse_iso_datetime
from ..core.constants import COMPLIANCE_DUE_SOON_DAYS, ISP_REVIEW_DAYS
from ..core.enums import AlertType, ComplianceStatus
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..fire_evac.repository import FireEvacRepository
from ..fire_evac.service import plan_due_at
from ..isp.model import Isp
from ..isp.repository import IspRepository
from ..residents.repository import ResidentRepository
from ..residents.service import visible_residents
from ..settings.model import AppSettings
from ..settings.repository import SettingsRepository
from .due import days_until_due, review_status
from .model import ComplianceAlert
from .repository import ComplianceAlertRepository

logger = logging.getLogger(__name__)

_TITLES = {
    AlertType.ISP: "ISP review due",
    AlertType.FIRE_EVAC: "Fire evacuation plan review due",
}


def js_weekday(moment: datetime) -> int:
    """0 = Sunday ... 6 = Saturday, the numbering stored in app settings."""
    return (moment.weekday() + 1) % 7


def is_alert_run_due(settings: AppSettings, now: datetime) -> bool:
    return (
        js_weekday(now) == settings.alert_weekday
        and now.hour == settings.alert_hour
        and now.minute == settings.alert_minute
    )


def next_alert_run(settings: AppSettings, now: datetime) -> datetime:
    """The first scheduled minute strictly after `now`."""
    candidate = now.replace(hour=settings.alert_hour, minute=settings.alert_minute, second=0, microsecond=0)
    candidate += timedelta(days=(settings.alert_weekday - js_weekday(now)) % 7)
    if candidate <= now:
        candidate += timedelta(days=7)
    return candidate


def alert_to_dict(alert: ComplianceAlert) -> dict:
    return {
        "id": alert.alert_id,
        "type": alert.alert_type.value,
        "title": alert.title,
        "description": alert.description,
        "location": alert.location,
        "resident_id": alert.resident_id,
        "severity": alert.severity,
        "due_at": fmt_datetime(alert.due_at),
        "created_at": fmt_datetime(alert.created_at),
    }


def _bounded(value, name: str, low: int, high: int) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be a number")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be a number")
    if not low <= number <= high:
        raise ValidationError(f"{name} must be between {low} and {high}")
    return number


class ComplianceService:
    """ISP and fire evacuation review tracking, plus the weekly alert run.

    An ISP is due at its `due_at` (set on publish, moved by `set_isp_due_date`).
    A fire evacuation plan is due a year after its latest version was saved.
    """

    def __init__(
        self,
        alerts: ComplianceAlertRepository,
        settings: SettingsRepository,
        residents: ResidentRepository,
        isps: IspRepository,
        fire_evac_plans: FireEvacRepository,
        guard: AccessGuard,
        audit: AuditService,
    ):
        self._alerts = alerts
        self._settings = settings
        self._residents = residents
        self._isps = isps
        self._plans = fire_evac_plans
        self._guard = guard
        self._audit = audit

    # ---- overview ----

    @staticmethod
    def _isp_due_at(isp: Isp) -> Optional[datetime]:
        if isp.due_at:
            return isp.due_at
        if isp.published_at:
            return isp.published_at + timedelta(days=ISP_REVIEW_DAYS)
        return None

    def _items(self, residents, now: datetime) -> list[dict]:
        published: dict[int, Isp] = {}
        for isp in self._isps.list_for_residents([r.resident_id for r in residents]):
            current = published.get(isp.resident_id)
            if isp.published and (current is None or isp.version > current.version):
                published[isp.resident_id] = isp

        items: list[dict] = []
        for resident in residents:
            isp = published.get(resident.resident_id)
            plan = self._plans.get_latest_for_resident(resident.resident_id)
            for alert_type, due_at, missing in (
                (AlertType.ISP, self._isp_due_at(isp) if isp else None, "No ISP on file"),
                (AlertType.FIRE_EVAC, plan_due_at(plan) if plan else None, "No plan on file"),
            ):
                base = {
                    "type": alert_type.value,
                    "resident_id": resident.resident_id,
                    "resident_name": resident.name,
                    "location": resident.location,
                }
                if due_at is None:
                    items.append(
                        {
                            **base,
                            "due_at": None,
                            "days_until_due": None,
                            "status": ComplianceStatus.OVERDUE.value,
                            "note": missing,
                        }
                    )
                    continue
                items.append(
                    {
                        **base,
                        "due_at": fmt_datetime(due_at),
                        "days_until_due": days_until_due(due_at, now),
                        "status": review_status(due_at, now).value,
                        "note": "",
                    }
                )
        return items

    def get_compliance_overview(self, *, user_id: Optional[int], now: Optional[datetime] = None) -> dict:
        role = self._guard.require_care_access(user_id)
        now = now or now_local()
        items = self._items(visible_residents(self._residents, role), now)
        counts = {status.value: 0 for status in ComplianceStatus}
        for item in items:
            counts[item["status"]] += 1
        return {"items": items, "counts": counts}

    # ---- alerts ----

    def generate_compliance_alerts(self, *, now: Optional[datetime] = None) -> int:
        """Raise one alert per review item due within the warning window. Returns how many were new."""
        now = now or now_local()
        created = 0
        for resident in self._residents.list_all():
            for item in self._items([resident], now):
                if item["due_at"] is None or item["days_until_due"] > COMPLIANCE_DUE_SOON_DAYS:
                    continue
                alert_type = AlertType(item["type"])
                due_at = parse_iso_datetime(item["due_at"])
                if self._alerts.find_active(
                    alert_type=alert_type, location=resident.location, due_at=due_at, resident_id=resident.resident_id
                ):
                    continue
                self._alerts.create(
                    alert_type=alert_type,
                    title=_TITLES[alert_type],
                    description=f"{resident.name}: due {due_at:%Y-%m-%d}",
                    location=resident.location,
                    due_at=due_at,
                    created_at=now,
                    resident_id=resident.resident_id,
                )
                created += 1
        logger.info("compliance alert run created=%s", created)
        return created

    def run_scheduled_alerts(self, *, now: Optional[datetime] = None, force: bool = False) -> Optional[int]:
        """Generate alerts when `now` is the configured weekly minute; None when skipped."""
        now = now or now_local()
        settings = self._settings.get() or AppSettings()
        if not force and not is_alert_run_due(settings, now):
            logger.debug("compliance alert run skipped next=%s", fmt_datetime(next_alert_run(settings, now)))
            return None
        return self.generate_compliance_alerts(now=now)

    def list_active_alerts(self, *, user_id: Optional[int]) -> list[dict]:
        role = self._guard.require_care_access(user_id)
        if role.is_admin:
            alerts = self._alerts.list_active()
        else:
            alerts = self._alerts.list_active(locations=list(role.locations))
        return [alert_to_dict(a) for a in alerts]

    def dismiss_alert(self, *, user_id: Optional[int], alert_id: int, now: Optional[datetime] = None) -> bool:
        role = self._guard.require_care_access(user_id)
        alert = self._alerts.get_by_id(int(alert_id))
        if not alert or not alert.active:
            raise NotFoundError("Alert not found")
        if not self._guard.can_access_location(role, alert.location):
            self._audit.log("access_denied", user_id=role.user_id, details=f"alert_access_denied={alert_id}")
            raise AuthorizationError("Access denied to this alert")

        now = now or now_local()
        self._alerts.dismiss(alert.alert_id, dismissed_by=int(user_id), dismissed_at=now)
        self._audit.log(
            "dismiss_alert",
            user_id=int(user_id),
            details=f"alertId={alert.alert_id},type={alert.alert_type.value},location={alert.location}",
            location=alert.location,
            now=now,
        )
        return True

    # ---- schedule ----

    def get_alert_schedule(self, *, user_id: Optional[int], now: Optional[datetime] = None) -> dict:
        self._guard.require_admin(user_id)
        settings = self._settings.get() or AppSettings()
        return {
            "weekday": settings.alert_weekday,
            "hour": settings.alert_hour,
            "minute": settings.alert_minute,
            "next_run": fmt_datetime(next_alert_run(settings, now or now_local())),
        }

    def set_alert_schedule(
        self, *, user_id: Optional[int], weekday, hour, minute, now: Optional[datetime] = None
    ) -> dict:
        self._guard.require_admin(user_id)
        patch = {
            "alert_weekday": _bounded(weekday, "Weekday", 0, 6),
            "alert_hour": _bounded(hour, "Hour", 0, 23),
            "alert_minute": _bounded(minute, "Minute", 0, 59),
        }
        self._settings.save(dataclasses.replace(self._settings.get() or AppSettings(), **patch))
        self._audit.log(
            "set_alert_schedule",
            user_id=int(user_id),
            details="weekday={alert_weekday},hour={alert_hour},minute={alert_minute}".format(**patch),
            now=now,
        )
        return self.get_alert_schedule(user_id=user_id, now=now)

    # ---- ISP due dates ----

    def set_isp_due_date(
        self,
        *,
        user_id: Optional[int],
        isp_id: int,
        due_at: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> dict:
        """Move an ISP's review date; without a date the next review is six months out."""
        role = self._guard.require_supervisor(user_id)
        isp = self._isps.get_by_id(int(isp_id))
        if not isp:
            raise NotFoundError("ISP not found")
        resident = self._residents.get_by_id(isp.resident_id)
        if not resident:
            raise NotFoundError("Resident not found")
        if not self._guard.can_access_location(role, resident.location):
            self._audit.log("access_denied", user_id=role.user_id, details=f"resident_access_denied={resident.resident_id}")
            raise AuthorizationError("Access denied to this resident")

        now = now or now_local()
        if due_at is not None and not isinstance(due_at, str):
            raise ValidationError("Invalid due date")
        try:
            new_due = parse_iso_datetime(due_at)
        except ValueError:
            raise ValidationError("Invalid due date")
        new_due = new_due or now + timedelta(days=ISP_REVIEW_DAYS)
        self._isps.set_due_at(isp.isp_id, due_at=new_due)
        self._audit.log(
            "set_isp_due_date",
            user_id=int(user_id),
            details=f"ispId={isp.isp_id},residentId={resident.resident_id},dueAt={fmt_datetime(new_due)}",
            location=resident.location,
            now=now,
        )
        return {"isp_id": isp.isp_id, "due_at": fmt_datetime(new_due)}
