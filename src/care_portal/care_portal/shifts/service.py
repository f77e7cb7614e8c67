from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from ..access.guard import AccessGuard
from ..audit.service import AuditService
from ..common.datetime_utils import fmt_datetime, now_local
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_LOG_LIMIT, WEB_BROWSER_DEVICE_ID
from ..core.exceptions import AuthorizationError, ValidationError
from ..settings.repository import SettingsRepository
from .model import Shift
from .repository import ShiftRepository

logger = logging.getLogger(__name__)


def shift_to_dict(shift: Shift) -> dict:
    return {
        "id": shift.shift_id,
        "user_id": shift.user_id,
        "location": shift.location,
        "clock_in_time": fmt_datetime(shift.clock_in_time),
        "clock_out_time": fmt_datetime(shift.clock_out_time),
        "device_id": shift.device_id,
        "kiosk_id": shift.kiosk_id,
    }


class CareShiftService:
    """Use case: staff clock in / clock out.

    Only one open shift per user. The check and the insert are two separate
    statements, so two simultaneous clock-ins can both succeed.
    """

    def __init__(
        self,
        shifts: ShiftRepository,
        settings: SettingsRepository,
        guard: AccessGuard,
        audit: AuditService,
    ):
        self._shifts = shifts
        self._settings = settings
        self._guard = guard
        self._audit = audit

    def is_selfie_enforced(self) -> bool:
        settings = self._settings.get()
        return bool(settings and settings.selfie_enforced)

    def clock_in(
        self,
        *,
        user_id: Optional[int],
        location: str,
        selfie_id: Optional[str] = None,
        kiosk_id: Optional[int] = None,
        device_id: str = WEB_BROWSER_DEVICE_ID,
        now: Optional[datetime] = None,
    ) -> int:
        self._guard.require_care_access(user_id)
        location = require_non_empty(location, "Location")

        if self.is_selfie_enforced() and not selfie_id:
            raise ValidationError("Selfie verification is required for clock in")

        if self._shifts.get_open_for_user(int(user_id)):
            raise ValidationError("Already clocked in. Please clock out first.")

        now = now or now_local()
        shift_id = self._shifts.create(
            user_id=int(user_id),
            location=location,
            clock_in_time=now,
            device_id=device_id,
            kiosk_id=kiosk_id,
            clock_in_selfie=selfie_id,
        )
        self._audit.log(
            "clock_in",
            user_id=int(user_id),
            details=f"location={location},selfie={'yes' if selfie_id else 'no'}",
            device_id=device_id,
            location=location,
            now=now,
        )
        logger.info("clock in user_id=%s shift_id=%s location=%s", user_id, shift_id, location)
        return shift_id

    def clock_out(
        self,
        *,
        user_id: Optional[int],
        selfie_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> dict:
        # Selfie is only ever required on clock in.
        self._guard.require_care_access(user_id)

        shift = self._shifts.get_open_for_user(int(user_id))
        if not shift:
            raise ValidationError("No active shift found")

        now = now or now_local()
        self._shifts.close(shift.shift_id, clock_out_time=now, clock_out_selfie=selfie_id)
        duration = int((now - shift.clock_in_time).total_seconds())
        self._audit.log(
            "clock_out",
            user_id=int(user_id),
            details=f"location={shift.location},selfie={'yes' if selfie_id else 'no'}",
            device_id=shift.device_id or WEB_BROWSER_DEVICE_ID,
            location=shift.location,
            now=now,
        )
        logger.info("clock out user_id=%s shift_id=%s duration=%ss", user_id, shift.shift_id, duration)
        return {"shift_id": shift.shift_id, "duration_seconds": duration, "location": shift.location}

    def get_current_shift(self, *, user_id: Optional[int], now: Optional[datetime] = None) -> Optional[dict]:
        self._guard.require_care_access(user_id)
        shift = self._shifts.get_open_for_user(int(user_id))
        if not shift:
            return None
        now = now or now_local()
        return {
            "id": shift.shift_id,
            "location": shift.location,
            "clock_in_time": fmt_datetime(shift.clock_in_time),
            "duration_seconds": int((now - shift.clock_in_time).total_seconds()),
        }

    def list_shifts(
        self,
        *,
        actor_id: Optional[int],
        location: Optional[str] = None,
        user_id: Optional[int] = None,
        limit: int = DEFAULT_LOG_LIMIT,
    ) -> list[dict]:
        role = self._guard.require_supervisor(actor_id)

        if role.is_admin:
            locations = [location] if location else None
        elif location:
            if not self._guard.can_access_location(role, location):
                raise AuthorizationError("Access denied to this location")
            locations = [location]
        else:
            locations = list(role.locations)

        shifts = self._shifts.list_recent(locations=locations, user_id=user_id, limit=int(limit))
        return [shift_to_dict(s) for s in shifts]
