from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional

from ..access.guard import AccessGuard
from ..audit.service import AuditService
from ..common.datetime_utils import fmt_datetime, now_local
from ..common.validators import require_non_empty
from ..compliance.due import days_until_due, review_status
from ..core.constants import FIRE_EVAC_REVIEW_DAYS
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..residents.model import Resident
from ..residents.repository import ResidentRepository
from ..residents.service import visible_residents
from ..users.model import RoleAssignment
from .model import FireEvacPlan
from .repository import FireEvacRepository

logger = logging.getLogger(__name__)

_DETAIL_FIELDS = ("mobility_needs", "assistance_required", "medical_equipment", "special_instructions", "notes")


def plan_due_at(plan: FireEvacPlan) -> datetime:
    return plan.created_at + timedelta(days=FIRE_EVAC_REVIEW_DAYS)


def _optional_text(value) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError("Plan details must be text")
    return value.strip() or None


class FireEvacService:
    """Versioned per-resident fire evacuation plans, reviewed yearly."""

    def __init__(
        self,
        plans: FireEvacRepository,
        residents: ResidentRepository,
        guard: AccessGuard,
        audit: AuditService,
    ):
        self._plans = plans
        self._residents = residents
        self._guard = guard
        self._audit = audit

    def _resident_in_scope(self, role: RoleAssignment, resident_id: int) -> Resident:
        resident = self._residents.get_by_id(int(resident_id))
        if not resident:
            raise NotFoundError("Resident not found")
        if not self._guard.can_access_location(role, resident.location):
            self._audit.log("access_denied", user_id=role.user_id, details=f"resident_access_denied={resident_id}")
            raise AuthorizationError("Access denied to this resident")
        return resident

    @staticmethod
    def _to_dict(plan: FireEvacPlan, resident: Resident, now: datetime) -> dict:
        due_at = plan_due_at(plan)
        return {
            "id": plan.plan_id,
            "resident_id": plan.resident_id,
            "resident_name": resident.name,
            "location": resident.location,
            "version": plan.version,
            "file_ref": plan.file_ref,
            "file_name": plan.file_name,
            "file_size": plan.file_size,
            "content_type": plan.content_type,
            "mobility_needs": plan.mobility_needs,
            "assistance_required": plan.assistance_required,
            "medical_equipment": plan.medical_equipment,
            "special_instructions": plan.special_instructions,
            "notes": plan.notes,
            "created_at": fmt_datetime(plan.created_at),
            "created_by": plan.created_by,
            "due_at": fmt_datetime(due_at),
            "days_until_due": days_until_due(due_at, now),
            "status": review_status(due_at, now).value,
        }

    def save_resident_fire_evac_plan(
        self,
        *,
        user_id: Optional[int],
        resident_id: int,
        file_ref: str,
        file_name: str,
        file_size: Optional[int] = None,
        content_type: Optional[str] = None,
        details: Optional[dict] = None,
        now: Optional[datetime] = None,
    ) -> dict:
        role = self._guard.require_supervisor(user_id)
        resident = self._resident_in_scope(role, resident_id)
        file_ref = require_non_empty(file_ref, "File reference")
        file_name = require_non_empty(file_name, "File name")
        if file_size is not None and (isinstance(file_size, bool) or not isinstance(file_size, int) or file_size < 0):
            raise ValidationError("File size must be a non-negative number")
        details = details or {}
        unknown = set(details) - set(_DETAIL_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown plan fields: {', '.join(sorted(unknown))}")

        latest = self._plans.get_latest_for_resident(resident.resident_id)
        version = (latest.version if latest else 0) + 1
        now = now or now_local()
        plan_id = self._plans.create(
            FireEvacPlan(
                plan_id=0,
                resident_id=resident.resident_id,
                location=resident.location,
                version=version,
                created_at=now,
                created_by=int(user_id),
                file_ref=file_ref,
                file_name=file_name,
                file_size=file_size,
                content_type=(content_type or "").strip() or None,
                **{key: _optional_text(details.get(key)) for key in _DETAIL_FIELDS},
            )
        )
        self._audit.log(
            "upload_fire_evac_plan",
            user_id=int(user_id),
            details=f"residentId={resident.resident_id},version={version}",
            location=resident.location,
            now=now,
        )
        logger.info("fire evac plan saved resident_id=%s version=%s", resident.resident_id, version)
        return {"plan_id": plan_id, "version": version}

    def get_resident_fire_evac_plans(
        self, *, user_id: Optional[int], resident_id: int, now: Optional[datetime] = None
    ) -> list[dict]:
        role = self._guard.require_care_access(user_id)
        resident = self._resident_in_scope(role, resident_id)
        now = now or now_local()
        return [self._to_dict(p, resident, now) for p in self._plans.list_for_resident(resident.resident_id)]

    def get_fire_evac_plans(self, *, user_id: Optional[int], now: Optional[datetime] = None) -> list[dict]:
        """Latest plan of every resident in scope that has one."""
        role = self._guard.require_care_access(user_id)
        now = now or now_local()
        out: list[dict] = []
        for resident in visible_residents(self._residents, role):
            plan = self._plans.get_latest_for_resident(resident.resident_id)
            if plan:
                out.append(self._to_dict(plan, resident, now))
        return out
