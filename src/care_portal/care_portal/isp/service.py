from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional, Sequence

from ..access.guard import AccessGuard
from ..audit.service import AuditService
from ..common.datetime_utils import fmt_datetime, now_local
from ..common.validators import clean_string_list
from ..core.constants import ISP_DUE_DAYS
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..residents.model import Resident
from ..residents.repository import ResidentRepository
from ..residents.service import visible_residents
from ..users.model import RoleAssignment
from .model import Isp, IspAcknowledgment
from .repository import AcknowledgmentRepository, IspRepository

logger = logging.getLogger(__name__)


def isp_to_dict(isp: Isp) -> dict:
    return {
        "id": isp.isp_id,
        "resident_id": isp.resident_id,
        "version": isp.version,
        "content": isp.content,
        "goals": list(isp.goals),
        "published": isp.published,
        "created_at": fmt_datetime(isp.created_at),
        "published_at": fmt_datetime(isp.published_at),
        "due_at": fmt_datetime(isp.due_at),
    }


def ack_to_dict(ack: IspAcknowledgment) -> dict:
    return {
        "id": ack.ack_id,
        "resident_id": ack.resident_id,
        "user_id": ack.user_id,
        "isp_id": ack.isp_id,
        "acknowledged_at": fmt_datetime(ack.acknowledged_at),
    }


class IspService:
    """ISP authoring, publishing and acknowledgment.

    Acknowledgments point at one ISP version. Publishing a newer version
    therefore leaves every earlier acknowledgment stale without touching it.
    """

    def __init__(
        self,
        isps: IspRepository,
        acks: AcknowledgmentRepository,
        residents: ResidentRepository,
        guard: AccessGuard,
        audit: AuditService,
        *,
        due_days: int = ISP_DUE_DAYS,
    ):
        self._isps = isps
        self._acks = acks
        self._residents = residents
        self._guard = guard
        self._audit = audit
        self._due = timedelta(days=int(due_days))

    def _resident_in_scope(self, role: RoleAssignment, resident_id: int) -> Resident:
        resident = self._residents.get_by_id(int(resident_id))
        if not resident:
            raise NotFoundError("Resident not found")
        if not self._guard.can_access_location(role, resident.location):
            self._audit.log("access_denied", user_id=role.user_id, details=f"resident_access_denied={resident_id}")
            raise AuthorizationError("Access denied to this resident")
        return resident

    def author_isp(
        self,
        *,
        user_id: Optional[int],
        resident_id: int,
        content: str,
        goals: Optional[Sequence[str]] = None,
        now: Optional[datetime] = None,
    ) -> int:
        role = self._guard.require_supervisor(user_id)
        resident = self._resident_in_scope(role, resident_id)

        latest = self._isps.get_latest_for_resident(resident.resident_id)
        version = (latest.version if latest else 0) + 1
        now = now or now_local()
        isp_id = self._isps.create(
            resident_id=resident.resident_id,
            version=version,
            content=content or "",
            goals=clean_string_list(goals, "Goals"),
            created_at=now,
            created_by=int(user_id),
        )
        self._audit.log(
            "create_isp",
            user_id=int(user_id),
            details=f"residentId={resident.resident_id},ispId={isp_id},version={version}",
            location=resident.location,
            now=now,
        )
        return isp_id

    def publish_isp(self, *, user_id: Optional[int], resident_id: int, now: Optional[datetime] = None) -> dict:
        role = self._guard.require_supervisor(user_id)
        resident = self._resident_in_scope(role, resident_id)

        latest = self._isps.get_latest_for_resident(resident.resident_id)
        if not latest:
            raise ValidationError("No ISP draft found")
        if latest.published:
            raise ValidationError("ISP already published")

        now = now or now_local()
        due_at = now + self._due
        self._isps.mark_published(latest.isp_id, published_at=now, published_by=int(user_id), due_at=due_at)
        self._audit.log(
            "publish_isp",
            user_id=int(user_id),
            details=f"ispId={latest.isp_id},residentId={resident.resident_id}",
            location=resident.location,
            now=now,
        )
        logger.info("isp published isp_id=%s version=%s due_at=%s", latest.isp_id, latest.version, due_at)
        return {"isp_id": latest.isp_id, "version": latest.version, "due_at": fmt_datetime(due_at)}

    def get_current_isp(self, *, user_id: Optional[int], resident_id: int) -> Optional[dict]:
        role = self._guard.require_care_access(user_id)
        self._resident_in_scope(role, resident_id)
        latest = self._isps.get_latest_for_resident(int(resident_id))
        return isp_to_dict(latest) if latest else None

    def list_resident_isps(self, *, user_id: Optional[int], resident_id: int) -> list[dict]:
        role = self._guard.require_care_access(user_id)
        self._resident_in_scope(role, resident_id)
        return [isp_to_dict(i) for i in self._isps.list_for_resident(int(resident_id))]

    def list_isp_acknowledgments(self, *, user_id: Optional[int], resident_id: int) -> list[dict]:
        role = self._guard.require_care_access(user_id)
        self._resident_in_scope(role, resident_id)
        return [ack_to_dict(a) for a in self._acks.list_for_resident(int(resident_id))]

    def acknowledge_isp(self, *, user_id: Optional[int], resident_id: int, now: Optional[datetime] = None) -> bool:
        role = self._guard.require_care_access(user_id)
        resident = self._resident_in_scope(role, resident_id)

        current = self._isps.get_latest_for_resident(resident.resident_id)
        if not current or not current.published:
            raise ValidationError("No published ISP")

        if self._acks.find(user_id=int(user_id), isp_id=current.isp_id):
            return True

        now = now or now_local()
        self._acks.create(
            resident_id=resident.resident_id, user_id=int(user_id), isp_id=current.isp_id, acknowledged_at=now
        )
        self._audit.log(
            "acknowledge_isp",
            user_id=int(user_id),
            details=f"residentId={resident.resident_id},ispId={current.isp_id}",
            location=resident.location,
            now=now,
        )
        return True

    def can_log_for_resident(self, *, user_id: Optional[int], resident_id: int) -> bool:
        """True when there is no published ISP or the user acknowledged the current one."""
        if not user_id:
            return False
        current = self._isps.get_latest_for_resident(int(resident_id))
        if not current or not current.published:
            return True
        return self._acks.find(user_id=int(user_id), isp_id=current.isp_id) is not None

    def get_resident_isp_status(self, *, user_id: Optional[int], resident_id: int) -> Optional[dict]:
        role = self._guard.require_care_access(user_id)
        resident = self._residents.get_by_id(int(resident_id))
        if not resident or not self._guard.can_access_location(role, resident.location):
            return None
        published = next((i for i in self._isps.list_for_resident(resident.resident_id) if i.published), None)
        if not published:
            return None
        return {
            "id": published.isp_id,
            "version": published.version,
            "due_at": fmt_datetime(published.due_at),
            "acknowledged": self._acks.find(user_id=int(user_id), isp_id=published.isp_id) is not None,
        }

    def get_pending_acknowledgments(self, *, user_id: Optional[int], now: Optional[datetime] = None) -> list[dict]:
        role = self._guard.require_care_access(user_id)
        residents = {r.resident_id: r for r in visible_residents(self._residents, role)}
        acked = {a.isp_id for a in self._acks.list_for_user(int(user_id))}

        latest_by_resident: dict[int, Isp] = {}
        for isp in self._isps.list_for_residents(list(residents)):
            best = latest_by_resident.get(isp.resident_id)
            if best is None or isp.version > best.version:
                latest_by_resident[isp.resident_id] = isp

        now = now or now_local()
        pending: list[dict] = []
        for resident_id, isp in latest_by_resident.items():
            if not isp.published or isp.isp_id in acked:
                continue
            pending.append(
                {
                    "isp_id": isp.isp_id,
                    "resident_id": resident_id,
                    "isp_version": isp.version,
                    "location": residents[resident_id].location,
                    "due_at": fmt_datetime(isp.due_at or now),
                }
            )
        pending.sort(key=lambda p: (p["due_at"] or "", p["isp_id"]))
        return pending
