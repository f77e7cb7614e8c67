from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from ..access.guard import AccessGuard
from ..audit.service import AuditService
from ..common.datetime_utils import fmt_datetime, now_local
from ..common.validators import normalize_email, require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..users.model import RoleAssignment
from .model import Guardian, Resident
from .repository import GuardianRepository, ResidentRepository

logger = logging.getLogger(__name__)


def resident_to_dict(resident: Resident) -> dict:
    return {
        "id": resident.resident_id,
        "name": resident.name,
        "location": resident.location,
        "dob": resident.dob,
        "created_at": fmt_datetime(resident.created_at),
    }


def guardian_to_dict(guardian: Guardian) -> dict:
    return {
        "id": guardian.guardian_id,
        "resident_id": guardian.resident_id,
        "name": guardian.name,
        "relationship": guardian.relationship,
        "phone": guardian.phone,
        "email": guardian.email,
        "address": guardian.address,
        "created_at": fmt_datetime(guardian.created_at),
    }


def visible_residents(residents: ResidentRepository, role: RoleAssignment) -> Sequence[Resident]:
    """Admin sees every resident; others only those at their locations."""
    if role.is_admin:
        return residents.list_all()
    return residents.list_by_locations(list(role.locations))


class ResidentService:
    def __init__(self, residents: ResidentRepository, guard: AccessGuard, audit: AuditService):
        self._residents = residents
        self._guard = guard
        self._audit = audit

    def get_my_residents(self, *, user_id: Optional[int]) -> list[dict]:
        role = self._guard.require_care_access(user_id)
        return [resident_to_dict(r) for r in visible_residents(self._residents, role)]

    def list_residents(self, *, user_id: Optional[int], location: Optional[str] = None) -> list[dict]:
        role = self._guard.require_care_access(user_id)
        items = visible_residents(self._residents, role)
        if location:
            items = [r for r in items if r.location == location]
        return [resident_to_dict(r) for r in items]

    def get_resident(self, *, user_id: Optional[int], resident_id: int) -> dict:
        role = self._guard.require_care_access(user_id)
        resident = self._residents.get_by_id(int(resident_id))
        if not resident:
            raise NotFoundError("Resident not found")
        if not self._guard.can_access_location(role, resident.location):
            raise AuthorizationError("Access denied to this resident")
        return resident_to_dict(resident)

    def create_resident(
        self,
        *,
        actor_id: Optional[int],
        name: str,
        location: str,
        dob: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> int:
        role = self._guard.require_supervisor(actor_id)
        name = require_non_empty(name, "Name")
        location = require_non_empty(location, "Location")
        if role.role == Role.SUPERVISOR and location not in role.locations:
            self._audit.log("access_denied", user_id=actor_id, details=f"location_access_denied={location}")
            raise AuthorizationError("Access denied to this location")

        now = now or now_local()
        resident_id = self._residents.create(
            name=name, location=location, dob=(dob or "").strip() or None, created_at=now, created_by=actor_id
        )
        self._audit.log(
            "create_resident",
            user_id=actor_id,
            details=f"residentId={resident_id}",
            location=location,
            now=now,
        )
        logger.info("resident created resident_id=%s location=%s", resident_id, location)
        return resident_id


class GuardianService:
    """Guardians are readable by care staff of the resident's location, writable by admins."""

    def __init__(
        self,
        guardians: GuardianRepository,
        residents: ResidentRepository,
        guard: AccessGuard,
        audit: AuditService,
    ):
        self._guardians = guardians
        self._residents = residents
        self._guard = guard
        self._audit = audit

    def _require_resident(self, resident_id: Optional[int]) -> Optional[Resident]:
        if resident_id is None:
            return None
        resident = self._residents.get_by_id(int(resident_id))
        if not resident:
            raise NotFoundError("Resident not found")
        return resident

    def create_guardian(
        self,
        *,
        actor_id: Optional[int],
        name: str,
        phone: str,
        email: str,
        resident_id: Optional[int] = None,
        relationship: Optional[str] = None,
        address: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> int:
        self._guard.require_admin(actor_id)
        name = require_non_empty(name, "Name")
        phone = require_non_empty(phone, "Phone")
        email = normalize_email(email)
        self._require_resident(resident_id)

        now = now or now_local()
        guardian_id = self._guardians.create(
            name=name,
            phone=phone,
            email=email,
            resident_id=int(resident_id) if resident_id is not None else None,
            relationship=(relationship or "").strip() or None,
            address=(address or "").strip() or None,
            created_at=now,
            created_by=actor_id,
        )
        details = f"guardianId={guardian_id}"
        if resident_id is not None:
            details += f",residentId={resident_id}"
        self._audit.log("create_guardian", user_id=actor_id, details=details, now=now)
        return guardian_id

    def list_guardians(self, *, user_id: Optional[int], resident_id: Optional[int] = None) -> list[dict]:
        role = self._guard.require_care_access(user_id)
        if resident_id is not None:
            resident = self._require_resident(resident_id)
            if not self._guard.can_access_location(role, resident.location):
                raise AuthorizationError("Access denied to this resident")
            return [guardian_to_dict(g) for g in self._guardians.list_all(resident_id=int(resident_id))]

        guardians = self._guardians.list_all()
        if role.is_admin:
            return [guardian_to_dict(g) for g in guardians]
        visible_ids = {r.resident_id for r in self._residents.list_by_locations(list(role.locations))}
        return [guardian_to_dict(g) for g in guardians if g.resident_id in visible_ids]

    def update_guardian(self, *, actor_id: Optional[int], guardian_id: int, **fields) -> bool:
        self._guard.require_admin(actor_id)
        if not self._guardians.get_by_id(int(guardian_id)):
            raise NotFoundError("Guardian not found")

        changes: dict = {}
        for key in ("name", "phone", "relationship", "address"):
            if fields.get(key) is not None:
                changes[key] = str(fields[key]).strip()
        if "name" in changes and not changes["name"]:
            raise ValidationError("Name is required")
        if "phone" in changes and not changes["phone"]:
            raise ValidationError("Phone is required")
        if fields.get("email") is not None:
            changes["email"] = normalize_email(fields["email"])
        if fields.get("resident_id") is not None:
            self._require_resident(fields["resident_id"])
            changes["resident_id"] = int(fields["resident_id"])
        if not changes:
            raise ValidationError("Nothing to update")

        self._guardians.update(int(guardian_id), **changes)
        self._audit.log(
            "update_guardian",
            user_id=actor_id,
            details=f"guardianId={guardian_id},fields={','.join(sorted(changes))}",
        )
        return True

    def delete_guardian(self, *, actor_id: Optional[int], guardian_id: int) -> bool:
        self._guard.require_admin(actor_id)
        if not self._guardians.delete(int(guardian_id)):
            raise NotFoundError("Guardian not found")
        self._audit.log("delete_guardian", user_id=actor_id, details=f"guardianId={guardian_id}")
        return True
