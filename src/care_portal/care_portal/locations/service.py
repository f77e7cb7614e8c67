from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from ..access.guard import AccessGuard
from ..audit.service import AuditService
from ..common.datetime_utils import fmt_datetime, now_local
from ..common.validators import require_non_empty
from ..core.enums import LocationStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..kiosks.repository import KioskRepository
from ..residents.repository import ResidentRepository
from ..shifts.repository import ShiftRepository
from ..users.employee_repository import EmployeeRepository
from .model import Location
from .repository import LocationRepository

logger = logging.getLogger(__name__)


def location_to_dict(location: Location) -> dict:
    return {
        "id": location.location_id,
        "name": location.name,
        "address": location.address,
        "capacity": location.capacity,
        "status": location.status.value,
        "created_by": location.created_by,
        "created_at": fmt_datetime(location.created_at),
        "updated_at": fmt_datetime(location.updated_at),
    }


def _parse_capacity(value) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        capacity = int(value)
    except (TypeError, ValueError):
        raise ValidationError("Capacity must be a number")
    if capacity < 0:
        raise ValidationError("Capacity must not be negative")
    return capacity


class LocationService:
    """Admin management of care homes.

    Residents, kiosks, shifts and employees store the location by name, so a
    location that is still referenced cannot be deleted.
    """

    def __init__(
        self,
        locations: LocationRepository,
        residents: ResidentRepository,
        kiosks: KioskRepository,
        shifts: ShiftRepository,
        employees: EmployeeRepository,
        guard: AccessGuard,
        audit: AuditService,
    ):
        self._locations = locations
        self._residents = residents
        self._kiosks = kiosks
        self._shifts = shifts
        self._employees = employees
        self._guard = guard
        self._audit = audit

    def list_locations(self, *, actor_id: Optional[int]) -> list[dict]:
        self._guard.require_admin(actor_id)
        return [location_to_dict(loc) for loc in self._locations.list_all()]

    def create_location(
        self,
        *,
        actor_id: Optional[int],
        name: str,
        address: Optional[str] = None,
        capacity=None,
        now: Optional[datetime] = None,
    ) -> int:
        self._guard.require_admin(actor_id)
        name = require_non_empty(name, "Location name")
        if self._locations.get_by_name(name):
            raise ValidationError("Location already exists")
        now = now or now_local()
        location_id = self._locations.create(
            name=name,
            address=(address or "").strip() or None,
            capacity=_parse_capacity(capacity),
            created_by=int(actor_id),
            created_at=now,
        )
        self._audit.log("create_location", user_id=int(actor_id), details=f"name={name}", location=name, now=now)
        return location_id

    def update_location(
        self,
        *,
        actor_id: Optional[int],
        location_id: int,
        name: Optional[str] = None,
        address: Optional[str] = None,
        capacity=None,
        status: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> bool:
        self._guard.require_admin(actor_id)
        location = self._locations.get_by_id(int(location_id))
        if not location:
            raise NotFoundError("Location not found")

        fields: dict = {}
        if name is not None:
            fields["name"] = require_non_empty(name, "Location name")
        if address is not None:
            fields["address"] = address.strip() or None
        if capacity is not None:
            fields["capacity"] = _parse_capacity(capacity)
        if status is not None:
            try:
                fields["status"] = LocationStatus(status.strip().lower())
            except ValueError:
                raise ValidationError("Status must be active or inactive")

        now = now or now_local()
        self._locations.update(location.location_id, updated_at=now, **fields)
        self._audit.log(
            "update_location",
            user_id=int(actor_id),
            details=f"locationId={location.location_id},fields={','.join(sorted(fields))}",
            location=location.name,
            now=now,
        )
        return True

    def delete_location(self, *, actor_id: Optional[int], location_id: int, now: Optional[datetime] = None) -> bool:
        self._guard.require_admin(actor_id)
        location = self._locations.get_by_id(int(location_id))
        if not location:
            raise NotFoundError("Location not found")

        name = location.name
        if self._residents.any_at_location(name):
            raise ValidationError(
                "Cannot delete location: It is assigned to one or more residents. Please reassign residents first."
            )
        if self._kiosks.any_at_location(name):
            raise ValidationError(
                "Cannot delete location: It has registered kiosks. Please remove or reassign kiosks first."
            )
        if self._shifts.any_at_location(name):
            raise ValidationError(
                "Cannot delete location: It has shift records. Please archive this location instead of deleting it."
            )
        if self._employees.any_with_location(name):
            raise ValidationError(
                "Cannot delete location: It is assigned to one or more employees. "
                "Please update employee assignments first."
            )

        self._locations.delete(location.location_id)
        self._audit.log(
            "delete_location",
            user_id=int(actor_id),
            details=f"locationId={location.location_id},name={name}",
            location=name,
            now=now,
        )
        return True

    def sync_locations_from_strings(self, *, actor_id: Optional[int], now: Optional[datetime] = None) -> dict:
        """Create a location row for every name used elsewhere that has none yet."""
        self._guard.require_admin(actor_id)

        found: list[str] = []

        def _add(name: Optional[str]) -> None:
            if name and name not in found:
                found.append(name)

        for resident in self._residents.list_all():
            _add(resident.location)
        for employee in self._employees.list_all():
            for loc in employee.locations:
                _add(loc)
        for loc in self._shifts.distinct_locations():
            _add(loc)
        for kiosk in self._kiosks.list_all():
            _add(kiosk.location)

        existing = list(self._locations.list_all())
        existing_names = {loc.name for loc in existing}
        now = now or now_local()
        created = []
        for name in found:
            if name in existing_names:
                continue
            new_id = self._locations.create(
                name=name, address=None, capacity=None, created_by=int(actor_id), created_at=now
            )
            created.append({"id": new_id, "name": name})

        if created:
            logger.info("synced %s new locations", len(created))
        return {
            "success": True,
            "total_found": len(found),
            "already_existed": len(existing),
            "created": len(created),
            "locations": created,
        }
