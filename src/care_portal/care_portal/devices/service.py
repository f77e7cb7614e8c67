from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from ..access.guard import AccessGuard
from ..audit.service import AuditService
from ..common.datetime_utils import fmt_datetime, now_local
from ..common.validators import require_non_empty
from ..core.enums import DeviceType, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..users.repository import UserRepository
from .model import Device
from .repository import DeviceRepository

logger = logging.getLogger(__name__)


def device_to_dict(device: Device) -> dict:
    return {
        "id": device.id,
        "device_id": device.device_id,
        "device_name": device.device_name,
        "location": device.location,
        "device_type": device.device_type.value,
        "is_active": device.is_active,
        "registered_at": fmt_datetime(device.registered_at),
        "metadata": dict(device.metadata),
        "notes": device.notes,
        "last_used_at": fmt_datetime(device.last_used_at),
        "last_used_by": device.last_used_by,
    }


def _parse_device_type(value: Optional[str]) -> DeviceType:
    if not value:
        return DeviceType.DESKTOP
    try:
        return DeviceType(value.strip().lower())
    except ValueError:
        raise ValidationError("Device type must be one of kiosk, mobile, desktop")


class DeviceService:
    """Admin-managed device registry used to restrict where staff sign in."""

    def __init__(self, devices: DeviceRepository, users: UserRepository, guard: AccessGuard, audit: AuditService):
        self._devices = devices
        self._users = users
        self._guard = guard
        self._audit = audit

    def _require_admin(self, actor_id: Optional[int], message: str) -> int:
        uid = self._guard.require_user(actor_id)
        role = self._guard.get_role(uid)
        if not role or role.role != Role.ADMIN:
            raise AuthorizationError(message)
        return uid

    def _require_device(self, id: int) -> Device:
        device = self._devices.get_by_id(int(id))
        if not device:
            raise NotFoundError("Device not found")
        return device

    def register_device(
        self,
        *,
        actor_id: Optional[int],
        device_id: str,
        device_name: str,
        location: str,
        device_type: Optional[str] = None,
        metadata: Optional[dict] = None,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> int:
        uid = self._require_admin(actor_id, "Only admins can register devices")
        device_id = require_non_empty(device_id, "Device ID")
        device_name = require_non_empty(device_name, "Device name")
        location = require_non_empty(location, "Location")
        kind = _parse_device_type(device_type)
        if self._devices.get_by_device_id(device_id):
            raise ValidationError("Device already registered")

        now = now or now_local()
        new_id = self._devices.create(
            device_id=device_id,
            device_name=device_name,
            location=location,
            device_type=kind,
            registered_by=uid,
            registered_at=now,
            metadata=metadata,
            notes=notes,
        )
        self._audit.log(
            "device_registered",
            user_id=uid,
            details=f"Registered device: {device_name}",
            device_id=device_id,
            location=location,
            now=now,
        )
        logger.info("device registered id=%s location=%s", new_id, location)
        return new_id

    def check_device(self, *, user_id: Optional[int], device_id: str) -> dict:
        if user_id:
            role = self._guard.get_role(int(user_id))
            if role and role.is_admin:
                return {
                    "is_registered": True,
                    "is_active": True,
                    "is_admin": True,
                    "device_name": "Admin Device (unrestricted)",
                    "location": "Any Location",
                    "message": "Admin access granted from any device",
                }

        device = self._devices.get_by_device_id((device_id or "").strip())
        if not device:
            return {
                "is_registered": False,
                "is_active": False,
                "is_admin": False,
                "message": "Device not registered. Contact your administrator.",
            }
        return {
            "is_registered": True,
            "is_active": device.is_active,
            "is_admin": False,
            "device_name": device.device_name,
            "location": device.location,
            "device_type": device.device_type.value,
            "message": "Device is active" if device.is_active else "Device is inactive. Contact administrator.",
        }

    def list_devices(self, *, actor_id: Optional[int], location: Optional[str] = None) -> list[dict]:
        self._require_admin(actor_id, "Only admins can view devices")
        return [device_to_dict(d) for d in self._devices.list_all(location=location or None)]

    def update_device_status(
        self, *, actor_id: Optional[int], id: int, is_active: bool, now: Optional[datetime] = None
    ) -> bool:
        uid = self._require_admin(actor_id, "Only admins can update devices")
        device = self._require_device(id)
        self._devices.update(device.id, is_active=bool(is_active))
        verb = "Activated" if is_active else "Deactivated"
        self._audit.log(
            "device_activated" if is_active else "device_deactivated",
            user_id=uid,
            details=f"{verb} device: {device.device_name}",
            device_id=device.device_id,
            location=device.location,
            now=now,
        )
        return True

    def update_device(
        self,
        *,
        actor_id: Optional[int],
        id: int,
        device_name: Optional[str] = None,
        location: Optional[str] = None,
        device_type: Optional[str] = None,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> bool:
        uid = self._require_admin(actor_id, "Only admins can update devices")
        device = self._require_device(id)
        fields: dict = {}
        if device_name is not None:
            fields["device_name"] = require_non_empty(device_name, "Device name")
        if location is not None:
            fields["location"] = require_non_empty(location, "Location")
        if device_type is not None:
            fields["device_type"] = _parse_device_type(device_type)
        if notes is not None:
            fields["notes"] = notes
        if fields:
            self._devices.update(device.id, **fields)
        self._audit.log(
            "device_updated",
            user_id=uid,
            details=f"Updated device: {device.device_name}",
            device_id=device.device_id,
            location=fields.get("location", device.location),
            now=now,
        )
        return True

    def delete_device(self, *, actor_id: Optional[int], id: int, now: Optional[datetime] = None) -> bool:
        uid = self._require_admin(actor_id, "Only admins can delete devices")
        device = self._require_device(id)
        self._devices.delete(device.id)
        self._audit.log(
            "device_deleted",
            user_id=uid,
            details=f"Deleted device: {device.device_name}",
            device_id=device.device_id,
            location=device.location,
            now=now,
        )
        return True

    def record_device_usage(self, *, user_id: Optional[int], device_id: str, now: Optional[datetime] = None) -> dict:
        uid = self._guard.require_user(user_id)
        device = self._devices.get_by_device_id((device_id or "").strip())
        if not device:
            return {"success": False, "message": "Device not registered"}
        if not device.is_active:
            return {"success": False, "message": "Device is inactive"}

        now = now or now_local()
        self._devices.record_usage(device.id, user_id=uid, at=now)
        self._users.record_login(uid, at=now, device_id=device.device_id, location=device.location)
        return {"success": True, "device_name": device.device_name, "location": device.location}
