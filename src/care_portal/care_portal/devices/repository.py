from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import DeviceType
from .model import Device


class DeviceRepository(Protocol):
    def get_by_id(self, id: int) -> Optional[Device]:
        raise NotImplementedError

    def get_by_device_id(self, device_id: str) -> Optional[Device]:
        raise NotImplementedError

    def list_all(self, *, location: Optional[str] = None) -> Sequence[Device]:
        """Newest registration first."""
        raise NotImplementedError

    def create(
        self,
        *,
        device_id: str,
        device_name: str,
        location: str,
        device_type: DeviceType,
        registered_by: int,
        registered_at: datetime,
        metadata: Optional[dict] = None,
        notes: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def update(self, id: int, **fields) -> bool:
        """Patch any of device_name, location, device_type, is_active, notes."""
        raise NotImplementedError

    def record_usage(self, id: int, *, user_id: int, at: datetime) -> bool:
        raise NotImplementedError

    def delete(self, id: int) -> bool:
        raise NotImplementedError
