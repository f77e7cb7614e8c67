from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import KioskStatus, PairingStatus


@dataclass(frozen=True)
class Kiosk:
    """A shared device paired to one location for staff clock-in."""

    kiosk_id: int
    device_id: str
    location: str
    name: Optional[str] = None
    device_label: Optional[str] = None
    status: KioskStatus = KioskStatus.ACTIVE
    registered_at: Optional[datetime] = None
    registered_by: Optional[int] = None
    last_seen_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status == KioskStatus.ACTIVE


@dataclass(frozen=True)
class PairingToken:
    pairing_id: int
    token: str
    location: str
    status: PairingStatus
    issued_by: int
    issued_at: datetime
    expires_at: datetime
    device_label: Optional[str] = None
    device_id: str = ""
    used_at: Optional[datetime] = None
