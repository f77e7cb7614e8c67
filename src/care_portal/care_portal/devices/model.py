from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..core.enums import DeviceType


@dataclass(frozen=True)
class Device:
    """A browser/device registered by an admin for staff sign-in."""

    id: int
    device_id: str
    device_name: str
    location: str
    device_type: DeviceType = DeviceType.DESKTOP
    is_active: bool = True
    registered_by: Optional[int] = None
    registered_at: Optional[datetime] = None
    metadata: dict = field(default_factory=dict)
    notes: Optional[str] = None
    last_used_at: Optional[datetime] = None
    last_used_by: Optional[int] = None
