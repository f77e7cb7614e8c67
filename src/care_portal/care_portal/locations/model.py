from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import LocationStatus


@dataclass(frozen=True)
class Location:
    """A care home. Other records refer to it by name."""

    location_id: int
    name: str
    address: Optional[str] = None
    capacity: Optional[int] = None
    status: LocationStatus = LocationStatus.ACTIVE
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
