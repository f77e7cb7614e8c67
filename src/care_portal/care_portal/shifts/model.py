from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Shift:
    """A clock-in/clock-out span. Open while `clock_out_time` is empty."""

    shift_id: int
    user_id: int
    location: str
    clock_in_time: datetime
    clock_out_time: Optional[datetime] = None
    device_id: Optional[str] = None
    kiosk_id: Optional[int] = None
    notes: Optional[str] = None
    clock_in_selfie: Optional[str] = None
    clock_out_selfie: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.clock_out_time is None
