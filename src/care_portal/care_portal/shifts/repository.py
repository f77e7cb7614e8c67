from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import Shift


class ShiftRepository(Protocol):
    def get_by_id(self, shift_id: int) -> Optional[Shift]:
        raise NotImplementedError

    def get_open_for_user(self, user_id: int) -> Optional[Shift]:
        """Newest shift of the user that has no clock-out yet."""
        raise NotImplementedError

    def get_latest_for_user(self, user_id: int) -> Optional[Shift]:
        raise NotImplementedError

    def create(
        self,
        *,
        user_id: int,
        location: str,
        clock_in_time: datetime,
        device_id: str,
        kiosk_id: Optional[int] = None,
        clock_in_selfie: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def close(self, shift_id: int, *, clock_out_time: datetime, clock_out_selfie: Optional[str] = None) -> bool:
        raise NotImplementedError

    def list_recent(
        self,
        *,
        locations: Optional[Sequence[str]] = None,
        user_id: Optional[int] = None,
        limit: int = 100,
    ) -> Sequence[Shift]:
        """Newest first. `locations=None` means every location."""
        raise NotImplementedError

    def list_between(
        self,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        user_ids: Optional[Sequence[int]] = None,
        locations: Optional[Sequence[str]] = None,
    ) -> Sequence[Shift]:
        """Shifts whose clock-in falls in [start, end], newest first. None means no bound."""
        raise NotImplementedError

    def any_at_location(self, location: str) -> bool:
        raise NotImplementedError

    def distinct_locations(self) -> Sequence[str]:
        raise NotImplementedError
