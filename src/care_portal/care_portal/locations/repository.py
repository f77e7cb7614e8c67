from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import Location


class LocationRepository(Protocol):
    def get_by_id(self, location_id: int) -> Optional[Location]:
        raise NotImplementedError

    def get_by_name(self, name: str) -> Optional[Location]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Location]:
        raise NotImplementedError

    def create(
        self,
        *,
        name: str,
        address: Optional[str],
        capacity: Optional[int],
        created_by: Optional[int],
        created_at: datetime,
    ) -> int:
        raise NotImplementedError

    def update(self, location_id: int, *, updated_at: datetime, **fields) -> bool:
        """Patch any of name, address, capacity, status."""
        raise NotImplementedError

    def delete(self, location_id: int) -> bool:
        raise NotImplementedError
