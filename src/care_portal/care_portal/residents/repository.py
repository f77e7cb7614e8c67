from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import Guardian, Resident


class ResidentRepository(Protocol):
    def get_by_id(self, resident_id: int) -> Optional[Resident]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Resident]:
        raise NotImplementedError

    def list_by_locations(self, locations: Sequence[str]) -> Sequence[Resident]:
        raise NotImplementedError

    def create(
        self, *, name: str, location: str, dob: Optional[str], created_at: datetime, created_by: Optional[int]
    ) -> int:
        raise NotImplementedError

    def any_at_location(self, location: str) -> bool:
        raise NotImplementedError


class GuardianRepository(Protocol):
    def get_by_id(self, guardian_id: int) -> Optional[Guardian]:
        raise NotImplementedError

    def list_all(self, *, resident_id: Optional[int] = None) -> Sequence[Guardian]:
        raise NotImplementedError

    def create(
        self,
        *,
        name: str,
        phone: str,
        email: str,
        resident_id: Optional[int],
        relationship: Optional[str],
        address: Optional[str],
        created_at: datetime,
        created_by: Optional[int],
    ) -> int:
        raise NotImplementedError

    def update(self, guardian_id: int, **fields) -> bool:
        raise NotImplementedError

    def delete(self, guardian_id: int) -> bool:
        raise NotImplementedError
