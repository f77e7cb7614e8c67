from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import Isp, IspAcknowledgment


class IspRepository(Protocol):
    def get_by_id(self, isp_id: int) -> Optional[Isp]:
        raise NotImplementedError

    def get_latest_for_resident(self, resident_id: int) -> Optional[Isp]:
        raise NotImplementedError

    def list_for_resident(self, resident_id: int) -> Sequence[Isp]:
        """Highest version first."""
        raise NotImplementedError

    def list_for_residents(self, resident_ids: Sequence[int]) -> Sequence[Isp]:
        raise NotImplementedError

    def create(
        self,
        *,
        resident_id: int,
        version: int,
        content: str,
        goals: Sequence[str],
        created_at: datetime,
        created_by: Optional[int],
    ) -> int:
        raise NotImplementedError

    def mark_published(self, isp_id: int, *, published_at: datetime, published_by: int, due_at: datetime) -> bool:
        raise NotImplementedError

    def set_due_at(self, isp_id: int, *, due_at: datetime) -> bool:
        raise NotImplementedError


class AcknowledgmentRepository(Protocol):
    def find(self, *, user_id: int, isp_id: int) -> Optional[IspAcknowledgment]:
        raise NotImplementedError

    def create(self, *, resident_id: int, user_id: int, isp_id: int, acknowledged_at: datetime) -> int:
        raise NotImplementedError

    def list_for_resident(self, resident_id: int) -> Sequence[IspAcknowledgment]:
        raise NotImplementedError

    def list_for_user(self, user_id: int) -> Sequence[IspAcknowledgment]:
        raise NotImplementedError

    def list_for_isps(self, isp_ids: Sequence[int]) -> Sequence[IspAcknowledgment]:
        raise NotImplementedError
