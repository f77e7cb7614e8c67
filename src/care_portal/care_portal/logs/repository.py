from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import ResidentLog


class ResidentLogRepository(Protocol):
    def get_by_id(self, log_id: int) -> Optional[ResidentLog]:
        raise NotImplementedError

    def max_version(self, resident_id: int) -> int:
        """0 when the resident has no logs yet."""
        raise NotImplementedError

    def create(
        self,
        *,
        resident_id: int,
        author_id: int,
        version: int,
        template: Optional[str],
        content: str,
        location: Optional[str],
        created_at: datetime,
    ) -> int:
        raise NotImplementedError

    def list_for_resident(self, resident_id: int, *, limit: Optional[int] = None) -> Sequence[ResidentLog]:
        """Newest first."""
        raise NotImplementedError

    def list_recent(self, *, limit: int, since: Optional[datetime] = None) -> Sequence[ResidentLog]:
        """Newest first across all residents."""
        raise NotImplementedError

    def list_between(
        self,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        author_ids: Optional[Sequence[int]] = None,
    ) -> Sequence[ResidentLog]:
        """Newest first; bounds are inclusive and None means unbounded."""
        raise NotImplementedError
