from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import AuditEntry


class AuditRepository(Protocol):
    def insert(
        self,
        *,
        user_id: Optional[int],
        event: str,
        timestamp: datetime,
        device_id: str,
        location: str,
        details: Optional[str],
    ) -> int:
        raise NotImplementedError

    def list_recent(self, *, limit: int) -> Sequence[AuditEntry]:
        """Newest first."""
        raise NotImplementedError

    def distinct_events(self) -> Sequence[str]:
        raise NotImplementedError

    def distinct_locations(self) -> Sequence[str]:
        raise NotImplementedError
