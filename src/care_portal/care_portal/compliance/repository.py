from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AlertType
from .model import ComplianceAlert


class ComplianceAlertRepository(Protocol):
    def get_by_id(self, alert_id: int) -> Optional[ComplianceAlert]:
        raise NotImplementedError

    def list_active(self, *, locations: Optional[Sequence[str]] = None) -> Sequence[ComplianceAlert]:
        """Newest first. `locations=None` means every location."""
        raise NotImplementedError

    def find_active(
        self, *, alert_type: AlertType, location: str, due_at: datetime, resident_id: Optional[int] = None
    ) -> Optional[ComplianceAlert]:
        raise NotImplementedError

    def create(
        self,
        *,
        alert_type: AlertType,
        title: str,
        description: str,
        location: str,
        due_at: datetime,
        created_at: datetime,
        resident_id: Optional[int] = None,
    ) -> int:
        raise NotImplementedError

    def dismiss(self, alert_id: int, *, dismissed_by: int, dismissed_at: datetime) -> bool:
        raise NotImplementedError
