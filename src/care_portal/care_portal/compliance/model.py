from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import AlertType


@dataclass(frozen=True)
class ComplianceAlert:
    """A review item coming due at a location. Active until someone dismisses it."""

    alert_id: int
    alert_type: AlertType
    title: str
    description: str
    location: str
    due_at: datetime
    created_at: datetime
    active: bool = True
    severity: str = "medium"
    resident_id: Optional[int] = None
    dismissed_by: Optional[int] = None
    dismissed_at: Optional[datetime] = None
