from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class AuditEntry:
    """One row of the persisted audit trail.

    `details` is a free-form `key=value,key=value` string; it must stay free of
    resident health information.
    """

    audit_id: int
    user_id: Optional[int]
    event: str
    timestamp: datetime
    device_id: str
    location: str
    details: Optional[str] = None
