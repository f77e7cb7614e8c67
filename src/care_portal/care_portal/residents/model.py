from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Resident:
    resident_id: int
    name: str
    location: str
    dob: Optional[str] = None
    created_at: Optional[datetime] = None
    created_by: Optional[int] = None


@dataclass(frozen=True)
class Guardian:
    """Family contact of a resident."""

    guardian_id: int
    name: str
    phone: str
    email: str
    resident_id: Optional[int] = None
    relationship: Optional[str] = None
    address: Optional[str] = None
    created_at: Optional[datetime] = None
    created_by: Optional[int] = None
