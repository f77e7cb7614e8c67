from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class FireEvacPlan:
    """One version of a resident's fire evacuation plan.

    The uploaded document itself lives in external storage; only its
    reference and file metadata are kept here.
    """

    plan_id: int
    resident_id: int
    location: str
    version: int
    created_at: datetime
    created_by: Optional[int] = None
    file_ref: Optional[str] = None
    file_name: Optional[str] = None
    file_size: Optional[int] = None
    content_type: Optional[str] = None
    mobility_needs: Optional[str] = None
    assistance_required: Optional[str] = None
    medical_equipment: Optional[str] = None
    special_instructions: Optional[str] = None
    notes: Optional[str] = None
