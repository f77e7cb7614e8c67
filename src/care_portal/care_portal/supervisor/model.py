from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import ReviewStatus, TimeExceptionKind


@dataclass(frozen=True)
class TimeExceptionReview:
    """A supervisor's decision on one flagged shift. At most one per (shift, kind)."""

    review_id: int
    shift_id: int
    kind: TimeExceptionKind
    status: ReviewStatus
    decided_by: int
    decided_at: datetime
    reason: Optional[str] = None
