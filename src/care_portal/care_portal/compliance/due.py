from __future__ import annotations

import math
from datetime import datetime

from ..core.constants import COMPLIANCE_DUE_SOON_DAYS
from ..core.enums import ComplianceStatus


def days_until_due(due_at: datetime, now: datetime) -> int:
    """Whole days left, rounded up; negative once overdue."""
    return math.ceil((due_at - now).total_seconds() / 86400)


def review_status(due_at: datetime, now: datetime) -> ComplianceStatus:
    days = days_until_due(due_at, now)
    if days < 0:
        return ComplianceStatus.OVERDUE
    if days <= COMPLIANCE_DUE_SOON_DAYS:
        return ComplianceStatus.DUE_SOON
    return ComplianceStatus.OK
