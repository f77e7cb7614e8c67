from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import now_local
from ..core.constants import SYSTEM_DEVICE_ID
from .repository import AuditRepository

logger = logging.getLogger(__name__)


class AuditService:
    """Writes the persisted audit trail (one row per security-relevant event)."""

    def __init__(self, audit: AuditRepository):
        self._audit = audit

    def log(
        self,
        event: str,
        *,
        user_id: Optional[int],
        details: Optional[str] = None,
        device_id: str = SYSTEM_DEVICE_ID,
        location: str = "",
        now: Optional[datetime] = None,
    ) -> int:
        audit_id = self._audit.insert(
            user_id=user_id,
            event=event,
            timestamp=now or now_local(),
            device_id=device_id,
            location=location or "",
            details=details,
        )
        logger.debug("audit event=%s user_id=%s details=%s", event, user_id, details)
        return audit_id
