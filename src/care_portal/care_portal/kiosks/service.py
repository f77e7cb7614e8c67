from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import BinaryIO, Optional

from ..access.guard import AccessGuard
from ..audit.service import AuditService
from ..common.datetime_utils import fmt_datetime, now_local
from ..common.tokens import kiosk_device_id, pairing_token
from ..common.validators import require_non_empty
from ..core.constants import KIOSK_AUDIT_DETAILS_MAX, KIOSK_AUDIT_EVENTS, PAIRING_TOKEN_TTL_MINUTES
from ..core.enums import KioskStatus, PairingStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..shifts.service import CareShiftService
from .model import Kiosk, PairingToken
from .qr import decode_qr_image
from .repository import KioskRepository, PairingTokenRepository

logger = logging.getLogger(__name__)


def kiosk_to_dict(kiosk: Kiosk) -> dict:
    return {
        "id": kiosk.kiosk_id,
        "name": kiosk.name,
        "device_id": kiosk.device_id,
        "device_label": kiosk.device_label,
        "location": kiosk.location,
        "status": kiosk.status.value,
        "is_active": kiosk.is_active,
        "registered_at": fmt_datetime(kiosk.registered_at),
        "last_seen_at": fmt_datetime(kiosk.last_seen_at),
    }


def pairing_to_dict(token: PairingToken) -> dict:
    return {
        "id": token.pairing_id,
        "token": token.token,
        "location": token.location,
        "device_label": token.device_label,
        "status": token.status.value,
        "issued_at": fmt_datetime(token.issued_at),
        "expires_at": fmt_datetime(token.expires_at),
    }


def _default_name(device_id: str) -> str:
    return f"Kiosk {device_id[:8]}"


def _parse_status(value: str) -> KioskStatus:
    try:
        return KioskStatus((value or "").strip().lower())
    except ValueError:
        raise ValidationError("Status must be one of active, disabled, retired")


class KioskService:
    """Kiosk pairing, the kiosk registry and the kiosk-side session.

    Pairing: an admin issues a short token for a location, the kiosk redeems
    it once before it expires and receives its own random device id.
    """

    def __init__(
        self,
        kiosks: KioskRepository,
        tokens: PairingTokenRepository,
        shifts: CareShiftService,
        guard: AccessGuard,
        audit: AuditService,
        *,
        token_ttl_minutes: int = PAIRING_TOKEN_TTL_MINUTES,
    ):
        self._kiosks = kiosks
        self._tokens = tokens
        self._shifts = shifts
        self._guard = guard
        self._audit = audit
        self._token_ttl = timedelta(minutes=token_ttl_minutes)

    def _require_kiosk(self, kiosk_id: int) -> Kiosk:
        kiosk = self._kiosks.get_by_id(int(kiosk_id))
        if not kiosk:
            raise NotFoundError("Kiosk not found")
        return kiosk

    # ---- pairing ----

    def create_kiosk_pairing(
        self,
        *,
        actor_id: Optional[int],
        location: str,
        device_label: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> dict:
        self._guard.require_admin(actor_id)
        location = require_non_empty(location, "Location")
        now = now or now_local()
        token = pairing_token()
        expires_at = now + self._token_ttl
        pairing_id = self._tokens.create(
            token=token,
            location=location,
            device_label=(device_label or "").strip() or None,
            issued_by=int(actor_id),
            issued_at=now,
            expires_at=expires_at,
        )
        self._audit.log(
            "create_kiosk_pairing",
            user_id=int(actor_id),
            details=f"location={location}",
            location=location,
            now=now,
        )
        return {
            "id": pairing_id,
            "token": token,
            "location": location,
            "device_label": (device_label or "").strip() or None,
            "expires_at": fmt_datetime(expires_at),
        }

    def list_pairing_tokens(self, *, actor_id: Optional[int], now: Optional[datetime] = None) -> list[dict]:
        self._guard.require_admin(actor_id)
        now = now or now_local()
        active = list(self._tokens.list_by_status(PairingStatus.ACTIVE))
        stale = [t.pairing_id for t in active if t.expires_at < now]
        if stale:
            self._tokens.mark_expired(stale)
            logger.info("expired %s stale pairing tokens", len(stale))
        return [pairing_to_dict(t) for t in active if t.expires_at >= now]

    def complete_pairing(
        self,
        *,
        token: str,
        kiosk_identifier: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> dict:
        code = require_non_empty(token, "Pairing token").upper()
        pairing = self._tokens.get_by_token(code)
        if not pairing:
            raise ValidationError("Invalid pairing token")
        if pairing.status != PairingStatus.ACTIVE:
            raise ValidationError("Token already used or expired")
        now = now or now_local()
        if pairing.expires_at < now:
            raise ValidationError("Token expired")

        device_id = kiosk_device_id()
        kiosk_id = self._kiosks.create(
            device_id=device_id,
            location=pairing.location,
            name=pairing.device_label or _default_name(device_id),
            device_label=pairing.device_label,
            status=KioskStatus.ACTIVE,
            registered_by=pairing.issued_by,
            created_at=now,
        )
        self._kiosks.update(kiosk_id, last_seen_at=now)
        self._tokens.mark_used(pairing.pairing_id, device_id=device_id, used_at=now)
        self._audit.log(
            "kiosk_paired",
            user_id=pairing.issued_by,
            details=f"kioskId={kiosk_id},identifier={kiosk_identifier or ''}",
            device_id=device_id,
            location=pairing.location,
            now=now,
        )
        logger.info("kiosk paired kiosk_id=%s location=%s", kiosk_id, pairing.location)
        return {
            "device_id": device_id,
            "location": pairing.location,
            "device_label": pairing.device_label,
            "kiosk_id": kiosk_id,
        }

    def complete_pairing_from_image(
        self,
        stream: BinaryIO,
        *,
        kiosk_identifier: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> dict:
        return self.complete_pairing(token=decode_qr_image(stream), kiosk_identifier=kiosk_identifier, now=now)

    # ---- registry ----

    def get_kiosk_by_device(self, device_id: str) -> Optional[dict]:
        kiosk = self._kiosks.get_by_device_id((device_id or "").strip())
        return kiosk_to_dict(kiosk) if kiosk else None

    def update_kiosk_last_seen(self, device_id: str, *, now: Optional[datetime] = None) -> bool:
        kiosk = self._kiosks.get_by_device_id((device_id or "").strip())
        if not kiosk:
            return False
        return self._kiosks.update(kiosk.kiosk_id, last_seen_at=now or now_local())

    def list_kiosks(self, *, actor_id: Optional[int]) -> list[dict]:
        self._guard.require_admin(actor_id)
        return [kiosk_to_dict(k) for k in self._kiosks.list_all()]

    def update_kiosk_label(self, *, actor_id: Optional[int], kiosk_id: int, device_label: Optional[str]) -> bool:
        self._guard.require_admin(actor_id)
        self._require_kiosk(kiosk_id)
        return self._kiosks.update(int(kiosk_id), device_label=(device_label or "").strip() or None)

    def update_kiosk_status(self, *, actor_id: Optional[int], kiosk_id: int, status: str) -> bool:
        self._guard.require_admin(actor_id)
        self._require_kiosk(kiosk_id)
        return self._kiosks.update(int(kiosk_id), status=_parse_status(status))

    def delete_kiosk(self, *, actor_id: Optional[int], kiosk_id: int, now: Optional[datetime] = None) -> bool:
        self._guard.require_admin(actor_id)
        kiosk = self._require_kiosk(kiosk_id)
        self._kiosks.delete(kiosk.kiosk_id)
        self._audit.log(
            "kiosk_deleted",
            user_id=int(actor_id),
            details=f"kioskId={kiosk.kiosk_id}",
            device_id=kiosk.device_id,
            location=kiosk.location,
            now=now,
        )
        return True

    def register_kiosk(
        self,
        *,
        actor_id: Optional[int],
        device_id: str,
        location: str,
        device_label: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> int:
        self._guard.require_admin(actor_id)
        device_id = require_non_empty(device_id, "Device ID")
        location = require_non_empty(location, "Location")
        if self._kiosks.get_by_device_id(device_id):
            raise ValidationError("Device ID already registered")

        now = now or now_local()
        kiosk_id = self._kiosks.create(
            device_id=device_id,
            location=location,
            name=_default_name(device_id),
            device_label=(device_label or "").strip() or None,
            status=KioskStatus.ACTIVE,
            registered_by=int(actor_id),
            created_at=now,
        )
        self._audit.log(
            "register_kiosk",
            user_id=int(actor_id),
            details=f"deviceId={device_id},location={location}",
            device_id=device_id,
            location=location,
            now=now,
        )
        return kiosk_id

    def update_kiosk(
        self,
        *,
        actor_id: Optional[int],
        kiosk_id: int,
        location: Optional[str] = None,
        device_label: Optional[str] = None,
        status: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> bool:
        self._guard.require_admin(actor_id)
        kiosk = self._require_kiosk(kiosk_id)
        fields: dict = {}
        if location is not None:
            fields["location"] = require_non_empty(location, "Location")
        if device_label is not None:
            fields["device_label"] = device_label.strip() or None
        if status is not None:
            fields["status"] = _parse_status(status)
        if not fields:
            return False
        self._kiosks.update(kiosk.kiosk_id, **fields)
        self._audit.log(
            "update_kiosk",
            user_id=int(actor_id),
            details=f"kioskId={kiosk.kiosk_id},fields={','.join(sorted(fields))}",
            device_id=kiosk.device_id,
            location=fields.get("location", kiosk.location),
            now=now,
        )
        return True

    def deactivate_kiosk(self, *, actor_id: Optional[int], kiosk_id: int, now: Optional[datetime] = None) -> bool:
        self._guard.require_admin(actor_id)
        kiosk = self._require_kiosk(kiosk_id)
        self._kiosks.update(kiosk.kiosk_id, status=KioskStatus.DISABLED)
        self._audit.log(
            "deactivate_kiosk",
            user_id=int(actor_id),
            details=f"kioskId={kiosk.kiosk_id}",
            device_id=kiosk.device_id,
            location=kiosk.location,
            now=now,
        )
        return True

    # ---- kiosk session ----

    def _require_active_kiosk(self, device_id: str) -> Kiosk:
        kiosk = self._kiosks.get_by_device_id((device_id or "").strip())
        if not kiosk:
            raise NotFoundError("Kiosk not registered")
        if not kiosk.is_active:
            raise ValidationError("Kiosk is not active")
        return kiosk

    def kiosk_clock_in(
        self,
        *,
        device_id: str,
        user_id: Optional[int],
        selfie_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> int:
        kiosk = self._require_active_kiosk(device_id)
        now = now or now_local()
        shift_id = self._shifts.clock_in(
            user_id=user_id,
            location=kiosk.location,
            selfie_id=selfie_id,
            kiosk_id=kiosk.kiosk_id,
            device_id=kiosk.device_id,
            now=now,
        )
        self._kiosks.update(kiosk.kiosk_id, last_seen_at=now)
        return shift_id

    def kiosk_log_audit(
        self,
        *,
        device_id: str,
        event: str,
        user_id: Optional[int] = None,
        details: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> int:
        kiosk = self._require_active_kiosk(device_id)
        event = require_non_empty(event, "Event")
        if event not in KIOSK_AUDIT_EVENTS:
            raise ValidationError(f"Unknown kiosk event: {event}")
        if details is not None and not isinstance(details, str):
            raise ValidationError("Details must be text")
        if details and len(details) > KIOSK_AUDIT_DETAILS_MAX:
            raise ValidationError(f"Details must be at most {KIOSK_AUDIT_DETAILS_MAX} characters")
        return self._audit.log(
            event,
            user_id=user_id,
            details=details,
            device_id=kiosk.device_id,
            location=kiosk.location,
            now=now,
        )
