from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import KioskStatus, PairingStatus
from .model import Kiosk, PairingToken


class KioskRepository(Protocol):
    def get_by_id(self, kiosk_id: int) -> Optional[Kiosk]:
        raise NotImplementedError

    def get_by_device_id(self, device_id: str) -> Optional[Kiosk]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Kiosk]:
        """Newest first."""
        raise NotImplementedError

    def create(
        self,
        *,
        device_id: str,
        location: str,
        name: Optional[str],
        device_label: Optional[str],
        status: KioskStatus,
        registered_by: Optional[int],
        created_at: datetime,
    ) -> int:
        raise NotImplementedError

    def update(self, kiosk_id: int, **fields) -> bool:
        """Patch any of name, device_label, location, status, last_seen_at."""
        raise NotImplementedError

    def delete(self, kiosk_id: int) -> bool:
        raise NotImplementedError

    def any_at_location(self, location: str) -> bool:
        raise NotImplementedError


class PairingTokenRepository(Protocol):
    def get_by_token(self, token: str) -> Optional[PairingToken]:
        raise NotImplementedError

    def list_by_status(self, status: PairingStatus) -> Sequence[PairingToken]:
        raise NotImplementedError

    def create(
        self,
        *,
        token: str,
        location: str,
        device_label: Optional[str],
        issued_by: int,
        issued_at: datetime,
        expires_at: datetime,
    ) -> int:
        raise NotImplementedError

    def mark_used(self, pairing_id: int, *, device_id: str, used_at: datetime) -> bool:
        raise NotImplementedError

    def mark_expired(self, pairing_ids: Sequence[int]) -> int:
        raise NotImplementedError
