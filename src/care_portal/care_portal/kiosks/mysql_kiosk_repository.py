from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import KioskStatus, PairingStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import Kiosk, PairingToken
from .repository import KioskRepository, PairingTokenRepository

_KIOSK_COLUMNS = """
    kiosk_id, name, device_id, device_label, location, status,
    registered_at, registered_by, last_seen_at, created_at
"""

_TOKEN_COLUMNS = """
    pairing_id, token, device_id, location, device_label, status,
    issued_by, issued_at, expires_at, used_at
"""

KIOSK_UPDATABLE = ("name", "device_label", "location", "status", "last_seen_at")


def _row_to_kiosk(row: dict) -> Kiosk:
    return Kiosk(
        kiosk_id=int(row["kiosk_id"]),
        device_id=row["device_id"],
        location=row["location"],
        name=row.get("name"),
        device_label=row.get("device_label"),
        status=KioskStatus(row.get("status") or KioskStatus.ACTIVE.value),
        registered_at=row.get("registered_at"),
        registered_by=row.get("registered_by"),
        last_seen_at=row.get("last_seen_at"),
        created_at=row.get("created_at"),
    )


def _row_to_token(row: dict) -> PairingToken:
    return PairingToken(
        pairing_id=int(row["pairing_id"]),
        token=row["token"],
        location=row["location"],
        status=PairingStatus(row["status"]),
        issued_by=int(row["issued_by"]),
        issued_at=row["issued_at"],
        expires_at=row["expires_at"],
        device_label=row.get("device_label"),
        device_id=row.get("device_id") or "",
        used_at=row.get("used_at"),
    )


class MySQLKioskRepository(KioskRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, kiosk_id: int) -> Optional[Kiosk]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_KIOSK_COLUMNS} FROM kiosks WHERE kiosk_id=%s", (kiosk_id,))
            row = fetchone(cur)
            return _row_to_kiosk(row) if row else None

    def get_by_device_id(self, device_id: str) -> Optional[Kiosk]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_KIOSK_COLUMNS} FROM kiosks WHERE device_id=%s", (device_id,))
            row = fetchone(cur)
            return _row_to_kiosk(row) if row else None

    def list_all(self) -> Sequence[Kiosk]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_KIOSK_COLUMNS} FROM kiosks ORDER BY created_at DESC, kiosk_id DESC")
            return [_row_to_kiosk(r) for r in fetchall(cur)]

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO kiosks(name, device_id, device_label, location, status,
                                   registered_at, registered_by, created_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (name, device_id, device_label, location, status.value, created_at, registered_by, created_at),
            )
            return int(cur.lastrowid)

    def update(self, kiosk_id: int, **fields) -> bool:
        sets = []
        params = []
        for key in KIOSK_UPDATABLE:
            if key in fields:
                value = fields[key]
                if isinstance(value, KioskStatus):
                    value = value.value
                sets.append(f"{key}=%s")
                params.append(value)
        if not sets:
            return False
        params.append(kiosk_id)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE kiosks SET {', '.join(sets)} WHERE kiosk_id=%s", tuple(params))
            return cur.rowcount > 0

    def delete(self, kiosk_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM kiosks WHERE kiosk_id=%s", (kiosk_id,))
            return cur.rowcount > 0

    def any_at_location(self, location: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT 1 AS found FROM kiosks WHERE location=%s LIMIT 1", (location,))
            return fetchone(cur) is not None


class MySQLPairingTokenRepository(PairingTokenRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_token(self, token: str) -> Optional[PairingToken]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_TOKEN_COLUMNS} FROM kiosk_pairing_tokens WHERE token=%s", (token,))
            row = fetchone(cur)
            return _row_to_token(row) if row else None

    def list_by_status(self, status: PairingStatus) -> Sequence[PairingToken]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_TOKEN_COLUMNS} FROM kiosk_pairing_tokens WHERE status=%s ORDER BY issued_at DESC",
                (status.value,),
            )
            return [_row_to_token(r) for r in fetchall(cur)]

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO kiosk_pairing_tokens(token, device_id, location, device_label, status,
                                                 issued_by, issued_at, expires_at)
                VALUES(%s,'',%s,%s,%s,%s,%s,%s)
                """,
                (token, location, device_label, PairingStatus.ACTIVE.value, issued_by, issued_at, expires_at),
            )
            return int(cur.lastrowid)

    def mark_used(self, pairing_id: int, *, device_id: str, used_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE kiosk_pairing_tokens SET status=%s, device_id=%s, used_at=%s WHERE pairing_id=%s",
                (PairingStatus.USED.value, device_id, used_at, pairing_id),
            )
            return cur.rowcount > 0

    def mark_expired(self, pairing_ids: Sequence[int]) -> int:
        if not pairing_ids:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE kiosk_pairing_tokens SET status=%s WHERE pairing_id IN ({in_clause(pairing_ids)})",
                (PairingStatus.EXPIRED.value, *pairing_ids),
            )
            return cur.rowcount
