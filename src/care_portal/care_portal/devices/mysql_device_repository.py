from __future__ import annotations

import json
from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import DeviceType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, load_dict
from .model import Device
from .repository import DeviceRepository

_COLUMNS = """
    id, device_id, device_name, location, device_type, is_active, registered_by,
    registered_at, metadata, notes, last_used_at, last_used_by
"""

DEVICE_UPDATABLE = ("device_name", "location", "device_type", "is_active", "notes")


def _row_to_device(row: dict) -> Device:
    return Device(
        id=int(row["id"]),
        device_id=row["device_id"],
        device_name=row["device_name"],
        location=row["location"],
        device_type=DeviceType(row.get("device_type") or DeviceType.DESKTOP.value),
        is_active=bool(row.get("is_active")),
        registered_by=row.get("registered_by"),
        registered_at=row.get("registered_at"),
        metadata=load_dict(row.get("metadata")),
        notes=row.get("notes"),
        last_used_at=row.get("last_used_at"),
        last_used_by=row.get("last_used_by"),
    )


class MySQLDeviceRepository(DeviceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, id: int) -> Optional[Device]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM devices WHERE id=%s", (id,))
            row = fetchone(cur)
            return _row_to_device(row) if row else None

    def get_by_device_id(self, device_id: str) -> Optional[Device]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM devices WHERE device_id=%s", (device_id,))
            row = fetchone(cur)
            return _row_to_device(row) if row else None

    def list_all(self, *, location: Optional[str] = None) -> Sequence[Device]:
        sql = f"SELECT {_COLUMNS} FROM devices"
        params: tuple = ()
        if location:
            sql += " WHERE location=%s"
            params = (location,)
        sql += " ORDER BY registered_at DESC, id DESC"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return [_row_to_device(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        device_id: str,
        device_name: str,
        location: str,
        device_type: DeviceType,
        registered_by: int,
        registered_at: datetime,
        metadata: Optional[dict] = None,
        notes: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO devices(device_id, device_name, location, device_type, is_active,
                                    registered_by, registered_at, metadata, notes)
                VALUES(%s,%s,%s,%s,1,%s,%s,%s,%s)
                """,
                (
                    device_id,
                    device_name,
                    location,
                    device_type.value,
                    registered_by,
                    registered_at,
                    json.dumps(metadata or {}),
                    notes,
                ),
            )
            return int(cur.lastrowid)

    def update(self, id: int, **fields) -> bool:
        sets = []
        params = []
        for key in DEVICE_UPDATABLE:
            if key in fields:
                value = fields[key]
                if isinstance(value, DeviceType):
                    value = value.value
                elif isinstance(value, bool):
                    value = 1 if value else 0
                sets.append(f"{key}=%s")
                params.append(value)
        if not sets:
            return False
        params.append(id)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE devices SET {', '.join(sets)} WHERE id=%s", tuple(params))
            return cur.rowcount > 0

    def record_usage(self, id: int, *, user_id: int, at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE devices SET last_used_at=%s, last_used_by=%s WHERE id=%s", (at, user_id, id))
            return cur.rowcount > 0

    def delete(self, id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM devices WHERE id=%s", (id,))
            return cur.rowcount > 0
