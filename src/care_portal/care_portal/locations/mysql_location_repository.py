from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import LocationStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Location
from .repository import LocationRepository

_COLUMNS = "location_id, name, address, capacity, status, created_by, created_at, updated_at"

LOCATION_UPDATABLE = ("name", "address", "capacity", "status")


def _row_to_location(row: dict) -> Location:
    capacity = row.get("capacity")
    return Location(
        location_id=int(row["location_id"]),
        name=row["name"],
        address=row.get("address"),
        capacity=int(capacity) if capacity is not None else None,
        status=LocationStatus(row.get("status") or LocationStatus.ACTIVE.value),
        created_by=row.get("created_by"),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


class MySQLLocationRepository(LocationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, location_id: int) -> Optional[Location]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM locations WHERE location_id=%s", (location_id,))
            row = fetchone(cur)
            return _row_to_location(row) if row else None

    def get_by_name(self, name: str) -> Optional[Location]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM locations WHERE name=%s", (name,))
            row = fetchone(cur)
            return _row_to_location(row) if row else None

    def list_all(self) -> Sequence[Location]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM locations ORDER BY name")
            return [_row_to_location(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        name: str,
        address: Optional[str],
        capacity: Optional[int],
        created_by: Optional[int],
        created_at: datetime,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO locations(name, address, capacity, status, created_by, created_at)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (name, address, capacity, LocationStatus.ACTIVE.value, created_by, created_at),
            )
            return int(cur.lastrowid)

    def update(self, location_id: int, *, updated_at: datetime, **fields) -> bool:
        sets = ["updated_at=%s"]
        params: list = [updated_at]
        for key in LOCATION_UPDATABLE:
            if key in fields:
                value = fields[key]
                if isinstance(value, LocationStatus):
                    value = value.value
                sets.append(f"{key}=%s")
                params.append(value)
        params.append(location_id)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE locations SET {', '.join(sets)} WHERE location_id=%s", tuple(params))
            return cur.rowcount > 0

    def delete(self, location_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM locations WHERE location_id=%s", (location_id,))
            return cur.rowcount > 0
