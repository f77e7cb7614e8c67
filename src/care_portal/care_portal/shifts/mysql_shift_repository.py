from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import Shift
from .repository import ShiftRepository

_COLUMNS = """
    shift_id, user_id, location, clock_in_time, clock_out_time, device_id, kiosk_id,
    notes, clock_in_selfie, clock_out_selfie
"""


def _row_to_shift(row: dict) -> Shift:
    return Shift(
        shift_id=int(row["shift_id"]),
        user_id=int(row["user_id"]),
        location=row["location"],
        clock_in_time=row["clock_in_time"],
        clock_out_time=row.get("clock_out_time"),
        device_id=row.get("device_id"),
        kiosk_id=row.get("kiosk_id"),
        notes=row.get("notes"),
        clock_in_selfie=row.get("clock_in_selfie"),
        clock_out_selfie=row.get("clock_out_selfie"),
    )


class MySQLShiftRepository(ShiftRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, shift_id: int) -> Optional[Shift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM shifts WHERE shift_id=%s", (shift_id,))
            row = fetchone(cur)
            return _row_to_shift(row) if row else None

    def get_open_for_user(self, user_id: int) -> Optional[Shift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM shifts
                WHERE user_id=%s AND clock_out_time IS NULL
                ORDER BY clock_in_time DESC, shift_id DESC
                LIMIT 1
                """,
                (user_id,),
            )
            row = fetchone(cur)
            return _row_to_shift(row) if row else None

    def get_latest_for_user(self, user_id: int) -> Optional[Shift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM shifts WHERE user_id=%s ORDER BY clock_in_time DESC, shift_id DESC LIMIT 1",
                (user_id,),
            )
            row = fetchone(cur)
            return _row_to_shift(row) if row else None

    def create(
        self,
        *,
        user_id: int,
        location: str,
        clock_in_time: datetime,
        device_id: str,
        kiosk_id: Optional[int] = None,
        clock_in_selfie: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO shifts(user_id, location, clock_in_time, device_id, kiosk_id, clock_in_selfie)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (user_id, location, clock_in_time, device_id, kiosk_id, clock_in_selfie),
            )
            return int(cur.lastrowid)

    def close(self, shift_id: int, *, clock_out_time: datetime, clock_out_selfie: Optional[str] = None) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE shifts SET clock_out_time=%s, clock_out_selfie=%s
                WHERE shift_id=%s AND clock_out_time IS NULL
                """,
                (clock_out_time, clock_out_selfie, shift_id),
            )
            return cur.rowcount > 0

    def list_recent(
        self,
        *,
        locations: Optional[Sequence[str]] = None,
        user_id: Optional[int] = None,
        limit: int = 100,
    ) -> Sequence[Shift]:
        if locations is not None and not locations:
            return []
        where: list[str] = []
        params: list = []
        if locations is not None:
            where.append(f"location IN ({in_clause(locations)})")
            params.extend(locations)
        if user_id is not None:
            where.append("user_id=%s")
            params.append(user_id)
        where_sql = f"WHERE {' AND '.join(where)}" if where else ""
        params.append(int(limit))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM shifts {where_sql} ORDER BY clock_in_time DESC, shift_id DESC LIMIT %s",
                tuple(params),
            )
            return [_row_to_shift(r) for r in fetchall(cur)]

    def list_between(
        self,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        user_ids: Optional[Sequence[int]] = None,
        locations: Optional[Sequence[str]] = None,
    ) -> Sequence[Shift]:
        if (user_ids is not None and not user_ids) or (locations is not None and not locations):
            return []
        where: list[str] = []
        params: list = []
        if start is not None:
            where.append("clock_in_time >= %s")
            params.append(start)
        if end is not None:
            where.append("clock_in_time <= %s")
            params.append(end)
        if user_ids is not None:
            where.append(f"user_id IN ({in_clause(user_ids)})")
            params.extend(user_ids)
        if locations is not None:
            where.append(f"location IN ({in_clause(locations)})")
            params.extend(locations)
        where_sql = f"WHERE {' AND '.join(where)}" if where else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM shifts {where_sql} ORDER BY clock_in_time DESC, shift_id DESC",
                tuple(params),
            )
            return [_row_to_shift(r) for r in fetchall(cur)]

    def any_at_location(self, location: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT 1 FROM shifts WHERE location=%s LIMIT 1", (location,))
            return fetchone(cur) is not None

    def distinct_locations(self) -> Sequence[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT DISTINCT location FROM shifts WHERE location <> '' ORDER BY location")
            return [r["location"] for r in fetchall(cur)]
