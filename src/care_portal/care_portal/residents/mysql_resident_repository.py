from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import Guardian, Resident
from .repository import GuardianRepository, ResidentRepository

GUARDIAN_UPDATABLE = ("name", "relationship", "phone", "email", "address", "resident_id")


def _row_to_resident(row: dict) -> Resident:
    return Resident(
        resident_id=int(row["resident_id"]),
        name=row["name"],
        location=row["location"],
        dob=row.get("dob"),
        created_at=row.get("created_at"),
        created_by=row.get("created_by"),
    )


def _row_to_guardian(row: dict) -> Guardian:
    return Guardian(
        guardian_id=int(row["guardian_id"]),
        name=row["name"],
        phone=row["phone"],
        email=row["email"],
        resident_id=row.get("resident_id"),
        relationship=row.get("relationship"),
        address=row.get("address"),
        created_at=row.get("created_at"),
        created_by=row.get("created_by"),
    )


class MySQLResidentRepository(ResidentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, resident_id: int) -> Optional[Resident]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT resident_id, name, location, dob, created_at, created_by FROM residents WHERE resident_id=%s",
                (resident_id,),
            )
            row = fetchone(cur)
            return _row_to_resident(row) if row else None

    def list_all(self) -> Sequence[Resident]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT resident_id, name, location, dob, created_at, created_by FROM residents ORDER BY name")
            return [_row_to_resident(r) for r in fetchall(cur)]

    def list_by_locations(self, locations: Sequence[str]) -> Sequence[Resident]:
        if not locations:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT resident_id, name, location, dob, created_at, created_by
                FROM residents
                WHERE location IN ({in_clause(locations)})
                ORDER BY name
                """,
                tuple(locations),
            )
            return [_row_to_resident(r) for r in fetchall(cur)]

    def create(
        self, *, name: str, location: str, dob: Optional[str], created_at: datetime, created_by: Optional[int]
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO residents(name, location, dob, created_at, created_by) VALUES(%s,%s,%s,%s,%s)",
                (name, location, dob, created_at, created_by),
            )
            return int(cur.lastrowid)

    def any_at_location(self, location: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT 1 FROM residents WHERE location=%s LIMIT 1", (location,))
            return fetchone(cur) is not None


class MySQLGuardianRepository(GuardianRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, guardian_id: int) -> Optional[Guardian]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT * FROM guardians WHERE guardian_id=%s", (guardian_id,))
            row = fetchone(cur)
            return _row_to_guardian(row) if row else None

    def list_all(self, *, resident_id: Optional[int] = None) -> Sequence[Guardian]:
        with db_cursor(self._conn_factory) as (_, cur):
            if resident_id is None:
                cur.execute("SELECT * FROM guardians ORDER BY name")
            else:
                cur.execute("SELECT * FROM guardians WHERE resident_id=%s ORDER BY name", (resident_id,))
            return [_row_to_guardian(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        name: str,
        phone: str,
        email: str,
        resident_id: Optional[int],
        relationship: Optional[str],
        address: Optional[str],
        created_at: datetime,
        created_by: Optional[int],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO guardians(resident_id, name, relationship, phone, email, address, created_at, created_by)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (resident_id, name, relationship, phone, email, address, created_at, created_by),
            )
            return int(cur.lastrowid)

    def update(self, guardian_id: int, **fields) -> bool:
        changes = {k: v for k, v in fields.items() if k in GUARDIAN_UPDATABLE}
        if not changes:
            return False
        assignments = ", ".join(f"{k}=%s" for k in changes)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE guardians SET {assignments} WHERE guardian_id=%s",
                tuple(changes.values()) + (guardian_id,),
            )
            return cur.rowcount > 0

    def delete(self, guardian_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM guardians WHERE guardian_id=%s", (guardian_id,))
            return cur.rowcount > 0
