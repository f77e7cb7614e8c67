from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import AuditEntry
from .repository import AuditRepository


def _row_to_entry(row: dict) -> AuditEntry:
    return AuditEntry(
        audit_id=int(row["audit_id"]),
        user_id=int(row["user_id"]) if row.get("user_id") is not None else None,
        event=row["event"],
        timestamp=row["timestamp"],
        device_id=row["device_id"],
        location=row.get("location") or "",
        details=row.get("details"),
    )


class MySQLAuditRepository(AuditRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def insert(
        self,
        *,
        user_id: Optional[int],
        event: str,
        timestamp: datetime,
        device_id: str,
        location: str,
        details: Optional[str],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO audit_logs(user_id, event, timestamp, device_id, location, details)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (user_id, event, timestamp, device_id, location, details),
            )
            return int(cur.lastrowid)

    def list_recent(self, *, limit: int) -> Sequence[AuditEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT audit_id, user_id, event, timestamp, device_id, location, details
                FROM audit_logs
                ORDER BY timestamp DESC, audit_id DESC
                LIMIT %s
                """,
                (int(limit),),
            )
            return [_row_to_entry(r) for r in fetchall(cur)]

    def distinct_events(self) -> Sequence[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT DISTINCT event FROM audit_logs ORDER BY event")
            return [r["event"] for r in fetchall(cur)]

    def distinct_locations(self) -> Sequence[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT DISTINCT location FROM audit_logs WHERE location IS NOT NULL AND location <> '' ORDER BY location"
            )
            return [r["location"] for r in fetchall(cur)]
