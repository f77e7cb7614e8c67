from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import AlertType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import ComplianceAlert
from .repository import ComplianceAlertRepository

_COLUMNS = """
    alert_id, alert_type, title, description, location, due_at, created_at, active, severity,
    resident_id, dismissed_by, dismissed_at
"""


def _row_to_alert(row: dict) -> ComplianceAlert:
    return ComplianceAlert(
        alert_id=int(row["alert_id"]),
        alert_type=AlertType(row["alert_type"]),
        title=row["title"],
        description=row.get("description") or "",
        location=row["location"],
        due_at=row["due_at"],
        created_at=row["created_at"],
        active=bool(row.get("active")),
        severity=row.get("severity") or "medium",
        resident_id=row.get("resident_id"),
        dismissed_by=row.get("dismissed_by"),
        dismissed_at=row.get("dismissed_at"),
    )


class MySQLComplianceAlertRepository(ComplianceAlertRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, alert_id: int) -> Optional[ComplianceAlert]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM compliance_alerts WHERE alert_id=%s", (alert_id,))
            row = fetchone(cur)
            return _row_to_alert(row) if row else None

    def list_active(self, *, locations: Optional[Sequence[str]] = None) -> Sequence[ComplianceAlert]:
        if locations is not None and not locations:
            return []
        sql = f"SELECT {_COLUMNS} FROM compliance_alerts WHERE active=1"
        params: tuple = ()
        if locations is not None:
            sql += f" AND location IN ({in_clause(locations)})"
            params = tuple(locations)
        sql += " ORDER BY created_at DESC, alert_id DESC"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return [_row_to_alert(r) for r in fetchall(cur)]

    def find_active(
        self, *, alert_type: AlertType, location: str, due_at: datetime, resident_id: Optional[int] = None
    ) -> Optional[ComplianceAlert]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM compliance_alerts
                WHERE active=1 AND alert_type=%s AND location=%s AND due_at=%s AND resident_id <=> %s
                LIMIT 1
                """,
                (alert_type.value, location, due_at, resident_id),
            )
            row = fetchone(cur)
            return _row_to_alert(row) if row else None

    def create(
        self,
        *,
        alert_type: AlertType,
        title: str,
        description: str,
        location: str,
        due_at: datetime,
        created_at: datetime,
        resident_id: Optional[int] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO compliance_alerts(alert_type, title, description, location, due_at, created_at,
                                              active, severity, resident_id)
                VALUES(%s,%s,%s,%s,%s,%s,1,'medium',%s)
                """,
                (alert_type.value, title, description, location, due_at, created_at, resident_id),
            )
            return int(cur.lastrowid)

    def dismiss(self, alert_id: int, *, dismissed_by: int, dismissed_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE compliance_alerts SET active=0, dismissed_by=%s, dismissed_at=%s
                WHERE alert_id=%s AND active=1
                """,
                (dismissed_by, dismissed_at, alert_id),
            )
            return cur.rowcount > 0
