from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import FireEvacPlan
from .repository import FireEvacRepository

_COLUMNS = """
    plan_id, resident_id, location, version, created_at, created_by, file_ref, file_name,
    file_size, content_type, mobility_needs, assistance_required, medical_equipment,
    special_instructions, notes
"""


def _row_to_plan(row: dict) -> FireEvacPlan:
    return FireEvacPlan(
        plan_id=int(row["plan_id"]),
        resident_id=int(row["resident_id"]),
        location=row.get("location") or "",
        version=int(row["version"]),
        created_at=row["created_at"],
        created_by=row.get("created_by"),
        file_ref=row.get("file_ref"),
        file_name=row.get("file_name"),
        file_size=int(row["file_size"]) if row.get("file_size") is not None else None,
        content_type=row.get("content_type"),
        mobility_needs=row.get("mobility_needs"),
        assistance_required=row.get("assistance_required"),
        medical_equipment=row.get("medical_equipment"),
        special_instructions=row.get("special_instructions"),
        notes=row.get("notes"),
    )


class MySQLFireEvacRepository(FireEvacRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_latest_for_resident(self, resident_id: int) -> Optional[FireEvacPlan]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM fire_evac_plans WHERE resident_id=%s ORDER BY version DESC LIMIT 1",
                (resident_id,),
            )
            row = fetchone(cur)
            return _row_to_plan(row) if row else None

    def list_for_resident(self, resident_id: int) -> Sequence[FireEvacPlan]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM fire_evac_plans WHERE resident_id=%s ORDER BY version DESC",
                (resident_id,),
            )
            return [_row_to_plan(r) for r in fetchall(cur)]

    def create(self, plan: FireEvacPlan) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO fire_evac_plans(
                    resident_id, location, version, created_at, created_by, file_ref, file_name,
                    file_size, content_type, mobility_needs, assistance_required, medical_equipment,
                    special_instructions, notes
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    plan.resident_id,
                    plan.location,
                    plan.version,
                    plan.created_at,
                    plan.created_by,
                    plan.file_ref,
                    plan.file_name,
                    plan.file_size,
                    plan.content_type,
                    plan.mobility_needs,
                    plan.assistance_required,
                    plan.medical_equipment,
                    plan.special_instructions,
                    plan.notes,
                ),
            )
            return int(cur.lastrowid)
