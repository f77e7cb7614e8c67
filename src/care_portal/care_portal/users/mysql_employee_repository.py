from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_list, fetchall, fetchone, load_list
from .employee_model import Employee
from .employee_repository import EmployeeRepository

_COLUMNS = """
    employee_id, user_id, name, work_email, phone, role, locations, assigned_device_id,
    invite_token, invite_expires_at, invited_at, invited_by, has_accepted_invite,
    employment_status, created_at
"""


def _row_to_employee(row: dict) -> Employee:
    return Employee(
        employee_id=int(row["employee_id"]),
        user_id=int(row["user_id"]) if row.get("user_id") is not None else None,
        name=row["name"],
        work_email=row["work_email"],
        phone=row.get("phone"),
        role=Role(row["role"]) if row.get("role") else None,
        locations=tuple(load_list(row.get("locations"))),
        assigned_device_id=row.get("assigned_device_id"),
        invite_token=row.get("invite_token"),
        invite_expires_at=row.get("invite_expires_at"),
        invited_at=row.get("invited_at"),
        invited_by=row.get("invited_by"),
        has_accepted_invite=bool(row.get("has_accepted_invite")),
        employment_status=row.get("employment_status"),
        created_at=row.get("created_at"),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_one(self, where: str, value) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE {where}=%s LIMIT 1", (value,))
            row = fetchone(cur)
            return _row_to_employee(row) if row else None

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        return self._get_one("employee_id", employee_id)

    def get_by_user_id(self, user_id: int) -> Optional[Employee]:
        return self._get_one("user_id", user_id)

    def get_by_email(self, work_email: str) -> Optional[Employee]:
        return self._get_one("work_email", work_email)

    def get_by_invite_token(self, token: str) -> Optional[Employee]:
        return self._get_one("invite_token", token)

    def list_all(self) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees ORDER BY name")
            return [_row_to_employee(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        name: str,
        work_email: str,
        role: Role,
        locations: Sequence[str],
        created_at: datetime,
        created_by: Optional[int],
        user_id: Optional[int] = None,
        invite_token: Optional[str] = None,
        invite_expires_at: Optional[datetime] = None,
        has_accepted_invite: bool = False,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO employees(
                    user_id, name, work_email, role, locations, invite_token, invite_expires_at,
                    invited_at, invited_by, has_accepted_invite, created_at, created_by
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    user_id,
                    name,
                    work_email,
                    role.value,
                    dump_list(locations),
                    invite_token,
                    invite_expires_at,
                    created_at if invite_token else None,
                    created_by if invite_token else None,
                    1 if has_accepted_invite else 0,
                    created_at,
                    created_by,
                ),
            )
            return int(cur.lastrowid)

    def mark_invite_accepted(self, employee_id: int, *, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE employees
                SET user_id=%s, has_accepted_invite=1, invite_token=NULL
                WHERE employee_id=%s
                """,
                (user_id, employee_id),
            )
            return cur.rowcount > 0

    def any_with_location(self, location: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 FROM employees WHERE JSON_CONTAINS(locations, JSON_QUOTE(%s)) LIMIT 1",
                (location,),
            )
            return fetchone(cur) is not None
