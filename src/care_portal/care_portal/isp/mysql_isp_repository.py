from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_list, fetchall, fetchone, in_clause, load_list
from .model import Isp, IspAcknowledgment
from .repository import AcknowledgmentRepository, IspRepository

_ISP_COLUMNS = """
    isp_id, resident_id, version, content, goals, published, created_at, created_by,
    published_at, published_by, due_at
"""


def _row_to_isp(row: dict) -> Isp:
    return Isp(
        isp_id=int(row["isp_id"]),
        resident_id=int(row["resident_id"]),
        version=int(row["version"] or 1),
        content=row.get("content") or "",
        goals=tuple(load_list(row.get("goals"))),
        published=bool(row.get("published")),
        created_at=row.get("created_at"),
        created_by=row.get("created_by"),
        published_at=row.get("published_at"),
        published_by=row.get("published_by"),
        due_at=row.get("due_at"),
    )


def _row_to_ack(row: dict) -> IspAcknowledgment:
    return IspAcknowledgment(
        ack_id=int(row["ack_id"]),
        resident_id=int(row["resident_id"]),
        user_id=int(row["user_id"]),
        isp_id=int(row["isp_id"]),
        acknowledged_at=row["acknowledged_at"],
    )


class MySQLIspRepository(IspRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, isp_id: int) -> Optional[Isp]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_ISP_COLUMNS} FROM isp WHERE isp_id=%s", (isp_id,))
            row = fetchone(cur)
            return _row_to_isp(row) if row else None

    def get_latest_for_resident(self, resident_id: int) -> Optional[Isp]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_ISP_COLUMNS} FROM isp WHERE resident_id=%s ORDER BY version DESC, isp_id DESC LIMIT 1",
                (resident_id,),
            )
            row = fetchone(cur)
            return _row_to_isp(row) if row else None

    def list_for_resident(self, resident_id: int) -> Sequence[Isp]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_ISP_COLUMNS} FROM isp WHERE resident_id=%s ORDER BY version DESC, isp_id DESC",
                (resident_id,),
            )
            return [_row_to_isp(r) for r in fetchall(cur)]

    def list_for_residents(self, resident_ids: Sequence[int]) -> Sequence[Isp]:
        if not resident_ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_ISP_COLUMNS} FROM isp
                WHERE resident_id IN ({in_clause(resident_ids)})
                ORDER BY created_at DESC, isp_id DESC
                """,
                tuple(resident_ids),
            )
            return [_row_to_isp(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        resident_id: int,
        version: int,
        content: str,
        goals: Sequence[str],
        created_at: datetime,
        created_by: Optional[int],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO isp(resident_id, version, content, goals, published, created_at, created_by)
                VALUES(%s,%s,%s,%s,0,%s,%s)
                """,
                (resident_id, version, content, dump_list(goals), created_at, created_by),
            )
            return int(cur.lastrowid)

    def mark_published(self, isp_id: int, *, published_at: datetime, published_by: int, due_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE isp SET published=1, published_at=%s, published_by=%s, due_at=%s
                WHERE isp_id=%s
                """,
                (published_at, published_by, due_at, isp_id),
            )
            return cur.rowcount > 0

    def set_due_at(self, isp_id: int, *, due_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE isp SET due_at=%s WHERE isp_id=%s", (due_at, isp_id))
            return cur.rowcount > 0


class MySQLAcknowledgmentRepository(AcknowledgmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find(self, *, user_id: int, isp_id: int) -> Optional[IspAcknowledgment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT ack_id, resident_id, user_id, isp_id, acknowledged_at
                FROM isp_acknowledgments
                WHERE user_id=%s AND isp_id=%s
                ORDER BY ack_id
                LIMIT 1
                """,
                (user_id, isp_id),
            )
            row = fetchone(cur)
            return _row_to_ack(row) if row else None

    def create(self, *, resident_id: int, user_id: int, isp_id: int, acknowledged_at: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO isp_acknowledgments(resident_id, user_id, isp_id, acknowledged_at)
                VALUES(%s,%s,%s,%s)
                """,
                (resident_id, user_id, isp_id, acknowledged_at),
            )
            return int(cur.lastrowid)

    def _list(self, where: str, params: tuple) -> Sequence[IspAcknowledgment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT ack_id, resident_id, user_id, isp_id, acknowledged_at
                FROM isp_acknowledgments
                WHERE {where}
                ORDER BY acknowledged_at DESC, ack_id DESC
                """,
                params,
            )
            return [_row_to_ack(r) for r in fetchall(cur)]

    def list_for_resident(self, resident_id: int) -> Sequence[IspAcknowledgment]:
        return self._list("resident_id=%s", (resident_id,))

    def list_for_user(self, user_id: int) -> Sequence[IspAcknowledgment]:
        return self._list("user_id=%s", (user_id,))

    def list_for_isps(self, isp_ids: Sequence[int]) -> Sequence[IspAcknowledgment]:
        if not isp_ids:
            return []
        return self._list(f"isp_id IN ({in_clause(isp_ids)})", tuple(isp_ids))
