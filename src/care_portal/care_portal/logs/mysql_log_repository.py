from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import ResidentLog
from .repository import ResidentLogRepository

_COLUMNS = "log_id, resident_id, author_id, version, template, content, location, created_at"


def _row_to_log(row: dict) -> ResidentLog:
    return ResidentLog(
        log_id=int(row["log_id"]),
        resident_id=int(row["resident_id"]),
        author_id=int(row["author_id"]) if row.get("author_id") is not None else None,
        version=int(row.get("version") or 0),
        template=row.get("template"),
        content=row.get("content") or "",
        location=row.get("location"),
        created_at=row["created_at"],
    )


class MySQLResidentLogRepository(ResidentLogRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, log_id: int) -> Optional[ResidentLog]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM resident_logs WHERE log_id=%s", (log_id,))
            row = fetchone(cur)
            return _row_to_log(row) if row else None

    def max_version(self, resident_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT MAX(version) AS v FROM resident_logs WHERE resident_id=%s", (resident_id,))
            row = fetchone(cur)
            return int(row["v"]) if row and row.get("v") is not None else 0

    def create(
        self,
        *,
        resident_id: int,
        author_id: int,
        version: int,
        template: Optional[str],
        content: str,
        location: Optional[str],
        created_at: datetime,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO resident_logs(resident_id, author_id, version, template, content, location, created_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (resident_id, author_id, version, template, content, location, created_at),
            )
            return int(cur.lastrowid)

    def list_for_resident(self, resident_id: int, *, limit: Optional[int] = None) -> Sequence[ResidentLog]:
        sql = f"SELECT {_COLUMNS} FROM resident_logs WHERE resident_id=%s ORDER BY created_at DESC, log_id DESC"
        params: tuple = (resident_id,)
        if limit is not None:
            sql += " LIMIT %s"
            params += (int(limit),)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return [_row_to_log(r) for r in fetchall(cur)]

    def list_recent(self, *, limit: int, since: Optional[datetime] = None) -> Sequence[ResidentLog]:
        with db_cursor(self._conn_factory) as (_, cur):
            if since is None:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM resident_logs ORDER BY created_at DESC, log_id DESC LIMIT %s",
                    (int(limit),),
                )
            else:
                cur.execute(
                    f"""
                    SELECT {_COLUMNS} FROM resident_logs
                    WHERE created_at > %s
                    ORDER BY created_at DESC, log_id DESC
                    LIMIT %s
                    """,
                    (since, int(limit)),
                )
            return [_row_to_log(r) for r in fetchall(cur)]

    def list_between(
        self,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        author_ids: Optional[Sequence[int]] = None,
    ) -> Sequence[ResidentLog]:
        if author_ids is not None and not author_ids:
            return []
        where: list[str] = []
        params: list = []
        if start is not None:
            where.append("created_at >= %s")
            params.append(start)
        if end is not None:
            where.append("created_at <= %s")
            params.append(end)
        if author_ids is not None:
            where.append(f"author_id IN ({in_clause(author_ids)})")
            params.extend(author_ids)
        where_sql = f"WHERE {' AND '.join(where)}" if where else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM resident_logs {where_sql} ORDER BY created_at DESC, log_id DESC",
                tuple(params),
            )
            return [_row_to_log(r) for r in fetchall(cur)]
