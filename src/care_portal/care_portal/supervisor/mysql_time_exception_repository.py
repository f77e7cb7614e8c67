from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import ReviewStatus, TimeExceptionKind
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import TimeExceptionReview
from .repository import TimeExceptionReviewRepository

_COLUMNS = "review_id, shift_id, kind, status, decided_by, decided_at, reason"


def _row_to_review(row: dict) -> TimeExceptionReview:
    return TimeExceptionReview(
        review_id=int(row["review_id"]),
        shift_id=int(row["shift_id"]),
        kind=TimeExceptionKind(row["kind"]),
        status=ReviewStatus(row["status"]),
        decided_by=int(row["decided_by"]),
        decided_at=row["decided_at"],
        reason=row.get("reason"),
    )


class MySQLTimeExceptionReviewRepository(TimeExceptionReviewRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find(self, *, shift_id: int, kind: TimeExceptionKind) -> Optional[TimeExceptionReview]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM time_exception_reviews WHERE shift_id=%s AND kind=%s",
                (shift_id, kind.value),
            )
            row = fetchone(cur)
            return _row_to_review(row) if row else None

    def list_for_shifts(self, shift_ids: Sequence[int]) -> Sequence[TimeExceptionReview]:
        if not shift_ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM time_exception_reviews WHERE shift_id IN ({in_clause(shift_ids)})",
                tuple(shift_ids),
            )
            return [_row_to_review(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        shift_id: int,
        kind: TimeExceptionKind,
        status: ReviewStatus,
        decided_by: int,
        decided_at: datetime,
        reason: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO time_exception_reviews(shift_id, kind, status, decided_by, decided_at, reason)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (shift_id, kind.value, status.value, decided_by, decided_at, reason),
            )
            return int(cur.lastrowid)
