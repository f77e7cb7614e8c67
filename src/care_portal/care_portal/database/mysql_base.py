from __future__ import annotations

import json
from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Sequence

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def dump_list(values: Optional[Sequence[str]]) -> str:
    """Encode a string list for a JSON/TEXT column."""
    return json.dumps(list(values or []))


def load_list(value: Any) -> list[str]:
    """Decode a JSON list column.

    mysql-connector returns JSON columns as str (pure python) or bytes
    depending on the server version; NULL means an empty list.
    """
    if value is None or value == "":
        return []
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        value = json.loads(value)
    if not isinstance(value, list):
        raise TypeError(f"Expected JSON list, got {type(value)!r}")
    return [str(v) for v in value]


def load_dict(value: Any) -> dict:
    if value is None or value == "":
        return {}
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        value = json.loads(value)
    return dict(value)


def in_clause(values: Sequence[Any]) -> str:
    """Placeholder list for `IN (...)`; callers must handle the empty case."""
    return ",".join(["%s"] * len(values))
