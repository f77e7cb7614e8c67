from __future__ import annotations

import json
import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Iterable

from werkzeug.security import generate_password_hash

from .connection import DatabaseConnection, DBConfig

logger = logging.getLogger(__name__)


def _strip_create_db_and_use(sql: str) -> str:
    # The database name comes from settings, not from the SQL files.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_line_comments(sql: str) -> str:
    return "\n".join(line for line in sql.splitlines() if not line.lstrip().startswith("--"))


def iter_sql_statements(sql: str) -> Iterable[str]:
    """Split a script on ';' outside of quoted strings."""
    buf: list[str] = []
    quote: str | None = None
    escape = False

    for ch in sql:
        buf.append(ch)
        if escape:
            escape = False
            continue
        if ch == "\\":
            escape = True
            continue
        if ch in ("'", '"'):
            if quote is None:
                quote = ch
            elif quote == ch:
                quote = None
            continue
        if ch == ";" and quote is None:
            stmt = "".join(buf[:-1]).strip()
            buf.clear()
            if stmt:
                yield stmt

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _run_script(config: DBConfig, path: str | Path) -> None:
    sql = _strip_line_comments(_strip_create_db_and_use(Path(path).read_text(encoding="utf-8")))
    conn = DatabaseConnection(config).connect()
    try:
        cur = conn.cursor()
        for stmt in iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()


def ensure_database_exists(config: DBConfig) -> None:
    conn = DatabaseConnection(config).connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{config.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    config = DBConfig.from_mapping(db_config)
    ensure_database_exists(config)
    _run_script(config, schema_path)
    logger.info("Applied schema %s to %s", Path(schema_path).name, config.database)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    config = DBConfig.from_mapping(db_config)
    _run_script(config, seed_path)
    logger.info("Applied seed %s to %s", Path(seed_path).name, config.database)


def ensure_demo_users(db_config: dict) -> None:
    """Create (or refresh) one demo account per role."""
    config = DBConfig.from_mapping(db_config)
    conn = DatabaseConnection(config).connect()
    try:
        cur = conn.cursor(dictionary=True)
        now = datetime.now()

        def upsert(name: str, email: str, password: str, role: str, locations: list[str]) -> None:
            password_hash = generate_password_hash(password)
            cur.execute("SELECT user_id FROM users WHERE email=%s", (email,))
            row = cur.fetchone()
            if row:
                user_id = int(row["user_id"])
                cur.execute(
                    "UPDATE users SET name=%s, password_hash=%s, is_active=1, updated_at=%s WHERE user_id=%s",
                    (name, password_hash, now, user_id),
                )
            else:
                cur.execute(
                    "INSERT INTO users (name, email, password_hash, created_at) VALUES (%s, %s, %s, %s)",
                    (name, email, password_hash, now),
                )
                user_id = int(cur.lastrowid)

            cur.execute(
                """
                INSERT INTO roles (user_id, role, locations, assigned_at)
                VALUES (%s, %s, %s, %s)
                ON DUPLICATE KEY UPDATE role=VALUES(role), locations=VALUES(locations)
                """,
                (user_id, role, json.dumps(locations), now),
            )
            cur.execute(
                """
                INSERT INTO employees (user_id, name, work_email, role, locations, has_accepted_invite, created_at)
                VALUES (%s, %s, %s, %s, %s, 1, %s)
                ON DUPLICATE KEY UPDATE name=VALUES(name), role=VALUES(role), locations=VALUES(locations)
                """,
                (user_id, name, email, role, json.dumps(locations), now),
            )

        upsert("Admin Demo", "admin@example.com", "admin1234", "admin", [])
        upsert("Supervisor Demo", "supervisor@example.com", "super1234", "supervisor", ["Maple House", "Cedar House"])
        upsert("Staff Demo", "staff@example.com", "staff1234", "staff", ["Maple House"])

        conn.commit()
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    config = DBConfig.from_mapping(db_config)
    conn = DatabaseConnection(config).connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
