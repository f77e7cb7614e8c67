from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_list, fetchall, fetchone, load_list
from .model import PasswordResetToken, RoleAssignment, User
from .repository import PasswordResetRepository, RoleRepository, UserRepository

_USER_COLUMNS = """
    user_id, name, email, password_hash, is_active,
    last_login_at, last_login_device_id, last_login_location
"""


def _row_to_user(row: dict) -> User:
    return User(
        user_id=int(row["user_id"]),
        name=row["name"],
        email=row["email"],
        password_hash=row["password_hash"],
        is_active=bool(row.get("is_active", True)),
        last_login_at=row.get("last_login_at"),
        last_login_device_id=row.get("last_login_device_id"),
        last_login_location=row.get("last_login_location"),
    )


def _row_to_role(row: dict) -> RoleAssignment:
    return RoleAssignment(
        user_id=int(row["user_id"]),
        role=Role(row["role"]),
        locations=tuple(load_list(row.get("locations"))),
        assigned_by=row.get("assigned_by"),
        assigned_at=row.get("assigned_at"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE user_id=%s", (user_id,))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE email=%s", (email,))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def list_all(self) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users ORDER BY user_id")
            return [_row_to_user(r) for r in fetchall(cur)]

    def create_user(self, *, name: str, email: str, password_hash: str, created_at: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(name, email, password_hash, is_active, created_at)
                VALUES(%s,%s,%s,1,%s)
                """,
                (name, email, password_hash, created_at),
            )
            return int(cur.lastrowid)

    def update_password(self, user_id: int, *, password_hash: str, updated_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE users SET password_hash=%s, updated_at=%s WHERE user_id=%s",
                (password_hash, updated_at, user_id),
            )
            return cur.rowcount > 0

    def record_login(self, user_id: int, *, at: datetime, device_id: str, location: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE users
                SET last_login_at=%s, last_login_device_id=%s, last_login_location=%s, updated_at=%s
                WHERE user_id=%s
                """,
                (at, device_id, location, at, user_id),
            )
            return cur.rowcount > 0


class MySQLRoleRepository(RoleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_user(self, user_id: int) -> Optional[RoleAssignment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT user_id, role, locations, assigned_by, assigned_at FROM roles WHERE user_id=%s",
                (user_id,),
            )
            row = fetchone(cur)
            return _row_to_role(row) if row else None

    def list_all(self) -> Sequence[RoleAssignment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT user_id, role, locations, assigned_by, assigned_at FROM roles ORDER BY user_id")
            return [_row_to_role(r) for r in fetchall(cur)]

    def count_admins(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM roles WHERE role=%s", (Role.ADMIN.value,))
            row = fetchone(cur)
            return int(row["n"]) if row else 0

    def upsert(
        self,
        *,
        user_id: int,
        role: Role,
        locations: Sequence[str],
        assigned_by: Optional[int],
        assigned_at: datetime,
    ) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO roles(user_id, role, locations, assigned_by, assigned_at)
                VALUES(%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE role=VALUES(role), locations=VALUES(locations),
                                        assigned_by=VALUES(assigned_by), assigned_at=VALUES(assigned_at)
                """,
                (user_id, role.value, dump_list(locations), assigned_by, assigned_at),
            )

    def delete_for_user(self, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM roles WHERE user_id=%s", (user_id,))
            return cur.rowcount > 0


class MySQLPasswordResetRepository(PasswordResetRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, *, user_id: int, token: str, expires_at: datetime, created_at: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO password_reset_tokens(user_id, token, expires_at, used, created_at)
                VALUES(%s,%s,%s,0,%s)
                """,
                (user_id, token, expires_at, created_at),
            )
            return int(cur.lastrowid)

    def find_unused(self, *, user_id: int, token: str) -> Optional[PasswordResetToken]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT token_id, user_id, token, expires_at, used, used_at, created_at
                FROM password_reset_tokens
                WHERE user_id=%s AND token=%s AND used=0
                ORDER BY token_id DESC
                LIMIT 1
                """,
                (user_id, token),
            )
            row = fetchone(cur)
            if not row:
                return None
            return PasswordResetToken(
                token_id=int(row["token_id"]),
                user_id=int(row["user_id"]),
                token=row["token"],
                expires_at=row["expires_at"],
                used=bool(row["used"]),
                used_at=row.get("used_at"),
                created_at=row.get("created_at"),
            )

    def mark_used(self, token_id: int, *, used_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE password_reset_tokens SET used=1, used_at=%s WHERE token_id=%s AND used=0",
                (used_at, token_id),
            )
            return cur.rowcount > 0
