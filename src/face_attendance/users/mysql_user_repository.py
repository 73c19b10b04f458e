from __future__ import annotations

from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import User
from .repository import UserRepository


def _row_to_user(r: dict) -> User:
    rate = r.get("hourly_rate")
    return User(
        user_id=int(r["user_id"]),
        full_name=r["full_name"],
        org_id=int(r["org_id"]),
        role=Role(r["role"]),
        is_active=bool(r.get("is_active", 1)),
        hourly_rate=Decimal(str(rate)) if rate is not None else None,
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, full_name, org_id, role, is_active, hourly_rate
                FROM users
                WHERE user_id=%s
                """,
                (int(user_id),),
            )
            r = fetchone(cur)
            return _row_to_user(r) if r else None

    def list_by_org(self, org_id: int) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, full_name, org_id, role, is_active, hourly_rate
                FROM users
                WHERE org_id=%s
                ORDER BY user_id
                """,
                (int(org_id),),
            )
            return [_row_to_user(r) for r in fetchall(cur)]

    def save(self, user: User) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(user_id, full_name, org_id, role, is_active, hourly_rate)
                VALUES(%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    full_name=VALUES(full_name), org_id=VALUES(org_id), role=VALUES(role),
                    is_active=VALUES(is_active), hourly_rate=VALUES(hourly_rate)
                """,
                (
                    user.user_id,
                    user.full_name,
                    user.org_id,
                    user.role.value,
                    1 if user.is_active else 0,
                    user.hourly_rate,
                ),
            )

    def set_active(self, user_id: int, *, is_active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE users SET is_active=%s WHERE user_id=%s",
                (1 if is_active else 0, int(user_id)),
            )
            return cur.rowcount > 0
