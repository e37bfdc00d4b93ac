from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fabshop.db import q


@dataclass(frozen=True)
class User:
    """The employee acting on a sale. company_id scopes every query."""

    id: int
    company_id: int
    name: str = ""
    email: Optional[str] = None
    is_admin: bool = False


def _from_row(r) -> User:
    return User(
        id=int(r["id"]),
        company_id=int(r["company_id"]),
        name=str(r["name"]),
        email=r["email"],
        is_admin=bool(r["is_admin"]),
    )


def get_user(conn, user_id: int) -> Optional[User]:
    rows = q(conn, "SELECT * FROM users WHERE id=?", (int(user_id),))
    return _from_row(rows[0]) if rows else None


def list_employees(conn) -> list[User]:
    rows = q(conn, "SELECT * FROM users WHERE is_employee=1 ORDER BY company_id, name")
    return [_from_row(r) for r in rows]
