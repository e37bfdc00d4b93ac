from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterable, Iterator

import streamlit as st

from fabshop.schema import SCHEMA_SQL

logger = logging.getLogger(__name__)


class FabConnection(sqlite3.Connection):
    """sqlite3 connection that knows whether a `transaction()` block is open."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.lock = threading.RLock()
        self.tx_depth = 0


def connect(db_path: Path | str) -> FabConnection:
    conn = sqlite3.connect(str(db_path), check_same_thread=False, factory=FabConnection)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    return conn


@st.cache_resource
def get_conn(db_path: Path) -> FabConnection:
    logger.info("Opening database %s", db_path)
    return connect(db_path)


def _column_exists(conn: sqlite3.Connection, table: str, column: str) -> bool:
    rows = conn.execute(f"PRAGMA table_info({table});").fetchall()
    cols = [r["name"] for r in rows]
    return column in cols


def ensure_schema(conn: FabConnection) -> None:
    with conn.lock:
        # Create base schema (for new installs)
        conn.executescript(SCHEMA_SQL)

        # ---- migrations for existing installs ----
        if not _column_exists(conn, "customers", "company_name"):
            conn.execute("ALTER TABLE customers ADD COLUMN company_name TEXT;")

        if not _column_exists(conn, "slab_inventory", "cut_date"):
            conn.execute("ALTER TABLE slab_inventory ADD COLUMN cut_date TEXT;")

        if not _column_exists(conn, "sales", "installed_date"):
            conn.execute("ALTER TABLE sales ADD COLUMN installed_date TEXT;")

        conn.commit()


def _in_transaction(conn: FabConnection) -> bool:
    return conn.tx_depth > 0


@contextmanager
def transaction(conn: FabConnection) -> Iterator[FabConnection]:
    """
    All-or-nothing block. `x`/`u` calls inside it do not commit; the block
    commits on success and rolls back on any exception.

    BEGIN IMMEDIATE takes the database write lock up front, so two sales
    cannot claim the same sink/faucet/slab row. Nested blocks join the outer one.
The connection lock is held for the whole block, so `q`/`x`/`u` calls from
other threads wait for it instead of joining it.
    """
    with conn.lock:
        if conn.tx_depth > 0:
            conn.tx_depth += 1
            try:
                yield conn
            finally:
                conn.tx_depth -= 1
            return

        conn.execute("BEGIN IMMEDIATE;")
        conn.tx_depth = 1
        try:
            yield conn
        except BaseException:
            conn.rollback()
            logger.warning("Transaction rolled back")
            raise
        else:
            conn.commit()
        finally:
            conn.tx_depth = 0


def q(conn: FabConnection, sql: str, params: Iterable[Any] = ()) -> list[sqlite3.Row]:
    with conn.lock:
        cur = conn.execute(sql, tuple(params))
        rows = cur.fetchall()
        cur.close()
    return rows


def q1(conn: FabConnection, sql: str, params: Iterable[Any] = ()) -> sqlite3.Row | None:
    rows = q(conn, sql, params)
    return rows[0] if rows else None


def x(conn: FabConnection, sql: str, params: Iterable[Any] = ()) -> int:
    """Execute a write and return the last inserted row id."""
    with conn.lock:
        cur = conn.execute(sql, tuple(params))
        if not _in_transaction(conn):
            conn.commit()
        last = cur.lastrowid
        cur.close()
    return int(last) if last is not None else 0


def u(conn: FabConnection, sql: str, params: Iterable[Any] = ()) -> int:
    """Execute a write and return the number of affected rows."""
    with conn.lock:
        cur = conn.execute(sql, tuple(params))
        if not _in_transaction(conn):
            conn.commit()
        n = cur.rowcount
        cur.close()
    return int(n)
