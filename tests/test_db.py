import threading

import pytest

from fabshop.db import _column_exists, ensure_schema, q, q1, transaction, u, x


def _company_names(conn) -> list[str]:
    return [r["name"] for r in q(conn, "SELECT name FROM company ORDER BY id")]


def test_ensure_schema_is_idempotent(conn) -> None:
    ensure_schema(conn)
    assert _column_exists(conn, "customers", "company_name")
    assert _column_exists(conn, "slab_inventory", "cut_date")
    assert _column_exists(conn, "sales", "installed_date")


def test_writes_outside_transaction_commit(conn) -> None:
    new_id = x(conn, "INSERT INTO company (name) VALUES ('A')")
    assert new_id > 0
    assert not conn.in_transaction
    assert u(conn, "UPDATE company SET name = 'B' WHERE id = ?", (new_id,)) == 1
    assert q1(conn, "SELECT name FROM company WHERE id = ?", (new_id,))["name"] == "B"


def test_transaction_commits(conn) -> None:
    with transaction(conn):
        x(conn, "INSERT INTO company (name) VALUES ('A')")
        x(conn, "INSERT INTO company (name) VALUES ('B')")
    assert not conn.in_transaction
    assert _company_names(conn) == ["A", "B"]


def test_transaction_rolls_back(conn) -> None:
    with pytest.raises(RuntimeError):
        with transaction(conn):
            x(conn, "INSERT INTO company (name) VALUES ('A')")
            raise RuntimeError("boom")
    assert _company_names(conn) == []
    assert conn.tx_depth == 0


def test_nested_transaction_joins_outer(conn) -> None:
    with pytest.raises(RuntimeError):
        with transaction(conn):
            x(conn, "INSERT INTO company (name) VALUES ('outer')")
            with transaction(conn):
                x(conn, "INSERT INTO company (name) VALUES ('inner')")
            assert conn.tx_depth == 1
            raise RuntimeError("boom")
    assert _company_names(conn) == []


def test_q1_without_rows(conn) -> None:
    assert q1(conn, "SELECT * FROM company WHERE id = 1") is None


def test_other_thread_waits_for_open_transaction(conn) -> None:
    started = threading.Event()

    def other_writer() -> None:
        started.set()
        x(conn, "INSERT INTO company (name) VALUES ('other thread')")

    writer = threading.Thread(target=other_writer)
    with pytest.raises(RuntimeError):
        with transaction(conn):
            x(conn, "INSERT INTO company (name) VALUES ('rolled back')")
            writer.start()
            started.wait(5)
            writer.join(0.2)
            # blocked on the connection lock until the block ends
            assert writer.is_alive()
            raise RuntimeError("boom")

    writer.join(5)
    assert not writer.is_alive()
    assert _company_names(conn) == ["other thread"]
    assert not conn.in_transaction
