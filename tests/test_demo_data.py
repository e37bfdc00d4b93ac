from fabshop.db import q, q1
from fabshop.services.demo_data import DEFAULT_COMPANY, load_demo_data, upsert_reference_data, wipe_all
from fabshop.services.users import list_employees


def _count(conn, table: str) -> int:
    return int(q1(conn, f"SELECT COUNT(*) AS n FROM {table}")["n"])


def test_reference_data_is_created_once(conn) -> None:
    first = upsert_reference_data(conn)
    second = upsert_reference_data(conn)
    assert first == second
    assert _count(conn, "company") == 1
    assert q1(conn, "SELECT name FROM company")["name"] == DEFAULT_COMPANY
    assert [e.company_id for e in list_employees(conn)] == [first, first]


def test_load_demo_data_sells_two_contracts(conn) -> None:
    load_demo_data(conn, seed=1)

    sales = q(conn, "SELECT id, status FROM sales ORDER BY id")
    assert len(sales) == 2
    assert {s["status"] for s in sales} == {"pending"}
    # second demo sale is a partial slab
    assert _count(conn, "slab_inventory WHERE parent_id IS NOT NULL") == 1
    assert _count(conn, "sinks WHERE is_deleted = 1") == 1
    assert _count(conn, "faucets WHERE is_deleted = 1") == 1


def test_wipe_all(conn) -> None:
    load_demo_data(conn)
    wipe_all(conn)
    for table in ("company", "customers", "sales", "slab_inventory", "sinks", "faucets"):
        assert _count(conn, table) == 0
