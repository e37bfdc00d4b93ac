from __future__ import annotations

from types import SimpleNamespace

import pytest

from fabshop.db import connect, ensure_schema, q, x
from fabshop.forms import CustomerForm
from fabshop.services.users import User

ROOM_ID = "dcdd9054-dadd-431d-a861-d0639f70f67b"


@pytest.fixture
def conn():
    c = connect(":memory:")
    ensure_schema(c)
    yield c
    c.close()


def _company(conn, name: str = "Test Company") -> SimpleNamespace:
    company_id = x(conn, "INSERT INTO company (name) VALUES (?)", (name,))
    user_id = x(
        conn,
        "INSERT INTO users (company_id, name, email) VALUES (?, 'Test User', 'test@example.com')",
        (company_id,),
    )
    customer_id = x(
        conn,
        """
        INSERT INTO customers (company_id, name, phone, email, address, postal_code)
        VALUES (?, 'Test Customer', '555-123-4567', 'customer@test.com', '123 Test Street, Test City, TC 12345', '12345')
        """,
        (company_id,),
    )
    stone_id = x(
        conn,
        "INSERT INTO stones (company_id, name, type, retail_price) VALUES (?, 'Test Stone', 'Granite', 50)",
        (company_id,),
    )
    sink_type_id = x(
        conn,
        "INSERT INTO sink_type (company_id, name, type, retail_price) VALUES (?, 'Test Sink Type', 'Undermount', 500)",
        (company_id,),
    )
    faucet_type_id = x(
        conn,
        "INSERT INTO faucet_type (company_id, name, type, retail_price) VALUES (?, 'Test Faucet Type', 'Kitchen', 200)",
        (company_id,),
    )

    def add_slab(stone=None, bundle="A") -> int:
        return x(
            conn,
            "INSERT INTO slab_inventory (stone_id, bundle, length, width, url) VALUES (?, ?, 10, 5, 'https://example.com/slab.jpg')",
            (stone or stone_id, bundle),
        )

    def add_sink(type_id=None) -> int:
        return x(conn, "INSERT INTO sinks (sink_type_id) VALUES (?)", (type_id or sink_type_id,))

    def add_faucet(type_id=None) -> int:
        return x(conn, "INSERT INTO faucets (faucet_type_id) VALUES (?)", (type_id or faucet_type_id,))

    shop = SimpleNamespace(
        company_id=company_id,
        user=User(id=user_id, company_id=company_id, name="Test User", email="test@example.com"),
        customer_id=customer_id,
        stone_id=stone_id,
        sink_type_id=sink_type_id,
        faucet_type_id=faucet_type_id,
        add_slab=add_slab,
        add_sink=add_sink,
        add_faucet=add_faucet,
    )
    shop.slab_id = add_slab()
    shop.sink_id = add_sink()
    shop.faucet_id = add_faucet()
    return shop


@pytest.fixture
def shop(conn):
    return _company(conn)


@pytest.fixture
def other_shop(conn, shop):
    return _company(conn, "Other Company")


@pytest.fixture
def make_room(shop):
    def _make(**overrides) -> dict:
        room = {
            "room": "kitchen",
            "room_id": ROOM_ID,
            "square_feet": 25,
            "retail_price": 60,
            "edge": "Flat",
            "backsplash": "No",
            "tear_out": "No",
            "stove": "F/S",
            "waterfall": "No",
            "corbels": 0,
            "seam": "Standard",
            "ten_year_sealer": False,
            "slabs": [{"id": shop.slab_id, "is_full": True}],
            "sink_type": [],
            "faucet_type": [],
        }
        room.update(overrides)
        return room

    return _make


@pytest.fixture
def make_form(shop, make_room):
    def _make(**overrides) -> CustomerForm:
        payload = {
            "name": "Test Customer",
            "customer_id": shop.customer_id,
            "billing_address": "123 Test Street, Test City, TC 12345",
            "project_address": "456 Project Street, Project City, PC 67890",
            "same_address": False,
            "notes_to_sale": "Test notes",
            "price": 5000,
            "rooms": [make_room()],
        }
        payload.update(overrides)
        return CustomerForm.model_validate(payload)

    return _make


@pytest.fixture
def rows(conn):
    """SELECT * helper: rows('sales', customer_id=1) -> list of dicts."""

    def _rows(table: str, **where) -> list[dict]:
        sql = f"SELECT * FROM {table}"
        if where:
            sql += " WHERE " + " AND ".join(
                f"{k} IS NULL" if v is None else f"{k} = ?" for k, v in where.items()
            )
        params = [v for v in where.values() if v is not None]
        return [dict(r) for r in q(conn, sql + " ORDER BY id", params)]

    return _rows
